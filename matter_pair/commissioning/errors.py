"""
Turn chip-tool output into messages an operator can act on.

chip-tool has no structured error output, so this matches substrings of
its log text. Rules are checked in order and the first match wins; keep
the more specific patterns above the generic ones.
"""

from typing import Sequence, Tuple

Rule = Tuple[Tuple[str, ...], str]

PAIRING_RULES: Sequence[Rule] = (
    (("integrity check failed",),
     "Invalid pairing code format. Please check the QR code or manual pairing code."),
    (("device discovery timed out", "no devices found"),
     "Device not found. Make sure the device is powered on and in pairing mode."),
    (("failed to establish pase",),
     "Failed to connect to device. Try resetting the device and pairing again."),
    (("timeout",),
     "Connection timeout. Ensure device is nearby and network is working."),
    (("already commissioned",),
     "Device is already paired. Reset the device before pairing again."),
    (("invalid discriminator",),
     "Invalid pairing code. Please verify the code from your device."),
)
PAIRING_FALLBACK = "Pairing failed. Check that the device is in pairing mode and the code is correct."

UNPAIR_RULES: Sequence[Rule] = (
    (("not found", "no device"),
     "Device not found. It may already be unpaired."),
    (("timeout",),
     "Connection timeout. Device may be offline or unreachable."),
    (("not commissioned",),
     "Device is not paired to this controller."),
)
UNPAIR_FALLBACK = "Unpair failed. Device may be offline or already unpaired."


def classify(output: str, rules: Sequence[Rule], fallback: str) -> str:
    """Return the message of the first rule with a pattern found in ``output``."""
    text = (output or "").lower()
    for patterns, message in rules:
        if any(p in text for p in patterns):
            return message
    return fallback


def classify_pairing_error(output: str) -> str:
    return classify(output, PAIRING_RULES, PAIRING_FALLBACK)


def classify_unpair_error(output: str) -> str:
    return classify(output, UNPAIR_RULES, UNPAIR_FALLBACK)

"""
matter2mqtt-pair - Matter device pairing for matter2mqtt

Serves a web page for scanning a device's Matter QR code, commissions the
device with chip-tool, and records it in the devices.yaml file read by the
matter2mqtt bridge.

Example:
    >>> from matter_pair import resolve_config
    >>> from matter_pair.api import run_server
    >>> run_server(resolve_config(port=8443, tls=True))
"""

__version__ = "1.0.0"

from .config import Config, get_config, resolve_config

__all__ = [
    "__version__",
    "Config",
    "get_config",
    "resolve_config",
]

"""
Matter commissioning through chip-tool.

Runs the external controller and classifies its failures.
"""

from .chip_tool import ChipTool, CommissioningResult
from .errors import classify_pairing_error, classify_unpair_error

__all__ = [
    "ChipTool",
    "CommissioningResult",
    "classify_pairing_error",
    "classify_unpair_error",
]

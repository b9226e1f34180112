"""
Network helpers for announcing the pairing page.

This module provides:
- LAN IPv4 detection
- Terminal QR rendering of the service URL
"""

from .ip_detect import (
    NetworkInterface,
    get_local_ips,
    get_local_ipv4,
    is_loopback,
    UNKNOWN_IP,
)
from .qr import render_qr, qr_matrix

__all__ = [
    "NetworkInterface",
    "get_local_ips",
    "get_local_ipv4",
    "is_loopback",
    "UNKNOWN_IP",
    "render_qr",
    "qr_matrix",
]

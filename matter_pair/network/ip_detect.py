"""
LAN address detection.

Finds the IPv4 address a phone on the same network should use to reach
the pairing page.
"""

import ipaddress
import logging
import socket
import subprocess
from dataclasses import dataclass
from typing import List

logger = logging.getLogger(__name__)

UNKNOWN_IP = "unknown"


@dataclass
class NetworkInterface:
    """An IPv4 address found on this host."""
    name: str
    ip: str
    priority: int  # Lower is better (1=default route, 2=named interface, 3=hostname lookup)


def is_loopback(ip: str) -> bool:
    try:
        return ipaddress.ip_address(ip).is_loopback
    except ValueError:
        return False


def is_ipv4(ip: str) -> bool:
    try:
        return isinstance(ipaddress.ip_address(ip), ipaddress.IPv4Address)
    except ValueError:
        return False


def _route_ip() -> List[NetworkInterface]:
    # UDP connect() only selects a route, nothing is sent
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        s.settimeout(0.1)
        s.connect(("8.8.8.8", 80))
        ip = s.getsockname()[0]
    except OSError as e:
        logger.debug(f"Route lookup failed: {e}")
        return []
    finally:
        s.close()
    return [NetworkInterface(name="route", ip=ip, priority=1)]


def _interface_ips() -> List[NetworkInterface]:
    try:
        output = subprocess.check_output(
            ["ip", "-4", "-o", "addr", "show"], text=True, stderr=subprocess.DEVNULL
        )
    except (OSError, subprocess.CalledProcessError) as e:
        logger.debug(f"'ip addr' failed: {e}")
        return []

    interfaces = []
    # "2: eth0    inet 192.168.1.20/24 brd ... scope global eth0"
    for line in output.splitlines():
        parts = line.split()
        if "inet" not in parts:
            continue
        idx = parts.index("inet") + 1
        if idx >= len(parts):
            continue
        interfaces.append(NetworkInterface(
            name=parts[1].rstrip(":"),
            ip=parts[idx].split("/")[0],
            priority=2,
        ))
    return interfaces


def _hostname_ips() -> List[NetworkInterface]:
    try:
        ips = socket.gethostbyname_ex(socket.gethostname())[2]
    except OSError as e:
        logger.debug(f"Hostname lookup failed: {e}")
        return []
    return [NetworkInterface(name="hostname", ip=ip, priority=3) for ip in ips]


def get_local_ips() -> List[NetworkInterface]:
    """
    All non-loopback IPv4 addresses of this host, best first.
    """
    seen = set()
    interfaces = []
    for candidate in _route_ip() + _interface_ips() + _hostname_ips():
        if candidate.ip in seen or not is_ipv4(candidate.ip) or is_loopback(candidate.ip):
            continue
        seen.add(candidate.ip)
        interfaces.append(candidate)

    interfaces.sort(key=lambda i: i.priority)
    return interfaces


def get_local_ipv4() -> str:
    """First non-loopback IPv4 address, or "unknown" when there is none."""
    interfaces = get_local_ips()
    if interfaces:
        return interfaces[0].ip
    logger.warning("No non-loopback IPv4 address found")
    return UNKNOWN_IP

"""Device registry module."""
from .devices import (
    DeviceRegistry,
    DeviceEntry,
    Registry,
    RegistryError,
    RegistryReadError,
    RegistryParseError,
    RegistryWriteError,
    MAX_NODE_ID,
)

__all__ = [
    "DeviceRegistry",
    "DeviceEntry",
    "Registry",
    "RegistryError",
    "RegistryReadError",
    "RegistryParseError",
    "RegistryWriteError",
    "MAX_NODE_ID",
]

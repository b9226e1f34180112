"""
Device Registry - The devices.yaml file consumed by the matter2mqtt bridge.

Maps Matter node IDs to the MQTT topic (and optional tuning) the bridge
should use for that device. The file is read fully and rewritten fully on
every change. Callers that read-modify-write must hold ``DeviceRegistry.lock``.

File layout:

    devices:
      42:
        topic: Living Room Sensor
        sensitivity: high
        debounce_ms: 500
"""

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

MAX_NODE_ID = 2 ** 64 - 1


class RegistryError(Exception):
    """Base class for devices.yaml I/O failures."""
    pass


class RegistryReadError(RegistryError):
    """The registry file exists but could not be read."""
    pass


class RegistryParseError(RegistryError):
    """The registry file is not a valid device mapping."""
    pass


class RegistryWriteError(RegistryError):
    """The registry file could not be written."""
    pass


@dataclass
class DeviceEntry:
    """Bridge settings for a single node."""
    topic: str
    sensitivity: Optional[str] = None
    debounce_ms: Optional[int] = None

    def to_dict(self) -> dict:
        # Unset optional fields are omitted, never written as null
        data = {"topic": self.topic}
        if self.sensitivity:
            data["sensitivity"] = self.sensitivity
        if self.debounce_ms:
            data["debounce_ms"] = self.debounce_ms
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "DeviceEntry":
        if not isinstance(data, dict):
            raise ValueError(f"device entry must be a mapping, got {type(data).__name__}")

        topic = data.get("topic")
        sensitivity = data.get("sensitivity")
        debounce_ms = data.get("debounce_ms")

        if topic is None:
            topic = ""
        topic = _scalar_str("topic", topic)
        if sensitivity is not None:
            sensitivity = _scalar_str("sensitivity", sensitivity)
        if debounce_ms is not None and (isinstance(debounce_ms, bool) or not isinstance(debounce_ms, int)):
            raise ValueError(f"debounce_ms must be an integer, got {debounce_ms!r}")

        return cls(
            topic=topic,
            sensitivity=sensitivity or None,
            debounce_ms=debounce_ms or None,
        )


@dataclass
class Registry:
    """In-memory snapshot of devices.yaml."""
    devices: Dict[int, DeviceEntry] = field(default_factory=dict)

    def upsert(self, node_id: int, entry: DeviceEntry) -> None:
        """Add a device, replacing any existing entry for the node wholesale."""
        self.devices[node_id] = entry

    def remove(self, node_id: int) -> bool:
        """Remove a device. Returns whether the node was registered."""
        if node_id not in self.devices:
            return False
        del self.devices[node_id]
        return True

    def get(self, node_id: int) -> Optional[DeviceEntry]:
        return self.devices.get(node_id)

    def items(self) -> List[tuple]:
        """Entries sorted by node ID."""
        return sorted(self.devices.items())

    def to_dict(self) -> dict:
        return {
            "devices": {
                node_id: entry.to_dict()
                for node_id, entry in self.items()
            }
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Registry":
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"expected a mapping at top level, got {type(data).__name__}")

        raw_devices = data.get("devices")
        if raw_devices is None:
            raw_devices = {}
        if not isinstance(raw_devices, dict):
            raise ValueError(f"'devices' must be a mapping, got {type(raw_devices).__name__}")

        registry = cls()
        for raw_id, raw_entry in raw_devices.items():
            node_id = _parse_node_id(raw_id)
            registry.devices[node_id] = DeviceEntry.from_dict(raw_entry or {})
        return registry


def _scalar_str(key: str, value) -> str:
    # Hand-edited files may hold "topic: 1234"; YAML reads that as a number
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ValueError(f"{key} must be a string, got {value!r}")


def _parse_node_id(raw) -> int:
    if isinstance(raw, bool):
        raise ValueError(f"invalid node id {raw!r}")
    if isinstance(raw, int):
        node_id = raw
    elif isinstance(raw, str) and raw.strip().isdigit():
        node_id = int(raw.strip())
    else:
        raise ValueError(f"invalid node id {raw!r}")
    if not 0 <= node_id <= MAX_NODE_ID:
        raise ValueError(f"node id {node_id} out of range")
    return node_id


class DeviceRegistry:
    """
    File-backed store for devices.yaml.

    A missing file is an empty registry. Nothing is cached between calls;
    every load() reads the file again so edits made by hand are picked up.
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self.lock = threading.Lock()

    @property
    def file_name(self) -> str:
        return self.path.name

    def load(self) -> Registry:
        """Read the registry from disk."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                text = f.read()
        except FileNotFoundError:
            logger.debug(f"{self.path} does not exist, starting with an empty registry")
            return Registry()
        except UnicodeDecodeError as e:
            raise RegistryParseError(f"Failed to parse {self.file_name}: {e}") from e
        except OSError as e:
            raise RegistryReadError(f"Failed to read {self.file_name}: {e}") from e

        try:
            registry = Registry.from_dict(yaml.safe_load(text))
        except (yaml.YAMLError, ValueError) as e:
            raise RegistryParseError(f"Failed to parse {self.file_name}: {e}") from e

        logger.debug(f"Loaded {len(registry.devices)} devices from {self.path}")
        return registry

    def save(self, registry: Registry) -> None:
        """Overwrite the registry file with the full contents of ``registry``."""
        text = yaml.safe_dump(
            registry.to_dict(),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            raise RegistryWriteError(f"Failed to write {self.file_name}: {e}") from e

        logger.info(f"Saved {len(registry.devices)} devices to {self.path}")

"""
Tests for the devices.yaml registry.
"""

import tempfile
from pathlib import Path

import pytest
import yaml

from matter_pair.registry import (
    DeviceEntry,
    DeviceRegistry,
    Registry,
    RegistryParseError,
    RegistryReadError,
    RegistryWriteError,
)


@pytest.fixture
def registry_path():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "devices.yaml"


class TestDeviceEntry:
    """Tests for DeviceEntry."""

    def test_optional_fields_omitted(self):
        """Test that unset fields are not serialized."""
        assert DeviceEntry(topic="Kitchen").to_dict() == {"topic": "Kitchen"}

    def test_full_entry(self):
        """Test serialization with every field set."""
        entry = DeviceEntry(topic="Hall", sensitivity="high", debounce_ms=250)
        assert entry.to_dict() == {"topic": "Hall", "sensitivity": "high", "debounce_ms": 250}

    def test_from_dict_ignores_unknown_keys(self):
        """Test that extra keys in a hand-edited file are ignored."""
        entry = DeviceEntry.from_dict({"topic": "Hall", "room": "upstairs"})
        assert entry == DeviceEntry(topic="Hall")

    def test_from_dict_rejects_bad_types(self):
        """Test type checking of entry fields."""
        with pytest.raises(ValueError):
            DeviceEntry.from_dict({"topic": "Hall", "debounce_ms": "fast"})
        with pytest.raises(ValueError):
            DeviceEntry.from_dict(["not", "a", "mapping"])

    def test_from_dict_numeric_scalars_become_strings(self):
        """Test that unquoted numbers in hand-edited files are read as text."""
        entry = DeviceEntry.from_dict({"topic": 1234, "sensitivity": 5, "debounce_ms": 50})
        assert entry == DeviceEntry(topic="1234", sensitivity="5", debounce_ms=50)

        assert DeviceEntry.from_dict({"topic": 2.5}).topic == "2.5"

    def test_from_dict_rejects_bool_topic(self):
        """Test that booleans are not taken as topic names."""
        with pytest.raises(ValueError):
            DeviceEntry.from_dict({"topic": True})


class TestRegistry:
    """Tests for the in-memory registry."""

    def test_upsert_replaces_wholesale(self):
        """Test that upsert drops fields the new entry does not set."""
        registry = Registry()
        registry.upsert(42, DeviceEntry(topic="Old", sensitivity="low", debounce_ms=100))
        registry.upsert(42, DeviceEntry(topic="New"))

        assert registry.devices == {42: DeviceEntry(topic="New")}

    def test_remove(self):
        """Test remove reports whether the node existed."""
        registry = Registry()
        registry.upsert(7, DeviceEntry(topic="Door"))

        assert registry.remove(7) is True
        assert registry.remove(7) is False
        assert registry.devices == {}

    def test_items_sorted(self):
        """Test that entries come back in node ID order."""
        registry = Registry()
        for node_id in (30, 2, 11):
            registry.upsert(node_id, DeviceEntry(topic=str(node_id)))

        assert [node_id for node_id, _ in registry.items()] == [2, 11, 30]


class TestDeviceRegistry:
    """Tests for loading and saving devices.yaml."""

    def test_missing_file_is_empty(self, registry_path):
        """Test that a missing file loads as an empty registry."""
        store = DeviceRegistry(str(registry_path))
        assert store.load().devices == {}
        assert not registry_path.exists()

    def test_empty_file_is_empty(self, registry_path):
        """Test that an empty document loads as an empty registry."""
        registry_path.write_text("")
        assert DeviceRegistry(str(registry_path)).load().devices == {}

        registry_path.write_text("devices:\n")
        assert DeviceRegistry(str(registry_path)).load().devices == {}

    def test_round_trip(self, registry_path):
        """Test that save then load yields the same mapping."""
        store = DeviceRegistry(str(registry_path))
        registry = Registry()
        registry.upsert(42, DeviceEntry(topic="Living Room Sensor"))
        registry.upsert(7, DeviceEntry(topic="Door", sensitivity="high", debounce_ms=500))
        registry.upsert(2 ** 64 - 1, DeviceEntry(topic="Max"))

        store.save(registry)
        loaded = store.load()

        assert loaded.devices == registry.devices
        assert loaded.get(42).sensitivity is None
        assert loaded.get(42).debounce_ms is None

    def test_file_format(self, registry_path):
        """Test the on-disk layout read by the bridge."""
        store = DeviceRegistry(str(registry_path))
        registry = Registry()
        registry.upsert(42, DeviceEntry(topic="Living Room Sensor"))
        registry.upsert(7, DeviceEntry(topic="Door", sensitivity="high", debounce_ms=500))
        store.save(registry)

        data = yaml.safe_load(registry_path.read_text())
        assert data == {
            "devices": {
                7: {"topic": "Door", "sensitivity": "high", "debounce_ms": 500},
                42: {"topic": "Living Room Sensor"},
            }
        }
        text = registry_path.read_text()
        assert text.index("7:") < text.index("42:")

    def test_empty_registry_format(self, registry_path):
        """Test that an empty registry is written as an empty mapping."""
        DeviceRegistry(str(registry_path)).save(Registry())
        assert yaml.safe_load(registry_path.read_text()) == {"devices": {}}

    def test_string_node_ids_accepted(self, registry_path):
        """Test hand-edited files with quoted node IDs."""
        registry_path.write_text('devices:\n  "12":\n    topic: Garage\n')
        loaded = DeviceRegistry(str(registry_path)).load()
        assert loaded.devices == {12: DeviceEntry(topic="Garage")}

    @pytest.mark.parametrize("content", [
        "devices: [1, 2, 3]\n",
        "devices: []\n",
        "devices: 0\n",
        "devices: \"\"\n",
        "devices:\n  abc:\n    topic: x\n",
        "devices:\n  -5:\n    topic: x\n",
        "- just\n- a list\n",
        "devices: {42: {topic: x}\n",
        "devices:\n  42:\n    topic: [not, a, string]\n",
    ])
    def test_malformed_file(self, registry_path, content):
        """Test that malformed files raise a parse error."""
        registry_path.write_text(content)
        with pytest.raises(RegistryParseError) as exc_info:
            DeviceRegistry(str(registry_path)).load()
        assert str(exc_info.value).startswith("Failed to parse devices.yaml: ")

    def test_numeric_topic_in_file(self, registry_path):
        """Test a file whose topic was written as a bare number."""
        registry_path.write_text("devices:\n  42:\n    topic: 1234\n    sensitivity: 5\n")
        loaded = DeviceRegistry(str(registry_path)).load()
        assert loaded.devices == {42: DeviceEntry(topic="1234", sensitivity="5")}

    def test_invalid_utf8(self, registry_path):
        """Test that bytes that are not UTF-8 raise a parse error."""
        registry_path.write_bytes(b"devices:\n  42:\n    topic: \xff\xfe\n")
        with pytest.raises(RegistryParseError) as exc_info:
            DeviceRegistry(str(registry_path)).load()
        assert str(exc_info.value).startswith("Failed to parse devices.yaml: ")

    def test_unreadable_file(self, registry_path):
        """Test that a path that cannot be read raises a read error."""
        registry_path.mkdir()
        with pytest.raises(RegistryReadError) as exc_info:
            DeviceRegistry(str(registry_path)).load()
        assert str(exc_info.value).startswith("Failed to read devices.yaml: ")

    def test_write_failure(self, registry_path):
        """Test that a failed write raises a write error."""
        missing_dir = registry_path.parent / "missing" / "devices.yaml"
        with pytest.raises(RegistryWriteError) as exc_info:
            DeviceRegistry(str(missing_dir)).save(Registry())
        assert str(exc_info.value).startswith("Failed to write devices.yaml: ")

    def test_file_name(self):
        """Test the name used in messages."""
        assert DeviceRegistry("/etc/matter2mqtt/devices.yaml").file_name == "devices.yaml"

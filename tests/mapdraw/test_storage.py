"""Tests for the persistence store backends."""

import json

import pytest
from mapdraw.storage import JsonFileStore, MemoryStore, StorageKey


class TestMemoryStore:
    """Dict-backed store."""

    def test_get_absent(self):
        assert MemoryStore().get("nope") is None

    def test_set_get_remove(self):
        store = MemoryStore()
        store.set("k", "v")
        assert store.get("k") == "v"
        store.remove("k")
        assert store.get("k") is None

    def test_remove_absent_is_noop(self):
        MemoryStore().remove("nope")

    def test_clear(self):
        store = MemoryStore({"a": "1", "b": "2"})
        store.clear()
        assert store.keys() == []

    def test_storage_key_enum_accepted(self):
        store = MemoryStore()
        store.set(StorageKey.DRAW_ITEMS, "x")
        assert store.get("drawItems") == "x"

    def test_values_must_be_text(self):
        with pytest.raises(TypeError):
            MemoryStore().set("k", {"a": 1})


class TestJsonFileStore:
    """File-backed store survives re-opening."""

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "store.json"
        JsonFileStore(path).set("drawItems", '{"type":"FeatureCollection","features":[]}')
        assert JsonFileStore(path).get("drawItems") == '{"type":"FeatureCollection","features":[]}'

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "store.json"
        JsonFileStore(path).set("k", "v")
        assert path.exists()

    def test_remove_and_clear_are_durable(self, tmp_path):
        path = tmp_path / "store.json"
        store = JsonFileStore(path)
        store.set("a", "1")
        store.set("b", "2")
        store.remove("a")
        assert json.loads(path.read_text()) == {"b": "2"}
        store.clear()
        assert JsonFileStore(path).get("b") is None

    def test_unreadable_file_loads_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{broken")
        assert JsonFileStore(path).get("drawItems") is None

    def test_invalid_utf8_file_loads_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_bytes(b'{"drawItems": "\xff\xfe"}')
        store = JsonFileStore(path)
        assert store.get("drawItems") is None
        store.set("drawItems", "ok")
        assert JsonFileStore(path).get("drawItems") == "ok"

    def test_deeply_nested_file_loads_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[" * 200000)
        assert JsonFileStore(path).get("drawItems") is None

    def test_non_object_file_loads_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2]")
        assert JsonFileStore(path).get("drawItems") is None

    def test_no_temp_files_left(self, tmp_path):
        store = JsonFileStore(tmp_path / "store.json")
        store.set("k", "v")
        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]

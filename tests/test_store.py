"""Tests for planengine/store.py JSON file persistence."""
import json
import os

from planengine.store import JsonFileStore


class TestJsonFileStore:
    def test_save_and_load(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        data = {"past": [[{"type": "line", "geometry": {"points": []}, "style": {}}]], "future": []}
        assert store.save("history", data)
        assert store.load("history") == data

    def test_creates_directory(self, tmp_path):
        store = JsonFileStore(str(tmp_path / "nested" / "dir"))
        assert store.save("k", [1, 2])
        assert os.path.exists(store.path_for("k"))

    def test_utf8_not_escaped(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        store.save("room", {"name": "Küche m²"})
        with open(store.path_for("room"), encoding="utf-8") as f:
            assert "Küche m²" in f.read()

    def test_missing_key(self, tmp_path):
        assert JsonFileStore(str(tmp_path)).load("absent") is None

    def test_corrupt_file(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        with open(store.path_for("broken"), "w", encoding="utf-8") as f:
            f.write("{not json")
        assert store.load("broken") is None

    def test_unserializable_data(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        assert not store.save("bad", {"obj": object()})
        assert store.load("bad") is None

    def test_delete(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        store.save("k", {})
        assert store.delete("k")
        assert store.load("k") is None
        assert store.delete("k")

    def test_key_sanitised(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        path = store.path_for("../../etc/passwd")
        assert os.path.dirname(path) == str(tmp_path)
        assert store.save("../../etc/passwd", 1)
        assert store.load("../../etc/passwd") == 1

    def test_overwrite(self, tmp_path):
        store = JsonFileStore(str(tmp_path))
        store.save("k", {"v": 1})
        store.save("k", {"v": 2})
        with open(store.path_for("k"), encoding="utf-8") as f:
            assert json.load(f) == {"v": 2}

"""Tests for pomo/store.py and pomo/fileio.py — the persistence port."""

import json

import pytest

from pomo.fileio import read_json, write_json_atomic
from pomo.store import JsonFileStore, MemoryStore, STATS_KEY


def test_file_store_missing_key(tmp_path):
    store = JsonFileStore(tmp_path / "store")
    assert store.get("settings") is None


def test_file_store_roundtrip(tmp_path):
    store = JsonFileStore(tmp_path / "store")
    store.put("tasks", [{"id": "1", "text": "write"}])
    assert store.get("tasks") == [{"id": "1", "text": "write"}]
    assert (tmp_path / "store" / "tasks.json").exists()


def test_file_store_last_write_wins(tmp_path):
    store = JsonFileStore(tmp_path)
    store.put(STATS_KEY, {"totalWorkSeconds": 1})
    store.put(STATS_KEY, {"totalWorkSeconds": 2})
    assert store.get(STATS_KEY) == {"totalWorkSeconds": 2}
    # no temp files left behind
    assert sorted(p.name for p in tmp_path.iterdir()) == ["stats.json"]


def test_file_store_malformed_document(tmp_path):
    (tmp_path / "stats.json").write_text("{not json", encoding="utf-8")
    assert JsonFileStore(tmp_path).get("stats") is None


@pytest.mark.parametrize("key", ["../escape", "", ".hidden", "a/b"])
def test_file_store_rejects_bad_keys(tmp_path, key):
    with pytest.raises(ValueError):
        JsonFileStore(tmp_path).get(key)


def test_file_store_for_workspace(workspace):
    store = JsonFileStore.for_workspace()
    assert store.directory == workspace / "store"


def test_memory_store_isolates_documents():
    store = MemoryStore()
    doc = {"dailyStats": {}}
    store.put("stats", doc)
    doc["dailyStats"]["x"] = 1
    assert store.get("stats") == {"dailyStats": {}}
    got = store.get("stats")
    got["extra"] = True
    assert store.get("stats") == {"dailyStats": {}}
    assert store.keys() == ["stats"]


def test_read_json_empty_file(tmp_path):
    path = tmp_path / "empty.json"
    path.write_text("  \n", encoding="utf-8")
    assert read_json(path) is None


def test_write_json_atomic_creates_parents(tmp_path):
    path = tmp_path / "a" / "b" / "doc.json"
    write_json_atomic(path, {"k": [1, 2]})
    assert json.loads(path.read_text(encoding="utf-8")) == {"k": [1, 2]}

import json

import pytest

from services.impl.json_history_store import JsonHistoryStore
from services.interfaces.history_store_interface import HistoryEntry


def entry(n):
    return HistoryEntry(id=f"id{n}", type="text", data=f"payload {n}", timestamp=f"2024-01-0{n}T00:00:00")


def test_entries_persist_under_fixed_key(tmp_path):
    path = tmp_path / "history.json"
    store = JsonHistoryStore(str(path))
    store.append(entry(1))
    store.append(entry(2))

    document = json.loads(path.read_text(encoding="utf-8"))
    assert [item["id"] for item in document["scanHistory"]] == ["id1", "id2"]
    assert set(document["scanHistory"][0]) == {"id", "type", "data", "timestamp"}

    reloaded = JsonHistoryStore(str(path))
    assert reloaded.list() == [entry(1), entry(2)]


def test_other_document_keys_are_preserved(tmp_path):
    path = tmp_path / "history.json"
    path.write_text(json.dumps({"theme": "dark"}))

    JsonHistoryStore(str(path)).append(entry(1))

    document = json.loads(path.read_text(encoding="utf-8"))
    assert document["theme"] == "dark"
    assert len(document["scanHistory"]) == 1


def test_max_entries_keeps_newest(tmp_path):
    store = JsonHistoryStore(maxEntries=2)
    for n in range(1, 5):
        store.append(entry(n))
    assert [e.id for e in store.list()] == ["id3", "id4"]


def test_clear_removes_everything(tmp_path):
    path = tmp_path / "history.json"
    store = JsonHistoryStore(str(path))
    store.append(entry(1))
    store.clear()

    assert store.list() == []
    assert JsonHistoryStore(str(path)).list() == []


def test_corrupt_file_starts_empty(tmp_path):
    path = tmp_path / "history.json"
    path.write_text("[[[")
    assert JsonHistoryStore(str(path)).list() == []


def test_list_returns_a_copy():
    store = JsonHistoryStore()
    store.append(entry(1))
    store.list().clear()
    assert len(store.list()) == 1


def test_failed_save_leaves_memory_and_disk_untouched(tmp_path):
    path = tmp_path / "history.json"
    store = JsonHistoryStore(str(path))
    # A directory in place of the file makes the final rename fail
    path.mkdir()

    with pytest.raises(OSError):
        store.append(entry(1))

    assert store.list() == []
    assert not (tmp_path / "history.json.tmp").exists()

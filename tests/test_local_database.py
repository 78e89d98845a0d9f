# Rev 0.2.0

from __future__ import annotations

from ganttboard.repositories.db import LocalDatabase


def test_set_get_remove(db):
    assert db.get_item("k") is None
    db.set_item("k", "one")
    db.set_item("k", "two")
    assert db.get_item("k") == "two"
    db.set_item("a", "x")
    assert db.keys() == ["a", "k"]
    db.remove_item("k")
    assert db.keys() == ["a"]


def test_values_survive_reopen(tmp_path):
    path = tmp_path / "nested" / "board.db"
    first = LocalDatabase(path)
    first.set_item("gantt-admin-lock", "pw")
    first.close()
    second = LocalDatabase(path)
    assert second.get_item("gantt-admin-lock") == "pw"
    second.close()


def test_in_memory_store():
    mem = LocalDatabase(":memory:")
    mem.set_item("k", "v")
    assert mem.get_item("k") == "v"
    mem.close()

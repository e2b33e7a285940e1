import pytest

from src.onair.history import HistoryEntry, HistoryLog


def _entry(n: int) -> HistoryEntry:
    return HistoryEntry(title=f"T{n}", leader=f"L{n}", label=f"a{n}")


def test_empty_log_undo_redo_are_noops():
    log = HistoryLog(capacity=5)
    assert len(log) == 0
    assert log.undo() is None
    assert log.redo() is None
    assert log.snapshot() == {"items": [], "index": -1}


def test_record_moves_cursor_to_tail():
    log = HistoryLog(capacity=5)
    for n in range(3):
        log.record(_entry(n))
    assert len(log) == 3
    assert log.index == 2
    assert log.current == _entry(2)


def test_undo_stops_at_origin():
    log = HistoryLog(capacity=5)
    log.record(_entry(0))
    log.record(_entry(1))
    assert log.undo() == _entry(0)
    assert log.index == 0
    assert log.undo() is None
    assert log.index == 0


def test_redo_is_symmetric_at_tail():
    log = HistoryLog(capacity=5)
    log.record(_entry(0))
    log.record(_entry(1))
    log.undo()
    assert log.redo() == _entry(1)
    assert log.redo() is None
    assert log.index == 1


def test_new_record_after_undo_discards_redo_branch():
    log = HistoryLog(capacity=5)
    for n in range(3):
        log.record(_entry(n))
    log.undo()
    log.undo()
    log.record(_entry(9))
    assert [i["title"] for i in log.snapshot()["items"]] == ["T0", "T9"]
    assert log.redo() is None


def test_capacity_eviction_shifts_index():
    log = HistoryLog(capacity=3)
    for n in range(4):
        log.record(_entry(n))
    assert len(log) == 3
    assert log.index == 2
    assert log.snapshot()["items"][0]["title"] == "T1"


def test_capacity_eviction_after_undo_and_branch_keeps_index_valid():
    log = HistoryLog(capacity=2)
    log.record(_entry(0))
    log.record(_entry(1))
    log.undo()
    log.record(_entry(2))
    log.record(_entry(3))
    assert len(log) == 2
    assert 0 <= log.index < len(log)
    assert log.current == _entry(3)


def test_entries_are_immutable():
    entry = _entry(1)
    with pytest.raises(Exception):
        entry.title = "changed"


def test_snapshot_uses_camel_case():
    log = HistoryLog()
    log.record(HistoryEntry(title="A", without_pair=True, hidden=True, label="x"))
    item = log.snapshot()["items"][0]
    assert item == {
        "title": "A",
        "leader": "",
        "follower": "",
        "withoutPair": True,
        "hidden": True,
        "label": "x",
    }


def test_invalid_capacity_rejected():
    with pytest.raises(ValueError):
        HistoryLog(capacity=0)

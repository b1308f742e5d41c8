import pytest

from book import HistoryAction, HistoryEntry
from history import HistoryLog


def _entry(i, action=HistoryAction.BORROW):
    return HistoryEntry(f"2025-12-11 22:00:{i:02d}", action, f"BK{i:03d}", f"Title {i}", "Alice")


@pytest.fixture
def log(db):
    history = HistoryLog(db)
    for i in range(1, 6):
        history.append(_entry(i))
    return history


def test_recent_returns_last_n_in_insertion_order(log):
    assert [e.book_id for e in log.recent(2)] == ["BK004", "BK005"]


@pytest.mark.parametrize("n", [0, -3, 5, 50])
def test_recent_non_positive_or_large_returns_everything(log, n):
    assert [e.book_id for e in log.recent(n)] == ["BK001", "BK002", "BK003", "BK004", "BK005"]


def test_append_persists_immediately(log, db):
    assert len(HistoryLog(db)) == 5
    assert HistoryLog(db).recent(1)[0] == _entry(5)


def test_recent_returns_a_copy(log):
    entries = log.recent(0)
    entries.clear()
    assert len(log) == 5


def test_entries_are_immutable():
    entry = _entry(1)
    with pytest.raises(AttributeError):
        entry.by_who = "Mallory"

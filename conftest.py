import itertools

import pytest

from database import FlatFileDatabase
from history import HistoryLog
from library import Library
from session import LibrarySession


@pytest.fixture
def db(tmp_path):
    # Every test gets its own pair of store files
    return FlatFileDatabase(str(tmp_path / "books.txt"), str(tmp_path / "history.txt"))


@pytest.fixture
def clock():
    ticks = itertools.count()
    return lambda: f"2025-12-11 22:00:{next(ticks):02d}"


@pytest.fixture
def lib(db, clock):
    return Library(db, HistoryLog(db), borrow_limit=2, clock=clock)


@pytest.fixture
def session(lib):
    return LibrarySession(lib, lib.history, authenticator=None, default_page_size=20, max_page_size=100)

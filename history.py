import logging
from typing import List

from book import HistoryEntry
from database import FlatFileDatabase

logger = logging.getLogger(__name__)


class HistoryLog:
    """Append-only, insertion-ordered log of borrow/return actions."""

    def __init__(self, db: FlatFileDatabase) -> None:
        self._db = db
        self._entries: List[HistoryEntry] = db.load_history()

    def append(self, entry: HistoryEntry) -> None:
        self._entries.append(entry)
        self._db.append_history(entry)
        logger.debug(f"History: {entry.action.value} {entry.book_id} by {entry.by_who}")

    def recent(self, n: int) -> List[HistoryEntry]:
        """Last ``n`` entries, oldest first. ``n <= 0`` or too large gives the whole log."""
        if n <= 0 or n >= len(self._entries):
            return list(self._entries)
        return self._entries[-n:]

    def __len__(self) -> int:
        return len(self._entries)

import logging
import os
import warnings
from typing import Callable, Iterator, List, Optional, Tuple, TypeVar

from book import Book, HistoryEntry
from codec import decode_book, decode_history, encode_book, encode_history
from config import settings
from errors import MalformedRecordError, PersistenceWarning

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FlatFileDatabase:
    """Books and history stores kept as delimited text files.

    The books file is rewritten in full on every save; the history file is
    only ever appended to.
    """

    def __init__(self, books_file: Optional[str] = None, history_file: Optional[str] = None) -> None:
        self.books_file = books_file or settings.books_file
        self.history_file = history_file or settings.history_file

    # ------------------------- Books ------------------------- #
    def load_books(self) -> List[Book]:
        books = self._load(self.books_file, decode_book)
        logger.info(f"Loaded {len(books)} book(s) from {self.books_file}")
        return books

    def save_books(self, books: List[Book]) -> bool:
        """Overwrite the books store. Returns False (with a warning) if it cannot be written."""
        try:
            with open(self.books_file, "w", encoding="utf-8") as f:
                for book in books:
                    f.write(encode_book(book) + "\n")
        except OSError as e:
            self._warn(f"cannot open {self.books_file} for writing: {e}")
            return False
        return True

    # ------------------------- History ------------------------- #
    def load_history(self) -> List[HistoryEntry]:
        entries = self._load(self.history_file, decode_history)
        logger.info(f"Loaded {len(entries)} history entr(ies) from {self.history_file}")
        return entries

    def append_history(self, entry: HistoryEntry) -> bool:
        try:
            with open(self.history_file, "a", encoding="utf-8") as f:
                f.write(encode_history(entry) + "\n")
        except OSError as e:
            self._warn(f"cannot open {self.history_file} for appending: {e}")
            return False
        return True

    # ------------------------- Helpers ------------------------- #
    def _load(self, path: str, decode: Callable[[str], T]) -> List[T]:
        # A missing file on first run is an empty store.
        if not os.path.exists(path):
            return []
        records: List[T] = []
        for lineno, line in self._read_lines(path):
            try:
                records.append(decode(line))
            except MalformedRecordError as e:
                logger.warning(f"Skipping malformed line {lineno} in {path}: {e}")
        return records

    @staticmethod
    def _read_lines(path: str) -> Iterator[Tuple[int, str]]:
        with open(path, "r", encoding="utf-8") as f:
            for lineno, line in enumerate(f, 1):
                if line.strip():
                    yield lineno, line

    @staticmethod
    def _warn(message: str) -> None:
        logger.warning(f"Warning: {message}")
        warnings.warn(message, PersistenceWarning, stacklevel=3)

import logging
import re
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Union

from book import Book, HistoryAction, HistoryEntry, clean_text
from config import settings
from database import FlatFileDatabase
from errors import (
    AlreadyBorrowedError,
    AmbiguousMatchError,
    BookNotFoundError,
    BorrowLimitExceededError,
    EmptyNameError,
    NameMismatchError,
    NotBorrowedError,
)
from history import HistoryLog

logger = logging.getLogger(__name__)

ID_PREFIX = "BK"
_ID_PATTERN = re.compile(rf"^{ID_PREFIX}(\d+)")
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class SearchMode(str, Enum):
    TITLE = "title"
    AUTHOR = "author"
    YEAR = "year"
    EITHER = "either"


class SortKey(str, Enum):
    NONE = "none"
    TITLE = "title"
    YEAR = "year"
    AVAILABILITY = "availability"


def _now() -> str:
    return datetime.now().strftime(TIMESTAMP_FORMAT)


def _normalize_name(name: Optional[str]) -> str:
    return clean_text(name).lower()


class Library:
    """Catalog of books with the borrow/return rules.

    Owns the in-memory book list and the ID counter. Every mutation is
    followed by a full rewrite of the books store.
    """

    def __init__(self, db: FlatFileDatabase, history: Optional[HistoryLog] = None,
                 borrow_limit: Optional[int] = None,
                 clock: Callable[[], str] = _now) -> None:
        self.db = db
        self.history = history if history is not None else HistoryLog(db)
        self.borrow_limit = settings.borrow_limit_per_user if borrow_limit is None else borrow_limit
        self._clock = clock
        self.has_unsaved_changes = False
        self.books: List[Book] = db.load_books()
        self._next_id_number = 1
        self._recalculate_next_id()

    # ------------------------- IDs ------------------------- #
    def _recalculate_next_id(self) -> None:
        # Derived from surviving records only; the counter itself is not stored.
        highest = 0
        for book in self.books:
            match = _ID_PATTERN.match(book.id)
            if match:
                highest = max(highest, int(match.group(1)))
        self._next_id_number = highest + 1

    def generate_next_id(self) -> str:
        book_id = f"{ID_PREFIX}{self._next_id_number:03d}"
        self._next_id_number += 1
        return book_id

    # ------------------------- Core operations ------------------------- #
    def add_book(self, title: str, author: str, year: int) -> Book:
        book = Book(self.generate_next_id(), title, author, year)
        self.books.append(book)
        self.save()
        logger.info(f"Added {book.id}: {book.title}")
        return book

    def update_book(self, book_id: str, *, title: Optional[str] = None,
                    author: Optional[str] = None, year: Optional[int] = None) -> Book:
        """Update fields in place. Empty strings and a zero/None year keep the current value."""
        book = self._require(book_id)
        if title is not None and title.strip():
            book.title = clean_text(title)
        if author is not None and author.strip():
            book.author = clean_text(author)
        if year:
            book.year = int(year)
        self.save()
        logger.info(f"Updated {book.id}")
        return book

    def remove_book(self, book_id: str) -> Book:
        book = self._require(book_id)
        self.books = [b for b in self.books if b.id != book_id]
        self.save()
        logger.info(f"Deleted {book.id}: {book.title}")
        return book

    def find_book(self, book_id: str) -> Optional[Book]:
        for book in self.books:
            if book.id == book_id:
                return book
        return None

    def search_books(self, mode: Union[SearchMode, str], value: Union[str, int]) -> List[Book]:
        """Matches in catalog order. Text modes are case-insensitive substring matches."""
        mode = SearchMode(mode)
        if mode is SearchMode.YEAR:
            year = int(value)
            return [b for b in self.books if b.year == year]

        keyword = clean_text(str(value)).lower()
        results = []
        for book in self.books:
            in_title = keyword in book.title.lower()
            in_author = keyword in book.author.lower()
            if mode is SearchMode.TITLE and in_title:
                results.append(book)
            elif mode is SearchMode.AUTHOR and in_author:
                results.append(book)
            elif mode is SearchMode.EITHER and (in_title or in_author):
                results.append(book)
        return results

    def list_books(self, sort_key: Union[SortKey, str, None] = None) -> List[Book]:
        """A fresh ordered view; the stored order is never changed."""
        sort_key = SortKey(sort_key or SortKey.NONE)
        books = list(self.books)
        if sort_key is SortKey.TITLE:
            books.sort(key=lambda b: b.title.lower())
        elif sort_key is SortKey.YEAR:
            books.sort(key=lambda b: b.year)
        elif sort_key is SortKey.AVAILABILITY:
            books.sort(key=lambda b: b.is_borrowed)
        return books

    def count_borrowed_by(self, name: str) -> int:
        wanted = _normalize_name(name)
        return sum(1 for b in self.books if b.is_borrowed and _normalize_name(b.borrower) == wanted)

    # ------------------------- Lending ------------------------- #
    def resolve(self, id_or_title: str) -> Book:
        """Exact ID first, then a unique case-insensitive title fragment."""
        query = (id_or_title or "").strip()
        book = self.find_book(query)
        if book:
            return book
        fragment = clean_text(query).lower()
        matches = [b for b in self.books if fragment in b.title.lower()] if fragment else []
        if not matches:
            raise BookNotFoundError(query)
        if len(matches) > 1:
            raise AmbiguousMatchError(query, matches)
        return matches[0]

    def borrow_book(self, id_or_title: str, borrower_name: str) -> Book:
        book = self.resolve(id_or_title)
        if book.is_borrowed:
            raise AlreadyBorrowedError(book)

        name = clean_text(borrower_name)
        if not name:
            raise EmptyNameError()

        current = self.count_borrowed_by(name)
        if current >= self.borrow_limit:
            raise BorrowLimitExceededError(name, current, self.borrow_limit)

        book.is_borrowed = True
        book.borrower = name
        self.history.append(HistoryEntry(self._clock(), HistoryAction.BORROW, book.id, book.title, name))
        self.save()
        logger.info(f"{name} borrowed {book.id}")
        return book

    def return_book(self, book_id: str, name: str) -> Book:
        book = self._require(book_id)
        if not book.is_borrowed:
            raise NotBorrowedError(book)

        name = clean_text(name)
        if name.lower() != book.borrower.lower():
            raise NameMismatchError(book, name)

        book.is_borrowed = False
        book.borrower = ""
        self.history.append(HistoryEntry(self._clock(), HistoryAction.RETURN, book.id, book.title, name))
        self.save()
        logger.info(f"{name} returned {book.id}")
        return book

    # ------------------------- Reporting ------------------------- #
    def get_statistics(self) -> dict:
        borrowed = sum(1 for b in self.books if b.is_borrowed)
        return {
            "total_books": len(self.books),
            "borrowed_books": borrowed,
            "available_books": len(self.books) - borrowed,
            "unique_authors": len({b.author.lower() for b in self.books}),
            "history_entries": len(self.history),
        }

    # ------------------------- Persistence ------------------------- #
    def save(self) -> bool:
        self.has_unsaved_changes = not self.db.save_books(self.books)
        return not self.has_unsaved_changes

    def _require(self, book_id: str) -> Book:
        book = self.find_book(book_id)
        if book is None:
            raise BookNotFoundError(book_id)
        return book

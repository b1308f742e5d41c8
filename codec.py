"""Single-line text form of book and history records.

Books:   id|title|author|year|isBorrowed(0/1)|borrower
History: timestamp|action|bookID|title|byWho

A delimiter inside a free-text field is replaced with ``/`` before joining,
so the escape is lossy but never breaks the field count. Line breaks inside
free-text fields become a single space.
"""
from typing import List

from book import DELIMITER, Book, HistoryEntry, clean_text
from errors import MalformedRecordError

BOOK_FIELD_COUNT = 6
HISTORY_FIELD_COUNT = 5


def escape_field(value: str) -> str:
    return clean_text(value)


def _split(line: str, expected: int, kind: str) -> List[str]:
    parts = line.rstrip("\r\n").split(DELIMITER)
    if len(parts) < expected:
        raise MalformedRecordError(
            f"{kind} record has {len(parts)} field(s), expected {expected}: {line!r}"
        )
    return parts


def encode_book(book: Book) -> str:
    return DELIMITER.join([
        escape_field(book.id),
        escape_field(book.title),
        escape_field(book.author),
        str(book.year),
        "1" if book.is_borrowed else "0",
        escape_field(book.borrower),
    ])


def decode_book(line: str) -> Book:
    """Parse one books-store line, raising MalformedRecordError if unusable."""
    parts = _split(line, BOOK_FIELD_COUNT, "Book")
    book_id, title, author, year_raw, borrowed_raw, borrower = parts[:BOOK_FIELD_COUNT]
    if not book_id.strip():
        raise MalformedRecordError(f"Book record has an empty ID: {line!r}")
    try:
        year = int(year_raw.strip())
    except ValueError as exc:
        raise MalformedRecordError(f"Book record has a non-integer year {year_raw!r}") from exc

    is_borrowed = borrowed_raw.strip() == "1"
    if is_borrowed and not borrower.strip():
        raise MalformedRecordError(f"Borrowed book {book_id} has no borrower")
    return Book(book_id.strip(), title, author, year, is_borrowed, borrower)


def encode_history(entry: HistoryEntry) -> str:
    return DELIMITER.join([
        escape_field(entry.timestamp),
        entry.action.value,
        escape_field(entry.book_id),
        escape_field(entry.title),
        escape_field(entry.by_who),
    ])


def decode_history(line: str) -> HistoryEntry:
    parts = _split(line, HISTORY_FIELD_COUNT, "History")
    timestamp, action, book_id, title, by_who = parts[:HISTORY_FIELD_COUNT]
    if not timestamp.strip():
        raise MalformedRecordError(f"History record has an empty timestamp: {line!r}")
    try:
        return HistoryEntry(timestamp, action.strip(), book_id, title, by_who)
    except ValueError as exc:
        raise MalformedRecordError(f"Unknown history action {action!r}") from exc

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


DELIMITER = "|"
SUBSTITUTE = "/"


def clean_text(value: str) -> str:
    """Canonical free-text form: trimmed, one line, no field delimiter."""
    value = (value or "").replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
    return value.replace(DELIMITER, SUBSTITUTE).strip()


class HistoryAction(str, Enum):
    BORROW = "BORROW"
    RETURN = "RETURN"


class Book:
    """A single catalog record and its lending state."""

    def __init__(self, book_id: str, title: str, author: str, year: int,
                 is_borrowed: bool = False, borrower: str = "") -> None:
        self.id = book_id
        self.title = clean_text(title)
        self.author = clean_text(author)
        self.year = int(year)
        self.is_borrowed = is_borrowed
        self.borrower = clean_text(borrower) if is_borrowed else ""

    @property
    def status(self) -> str:
        return "Borrowed" if self.is_borrowed else "Available"

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.id}: {self.title} by {self.author} ({self.year})"

    def __repr__(self) -> str:
        return (f"Book(id={self.id!r}, title={self.title!r}, author={self.author!r}, "
                f"year={self.year}, is_borrowed={self.is_borrowed}, borrower={self.borrower!r})")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Book):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def copy(self) -> "Book":
        return Book(self.id, self.title, self.author, self.year, self.is_borrowed, self.borrower)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "year": self.year,
            "is_borrowed": self.is_borrowed,
            "borrower": self.borrower,
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        return Book(
            book_id=data["id"],
            title=data["title"],
            author=data["author"],
            year=data["year"],
            is_borrowed=bool(data.get("is_borrowed", False)),
            borrower=data.get("borrower") or "",
        )


@dataclass(frozen=True)
class HistoryEntry:
    """Immutable record of one borrow or return."""

    timestamp: str
    action: HistoryAction
    book_id: str
    title: str
    by_who: str

    def __post_init__(self) -> None:
        # Accept the raw action string read back from storage.
        object.__setattr__(self, "action", HistoryAction(self.action))
        for name in ("book_id", "title", "by_who"):
            object.__setattr__(self, name, clean_text(getattr(self, name)))

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "action": self.action.value,
            "book_id": self.book_id,
            "title": self.title,
            "by_who": self.by_who,
        }

    @staticmethod
    def from_dict(data: dict) -> "HistoryEntry":
        return HistoryEntry(
            timestamp=data["timestamp"],
            action=data["action"],
            book_id=data["book_id"],
            title=data["title"],
            by_who=data["by_who"],
        )

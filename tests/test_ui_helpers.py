from book import Book, HistoryAction, HistoryEntry
from utils.ui_helpers import (
    format_book_details,
    format_book_row,
    format_history_row,
    print_book_list,
    print_history,
)


def test_book_row_truncates_long_fields():
    book = Book("BK001", "A" * 40, "B" * 25, 1999, True, "Alice")
    row = format_book_row(book)
    assert row.startswith("BK001  " + "A" * 27 + "...")
    assert "B" * 17 + "..." in row
    assert row.endswith("1999  Borrowed by Alice")


def test_book_row_short_fields_untouched():
    row = format_book_row(Book("BK002", "Emma", "Austen", 1815))
    assert "Emma" in row and "..." not in row
    assert row.endswith("Available")


def test_details_show_borrower_only_when_borrowed():
    assert "Borrower" not in format_book_details(Book("BK001", "Dune", "Herbert", 1965))
    assert "Borrower: Bob" in format_book_details(Book("BK001", "Dune", "Herbert", 1965, True, "Bob"))


def test_history_row():
    entry = HistoryEntry("2025-12-11 22:00:00", HistoryAction.RETURN, "BK001", "Dune", "Alice")
    assert format_history_row(entry) == "2025-12-11 22:00:00 | RETURN |  BK001 | Dune | Alice"


def test_empty_messages(capsys, monkeypatch):
    monkeypatch.setenv("LIB_CLI_OUTPUT", "plain")
    print_book_list([])
    print_history([])
    out = capsys.readouterr().out
    assert "No books in library." in out
    assert "No history available." in out

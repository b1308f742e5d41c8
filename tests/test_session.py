import os

import pytest
from pydantic import ValidationError

from auth import AllowAll, SettingsAuthenticator
from errors import AuthenticationError, BookNotFoundError, NameMismatchError, PersistenceWarning
from library import SearchMode, SortKey
from schemas import (
    AddBookRequest,
    BorrowRequest,
    DeleteBookRequest,
    HistoryRequest,
    ListRequest,
    ReturnRequest,
    SearchRequest,
    UpdateBookRequest,
)
from session import LibrarySession


def _add(session, title, author="Author", year=2000, **creds):
    return session.add_book(AddBookRequest(title=title, author=author, year=year), **creds)


def test_add_and_details(session):
    book = _add(session, "  Dune ", "Herbert", 1965)
    assert book.id == "BK001"
    assert session.book_details("BK001").title == "Dune"
    with pytest.raises(BookNotFoundError):
        session.book_details("BK404")


def test_update_request_defaults_keep_values(session):
    _add(session, "Dune", "Herbert", 1965)
    book = session.update_book(UpdateBookRequest(id="BK001", author="Frank Herbert"))
    assert (book.title, book.author, book.year) == ("Dune", "Frank Herbert", 1965)


def test_delete_requires_confirmation(session):
    _add(session, "Dune")
    assert session.delete_book(DeleteBookRequest(id="BK001")) is None
    assert session.book_details("BK001") is not None

    removed = session.delete_book(DeleteBookRequest(id="BK001", confirmed=True))
    assert removed.title == "Dune"
    with pytest.raises(BookNotFoundError):
        session.delete_book(DeleteBookRequest(id="BK001", confirmed=False))


def test_search_request_modes(session):
    _add(session, "Dune", "Frank Herbert", 1965)
    _add(session, "Emma", "Jane Austen", 1815)
    assert [b.id for b in session.search(SearchRequest(mode=SearchMode.YEAR, value="1815"))] == ["BK002"]
    assert [b.id for b in session.search(SearchRequest(mode="author", value="HERB"))] == ["BK001"]
    assert [b.id for b in session.search(SearchRequest(value="a"))] == ["BK001", "BK002"]


def test_year_search_rejects_non_numeric_value():
    with pytest.raises(ValidationError):
        SearchRequest(mode=SearchMode.YEAR, value="last year")


def test_list_pagination(session):
    for i in range(5):
        _add(session, f"Title {chr(ord('E') - i)}", year=2000 + i)

    page = session.list_books(ListRequest(sort_key=SortKey.TITLE, page=1, page_size=2))
    assert [b.title for b in page.items] == ["Title A", "Title B"]
    assert (page.total, page.pages, page.page_size) == (5, 3, 2)

    last = session.list_books(ListRequest(sort_key=SortKey.TITLE, page=3, page_size=2))
    assert [b.title for b in last.items] == ["Title E"]

    beyond = session.list_books(ListRequest(page=4, page_size=2))
    assert beyond.items == []


def test_list_page_size_is_clamped(lib):
    session = LibrarySession(lib, default_page_size=3, max_page_size=4)
    for i in range(6):
        _add(session, f"Book {i}")
    assert session.list_books(ListRequest()).page_size == 3
    assert session.list_books(ListRequest(page_size=50)).page_size == 4


def test_list_empty_catalog(session):
    page = session.list_books(ListRequest())
    assert (page.items, page.total, page.pages) == ([], 0, 0)


def test_borrow_return_history(session):
    _add(session, "Dune", "Herbert", 1965)
    assert session.borrow(BorrowRequest(id_or_title_fragment="dun", borrower_name="Alice")).borrower == "Alice"

    with pytest.raises(NameMismatchError):
        session.return_book(ReturnRequest(id="BK001", name="Bob"))
    session.return_book(ReturnRequest(id="BK001", name="ALICE"))

    result = session.history_entries(HistoryRequest(count=10))
    assert [e.action.value for e in result.entries] == ["BORROW", "RETURN"]
    assert result.total == 2
    assert [e.action.value for e in session.history_entries(HistoryRequest(count=1)).entries] == ["RETURN"]


def test_admin_operations_check_credentials(lib):
    session = LibrarySession(lib, authenticator=SettingsAuthenticator("admin", "1234"))

    with pytest.raises(AuthenticationError):
        _add(session, "Dune", username="admin", password="wrong")
    assert lib.list_books() == []

    book = _add(session, "Dune", username="admin", password="1234")
    with pytest.raises(AuthenticationError):
        session.update_book(UpdateBookRequest(id=book.id, title="X"), username="root", password="1234")
    with pytest.raises(AuthenticationError):
        session.delete_book(DeleteBookRequest(id=book.id, confirmed=True))
    assert lib.find_book(book.id).title == "Dune"


def test_lending_needs_no_admin(lib):
    session = LibrarySession(lib, authenticator=SettingsAuthenticator("admin", "1234"))
    lib.add_book("Dune", "Herbert", 1965)
    assert session.borrow(BorrowRequest(id_or_title_fragment="BK001", borrower_name="Alice")).is_borrowed


def test_allow_all_authenticator(lib):
    session = LibrarySession(lib, authenticator=AllowAll())
    assert _add(session, "Dune").id == "BK001"


def test_close_retries_a_failed_books_write(session, db, tmp_path):
    books_file = db.books_file
    db.books_file = str(tmp_path)
    with pytest.warns(PersistenceWarning):
        _add(session, "Dune")
    assert session.library.has_unsaved_changes is True

    db.books_file = books_file
    session.close()
    assert session.library.has_unsaved_changes is False
    assert [b.id for b in db.load_books()] == ["BK001"]


def test_close_without_changes_does_not_write(session, db):
    session.list_books(ListRequest())
    session.close()
    assert not os.path.exists(db.books_file)


def test_add_request_validation():
    with pytest.raises(ValidationError):
        AddBookRequest(title="   ", author="Someone", year=2000)
    with pytest.raises(ValidationError):
        AddBookRequest(title="Dune", author="Herbert", year="soon")

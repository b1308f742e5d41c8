import logging
import math
from typing import List, Optional

from auth import Authenticator
from book import Book
from config import settings
from errors import AuthenticationError, BookNotFoundError
from history import HistoryLog
from library import Library
from schemas import (
    AddBookRequest,
    BorrowRequest,
    DeleteBookRequest,
    HistoryPage,
    HistoryRequest,
    ListRequest,
    Page,
    ReturnRequest,
    SearchRequest,
    UpdateBookRequest,
)

logger = logging.getLogger(__name__)


class LibrarySession:
    """Maps validated caller requests onto the catalog and history log.

    Catalog changes (add, update, delete) go through the authenticator when
    one is configured. Errors from the catalog propagate unchanged.
    """

    def __init__(self, library: Library, history: Optional[HistoryLog] = None,
                 authenticator: Optional[Authenticator] = None,
                 default_page_size: Optional[int] = None,
                 max_page_size: Optional[int] = None) -> None:
        self.library = library
        self.history = history if history is not None else library.history
        self.authenticator = authenticator
        self.default_page_size = default_page_size or settings.default_page_size
        self.max_page_size = max_page_size or settings.max_page_size

    def authorize(self, username: str, password: str) -> None:
        if self.authenticator is None:
            return
        if not self.authenticator.authenticate(username, password):
            logger.warning(f"Rejected admin login for {username!r}")
            raise AuthenticationError()

    # ------------------------- Admin ------------------------- #
    def add_book(self, request: AddBookRequest, *, username: str = "", password: str = "") -> Book:
        self.authorize(username, password)
        return self.library.add_book(request.title, request.author, request.year)

    def update_book(self, request: UpdateBookRequest, *, username: str = "", password: str = "") -> Book:
        self.authorize(username, password)
        return self.library.update_book(
            request.id, title=request.title, author=request.author, year=request.year
        )

    def delete_book(self, request: DeleteBookRequest, *, username: str = "", password: str = "") -> Optional[Book]:
        """Returns the removed book, or None when the caller did not confirm."""
        self.authorize(username, password)
        if not request.confirmed:
            # Still report a missing ID rather than a silent cancel.
            self.book_details(request.id)
            return None
        return self.library.remove_book(request.id)

    # ------------------------- Queries ------------------------- #
    def book_details(self, book_id: str) -> Book:
        book = self.library.find_book(book_id.strip())
        if book is None:
            raise BookNotFoundError(book_id)
        return book

    def search(self, request: SearchRequest) -> List[Book]:
        return self.library.search_books(request.mode, request.value)

    def list_books(self, request: ListRequest) -> Page:
        books = self.library.list_books(request.sort_key)
        page_size = min(request.page_size or self.default_page_size, self.max_page_size)
        start = (request.page - 1) * page_size
        return Page(
            items=books[start:start + page_size],
            page=request.page,
            page_size=page_size,
            total=len(books),
            pages=math.ceil(len(books) / page_size) if books else 0,
        )

    def history_entries(self, request: HistoryRequest) -> HistoryPage:
        return HistoryPage(entries=self.history.recent(request.count), total=len(self.history))

    def statistics(self) -> dict:
        return self.library.get_statistics()

    # ------------------------- Lending ------------------------- #
    def borrow(self, request: BorrowRequest) -> Book:
        return self.library.borrow_book(request.id_or_title_fragment, request.borrower_name)

    def return_book(self, request: ReturnRequest) -> Book:
        return self.library.return_book(request.id, request.name)

    def close(self) -> None:
        """Retry the books store if the last write failed; history is already on disk."""
        if self.library.has_unsaved_changes:
            self.library.save()

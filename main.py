import logging
from typing import Optional

import typer
from pydantic import ValidationError

from auth import SettingsAuthenticator
from config import settings
from database import FlatFileDatabase
from errors import AmbiguousMatchError, LibraryError
from history import HistoryLog
from library import Library, SearchMode, SortKey
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
from utils.ui_helpers import (
    print_book_details,
    print_book_list,
    print_history,
    print_stats_result,
    set_output_mode,
)

app = typer.Typer(help=settings.app_name, no_args_is_help=True)


def build_session(books_file: Optional[str] = None, history_file: Optional[str] = None) -> LibrarySession:
    """Wire the stores, catalog and facade once for this process."""
    db = FlatFileDatabase(books_file, history_file)
    history = HistoryLog(db)
    library = Library(db, history)
    return LibrarySession(library, history, authenticator=SettingsAuthenticator())


def _session(ctx: typer.Context) -> LibrarySession:
    return ctx.obj


def _report(error: Exception) -> None:
    if isinstance(error, AmbiguousMatchError):
        print("Matches:")
        print_book_list(error.candidates)
    if isinstance(error, ValidationError):
        for detail in error.errors():
            field = ".".join(str(p) for p in detail["loc"]) or "request"
            print(f"Error: {field}: {detail['msg']}")
        return
    print(f"Error: {error}")


@app.callback()
def _global_options(
    ctx: typer.Context,
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output format: plain | json | rich (default: plain)"
    ),
    books_file: Optional[str] = typer.Option(None, "--books-file", help="Books store path"),
    history_file: Optional[str] = typer.Option(None, "--history-file", help="History store path"),
):
    """Global options (output mode, store locations)."""
    if ctx.resilient_parsing:
        return
    logging.basicConfig(level=settings.log_level, format="%(levelname)s: %(message)s")
    if output:
        set_output_mode(output)
    session = build_session(books_file, history_file)
    ctx.obj = session
    ctx.call_on_close(session.close)


@app.command("add")
def cli_add(
    ctx: typer.Context,
    title: str,
    author: str,
    year: int,
    username: str = typer.Option(..., "--username", "-u", prompt="Admin username"),
    password: str = typer.Option(..., "--password", "-p", prompt="Admin password", hide_input=True),
):
    """Add a book (admin)."""
    try:
        book = _session(ctx).add_book(
            AddBookRequest(title=title, author=author, year=year),
            username=username, password=password,
        )
    except (LibraryError, ValidationError) as e:
        _report(e)
        return
    print(f"Book added with ID: {book.id}")


@app.command("update")
def cli_update(
    ctx: typer.Context,
    book_id: str,
    title: Optional[str] = typer.Option(None, "--title", help="New title (omit to keep)"),
    author: Optional[str] = typer.Option(None, "--author", help="New author (omit to keep)"),
    year: int = typer.Option(0, "--year", help="New year (0 to keep)"),
    username: str = typer.Option(..., "--username", "-u", prompt="Admin username"),
    password: str = typer.Option(..., "--password", "-p", prompt="Admin password", hide_input=True),
):
    """Update a book's title, author or year (admin)."""
    try:
        _session(ctx).update_book(
            UpdateBookRequest(id=book_id, title=title, author=author, year=year),
            username=username, password=password,
        )
    except (LibraryError, ValidationError) as e:
        _report(e)
        return
    print("Book updated.")


@app.command("delete")
def cli_delete(
    ctx: typer.Context,
    book_id: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Delete without asking"),
    username: str = typer.Option(..., "--username", "-u", prompt="Admin username"),
    password: str = typer.Option(..., "--password", "-p", prompt="Admin password", hide_input=True),
):
    """Delete a book (admin)."""
    session = _session(ctx)
    try:
        session.authorize(username, password)
        book = session.book_details(book_id)
        confirmed = yes or typer.confirm(f"Are you sure you want to delete '{book.title}'?", default=False)
        removed = session.delete_book(
            DeleteBookRequest(id=book_id, confirmed=confirmed),
            username=username, password=password,
        )
    except (LibraryError, ValidationError) as e:
        _report(e)
        return
    print("Book deleted." if removed else "Delete cancelled.")


@app.command("search")
def cli_search(
    ctx: typer.Context,
    value: str = typer.Argument(..., help="Keyword, or a year with --by year"),
    by: SearchMode = typer.Option(SearchMode.EITHER, "--by", "-b", help="Field to search"),
):
    """Search by title, author, year or title/author."""
    try:
        results = _session(ctx).search(SearchRequest(mode=by, value=value))
    except ValidationError as e:
        _report(e)
        return
    if not results:
        print("No results.")
        return
    print(f"Found {len(results)} result(s):")
    print_book_list(results, title=f"🔎 Results for '{value}'")


@app.command("borrow")
def cli_borrow(ctx: typer.Context, book: str = typer.Argument(..., help="Book ID or part of the title"),
               name: str = typer.Argument(..., help="Borrower name")):
    """Borrow a book."""
    try:
        borrowed = _session(ctx).borrow(BorrowRequest(id_or_title_fragment=book, borrower_name=name))
    except (LibraryError, ValidationError) as e:
        _report(e)
        return
    print(f"You have successfully borrowed '{borrowed.title}' (ID: {borrowed.id}).")


@app.command("return")
def cli_return(ctx: typer.Context, book_id: str, name: str):
    """Return a borrowed book; the name must match the borrower."""
    try:
        _session(ctx).return_book(ReturnRequest(id=book_id, name=name))
    except (LibraryError, ValidationError) as e:
        _report(e)
        return
    print("Book returned successfully. Thank you.")


@app.command("list")
def cli_list(
    ctx: typer.Context,
    sort: SortKey = typer.Option(SortKey.NONE, "--sort", "-s", help="Sort order"),
    page: int = typer.Option(1, "--page", min=1),
    page_size: Optional[int] = typer.Option(None, "--page-size", min=1),
):
    """List all books."""
    result = _session(ctx).list_books(ListRequest(sort_key=sort, page=page, page_size=page_size))
    if result.total and not result.items:
        print(f"Page {result.page} is empty ({result.pages} page(s)).")
        return
    footer = f"Page {result.page}/{result.pages} ({result.total} books)" if result.pages > 1 else None
    print_book_list(result.items, footer=footer)


@app.command("history")
def cli_history(ctx: typer.Context,
                count: int = typer.Option(0, "--count", "-n", help="Entries to show (0 = all)")):
    """Show the borrow/return history."""
    print_history(_session(ctx).history_entries(HistoryRequest(count=count)).entries)


@app.command("show")
def cli_show(ctx: typer.Context, book_id: str):
    """Show details for a single book."""
    try:
        book = _session(ctx).book_details(book_id)
    except LibraryError as e:
        _report(e)
        return
    print_book_details(book)


@app.command("stats")
def cli_stats(ctx: typer.Context):
    """Show catalog statistics."""
    print_stats_result(_session(ctx).statistics())


if __name__ == "__main__":
    app()

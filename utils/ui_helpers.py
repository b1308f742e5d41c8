import os
import json
from typing import List, Any, Dict, Optional
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def _clip(text: str, width: int) -> str:
    return text[:width - 3] + "..." if len(text) > width - 3 else text


def format_book_row(book: Any) -> str:
    status = f"Borrowed by {book.borrower}" if book.is_borrowed else "Available"
    return (f"{book.id:<7}{_clip(book.title, 30):<30}{_clip(book.author, 20):<20}"
            f"{book.year:<6}{status}")


def format_book_header() -> str:
    return f"{'ID':<7}{'Title':<30}{'Author':<20}{'Year':<6}Status\n" + "-" * 80


def format_book_details(book: Any) -> str:
    lines = [
        f"ID: {book.id}",
        f"Title: {book.title}",
        f"Author: {book.author}",
        f"Year: {book.year}",
        f"Status: {book.status}",
    ]
    if book.is_borrowed:
        lines.append(f"Borrower: {book.borrower}")
    return "\n".join(lines)


def format_history_row(entry: Any) -> str:
    return (f"{entry.timestamp} | {entry.action.value:>6} | {entry.book_id:>6} | "
            f"{entry.title} | {entry.by_who}")


def print_book_list(books: List[Any], title: str = "📚 Books", footer: Optional[str] = None) -> None:
    """Print books in the current output mode.
    - plain: fixed-width rows under a header, or 'No books in library.'
    - json: JSON array of book dicts
    - rich: Rich table
    """
    mode = get_output_mode()

    if not books:
        print("No books in library.")
        return

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title=title, show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Year", justify="right")
        table.add_column("Status")
        for b in books:
            status = f"[red]Borrowed[/] by {escape(b.borrower)}" if b.is_borrowed else "[green]Available[/]"
            table.add_row(b.id, escape(b.title), escape(b.author), str(b.year), status)
        _console.print(table)
        if footer:
            _console.print(f"[dim]{footer}[/]")
    else:
        print(format_book_header())
        for b in books:
            print(format_book_row(b))
        if footer:
            print(footer)


def print_book_details(book: Any) -> None:
    mode = get_output_mode()
    if mode == "json":
        print(json.dumps(book.to_dict(), ensure_ascii=False))
    elif mode == "rich":
        _console.print(Panel.fit(escape(format_book_details(book)), title="🔍 Book", border_style="green"))
    else:
        print(format_book_details(book))


def print_history(entries: List[Any]) -> None:
    mode = get_output_mode()

    if not entries:
        print("No history available.")
        return

    if mode == "json":
        print(json.dumps([e.to_dict() for e in entries], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="🕑 History", header_style="bold cyan")
        for column in ("Time", "Action", "ID", "Title", "By"):
            table.add_column(column)
        for e in entries:
            table.add_row(e.timestamp, e.action.value, e.book_id, escape(e.title), escape(e.by_who))
        _console.print(table)
    else:
        for e in entries:
            print(format_history_row(e))


def print_stats_result(stats: Dict[str, Any]) -> None:
    mode = get_output_mode()

    if not stats:
        print("No statistics available.")
        return

    labels = {
        "total_books": "Total Books",
        "borrowed_books": "Borrowed",
        "available_books": "Available",
        "unique_authors": "Unique Authors",
        "history_entries": "History Entries",
    }
    if mode == "json":
        print(json.dumps(stats, ensure_ascii=False))
    elif mode == "rich":
        content = "\n".join(f"[bold]{labels.get(k, k)}:[/] {v}" for k, v in stats.items())
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        for k, v in stats.items():
            print(f"{labels.get(k, k)}: {v}")

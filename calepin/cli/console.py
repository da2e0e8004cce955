"""Console output for the CLI.

Provides a Console class that wraps rich for consistent, polished output.
All CLI output should go through this module.
"""

from datetime import datetime, timezone
from typing import Any

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.table import Table

from calepin.domain.knowledge.model.card import Card
from calepin.domain.knowledge.model.record import Record
from calepin.domain.knowledge.model.value import DateRange, PropertyValue

MAX_VALUE_LENGTH = 100
FORMATTED_TYPES = frozenset(
    {"title", "rich_text", "url", "email", "phone_number", "number", "select", "date"}
)


def relative_time(value: datetime | str | None) -> str:
    """Convert a timestamp to a relative time string (e.g., '2 hours ago')."""
    if value is None:
        return "unknown"
    try:
        dt = value if isinstance(value, datetime) else datetime.fromisoformat(value)
        now = datetime.now(timezone.utc)
        delta = now - dt

        seconds = delta.total_seconds()
        if seconds < 60:
            return "just now"
        elif seconds < 3600:
            mins = int(seconds // 60)
            return f"{mins} minute{'s' if mins != 1 else ''} ago"
        elif seconds < 86400:
            hours = int(seconds // 3600)
            return f"{hours} hour{'s' if hours != 1 else ''} ago"
        elif seconds < 604800:
            days = int(seconds // 86400)
            return f"{days} day{'s' if days != 1 else ''} ago"
        else:
            return dt.strftime("%Y-%m-%d %H:%M")
    except (ValueError, TypeError):
        return str(value)


def truncate(text: str, limit: int = MAX_VALUE_LENGTH) -> str:
    """Cut text longer than ``limit`` to ``limit - 3`` characters plus '...'."""
    return text if len(text) <= limit else text[: limit - 3] + "..."


def format_property_value(prop: PropertyValue) -> str:
    """Human-readable rendering of a normalized property value."""
    value = prop.value
    if prop.type == "checkbox":
        return "Yes" if value else "No"
    if prop.type == "relation":
        return f"{value or 0} relation(s)"
    if prop.type == "multi_select":
        return ", ".join(value) if value else "(empty)"
    if isinstance(value, DateRange):
        return f"{value.start} -> {value.end}" if value.end else value.start
    if value is None or value == "":
        return "(empty)" if prop.type in FORMATTED_TYPES else f"({prop.type})"
    return truncate(str(value))


class Console:
    """CLI output manager wrapping rich.

    Provides consistent formatting for success/error messages, tables,
    and structured output.
    """

    def __init__(
        self,
        *,
        force_terminal: bool | None = None,
        quiet: bool = False,
    ) -> None:
        """Initialize the console.

        Args:
            force_terminal: Force terminal mode (True/False) or auto-detect (None).
            quiet: Suppress non-essential output.
        """
        self._console = RichConsole(force_terminal=force_terminal, stderr=False)
        self._err_console = RichConsole(force_terminal=force_terminal, stderr=True)
        self._quiet = quiet

    # -------------------------------------------------------------------------
    # Status messages
    # -------------------------------------------------------------------------

    def success(self, message: str) -> None:
        """Print a success message."""
        self._console.print(f"[green]✓[/green] {message}")

    def error(self, message: str, *, hint: str | None = None) -> None:
        """Print an error message to stderr."""
        self._err_console.print(f"[red]✗[/red] {message}")
        if hint:
            self._err_console.print(f"  [dim]{hint}[/dim]")

    def warning(self, message: str) -> None:
        """Print a warning message."""
        self._console.print(f"[yellow]⚠[/yellow] {message}")

    def info(self, message: str) -> None:
        """Print an info message (suppressed in quiet mode)."""
        if not self._quiet:
            self._console.print(f"[dim]{message}[/dim]")

    # -------------------------------------------------------------------------
    # Structured output
    # -------------------------------------------------------------------------

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Print to console (pass-through to rich)."""
        self._console.print(*args, **kwargs)

    def table(
        self,
        rows: list[dict[str, Any]],
        columns: list[tuple[str, str]],  # (key, header)
        *,
        title: str | None = None,
        numbered: bool = False,
    ) -> None:
        """Print a table.

        Args:
            rows: List of dicts containing row data.
            columns: List of (key, header) tuples defining columns.
            title: Optional table title.
            numbered: Add a # column with row numbers.
        """
        table = Table(title=title, show_header=True, header_style="bold")

        if numbered:
            table.add_column("#", style="dim", width=3)

        for key, header in columns:
            table.add_column(header)

        for i, row in enumerate(rows, 1):
            values = [str(row.get(key, "") or "") for key, _ in columns]
            if numbered:
                table.add_row(str(i), *values)
            else:
                table.add_row(*values)

        self._console.print(table)

    def panel(
        self,
        content: str,
        *,
        title: str | None = None,
        subtitle: str | None = None,
        border_style: str = "dim",
    ) -> None:
        """Print content in a panel/box."""
        self._console.print(
            Panel(content, title=title, subtitle=subtitle, border_style=border_style)
        )

    def record_detail(self, record: Record, position: int, total: int) -> None:
        """Print one record with every property formatted."""
        lines = [
            f"[cyan]{name}[/cyan] [dim]({prop.type})[/dim]: {format_property_value(prop)}"
            for name, prop in record.properties.items()
        ]
        lines.append("")
        lines.append(
            f"[dim]Created {relative_time(record.created_time)} · "
            f"modified {relative_time(record.last_edited_time)}[/dim]"
        )
        if record.url:
            lines.append(f"[dim]{record.url}[/dim]")

        self._console.print(
            Panel(
                "\n".join(lines),
                title=f"[bold]Record {position}/{total}[/bold]",
                subtitle=f"[dim]{record.id}[/dim]",
                border_style="blue",
                padding=(0, 2),
            )
        )

    def cards(self, cards: list[Card]) -> None:
        """Print the card feed as a table."""
        if not cards:
            self.warning("No cards found")
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("Source")
        table.add_column("Title")
        table.add_column("Artist")
        table.add_column("Genre")
        table.add_column("Added", style="dim")
        table.add_column("♥", width=2)

        for card in cards:
            table.add_row(
                card.source_name,
                truncate(card.title, 60),
                card.artist or "",
                ", ".join(card.genre or []),
                card.added_on.isoformat() if card.added_on else "",
                "♥" if card.like else "",
            )

        self._console.print(table)
        self._console.print(f"{len(cards)} card{'s' if len(cards) != 1 else ''}")

    # -------------------------------------------------------------------------
    # Progress and status
    # -------------------------------------------------------------------------

    def status(self, message: str):
        """Return a status context manager for long operations.

        Usage:
            with console.status("Loading..."):
                do_something()
        """
        return self._console.status(message)


# Module-level default instance for convenience
_default: Console | None = None


def get_console() -> Console:
    """Get the default console instance."""
    global _default
    if _default is None:
        _default = Console()
    return _default

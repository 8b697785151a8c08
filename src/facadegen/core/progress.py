"""User-facing feedback for CLI operations.

Design principles:
- Single line updates, no spam
- Graceful degradation in non-TTY (CI, pipes)
- Suppress structlog console output during spinners to avoid line collision

Usage::

    from facadegen.core.progress import spinner, status

    status("Loaded 12 types")
    status("Wrote 10 facades", style="success")  # ✓ Wrote 10 facades

    with spinner("Generating 12 facades"):
        run()  # console logging suppressed during this block
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

_console = Console(stderr=True)

_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}

_STRATEGY_STYLES = {
    "direct": "green",
    "trampoline": "cyan",
    "dynamic_invoke": "yellow",
}

# Process-wide: generation logs from worker threads must be held back too.
_suppress_console_logs = threading.Event()


def is_console_suppressed() -> bool:
    """Check if console logging is currently suppressed."""
    return _suppress_console_logs.is_set()


@contextmanager
def suppress_console_logs() -> Iterator[None]:
    """Suppress structlog console output; file handlers keep receiving records."""
    _suppress_console_logs.set()
    try:
        yield
    finally:
        _suppress_console_logs.clear()


def _get_logger() -> BoundLogger:
    """Get logger lazily to respect runtime config."""
    from facadegen.core.logging import get_logger

    return get_logger("progress")


def _is_tty() -> bool:
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


def get_console() -> Console:
    """Get the shared Rich console instance."""
    return _console


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print a styled status message to stderr."""
    prefix = _STYLES.get(style, "")
    padding = " " * indent
    _console.print(f"{padding}{prefix}{message}", highlight=False)

    _get_logger().debug("status", message=message, style=style)


@contextmanager
def spinner(message: str, *, indent: int = 0) -> Iterator[None]:
    """Show a spinner while the block runs, suppressing console logs.

    In a non-TTY the message is printed once instead.
    """
    padding = " " * indent
    if _is_tty():
        with (
            suppress_console_logs(),
            _console.status(f"{padding}[cyan]{message}[/cyan]", spinner="dots"),
        ):
            yield
    else:
        _console.print(f"{padding}{message}...", highlight=False)
        yield


def make_strategy_table(title: str, rows: Sequence[tuple[str, str, str, str]]) -> Table:
    """Rich table of (kind, member, accessor, strategy) rows."""
    table = Table(title=title, title_justify="left", padding=(0, 1), pad_edge=False)
    table.add_column("kind", style="dim")
    table.add_column("member", style="bold")
    table.add_column("accessor")
    table.add_column("strategy")
    for kind, member, accessor, strategy in rows:
        style = _STRATEGY_STYLES.get(strategy, "")
        table.add_row(kind, member, accessor, f"[{style}]{strategy}[/{style}]" if style else strategy)
    return table

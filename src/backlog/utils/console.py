"""Rich console utilities for consistent terminal output.

This module provides a shared Rich Console instance and helper functions
for displaying tasks, boards and status messages.
"""

import logging
import sys

from rich.console import Console
from rich.table import Table

from backlog.models.task import Task

logger = logging.getLogger(__name__)

# Legacy Windows encodings that require special handling
LEGACY_WINDOWS_ENCODINGS = frozenset({"cp1252", "cp437", "ascii"})

PRIORITY_STYLES = {"high": "bold red", "medium": "yellow", "low": "dim"}


def create_console() -> Console:
    """Create a Rich Console with appropriate settings for the current terminal.

    On Windows terminals with legacy encodings (cp1252, cp437, ascii), enables
    legacy_windows mode to avoid unicode encoding errors.

    Returns:
        Console: A configured Rich Console instance.
    """
    if sys.platform == "win32":
        encoding = getattr(sys.stdout, "encoding", None) or "utf-8"
        encoding = encoding.lower().replace("-", "")

        if encoding in LEGACY_WINDOWS_ENCODINGS:
            logger.debug(
                "Detected legacy Windows encoding '%s', enabling legacy_windows mode",
                encoding,
            )
            return Console(legacy_windows=True)

    return Console()


console = create_console()


def print_success(message: str) -> None:
    """Print a success message with a green checkmark."""
    console.print(f"[bold green]✓[/bold green] {message}")


def print_error(message: str) -> None:
    """Print an error message with a red X."""
    console.print(f"[bold red]✗[/bold red] {message}")


def print_warning(message: str) -> None:
    """Print a warning message with a yellow warning sign."""
    console.print(f"[bold yellow]⚠[/bold yellow] {message}")


def format_priority(priority: str | None) -> str:
    """Return rich markup for a priority value."""
    if not priority:
        return ""
    style = PRIORITY_STYLES.get(priority, "")
    return f"[{style}]{priority}[/{style}]" if style else priority


def build_task_table(tasks: list[Task], title: str | None = None) -> Table:
    """Build a table with one row per task.

    Args:
        tasks: Tasks to display, in display order.
        title: Optional table title.

    Returns:
        A Rich Table ready to print.
    """
    table = Table(title=title, show_lines=False)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Priority")
    table.add_column("Milestone", style="magenta")
    table.add_column("Labels", style="dim")

    for task in tasks:
        table.add_row(
            task.id,
            task.title,
            task.status,
            format_priority(task.priority),
            task.milestone or "",
            ", ".join(task.labels),
        )
    return table


def build_board_table(columns: dict[str, list[Task]]) -> Table:
    """Build a kanban board with one column per status.

    Args:
        columns: Mapping of status to the tasks in that column.

    Returns:
        A Rich Table with one column per status.
    """
    table = Table(show_lines=False, expand=True)
    for status, tasks in columns.items():
        table.add_column(f"{status} ({len(tasks)})", overflow="fold")

    depth = max((len(tasks) for tasks in columns.values()), default=0)
    for row in range(depth):
        cells = []
        for tasks in columns.values():
            if row < len(tasks):
                task = tasks[row]
                cells.append(f"[cyan]{task.id}[/cyan] {task.title}")
            else:
                cells.append("")
        table.add_row(*cells)
    return table

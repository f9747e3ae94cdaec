"""Backlog board command - show tasks as a kanban board."""

import logging
from pathlib import Path

import typer

from backlog.commands.common import run_with_store
from backlog.models import Task
from backlog.services import BacklogStore
from backlog.utils import build_board_table, console

logger = logging.getLogger(__name__)


def board(
    root: Path | None = typer.Option(None, "--root", "-r", help="Project root"),
    include_completed: bool = typer.Option(
        False, "--completed", "-c", help="Include tasks from the completed directory"
    ),
) -> None:
    """Show active tasks grouped into the configured status columns."""

    async def _columns(store: BacklogStore) -> tuple[str, dict[str, list[Task]]]:
        columns = store.get_tasks_by_status()
        if not include_completed:
            columns = {
                status: [task for task in tasks if task.source != "completed"]
                for status, tasks in columns.items()
            }
        return store.get_config().project_name, columns

    project_name, columns = run_with_store(root, _columns)
    console.print(f"[bold]{project_name}[/bold]")
    console.print(build_board_table(columns))

"""Backlog CLI entry point.

This module provides the main entry point for the backlog CLI, a
command-line front end for Backlog.md task and milestone files.
"""

import logging

import typer

from backlog import __version__
from backlog.commands import (
    archive,
    board,
    create,
    delete,
    edit,
    init,
    list_tasks,
    milestone_create,
    milestones,
    restore,
    show,
)

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="backlog",
    help="Backlog - Markdown task and milestone management",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Handle the version flag callback.

    Args:
        value: Whether the version flag was provided.

    Raises:
        typer.Exit: Always raised after printing version when value is True.
    """
    if value:
        typer.echo(f"backlog {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging."),
) -> None:
    """Backlog - Markdown task and milestone management."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


app.command(name="init", help="Create a backlog in the current directory")(init)
app.command(name="list", help="List tasks")(list_tasks)
app.command(name="board", help="Show tasks as a kanban board")(board)
app.command(name="show", help="Show a task")(show)
app.command(name="create", help="Create a task")(create)
app.command(name="edit", help="Edit a task")(edit)
app.command(name="archive", help="Move a task to completed")(archive)
app.command(name="restore", help="Move a completed task back to tasks")(restore)
app.command(name="delete", help="Delete a task")(delete)
app.command(name="milestones", help="Show milestone progress")(milestones)
app.command(name="milestone-create", help="Create a milestone")(milestone_create)


if __name__ == "__main__":
    app()

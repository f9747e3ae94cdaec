"""Backlog init command - create a project.

This module implements the 'backlog init' command which writes
backlog/config.yml and the task, completed and milestone directories.
"""

import asyncio
import logging
from pathlib import Path

import typer

from backlog.commands.common import split_csv
from backlog.models import DEFAULT_STATUSES, BacklogConfig
from backlog.services import BacklogStore, LocalStorageAdapter
from backlog.utils import console, print_error, print_success, print_warning

logger = logging.getLogger(__name__)


def init(
    root: Path | None = typer.Option(
        None, "--root", "-r", help="Project root (defaults to the current directory)"
    ),
    project_name: str | None = typer.Option(
        None, "--name", "-n", help="Project name (defaults to directory name)"
    ),
    statuses: str | None = typer.Option(
        None, "--statuses", help="Comma-separated status columns (default: To Do, In Progress, Done)"
    ),
    labels: str | None = typer.Option(None, "--labels", help="Comma-separated labels"),
) -> None:
    """Create backlog/config.yml and the backlog directories."""
    project_root = (root or Path.cwd()).resolve()
    status_list = split_csv(statuses) or list(DEFAULT_STATUSES)

    config = BacklogConfig(
        project_name=project_name or project_root.name,
        statuses=status_list,
        labels=split_csv(labels),
        default_status=status_list[0],
    )
    store = BacklogStore(project_root=str(project_root), adapter=LocalStorageAdapter())

    try:
        created = asyncio.run(store.init_project(config))
    except OSError as e:
        print_error(f"Failed to initialize project: {e}")
        raise typer.Exit(1) from e

    if not created:
        print_warning(f"A backlog already exists at {store.config_path}")
        return

    print_success(f"Initialized backlog [bold]{config.project_name}[/bold]")
    console.print(f"[dim]Config:[/dim] [cyan]{store.config_path}[/cyan]")
    console.print(f"[dim]Statuses:[/dim] {', '.join(config.statuses)}")
    console.print()
    console.print("Create your first task with [cyan]backlog create \"Title\"[/cyan]")

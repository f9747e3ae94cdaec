"""Backlog milestone commands.

This module implements 'backlog milestones', which shows per-milestone
progress, and 'backlog milestone-create'.
"""

import logging
from pathlib import Path

import typer
from rich.table import Table

from backlog.commands.common import run_with_store
from backlog.models import Milestone, MilestoneCreateInput, MilestoneSummary
from backlog.services import BacklogStore
from backlog.utils import console, print_success

logger = logging.getLogger(__name__)


def milestones(
    root: Path | None = typer.Option(None, "--root", "-r", help="Project root"),
) -> None:
    """Show every milestone with its task counts and progress."""

    async def _summary(store: BacklogStore) -> MilestoneSummary:
        return await store.get_tasks_by_milestone()

    summary = run_with_store(root, _summary)
    if not summary.buckets:
        console.print("[dim]No tasks or milestones found.[/dim]")
        return

    table = Table(title="Milestones")
    table.add_column("Milestone", style="magenta")
    table.add_column("Tasks", justify="right")
    table.add_column("Done", justify="right")
    table.add_column("Progress", justify="right")
    for bucket in summary.buckets:
        label = f"[dim]{bucket.label}[/dim]" if bucket.is_no_milestone else bucket.label
        table.add_row(label, str(bucket.total), str(bucket.done_count), f"{bucket.progress}%")
    console.print(table)


def milestone_create(
    title: str = typer.Argument(..., help="Milestone title"),
    root: Path | None = typer.Option(None, "--root", "-r", help="Project root"),
    description: str = typer.Option("", "--description", "-d", help="Milestone description"),
) -> None:
    """Create a new milestone."""

    async def _create(store: BacklogStore) -> Milestone:
        return await store.create_milestone(MilestoneCreateInput(title=title, description=description))

    milestone = run_with_store(root, _create)
    print_success(f"Created milestone {milestone.id}: {milestone.title}")
    console.print(f"[dim]File:[/dim] [cyan]{milestone.file_path}[/cyan]")

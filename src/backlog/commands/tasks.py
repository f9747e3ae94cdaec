"""Backlog task commands.

This module implements the task-level commands: list, show, create,
edit, archive, restore and delete. Each command is a thin wrapper that
runs one store operation and renders the result with rich.
"""

import logging
from pathlib import Path

import typer
from rich.markdown import Markdown
from rich.prompt import Confirm

from backlog.commands.common import run_with_store
from backlog.models import (
    AcceptanceCriterionInput,
    PaginationOptions,
    Task,
    TaskCreateInput,
    TaskListFilter,
    TaskUpdateInput,
)
from backlog.services import BacklogStore
from backlog.utils import build_task_table, console, get_task_body_markdown, print_error, print_success

logger = logging.getLogger(__name__)

_PRIORITIES = ("high", "medium", "low")


def _check_priority(priority: str | None) -> str | None:
    if priority is not None and priority not in _PRIORITIES:
        print_error(f"Invalid priority '{priority}'. Use one of: {', '.join(_PRIORITIES)}")
        raise typer.Exit(1)
    return priority


def _not_found(task_id: str) -> typer.Exit:
    print_error(f"Task {task_id} not found")
    return typer.Exit(1)


def list_tasks(
    root: Path | None = typer.Option(None, "--root", "-r", help="Project root"),
    status: str | None = typer.Option(None, "--status", "-s", help="Only tasks with this status"),
    assignee: str | None = typer.Option(None, "--assignee", "-a", help="Only tasks assigned to this person"),
    priority: str | None = typer.Option(None, "--priority", "-p", help="Only tasks with this priority"),
    milestone: str | None = typer.Option(None, "--milestone", "-m", help="Only tasks in this milestone"),
    label: list[str] | None = typer.Option(None, "--label", "-l", help="Only tasks with any of these labels"),
    limit: int | None = typer.Option(None, "--limit", help="Maximum number of tasks to show"),
    offset: int = typer.Option(0, "--offset", help="Number of tasks to skip"),
) -> None:
    """List tasks, optionally filtered."""
    criteria = TaskListFilter(
        status=status,
        assignee=assignee,
        priority=_check_priority(priority),
        milestone=milestone,
        labels=label or [],
    )

    async def _list(store: BacklogStore) -> tuple[list[Task], int]:
        if limit is None:
            tasks = store.list_tasks(criteria)
            return tasks, len(tasks)
        page = store.list_tasks_paginated(criteria, PaginationOptions(limit=limit, offset=offset))
        return page.items, page.total

    tasks, total = run_with_store(root, _list)
    if not tasks:
        console.print("[dim]No tasks found.[/dim]")
        return

    console.print(build_task_table(tasks))
    if len(tasks) < total:
        console.print(f"[dim]Showing {offset + 1}-{offset + len(tasks)} of {total} tasks[/dim]")


def show(
    task_id: str = typer.Argument(..., help="Task id, e.g. 42"),
    root: Path | None = typer.Option(None, "--root", "-r", help="Project root"),
) -> None:
    """Show a task's metadata and body."""

    async def _show(store: BacklogStore) -> Task | None:
        return await store.load_task(task_id)

    task = run_with_store(root, _show)
    if task is None:
        raise _not_found(task_id)

    console.print(f"[bold cyan]Task {task.id}[/bold cyan] [bold]{task.title}[/bold]")
    console.print(f"[dim]Status:[/dim] {task.status}")
    if task.priority:
        console.print(f"[dim]Priority:[/dim] {task.priority}")
    if task.assignee:
        console.print(f"[dim]Assignee:[/dim] {', '.join(task.assignee)}")
    if task.labels:
        console.print(f"[dim]Labels:[/dim] {', '.join(task.labels)}")
    if task.milestone:
        console.print(f"[dim]Milestone:[/dim] {task.milestone}")
    if task.dependencies:
        console.print(f"[dim]Depends on:[/dim] {', '.join(task.dependencies)}")
    console.print(f"[dim]Created:[/dim] {task.created_date}")
    if task.updated_date:
        console.print(f"[dim]Updated:[/dim] {task.updated_date}")
    console.print(f"[dim]File:[/dim] {task.file_path}")

    body = get_task_body_markdown(task)
    if body:
        console.print()
        console.print(Markdown(body))


def create(
    title: str = typer.Argument(..., help="Task title"),
    root: Path | None = typer.Option(None, "--root", "-r", help="Project root"),
    description: str | None = typer.Option(None, "--description", "-d", help="Task description"),
    status: str | None = typer.Option(None, "--status", "-s", help="Initial status"),
    priority: str | None = typer.Option(None, "--priority", "-p", help="high, medium or low"),
    label: list[str] | None = typer.Option(None, "--label", "-l", help="Label (repeatable)"),
    assignee: list[str] | None = typer.Option(None, "--assignee", "-a", help="Assignee (repeatable)"),
    milestone: str | None = typer.Option(None, "--milestone", "-m", help="Milestone id"),
    depends_on: list[str] | None = typer.Option(None, "--depends-on", help="Dependency task id (repeatable)"),
    parent: str | None = typer.Option(None, "--parent", help="Parent task id"),
    criteria: list[str] | None = typer.Option(None, "--ac", help="Acceptance criterion (repeatable)"),
    plan: str | None = typer.Option(None, "--plan", help="Implementation plan"),
    notes: str | None = typer.Option(None, "--notes", help="Implementation notes"),
) -> None:
    """Create a new task."""
    data = TaskCreateInput(
        title=title,
        description=description,
        status=status,
        priority=_check_priority(priority),
        labels=label or [],
        assignee=assignee or [],
        milestone=milestone,
        dependencies=depends_on or [],
        parent_task_id=parent,
        acceptance_criteria=[AcceptanceCriterionInput(text=text) for text in criteria or []],
        implementation_plan=plan,
        implementation_notes=notes,
    )

    async def _create(store: BacklogStore) -> Task:
        return await store.create_task(data)

    task = run_with_store(root, _create)
    print_success(f"Created task {task.id}: {task.title}")
    console.print(f"[dim]File:[/dim] [cyan]{task.file_path}[/cyan]")


def edit(
    task_id: str = typer.Argument(..., help="Task id"),
    root: Path | None = typer.Option(None, "--root", "-r", help="Project root"),
    title: str | None = typer.Option(None, "--title", "-t", help="New title"),
    description: str | None = typer.Option(None, "--description", "-d", help="New description"),
    status: str | None = typer.Option(None, "--status", "-s", help="New status"),
    priority: str | None = typer.Option(None, "--priority", "-p", help="New priority"),
    milestone: str | None = typer.Option(None, "--milestone", "-m", help="New milestone id"),
    clear_milestone: bool = typer.Option(False, "--clear-milestone", help="Remove the milestone"),
    add_label: list[str] | None = typer.Option(None, "--add-label", help="Label to add (repeatable)"),
    remove_label: list[str] | None = typer.Option(None, "--remove-label", help="Label to remove (repeatable)"),
    add_criterion: list[str] | None = typer.Option(None, "--ac", help="Acceptance criterion to add (repeatable)"),
    check_criterion: list[int] | None = typer.Option(None, "--check-ac", help="Criterion number to check"),
    uncheck_criterion: list[int] | None = typer.Option(None, "--uncheck-ac", help="Criterion number to uncheck"),
    remove_criterion: list[int] | None = typer.Option(None, "--remove-ac", help="Criterion number to remove"),
    plan: str | None = typer.Option(None, "--plan", help="Replace the implementation plan"),
    append_notes: list[str] | None = typer.Option(None, "--append-notes", help="Append implementation notes"),
) -> None:
    """Edit an existing task."""
    changes: dict[str, object] = {}
    if title is not None:
        changes["title"] = title
    if description is not None:
        changes["description"] = description
    if status is not None:
        changes["status"] = status
    if priority is not None:
        changes["priority"] = _check_priority(priority)
    if clear_milestone:
        changes["milestone"] = None
    elif milestone is not None:
        changes["milestone"] = milestone
    if plan is not None:
        changes["implementation_plan"] = plan
    changes.update(
        add_labels=add_label or [],
        remove_labels=remove_label or [],
        add_acceptance_criteria=add_criterion or [],
        check_acceptance_criteria=check_criterion or [],
        uncheck_acceptance_criteria=uncheck_criterion or [],
        remove_acceptance_criteria=remove_criterion or [],
        append_implementation_notes=append_notes or [],
    )
    updates = TaskUpdateInput(**changes)

    async def _edit(store: BacklogStore) -> Task | None:
        if await store.load_task(task_id) is None:
            return None
        return await store.update_task(task_id, updates)

    task = run_with_store(root, _edit)
    if task is None:
        raise _not_found(task_id)
    print_success(f"Updated task {task.id}: {task.title}")


def archive(
    task_id: str = typer.Argument(..., help="Task id"),
    root: Path | None = typer.Option(None, "--root", "-r", help="Project root"),
) -> None:
    """Move a task to the completed directory."""

    async def _archive(store: BacklogStore) -> Task | None:
        return await store.archive_task(task_id)

    task = run_with_store(root, _archive)
    if task is None:
        print_error(f"Task {task_id} not found or already completed")
        raise typer.Exit(1)
    print_success(f"Archived task {task.id}: {task.title}")


def restore(
    task_id: str = typer.Argument(..., help="Task id"),
    root: Path | None = typer.Option(None, "--root", "-r", help="Project root"),
) -> None:
    """Move a completed task back to the tasks directory."""

    async def _restore(store: BacklogStore) -> Task | None:
        return await store.restore_task(task_id)

    task = run_with_store(root, _restore)
    if task is None:
        print_error(f"Task {task_id} not found or not completed")
        raise typer.Exit(1)
    print_success(f"Restored task {task.id}: {task.title}")


def delete(
    task_id: str = typer.Argument(..., help="Task id"),
    root: Path | None = typer.Option(None, "--root", "-r", help="Project root"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Delete without asking"),
) -> None:
    """Delete a task file."""
    if not yes and not Confirm.ask(f"Delete task {task_id}?", default=False):
        console.print("[dim]Aborted.[/dim]")
        raise typer.Exit(0)

    async def _delete(store: BacklogStore) -> bool:
        return await store.delete_task(task_id)

    if not run_with_store(root, _delete):
        raise _not_found(task_id)
    print_success(f"Deleted task {task_id}")

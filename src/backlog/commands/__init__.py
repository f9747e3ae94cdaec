"""Backlog CLI commands."""

from backlog.commands.board import board
from backlog.commands.init_cmd import init
from backlog.commands.milestones import milestone_create, milestones
from backlog.commands.tasks import archive, create, delete, edit, list_tasks, restore, show

__all__ = [
    "init",
    "list_tasks",
    "board",
    "show",
    "create",
    "edit",
    "archive",
    "restore",
    "delete",
    "milestones",
    "milestone_create",
]

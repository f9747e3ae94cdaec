"""Shared pytest fixtures for backlog tests."""

import re
from pathlib import Path

import pytest
from typer.testing import CliRunner

from backlog.services import BacklogStore, Diagnostic, InMemoryStorageAdapter

PROJECT_ROOT = "/project"
BACKLOG = f"{PROJECT_ROOT}/backlog"
CONFIG_PATH = f"{BACKLOG}/config.yml"
TASKS = f"{BACKLOG}/tasks"
COMPLETED = f"{BACKLOG}/completed"
MILESTONES = f"{BACKLOG}/milestones"

CONFIG_TEXT = (
    "# Backlog config\n"
    'project_name: "Test Project"\n'
    'default_status: "To Do"\n'
    'statuses: ["To Do", "In Progress", "Done"]\n'
    "labels: []\n"
    "milestones: []\n"
    'date_format: "yyyy-mm-dd"\n'
)


def strip_ansi(text: str) -> str:
    """Strip ANSI escape codes from text."""
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def task_content(
    title: str,
    status: str = "To Do",
    created: str = "2024-01-01",
    extra: tuple[str, ...] = (),
    body: str = "",
) -> str:
    """Build the text of a task file.

    Args:
        title: Task title.
        status: Status metadata value.
        created: createdDate metadata value.
        extra: Additional "key: value" metadata lines.
        body: Markdown placed after the title.

    Returns:
        The file content.
    """
    meta = "\n".join([f"status: {status}", *extra, f"createdDate: {created}"])
    return f"---\n{meta}\n---\n\n# {title}\n\n{body}\n"


def milestone_content(milestone_id: str, title: str, tasks: str = "[]") -> str:
    """Build the text of a milestone file."""
    return f'---\nid: {milestone_id}\ntitle: "{title}"\ntasks: {tasks}\n---\n\n## Description\n\nMilestone: {title}\n'


@pytest.fixture
def runner() -> CliRunner:
    """Create a CliRunner for testing commands."""
    return CliRunner()


@pytest.fixture
def adapter() -> InMemoryStorageAdapter:
    """Create an in-memory adapter holding only the project config."""
    return InMemoryStorageAdapter(files={CONFIG_PATH: CONFIG_TEXT})


@pytest.fixture
def diagnostics() -> list[Diagnostic]:
    """Collect diagnostics reported by a store."""
    return []


@pytest.fixture
def store(adapter: InMemoryStorageAdapter, diagnostics: list[Diagnostic]) -> BacklogStore:
    """Create an uninitialised store over the in-memory adapter.

    Args:
        adapter: In-memory storage adapter.
        diagnostics: List receiving every reported diagnostic.

    Returns:
        A BacklogStore rooted at PROJECT_ROOT.
    """
    return BacklogStore(project_root=PROJECT_ROOT, adapter=adapter, on_diagnostic=diagnostics.append)


@pytest.fixture
def backlog_project(tmp_path: Path) -> Path:
    """Create a backlog project on disk.

    Args:
        tmp_path: pytest's built-in tmp_path fixture.

    Returns:
        Path to the project root.
    """
    backlog_dir = tmp_path / "backlog"
    for name in ("tasks", "completed", "milestones"):
        (backlog_dir / name).mkdir(parents=True)
    (backlog_dir / "config.yml").write_text(CONFIG_TEXT)
    return tmp_path

"""Filename conventions for task and milestone files.

Task files are named "{id} - {title}.md" (optionally prefixed with
"task-"), milestone files "m-{N} - {title}.md". Everything here works on
path strings only and never touches the filesystem.
"""

import re

from backlog.models.task import IndexSource, TaskIndexEntry

BACKLOG_DIR = "backlog"
TASKS_DIR = "tasks"
COMPLETED_DIR = "completed"
MILESTONES_DIR = "milestones"
CONFIG_FILENAME = "config.yml"

MAX_TITLE_LENGTH = 50

_TASK_ID_PATTERN = re.compile(r"^(?:task-)?(\d+(?:\.\d+)?)\s*-")
_TASK_TITLE_PATTERN = re.compile(r"^(?:task-)?\d+(?:\.\d+)?\s*-\s*(.+)\.md$")
_MILESTONE_ID_PATTERN = re.compile(r"^(m-\d+)", re.IGNORECASE)
_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*]')
_WHITESPACE = re.compile(r"\s+")


def _split_path(path: str) -> list[str]:
    """Split a path on either separator, dropping empty segments."""
    return [part for part in re.split(r"[\\/]", path) if part]


def _filename(path: str) -> str:
    parts = _split_path(path)
    return parts[-1] if parts else ""


def _stem(filename: str) -> str:
    return filename[:-3] if filename.endswith(".md") else filename


def extract_id_from_path(path: str) -> str:
    """Extract the task id from a task file path.

    Args:
        path: Path to a task file.

    Returns:
        The id (e.g. "42" or "42.1"), or the filename stem when the
        filename does not follow the convention.
    """
    filename = _filename(path)
    match = _TASK_ID_PATTERN.match(filename)
    if match:
        return match.group(1)
    return _stem(filename)


def extract_title_from_path(path: str) -> str:
    """Extract the title embedded in a task filename.

    Args:
        path: Path to a task file.

    Returns:
        The title part of the filename, or the filename stem when the
        filename does not follow the convention.
    """
    filename = _filename(path)
    match = _TASK_TITLE_PATTERN.match(filename)
    if match:
        return match.group(1).strip()
    return _stem(filename)


def extract_source_from_path(path: str) -> IndexSource:
    """Return "completed" if any path segment is "completed", else "tasks"."""
    if COMPLETED_DIR in _split_path(path)[:-1]:
        return "completed"
    return "tasks"


def extract_task_index_from_path(path: str) -> TaskIndexEntry:
    """Build a TaskIndexEntry from a path without reading the file.

    Args:
        path: Path to the task file.

    Returns:
        TaskIndexEntry with id, title, file path and source.
    """
    return TaskIndexEntry(
        id=extract_id_from_path(path),
        file_path=path,
        title=extract_title_from_path(path),
        source=extract_source_from_path(path),
    )


def is_task_file_path(path: str) -> bool:
    """Check whether a path names a task file for lazy indexing.

    Accepts ".md" files directly inside backlog/tasks/ or
    backlog/completed/. The config file is never a task file.

    Args:
        path: Path relative to the project root, or absolute.

    Returns:
        True if the path should be indexed as a task.
    """
    parts = _split_path(path)
    if len(parts) < 3 or not parts[-1].endswith(".md"):
        return False
    if parts[-1] == CONFIG_FILENAME:
        return False
    return parts[-2] in (TASKS_DIR, COMPLETED_DIR) and parts[-3] == BACKLOG_DIR


def sanitize_title(title: str) -> str:
    """Make a title safe for use in a filename.

    Strips characters that are unsafe on common filesystems, collapses
    whitespace and truncates to MAX_TITLE_LENGTH characters.
    """
    safe = _UNSAFE_CHARS.sub("", title)
    safe = _WHITESPACE.sub(" ", safe).strip()
    return safe[:MAX_TITLE_LENGTH].strip()


def get_task_filename(task_id: str, title: str) -> str:
    """Return the filename for a task, e.g. "7 - Fix login.md"."""
    return f"{task_id} - {sanitize_title(title)}.md"


def get_milestone_filename(milestone_id: str, title: str) -> str:
    """Return the filename for a milestone, e.g. "m-0 - release-1.0.md"."""
    safe = _UNSAFE_CHARS.sub("", title)
    safe = _WHITESPACE.sub("-", safe.strip()).lower()[:MAX_TITLE_LENGTH]
    return f"{milestone_id} - {safe}.md"


def extract_milestone_id_from_filename(filename: str) -> str | None:
    """Return the "m-N" id at the start of a milestone filename, or None."""
    match = _MILESTONE_ID_PATTERN.match(filename)
    return match.group(1).lower() if match else None


def is_milestone_file(filename: str) -> bool:
    """Check whether a milestones directory entry is a milestone file."""
    return filename.endswith(".md") and filename.lower() != "readme.md"


def task_id_sort_key(task_id: str) -> tuple[int, ...]:
    """Sort key comparing dotted numeric ids part by part.

    Non-numeric ids sort before numeric ones.
    """
    try:
        return tuple(int(part) for part in task_id.split("."))
    except ValueError:
        return (-1,)

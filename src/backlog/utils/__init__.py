"""Backlog utilities."""

from backlog.utils.console import (
    build_board_table,
    build_task_table,
    console,
    print_error,
    print_success,
    print_warning,
)
from backlog.utils.files import (
    delete_file,
    ensure_dir,
    file_exists,
    get_project_root,
    list_dir,
    read_file,
    write_file,
)
from backlog.utils.markdown import (
    get_task_body_markdown,
    parse_milestone_markdown,
    parse_task_markdown,
    serialize_milestone_markdown,
    serialize_task_markdown,
)
from backlog.utils.milestones import (
    build_milestone_buckets,
    build_milestone_summary,
    group_tasks_by_milestone,
    is_done_status,
    milestone_key,
)
from backlog.utils.paths import (
    extract_milestone_id_from_filename,
    extract_task_index_from_path,
    get_milestone_filename,
    get_task_filename,
    sanitize_title,
)
from backlog.utils.sorting import (
    group_tasks_by_status,
    sort_tasks,
    sort_tasks_by,
    sort_tasks_by_title,
)

__all__ = [
    "build_board_table",
    "build_milestone_buckets",
    "build_milestone_summary",
    "build_task_table",
    "console",
    "delete_file",
    "ensure_dir",
    "extract_milestone_id_from_filename",
    "extract_task_index_from_path",
    "file_exists",
    "get_milestone_filename",
    "get_project_root",
    "get_task_body_markdown",
    "get_task_filename",
    "group_tasks_by_milestone",
    "group_tasks_by_status",
    "is_done_status",
    "list_dir",
    "milestone_key",
    "parse_milestone_markdown",
    "parse_task_markdown",
    "print_error",
    "print_success",
    "print_warning",
    "read_file",
    "sanitize_title",
    "serialize_milestone_markdown",
    "serialize_task_markdown",
    "sort_tasks",
    "sort_tasks_by",
    "sort_tasks_by_title",
    "write_file",
]

"""Task ordering and status grouping."""

from functools import cmp_to_key

from backlog.models.task import Task

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}
_UNSET_PRIORITY = 3


def compare_tasks(a: Task, b: Task) -> int:
    """Canonical comparator: ordinal, then priority, then newest first.

    Tasks that define an ordinal sort before tasks that don't. Among tasks
    without an ordinal, high < medium < low < unset priority, and ties
    are broken by created date descending.
    """
    if a.ordinal is not None and b.ordinal is not None:
        return a.ordinal - b.ordinal
    if a.ordinal is not None:
        return -1
    if b.ordinal is not None:
        return 1

    a_priority = PRIORITY_ORDER.get(a.priority or "", _UNSET_PRIORITY)
    b_priority = PRIORITY_ORDER.get(b.priority or "", _UNSET_PRIORITY)
    if a_priority != b_priority:
        return a_priority - b_priority

    if a.created_date == b.created_date:
        return 0
    return 1 if a.created_date < b.created_date else -1


def sort_tasks(tasks: list[Task]) -> list[Task]:
    """Return a new list sorted with the canonical comparator."""
    return sorted(tasks, key=cmp_to_key(compare_tasks))


def sort_tasks_by_title(tasks: list[Task], direction: str = "asc") -> list[Task]:
    """Return a new list sorted by title, case-insensitively."""
    return sorted(tasks, key=lambda t: (t.title.casefold(), t.title), reverse=direction == "desc")


def sort_tasks_by(tasks: list[Task], sort_by: str = "title", direction: str = "asc") -> list[Task]:
    """Sort tasks by a single field.

    title and createdDate bypass the canonical comparator. priority and
    ordinal use the canonical ordering, reversed for "desc".

    Args:
        tasks: Tasks to sort.
        sort_by: One of "title", "createdDate", "priority", "ordinal".
        direction: "asc" or "desc".

    Returns:
        New sorted list.
    """
    if sort_by == "title":
        return sort_tasks_by_title(tasks, direction)
    if sort_by == "createdDate":
        return sorted(tasks, key=lambda t: t.created_date, reverse=direction == "desc")

    ordered = sort_tasks(tasks)
    if direction == "desc":
        ordered.reverse()
    return ordered


def group_tasks_by_status(tasks: list[Task], statuses: list[str]) -> dict[str, list[Task]]:
    """Group tasks into status columns.

    The result has one key per configured status, in configured order,
    even when the column is empty. Statuses not in the configuration get
    their own key after the configured ones. Each column is sorted with
    the canonical comparator.

    Args:
        tasks: Tasks to group.
        statuses: Configured statuses in column order.

    Returns:
        Mapping of status to sorted tasks.
    """
    grouped: dict[str, list[Task]] = {status: [] for status in statuses}
    for task in tasks:
        grouped.setdefault(task.status, []).append(task)
    return {status: sort_tasks(column) for status, column in grouped.items()}

"""Tests for task ordering and status grouping."""

from backlog.models import Task
from backlog.utils.sorting import group_tasks_by_status, sort_tasks, sort_tasks_by


def make_task(task_id: str, **kwargs) -> Task:
    """Create a task with sensible defaults."""
    fields = {"title": f"Task {task_id}", "status": "To Do", "created_date": "2024-01-01"}
    fields.update(kwargs)
    return Task(id=task_id, **fields)


def ids(tasks: list[Task]) -> list[str]:
    return [task.id for task in tasks]


class TestSortTasks:
    """Tests for the canonical ordering."""

    def test_ordinal_first(self) -> None:
        """Test that tasks with an ordinal come first, ascending."""
        tasks = [
            make_task("1", priority="high"),
            make_task("2", ordinal=5),
            make_task("3", ordinal=1),
        ]
        assert ids(sort_tasks(tasks)) == ["3", "2", "1"]

    def test_priority_then_newest(self) -> None:
        """Test priority order, then created date descending."""
        tasks = [
            make_task("1"),
            make_task("2", priority="low"),
            make_task("3", priority="high", created_date="2024-01-01"),
            make_task("4", priority="high", created_date="2024-02-01"),
            make_task("5", priority="medium"),
        ]
        assert ids(sort_tasks(tasks)) == ["4", "3", "5", "2", "1"]

    def test_does_not_mutate_input(self) -> None:
        """Test that a new list is returned."""
        tasks = [make_task("1"), make_task("2", ordinal=0)]
        sort_tasks(tasks)
        assert ids(tasks) == ["1", "2"]


class TestSortTasksBy:
    """Tests for single-field sorting."""

    def test_title_case_insensitive(self) -> None:
        """Test that titles compare case-insensitively."""
        tasks = [make_task("1", title="banana"), make_task("2", title="Apple"), make_task("3", title="cherry")]

        assert ids(sort_tasks_by(tasks, "title")) == ["2", "1", "3"]
        assert ids(sort_tasks_by(tasks, "title", "desc")) == ["3", "1", "2"]

    def test_created_date(self) -> None:
        """Test sorting by created date in both directions."""
        tasks = [
            make_task("1", created_date="2024-03-01"),
            make_task("2", created_date="2024-01-01"),
            make_task("3", created_date="2024-02-01"),
        ]

        assert ids(sort_tasks_by(tasks, "createdDate")) == ["2", "3", "1"]
        assert ids(sort_tasks_by(tasks, "createdDate", "desc")) == ["1", "3", "2"]

    def test_priority_uses_canonical_order(self) -> None:
        """Test that priority sorting follows the canonical comparator."""
        tasks = [make_task("1", priority="low"), make_task("2", priority="high")]

        assert ids(sort_tasks_by(tasks, "priority")) == ["2", "1"]
        assert ids(sort_tasks_by(tasks, "priority", "desc")) == ["1", "2"]


class TestGroupTasksByStatus:
    """Tests for grouping into status columns."""

    def test_every_configured_status_present(self) -> None:
        """Test that empty columns are kept in configured order."""
        grouped = group_tasks_by_status([make_task("1", status="Done")], ["To Do", "In Progress", "Done"])

        assert list(grouped) == ["To Do", "In Progress", "Done"]
        assert grouped["To Do"] == []
        assert ids(grouped["Done"]) == ["1"]

    def test_unknown_status_gets_own_column(self) -> None:
        """Test that statuses outside the configuration are appended."""
        grouped = group_tasks_by_status([make_task("1", status="Blocked")], ["To Do"])
        assert list(grouped) == ["To Do", "Blocked"]

    def test_columns_are_sorted(self) -> None:
        """Test that each column uses the canonical ordering."""
        tasks = [make_task("1"), make_task("2", priority="high")]
        grouped = group_tasks_by_status(tasks, ["To Do"])
        assert ids(grouped["To Do"]) == ["2", "1"]

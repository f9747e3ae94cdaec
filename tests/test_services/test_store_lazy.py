"""Tests for BacklogStore in lazy mode."""

import asyncio

import pytest
from conftest import COMPLETED, CONFIG_PATH, MILESTONES, PROJECT_ROOT, TASKS, milestone_content, task_content

from backlog.models import PaginationOptions, SourcePaginationOptions, TaskCreateInput, TaskUpdateInput
from backlog.services import BacklogStore, Diagnostic, InMemoryStorageAdapter

PATHS = [
    "backlog/config.yml",
    "backlog/tasks/1 - Write docs.md",
    "backlog/tasks/2 - Add tests.md",
    "backlog/tasks/3 - Build CLI.md",
    "backlog/completed/4 - Setup repo.md",
    "backlog/completed/10 - Pick name.md",
    "backlog/milestones/m-0 - alpha.md",
    "backlog/tasks/nested/9 - Hidden.md",
    "src/main.py",
]


@pytest.fixture
def lazy_adapter() -> InMemoryStorageAdapter:
    """Adapter holding config plus three active and two completed tasks."""
    files = {CONFIG_PATH: 'project_name: "Lazy"\nstatuses: ["To Do", "In Progress", "Done"]\n'}
    files[f"{TASKS}/1 - Write docs.md"] = task_content("Write docs", extra=("labels: [docs]",))
    files[f"{TASKS}/2 - Add tests.md"] = task_content("Add tests", status="In Progress", extra=("priority: high",))
    files[f"{TASKS}/3 - Build CLI.md"] = task_content("Build CLI", body="Use typer.")
    files[f"{COMPLETED}/4 - Setup repo.md"] = task_content("Setup repo", status="Done")
    files[f"{COMPLETED}/10 - Pick name.md"] = task_content("Pick name", status="Done")
    return InMemoryStorageAdapter(files=files)


@pytest.fixture
def lazy_store(lazy_adapter: InMemoryStorageAdapter, diagnostics: list[Diagnostic]) -> BacklogStore:
    """Store initialised lazily from PATHS."""
    store = BacklogStore(project_root=PROJECT_ROOT, adapter=lazy_adapter, on_diagnostic=diagnostics.append)
    asyncio.run(store.initialize_lazy(PATHS))
    return store


class TestInitializeLazy:
    """Tests for building the index from path strings."""

    def test_reads_only_config(self, lazy_adapter: InMemoryStorageAdapter, lazy_store: BacklogStore) -> None:
        """Test that no task file is read during lazy initialisation."""
        assert lazy_adapter.reads == [CONFIG_PATH]
        assert lazy_store.is_lazy

    def test_indexes_only_task_paths(self, lazy_store: BacklogStore) -> None:
        """Test that only files directly in tasks/ or completed/ are indexed."""
        index = lazy_store.get_task_index()

        assert sorted(index, key=int) == ["1", "2", "3", "4", "10"]
        assert index["1"].title == "Write docs"
        assert index["1"].source == "tasks"
        assert index["10"].source == "completed"

    def test_cache_starts_empty(self, lazy_store: BacklogStore) -> None:
        """Test that indexed tasks are not available until loaded."""
        assert lazy_store.get_task("1") is None
        assert lazy_store.list_tasks() == []

    def test_duplicate_paths_are_reported(self, adapter: InMemoryStorageAdapter, diagnostics: list[Diagnostic]) -> None:
        """Test that two paths with one id keep the later path and report it."""
        store = BacklogStore(project_root=PROJECT_ROOT, adapter=adapter, on_diagnostic=diagnostics.append)

        asyncio.run(store.initialize_lazy(["backlog/tasks/1 - A.md", "backlog/tasks/1 - B.md"]))

        assert store.get_task_index()["1"].title == "B"
        assert [d.code for d in diagnostics] == ["duplicate_id"]


class TestLoadTask:
    """Tests for on-demand loading."""

    def test_load_and_cache(self, lazy_adapter: InMemoryStorageAdapter, lazy_store: BacklogStore) -> None:
        """Test that a task is read once and then served from the cache."""
        task = asyncio.run(lazy_store.load_task("3"))

        assert task.title == "Build CLI"
        assert task.description == "Use typer."
        assert task.source == "local"
        assert lazy_store.get_task("3") is task

        asyncio.run(lazy_store.load_task("3"))
        assert lazy_adapter.reads.count(f"{TASKS}/3 - Build CLI.md") == 1

    def test_relative_paths_resolve_against_root(self, lazy_store: BacklogStore) -> None:
        """Test that relative index paths are read from under project_root."""
        task = asyncio.run(lazy_store.load_task("10"))

        assert task.file_path == f"{COMPLETED}/10 - Pick name.md"
        assert task.source == "completed"

    def test_absolute_paths(self, lazy_adapter: InMemoryStorageAdapter) -> None:
        """Test that absolute paths are used as given."""
        store = BacklogStore(project_root=PROJECT_ROOT, adapter=lazy_adapter)
        asyncio.run(store.initialize_lazy([f"{TASKS}/2 - Add tests.md"]))

        assert asyncio.run(store.load_task("2")).priority == "high"

    def test_unknown_id(self, lazy_store: BacklogStore) -> None:
        """Test that an id outside the index is None."""
        assert asyncio.run(lazy_store.load_task("77")) is None

    def test_load_tasks_keeps_order_and_drops_misses(self, lazy_store: BacklogStore) -> None:
        """Test batch loading."""
        tasks = asyncio.run(lazy_store.load_tasks(["3", "77", "1"]))
        assert [t.id for t in tasks] == ["3", "1"]

    def test_load_tasks_drops_failures(
        self, lazy_adapter: InMemoryStorageAdapter, lazy_store: BacklogStore, diagnostics: list[Diagnostic]
    ) -> None:
        """Test that a file missing on disk is left out and reported."""
        del lazy_adapter.files[f"{TASKS}/2 - Add tests.md"]

        tasks = asyncio.run(lazy_store.load_tasks(["1", "2"]))

        assert [t.id for t in tasks] == ["1"]
        assert [d.code for d in diagnostics] == ["load_failed"]

    def test_lazy_matches_eager(self, lazy_adapter: InMemoryStorageAdapter, lazy_store: BacklogStore) -> None:
        """Test that lazily loaded tasks equal eagerly loaded ones."""
        eager = BacklogStore(project_root=PROJECT_ROOT, adapter=lazy_adapter)
        asyncio.run(eager.initialize())
        ids = list(eager.get_task_index())

        lazy_tasks = asyncio.run(lazy_store.load_tasks(ids))

        assert [t.id for t in lazy_tasks] == ids
        for task in lazy_tasks:
            assert task.model_dump() == eager.get_task(task.id).model_dump()


class TestSourcePagination:
    """Tests for paginating active and completed tasks separately."""

    def test_pages_by_source(self, lazy_adapter: InMemoryStorageAdapter, lazy_store: BacklogStore) -> None:
        """Test ordering, totals and that only page items are read."""
        result = asyncio.run(
            lazy_store.get_tasks_by_source_paginated(SourcePaginationOptions(tasks_limit=2, completed_limit=1))
        )

        active = result.by_source["tasks"]
        completed = result.by_source["completed"]
        assert result.sources == ["tasks", "completed"]
        assert [t.title for t in active.items] == ["Add tests", "Build CLI"]
        assert active.total == 3
        assert active.has_more is True
        assert [t.id for t in completed.items] == ["10"]
        assert completed.total == 2

        task_reads = [path for path in lazy_adapter.reads if path != CONFIG_PATH]
        assert sorted(task_reads) == sorted(
            [f"{TASKS}/2 - Add tests.md", f"{TASKS}/3 - Build CLI.md", f"{COMPLETED}/10 - Pick name.md"]
        )

    def test_load_more_for_source(self, lazy_store: BacklogStore) -> None:
        """Test continuing a source listing from an offset."""
        page = asyncio.run(lazy_store.load_more_for_source("tasks", 2, PaginationOptions(limit=2)))
        assert [t.title for t in page.items] == ["Write docs"]
        assert page.has_more is False

        completed = asyncio.run(lazy_store.load_more_for_source("completed", 1, PaginationOptions(limit=5)))
        assert [t.id for t in completed.items] == ["4"]

    def test_descending_titles(self, lazy_store: BacklogStore) -> None:
        """Test descending title order for active tasks."""
        result = asyncio.run(
            lazy_store.get_tasks_by_source_paginated(SourcePaginationOptions(tasks_sort_direction="desc"))
        )
        assert [t.title for t in result.by_source["tasks"].items] == ["Write docs", "Build CLI", "Add tests"]


class TestLazyMutations:
    """Tests for writes on a lazily initialised store."""

    def test_create_uses_index_for_next_id(self, lazy_store: BacklogStore) -> None:
        """Test that ids of unloaded tasks are taken into account."""
        task = asyncio.run(lazy_store.create_task(TaskCreateInput(title="New")))
        assert task.id == "11"

    def test_update_requires_loaded_task(self, lazy_store: BacklogStore) -> None:
        """Test that update works once the task has been loaded."""
        assert asyncio.run(lazy_store.update_task("1", TaskUpdateInput(status="Done"))) is None

        asyncio.run(lazy_store.load_task("1"))
        task = asyncio.run(lazy_store.update_task("1", TaskUpdateInput(status="Done")))

        assert task.status == "Done"
        assert task.labels == ["docs"]

    def test_status_pagination_loads_everything(self, lazy_store: BacklogStore) -> None:
        """Test that status grouping loads all indexed tasks on demand."""
        result = asyncio.run(lazy_store.get_tasks_by_status_paginated())

        assert result.by_status["Done"].total == 2
        assert result.by_status["In Progress"].total == 1
        assert len(lazy_store.list_tasks()) == 5

    def test_archive_unloaded_task(self, lazy_adapter: InMemoryStorageAdapter, lazy_store: BacklogStore) -> None:
        """Test that archive loads the task before moving it."""
        task = asyncio.run(lazy_store.archive_task("1"))

        assert task.source == "completed"
        assert f"{COMPLETED}/1 - Write docs.md" in lazy_adapter.files
        assert f"{TASKS}/1 - Write docs.md" not in lazy_adapter.files

    def test_delete_unloaded_task_with_missing_file(
        self, lazy_adapter: InMemoryStorageAdapter, lazy_store: BacklogStore
    ) -> None:
        """Test that deleting an indexed task whose file is already gone succeeds."""
        lazy_adapter.files[f"{MILESTONES}/m-0 - alpha.md"] = milestone_content("m-0", "Alpha", "[1, 3]")
        del lazy_adapter.files[f"{TASKS}/1 - Write docs.md"]

        assert asyncio.run(lazy_store.delete_task("1")) is True

        assert "1" not in lazy_store.get_task_index()
        milestone = asyncio.run(lazy_store.load_milestone("m-0"))
        assert milestone.tasks == ["3"]
        assert asyncio.run(lazy_store.delete_task("1")) is False

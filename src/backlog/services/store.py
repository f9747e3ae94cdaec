"""File-backed task and milestone store.

This module implements BacklogStore, which maps tasks and milestones to
markdown files under {project_root}/backlog/, keeps an in-memory index of
them and keeps each milestone's task list in sync with the milestone
field of its tasks.

The store can be initialised eagerly (every task file parsed up front)
or lazily (an id -> path index built from path strings, with task content
loaded on demand). All I/O goes through a StorageAdapter.
"""

import asyncio
import logging
import os
from collections.abc import Callable
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from backlog.models.config import (
    BacklogConfig,
    ConfigDefaults,
    parse_backlog_config,
    serialize_backlog_config,
)
from backlog.models.milestone import Milestone, MilestoneCreateInput, MilestoneSummary, MilestoneUpdateInput
from backlog.models.pagination import (
    PaginatedResult,
    PaginatedTasksBySource,
    PaginatedTasksByStatus,
    PaginationOptions,
    SourcePaginationOptions,
    paginate_tasks,
)
from backlog.models.task import (
    AcceptanceCriterion,
    AcceptanceCriterionInput,
    IndexSource,
    Task,
    TaskCreateInput,
    TaskIndexEntry,
    TaskListFilter,
    TaskUpdateInput,
)
from backlog.services.adapters import StorageAdapter
from backlog.utils.markdown import (
    parse_milestone_markdown,
    parse_task_markdown,
    serialize_milestone_markdown,
    serialize_task_markdown,
    split_frontmatter,
)
from backlog.utils.milestones import build_milestone_summary, milestone_key, normalize_milestone_name
from backlog.utils.paths import (
    BACKLOG_DIR,
    COMPLETED_DIR,
    CONFIG_FILENAME,
    MILESTONES_DIR,
    TASKS_DIR,
    extract_milestone_id_from_filename,
    extract_task_index_from_path,
    get_milestone_filename,
    get_task_filename,
    is_milestone_file,
    is_task_file_path,
    task_id_sort_key,
)
from backlog.utils.sorting import group_tasks_by_status, sort_tasks, sort_tasks_by

logger = logging.getLogger(__name__)

SOURCES: tuple[IndexSource, ...] = ("tasks", "completed")


class BacklogError(Exception):
    """Base class for store failures."""


class NotAProjectError(BacklogError):
    """Raised when backlog/config.yml is missing.

    Attributes:
        config_path: Where the config file was expected.
    """

    def __init__(self, config_path: str) -> None:
        """Initialize NotAProjectError.

        Args:
            config_path: Where the config file was expected.
        """
        self.config_path = config_path
        super().__init__(f"Not a Backlog.md project: config.yml not found at {config_path}")


class NotInitializedError(BacklogError):
    """Raised when the store is used before initialize() or initialize_lazy()."""

    def __init__(self) -> None:
        super().__init__("Store not initialized. Call initialize() or initialize_lazy() first.")


class Diagnostic(BaseModel):
    """A recoverable problem reported by the store.

    Attributes:
        code: Machine-readable kind (parse_failed, load_failed, invalid_status,
            duplicate_id, milestone_not_found).
        message: Human-readable description.
        file_path: File involved, if any.
    """

    code: str
    message: str
    file_path: str | None = None


DiagnosticSink = Callable[[Diagnostic], None]


def _merge_values(
    current: list[str], replace: list[str] | None, add: list[str], remove: list[str]
) -> list[str]:
    """Apply a replace, or an additive/subtractive update, keeping insertion order."""
    if replace is not None:
        return list(dict.fromkeys(replace))
    merged = list(dict.fromkeys(current + add))
    return [value for value in merged if value not in remove]


def _merge_text(current: str | None, replace: str | None, append: list[str], clear: bool) -> str | None:
    """Apply a replace, clear and/or append update to a long-text field."""
    if replace is not None:
        value = replace.strip() or None
    elif clear:
        value = None
    else:
        value = current

    extra = [chunk.strip() for chunk in append if chunk.strip()]
    if extra:
        value = "\n\n".join(([value] if value else []) + extra)
    return value


def _merge_criteria(current: list[AcceptanceCriterion], updates: TaskUpdateInput) -> list[AcceptanceCriterion]:
    """Apply acceptance criteria updates. Indices refer to the current numbering."""
    if updates.acceptance_criteria is not None:
        items = [(c.text, c.checked) for c in updates.acceptance_criteria]
    else:
        remove = set(updates.remove_acceptance_criteria)
        check = set(updates.check_acceptance_criteria)
        uncheck = set(updates.uncheck_acceptance_criteria)
        items = []
        for criterion in current:
            if criterion.index in remove:
                continue
            checked = criterion.checked
            if criterion.index in check:
                checked = True
            elif criterion.index in uncheck:
                checked = False
            items.append((criterion.text, checked))
        for added in updates.add_acceptance_criteria:
            if isinstance(added, AcceptanceCriterionInput):
                items.append((added.text, added.checked))
            else:
                items.append((added, False))

    texts = [(text.strip(), checked) for text, checked in items if text.strip()]
    return [
        AcceptanceCriterion(index=i, text=text, checked=checked)
        for i, (text, checked) in enumerate(texts, start=1)
    ]


def _matches(task: Task, criteria: TaskListFilter) -> bool:
    if criteria.status and task.status != criteria.status:
        return False
    if criteria.assignee and criteria.assignee not in task.assignee:
        return False
    if criteria.priority and task.priority != criteria.priority:
        return False
    if criteria.milestone and milestone_key(task.milestone) != milestone_key(criteria.milestone):
        return False
    if criteria.labels and not any(label in task.labels for label in criteria.labels):
        return False
    if criteria.parent_task_id and task.parent_task_id != criteria.parent_task_id:
        return False
    return True


def _body_of(content: str) -> str:
    return split_frontmatter(content)[1].strip()


class BacklogStore(BaseModel):
    """File-backed store for a Backlog.md project.

    Storage operations are coroutines that suspend at adapter calls. The
    in-memory task cache and task index belong to this instance only.
    Task and milestone id allocation is serialised by a per-instance lock;
    other read-modify-write sequences are not atomic across concurrent
    calls on the same instance.

    Attributes:
        project_root: Directory containing the backlog/ folder.
        adapter: Storage adapter used for all I/O.
        config_defaults: Fallback values for missing config fields.
        on_diagnostic: Receives recoverable problems. Defaults to logging
            them at WARNING level.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    project_root: str
    adapter: StorageAdapter
    config_defaults: ConfigDefaults = Field(default_factory=ConfigDefaults)
    on_diagnostic: DiagnosticSink | None = None

    _config: BacklogConfig | None = PrivateAttr(default=None)
    _tasks: dict[str, Task] = PrivateAttr(default_factory=dict)
    _task_index: dict[str, TaskIndexEntry] = PrivateAttr(default_factory=dict)
    _initialized: bool = PrivateAttr(default=False)
    _lazy: bool = PrivateAttr(default=False)
    _id_lock: asyncio.Lock | None = PrivateAttr(default=None)
    _id_lock_loop: asyncio.AbstractEventLoop | None = PrivateAttr(default=None)

    # --- Paths ---

    @property
    def backlog_dir(self) -> str:
        return self.adapter.join(self.project_root, BACKLOG_DIR)

    @property
    def config_path(self) -> str:
        return self.adapter.join(self.backlog_dir, CONFIG_FILENAME)

    @property
    def tasks_dir(self) -> str:
        return self.adapter.join(self.backlog_dir, TASKS_DIR)

    @property
    def completed_dir(self) -> str:
        return self.adapter.join(self.backlog_dir, COMPLETED_DIR)

    @property
    def milestones_dir(self) -> str:
        return self.adapter.join(self.backlog_dir, MILESTONES_DIR)

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def is_lazy(self) -> bool:
        """True when initialised from path strings with content loaded on demand."""
        return self._initialized and self._lazy

    # --- Initialization ---

    async def is_project(self) -> bool:
        """Check whether project_root contains backlog/config.yml."""
        return await self.adapter.exists(self.config_path)

    async def init_project(self, config: BacklogConfig | None = None) -> bool:
        """Create backlog/config.yml and the task, completed and milestone directories.

        Args:
            config: Configuration to write (defaults from config_defaults).

        Returns:
            False if the project already exists (nothing is written), True otherwise.
        """
        if await self.is_project():
            return False

        if config is None:
            config = BacklogConfig(
                project_name=self.config_defaults.project_name,
                statuses=list(self.config_defaults.statuses),
                date_format=self.config_defaults.date_format,
            )
        for directory in (self.tasks_dir, self.completed_dir, self.milestones_dir):
            await self.adapter.create_dir(directory, recursive=True)
        await self.adapter.write_file(self.config_path, serialize_backlog_config(config))
        logger.info("Initialized backlog project at %s", self.backlog_dir)
        return True

    async def initialize(self) -> None:
        """Load the config and parse every task file in tasks/ and completed/.

        Files that fail to parse are reported and skipped. When two files
        resolve to the same id the later one in directory order wins.

        Raises:
            NotAProjectError: If backlog/config.yml does not exist.
        """
        if self._initialized and not self._lazy:
            return

        await self._load_config()
        self._tasks.clear()
        self._task_index.clear()

        await self._load_directory(self.tasks_dir, "tasks")
        await self._load_directory(self.completed_dir, "completed")

        self._initialized = True
        self._lazy = False
        logger.debug("Loaded %d task(s) from %s", len(self._tasks), self.backlog_dir)

    async def initialize_lazy(self, file_paths: list[str]) -> None:
        """Load the config and index task files from path strings only.

        No directory is listed and no task file is read. Paths may be
        absolute or relative to project_root. Only ".md" files directly in
        backlog/tasks/ or backlog/completed/ are indexed.

        Args:
            file_paths: Every file path in the project, as known by the caller.

        Raises:
            NotAProjectError: If backlog/config.yml does not exist.
        """
        await self._load_config()
        self._tasks.clear()
        self._task_index.clear()

        for path in file_paths:
            if not is_task_file_path(path):
                continue
            entry = extract_task_index_from_path(path)
            previous = self._task_index.get(entry.id)
            if previous is not None:
                self._report_duplicate(entry.id, previous.file_path, path)
            self._task_index[entry.id] = entry

        self._initialized = True
        self._lazy = True
        logger.debug("Indexed %d task file(s) lazily", len(self._task_index))

    async def reload(self) -> None:
        """Drop cached state and initialise again.

        Eager stores rescan the directories. Lazy stores re-index the
        paths they already know about.
        """
        if self._lazy:
            paths = [entry.file_path for entry in self._task_index.values()]
            self._initialized = False
            await self.initialize_lazy(paths)
            return
        self._initialized = False
        await self.initialize()

    def get_config(self) -> BacklogConfig:
        """Return the loaded configuration.

        Raises:
            NotInitializedError: If the store is not initialised.
        """
        if not self._initialized or self._config is None:
            raise NotInitializedError()
        return self._config

    def get_task_index(self) -> dict[str, TaskIndexEntry]:
        """Return a copy of the id -> TaskIndexEntry map."""
        self._ensure_initialized()
        return dict(self._task_index)

    # --- Queries ---

    def get_task(self, task_id: str) -> Task | None:
        """Return a task from the cache without loading it."""
        self._ensure_initialized()
        return self._tasks.get(task_id)

    async def load_task(self, task_id: str) -> Task | None:
        """Return a task, reading and caching it on first access.

        Args:
            task_id: Task id.

        Returns:
            The task, or None if the id is unknown or its file fails to parse.

        Raises:
            OSError: If reading the file fails.
        """
        self._ensure_initialized()
        cached = self._tasks.get(task_id)
        if cached is not None:
            return cached

        entry = self._task_index.get(task_id)
        if entry is None:
            return None

        path = self._resolve_path(entry.file_path)
        content = await self.adapter.read_file(path)
        try:
            task = parse_task_markdown(content, path)
        except ValueError as e:
            self._emit("parse_failed", f"Failed to parse task file {path}: {e}", path)
            return None

        task.source = "completed" if entry.source == "completed" else "local"
        self._tasks[task_id] = task
        return task

    async def load_tasks(self, task_ids: list[str]) -> list[Task]:
        """Load several tasks concurrently.

        The result follows the order of task_ids. Unknown ids and failed
        loads are left out.
        """
        self._ensure_initialized()
        results = await asyncio.gather(
            *(self.load_task(task_id) for task_id in task_ids), return_exceptions=True
        )

        tasks: list[Task] = []
        for task_id, result in zip(task_ids, results):
            if isinstance(result, Exception):
                self._emit("load_failed", f"Failed to load task {task_id}: {result}")
                continue
            if isinstance(result, BaseException):
                raise result
            if result is not None:
                tasks.append(result)
        return tasks

    def list_tasks(self, criteria: TaskListFilter | None = None) -> list[Task]:
        """List loaded tasks matching all given predicates, in canonical order."""
        self._ensure_initialized()
        tasks = list(self._tasks.values())
        if criteria is not None:
            tasks = [task for task in tasks if _matches(task, criteria)]
        return sort_tasks(tasks)

    def list_tasks_paginated(
        self,
        criteria: TaskListFilter | None = None,
        pagination: PaginationOptions | None = None,
    ) -> PaginatedResult[Task]:
        """Return one page of loaded tasks matching the filter."""
        options = pagination or PaginationOptions()
        tasks = self.list_tasks(criteria)
        ordered = sort_tasks_by(tasks, options.sort_by, options.sort_direction)
        return paginate_tasks(ordered, options.limit, options.offset)

    def get_tasks_by_status(self) -> dict[str, list[Task]]:
        """Group loaded tasks into the configured status columns.

        Every configured status has a key, in configured order, even when
        empty. Unconfigured statuses get extra keys.
        """
        config = self.get_config()
        return group_tasks_by_status(list(self._tasks.values()), config.statuses)

    async def get_tasks_by_status_paginated(
        self, pagination: PaginationOptions | None = None
    ) -> PaginatedTasksByStatus:
        """Paginate every status column independently with the same options."""
        options = pagination or PaginationOptions()
        config = self.get_config()
        columns: dict[str, list[Task]] = {status: [] for status in config.statuses}
        for task in await self._all_tasks():
            columns.setdefault(task.status, []).append(task)

        by_status = {
            status: paginate_tasks(
                sort_tasks_by(tasks, options.sort_by, options.sort_direction),
                options.limit,
                options.offset,
            )
            for status, tasks in columns.items()
        }
        return PaginatedTasksByStatus(by_status=by_status, statuses=list(config.statuses))

    async def load_more_for_status(
        self, status: str, current_offset: int, pagination: PaginationOptions | None = None
    ) -> PaginatedResult[Task]:
        """Return the page of one status column starting at current_offset."""
        options = pagination or PaginationOptions()
        self._ensure_initialized()
        tasks = [task for task in await self._all_tasks() if task.status == status]
        ordered = sort_tasks_by(tasks, options.sort_by, options.sort_direction)
        return paginate_tasks(ordered, options.limit, current_offset)

    async def get_tasks_by_source_paginated(
        self, options: SourcePaginationOptions | None = None
    ) -> PaginatedTasksBySource:
        """Paginate active and completed tasks independently.

        Only the tasks on each page are loaded, so this is cheap on a
        lazily initialised store.
        """
        options = options or SourcePaginationOptions()
        self._ensure_initialized()
        by_source = {
            "tasks": await self._page_source(
                "tasks", options.offset, options.tasks_limit, options.tasks_sort_direction, False
            ),
            "completed": await self._page_source(
                "completed",
                options.offset,
                options.completed_limit,
                "asc",
                options.completed_sort_by_id_desc,
            ),
        }
        return PaginatedTasksBySource(by_source=by_source, sources=list(SOURCES))

    async def load_more_for_source(
        self,
        source: IndexSource,
        current_offset: int,
        pagination: PaginationOptions | None = None,
    ) -> PaginatedResult[Task]:
        """Return the page of active or completed tasks starting at current_offset.

        Active tasks are ordered by title in the requested direction,
        completed tasks by id, newest first.
        """
        options = pagination or PaginationOptions()
        self._ensure_initialized()
        return await self._page_source(
            source, current_offset, options.limit, options.sort_direction, source == "completed"
        )

    async def get_tasks_by_milestone(self) -> MilestoneSummary:
        """Bucket all tasks by milestone with per-status counts and progress."""
        config = self.get_config()
        tasks = await self._all_tasks()
        milestones = await self.list_milestones()
        return build_milestone_summary(tasks, milestones, config.statuses)

    # --- Task mutations ---

    async def create_task(self, data: TaskCreateInput) -> Task:
        """Create a task file in tasks/ with the next free id.

        An unknown status is replaced by the configured default status and
        reported as a diagnostic. If a milestone is given, the task id is
        added to that milestone's file.

        Args:
            data: Fields of the new task.

        Returns:
            The created task.

        Raises:
            OSError: If the file cannot be written.
        """
        config = self.get_config()
        default_status = config.effective_default_status
        status = data.status or default_status
        if status not in config.statuses:
            self._emit(
                "invalid_status",
                f'Invalid status "{status}", using default status "{default_status}"',
            )
            status = default_status

        async with self._allocation_lock():
            task_id = str(self._next_task_id())
            task = Task(
                id=task_id,
                title=data.title.strip(),
                status=status,
                priority=data.priority,
                assignee=list(data.assignee),
                labels=list(dict.fromkeys(data.labels)),
                dependencies=list(dict.fromkeys(data.dependencies)),
                parent_task_id=data.parent_task_id,
                milestone=normalize_milestone_name(data.milestone or "") or None,
                ordinal=data.ordinal,
                created_date=self._today(),
                description=(data.description or "").strip() or None,
                implementation_plan=(data.implementation_plan or "").strip() or None,
                implementation_notes=(data.implementation_notes or "").strip() or None,
                acceptance_criteria_items=_merge_criteria(
                    [], TaskUpdateInput(acceptance_criteria=data.acceptance_criteria)
                ),
                source="local",
            )
            await self._write_task(task, self.tasks_dir)

        logger.info("Created task %s at %s", task.id, task.file_path)
        if task.milestone:
            await self._add_to_milestone(task.milestone, task.id)
        return task

    async def update_task(self, task_id: str, updates: TaskUpdateInput) -> Task | None:
        """Merge updates into a loaded task and rewrite its file.

        The old file is always deleted and a new one written, even when
        the filename does not change. The task must already be loaded.

        Args:
            task_id: Id of the task to update.
            updates: Fields to change. Unset fields are left alone.

        Returns:
            The updated task, or None if no task with this id is loaded.

        Raises:
            OSError: If the new file cannot be written.
        """
        self._ensure_initialized()
        existing = self._tasks.get(task_id)
        if existing is None:
            return None

        task = self._apply_updates(existing, updates)
        task.updated_date = self._today()

        if existing.file_path:
            await self._remove_file(existing.file_path, best_effort=True)
        directory = self.completed_dir if task.source == "completed" else self.tasks_dir
        await self._write_task(task, directory)

        if milestone_key(existing.milestone) != milestone_key(task.milestone):
            if existing.milestone:
                await self._remove_from_milestone(existing.milestone, task_id)
            if task.milestone:
                await self._add_to_milestone(task.milestone, task_id)
        return task

    async def delete_task(self, task_id: str) -> bool:
        """Delete a task file and drop it from its milestone and the index.

        Returns:
            True if the task existed, False otherwise.

        Raises:
            OSError: If the file exists but cannot be deleted.
        """
        self._ensure_initialized()
        entry = self._task_index.get(task_id)
        task = self._tasks.get(task_id)
        if task is None and entry is None:
            return False
        if task is None:
            try:
                task = await self.load_task(task_id)
            except FileNotFoundError:
                logger.debug("File for task %s already gone", task_id)

        path = task.file_path if task and task.file_path else self._resolve_path(entry.file_path)
        await self._remove_file(path, best_effort=False)

        if task is None:
            await self._remove_from_all_milestones(task_id)
        elif task.milestone:
            await self._remove_from_milestone(task.milestone, task_id)
        self._tasks.pop(task_id, None)
        self._task_index.pop(task_id, None)
        logger.info("Deleted task %s", task_id)
        return True

    async def archive_task(self, task_id: str) -> Task | None:
        """Move an active task to completed/.

        Returns:
            The moved task, or None if the task is unknown or already completed.
        """
        return await self._move_task(task_id, "completed")

    async def restore_task(self, task_id: str) -> Task | None:
        """Move a completed task back to tasks/.

        Returns:
            The moved task, or None if the task is unknown or not completed.
        """
        return await self._move_task(task_id, "local")

    # --- Milestones ---

    async def list_milestones(self) -> list[Milestone]:
        """Parse every milestone file, ordered by milestone number."""
        self._ensure_initialized()
        milestones: list[Milestone] = []
        for filename in await self._milestone_filenames():
            path = self.adapter.join(self.milestones_dir, filename)
            try:
                milestone = await self._read_milestone(path, filename)
            except (OSError, ValueError) as e:
                self._emit("parse_failed", f"Failed to parse milestone file {path}: {e}", path)
                continue
            milestones.append(milestone)
        return sorted(milestones, key=lambda m: task_id_sort_key(m.id.removeprefix("m-")))

    async def load_milestone(self, milestone_id: str) -> Milestone | None:
        """Return the milestone whose filename carries this id, or None."""
        self._ensure_initialized()
        path = await self._find_milestone_file(milestone_id)
        if path is None:
            return None
        return await self._read_milestone(path, self.adapter.basename(path))

    async def create_milestone(self, data: MilestoneCreateInput) -> Milestone:
        """Create a milestone file with the next free "m-N" id."""
        self._ensure_initialized()
        async with self._allocation_lock():
            milestone = Milestone(
                id=await self._next_milestone_id(),
                title=data.title.strip(),
                description=data.description.strip(),
            )
            await self._write_milestone(milestone)
        logger.info("Created milestone %s at %s", milestone.id, milestone.file_path)
        return milestone

    async def update_milestone(
        self, milestone_id: str, updates: MilestoneUpdateInput
    ) -> Milestone | None:
        """Change a milestone's title or description and rewrite its file.

        Returns:
            The updated milestone, or None if it does not exist.
        """
        milestone = await self.load_milestone(milestone_id)
        if milestone is None:
            return None
        if updates.title is not None:
            milestone.title = updates.title.strip()
        if updates.description is not None:
            milestone.description = updates.description.strip()
        await self._write_milestone(milestone)
        return milestone

    async def delete_milestone(self, milestone_id: str) -> bool:
        """Delete a milestone file.

        Tasks that reference the milestone keep their milestone field.

        Returns:
            True if the milestone existed, False otherwise.
        """
        self._ensure_initialized()
        path = await self._find_milestone_file(milestone_id)
        if path is None:
            return False
        await self._remove_file(path, best_effort=False)
        logger.info("Deleted milestone %s", milestone_id)
        return True

    # --- Internals ---

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise NotInitializedError()

    def _allocation_lock(self) -> asyncio.Lock:
        """Return the id allocation lock for the running event loop."""
        loop = asyncio.get_running_loop()
        if self._id_lock is None or self._id_lock_loop is not loop:
            self._id_lock = asyncio.Lock()
            self._id_lock_loop = loop
        return self._id_lock

    def _emit(self, code: str, message: str, file_path: str | None = None) -> None:
        diagnostic = Diagnostic(code=code, message=message, file_path=file_path)
        if self.on_diagnostic is not None:
            self.on_diagnostic(diagnostic)
        else:
            logger.warning("%s", message)

    def _report_duplicate(self, task_id: str, previous: str | None, current: str | None) -> None:
        self._emit(
            "duplicate_id",
            f"Task id {task_id} is used by both {previous} and {current}; keeping {current}",
            current,
        )

    def _today(self) -> str:
        if self._config is not None and self._config.include_date_time_in_dates:
            return datetime.now().strftime("%Y-%m-%d %H:%M")
        return date.today().isoformat()

    def _resolve_path(self, path: str) -> str:
        """Resolve a caller-supplied path against project_root when relative."""
        if os.path.isabs(path) or path.startswith("/") or path.startswith(self.project_root):
            return path
        return self.adapter.join(self.project_root, path)

    async def _load_config(self) -> None:
        if not await self.adapter.exists(self.config_path):
            raise NotAProjectError(self.config_path)
        content = await self.adapter.read_file(self.config_path)
        self._config = parse_backlog_config(content, self.config_defaults)

    async def _directory_exists(self, path: str) -> bool:
        try:
            return await self.adapter.exists(path) and await self.adapter.is_directory(path)
        except OSError as e:
            logger.debug("Treating %s as missing: %s", path, e)
            return False

    async def _list_directory(self, path: str) -> list[str]:
        if not await self._directory_exists(path):
            return []
        try:
            return await self.adapter.read_dir(path)
        except OSError as e:
            logger.debug("Treating %s as missing: %s", path, e)
            return []

    async def _load_directory(self, directory: str, source: IndexSource) -> None:
        for entry in await self._list_directory(directory):
            if not entry.endswith(".md"):
                continue
            path = self.adapter.join(directory, entry)
            try:
                if await self.adapter.is_directory(path):
                    continue
                content = await self.adapter.read_file(path)
                task = parse_task_markdown(content, path)
            except (OSError, ValueError) as e:
                self._emit("parse_failed", f"Failed to parse task file {path}: {e}", path)
                continue

            task.source = "completed" if source == "completed" else "local"
            previous = self._tasks.get(task.id)
            if previous is not None:
                self._report_duplicate(task.id, previous.file_path, path)
            self._remember(task, path)

    def _remember(self, task: Task, path: str) -> None:
        """Store a task in the cache and refresh its index entry."""
        self._tasks[task.id] = task
        entry = extract_task_index_from_path(path)
        self._task_index[task.id] = TaskIndexEntry(
            id=task.id,
            file_path=path,
            title=entry.title,
            source="completed" if task.source == "completed" else "tasks",
        )

    async def _all_tasks(self) -> list[Task]:
        """Return every task, loading any that are only indexed."""
        self._ensure_initialized()
        missing = [task_id for task_id in self._task_index if task_id not in self._tasks]
        if missing:
            await self.load_tasks(missing)
        return list(self._tasks.values())

    def _next_task_id(self) -> int:
        numbers = []
        for task_id in set(self._tasks) | set(self._task_index):
            head = task_id.split(".", 1)[0]
            if head.isdigit():
                numbers.append(int(head))
        return max(numbers, default=0) + 1

    async def _write_task(self, task: Task, directory: str) -> None:
        """Serialize a task into directory and update the in-memory state."""
        await self.adapter.create_dir(directory, recursive=True)
        path = self.adapter.join(directory, get_task_filename(task.id, task.title))
        content = serialize_task_markdown(task)
        await self.adapter.write_file(path, content)
        task.file_path = path
        task.raw_content = _body_of(content)
        self._remember(task, path)

    async def _remove_file(self, path: str, best_effort: bool) -> None:
        """Delete a file, tolerating its absence.

        Other I/O errors propagate unless best_effort is set.
        """
        try:
            await self.adapter.delete_file(path)
        except FileNotFoundError:
            logger.debug("File already gone: %s", path)
        except OSError as e:
            if not best_effort:
                raise
            logger.debug("Could not delete %s: %s", path, e)

    def _apply_updates(self, existing: Task, updates: TaskUpdateInput) -> Task:
        fields = updates.model_fields_set
        task = existing.model_copy(deep=True)

        if updates.title is not None:
            task.title = updates.title.strip()
        if "description" in fields:
            task.description = (updates.description or "").strip() or None
        if updates.status is not None:
            task.status = updates.status
        if "priority" in fields:
            task.priority = updates.priority
        if "milestone" in fields:
            task.milestone = normalize_milestone_name(updates.milestone or "") or None
        if "ordinal" in fields:
            task.ordinal = updates.ordinal
        if updates.assignee is not None:
            task.assignee = list(updates.assignee)

        task.labels = _merge_values(
            task.labels, updates.labels, updates.add_labels, updates.remove_labels
        )
        task.dependencies = _merge_values(
            task.dependencies,
            updates.dependencies,
            updates.add_dependencies,
            updates.remove_dependencies,
        )
        task.implementation_plan = _merge_text(
            task.implementation_plan,
            updates.implementation_plan,
            updates.append_implementation_plan,
            updates.clear_implementation_plan,
        )
        task.implementation_notes = _merge_text(
            task.implementation_notes,
            updates.implementation_notes,
            updates.append_implementation_notes,
            updates.clear_implementation_notes,
        )
        task.acceptance_criteria_items = _merge_criteria(task.acceptance_criteria_items, updates)
        return task

    async def _move_task(self, task_id: str, target: Literal["local", "completed"]) -> Task | None:
        self._ensure_initialized()
        task = await self.load_task(task_id)
        if task is None:
            return None
        if (task.source == "completed") == (target == "completed"):
            return None

        old_path = task.file_path
        moved = task.model_copy(deep=True, update={"source": target})
        directory = self.completed_dir if target == "completed" else self.tasks_dir
        await self._write_task(moved, directory)
        if old_path and old_path != moved.file_path:
            await self._remove_file(old_path, best_effort=True)
        logger.info("Moved task %s to %s", task_id, directory)
        return moved

    async def _page_source(
        self,
        source: IndexSource,
        offset: int,
        limit: int,
        direction: str,
        by_id_desc: bool,
    ) -> PaginatedResult[Task]:
        entries = [entry for entry in self._task_index.values() if entry.source == source]
        if by_id_desc:
            entries.sort(key=lambda e: task_id_sort_key(e.id), reverse=True)
        else:
            entries.sort(key=lambda e: self._display_title(e).casefold(), reverse=direction == "desc")

        page = entries[offset : offset + limit]
        tasks = await self.load_tasks([entry.id for entry in page])
        return PaginatedResult[Task](
            items=tasks,
            total=len(entries),
            has_more=offset + limit < len(entries),
            offset=offset,
            limit=limit,
        )

    def _display_title(self, entry: TaskIndexEntry) -> str:
        task = self._tasks.get(entry.id)
        return task.title if task is not None else entry.title

    async def _milestone_filenames(self) -> list[str]:
        return [name for name in await self._list_directory(self.milestones_dir) if is_milestone_file(name)]

    async def _find_milestone_file(self, milestone_id: str) -> str | None:
        wanted = milestone_key(milestone_id)
        for filename in await self._milestone_filenames():
            found = extract_milestone_id_from_filename(filename)
            if found is not None and found.lower() == wanted:
                return self.adapter.join(self.milestones_dir, filename)
        return None

    async def _read_milestone(self, path: str, filename: str) -> Milestone:
        content = await self.adapter.read_file(path)
        milestone = parse_milestone_markdown(content, path)
        if not milestone.id:
            milestone.id = extract_milestone_id_from_filename(filename) or ""
        if not milestone.id:
            raise ValueError(f"milestone file {filename} has no id")
        return milestone

    async def _next_milestone_id(self) -> str:
        numbers = []
        for filename in await self._milestone_filenames():
            found = extract_milestone_id_from_filename(filename)
            if found is not None:
                numbers.append(int(found.removeprefix("m-")))
        return f"m-{max(numbers, default=-1) + 1}"

    async def _write_milestone(self, milestone: Milestone) -> None:
        """Replace the milestone's current file with one named after its title."""
        await self.adapter.create_dir(self.milestones_dir, recursive=True)
        old_path = await self._find_milestone_file(milestone.id)
        if old_path is not None:
            await self._remove_file(old_path, best_effort=True)

        path = self.adapter.join(self.milestones_dir, get_milestone_filename(milestone.id, milestone.title))
        content = serialize_milestone_markdown(milestone)
        await self.adapter.write_file(path, content)
        milestone.file_path = path
        milestone.raw_content = _body_of(content)

    async def _add_to_milestone(self, milestone_id: str, task_id: str) -> None:
        milestone = await self.load_milestone(milestone_id)
        if milestone is None:
            self._emit("milestone_not_found", f"Milestone {milestone_id} not found; task {task_id} not added")
            return
        if task_id in milestone.tasks:
            return
        milestone.tasks.append(task_id)
        await self._write_milestone(milestone)

    async def _remove_from_milestone(self, milestone_id: str, task_id: str) -> None:
        milestone = await self.load_milestone(milestone_id)
        if milestone is None or task_id not in milestone.tasks:
            return
        milestone.tasks = [member for member in milestone.tasks if member != task_id]
        await self._write_milestone(milestone)

    async def _remove_from_all_milestones(self, task_id: str) -> None:
        for milestone in await self.list_milestones():
            if task_id in milestone.tasks:
                milestone.tasks = [member for member in milestone.tasks if member != task_id]
                await self._write_milestone(milestone)

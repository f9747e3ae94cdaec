"""Backlog data models."""

from backlog.models.config import (
    DEFAULT_STATUSES,
    BacklogConfig,
    ConfigDefaults,
    parse_backlog_config,
    serialize_backlog_config,
)
from backlog.models.milestone import (
    Milestone,
    MilestoneBucket,
    MilestoneCreateInput,
    MilestoneSummary,
    MilestoneUpdateInput,
)
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
    Task,
    TaskCreateInput,
    TaskIndexEntry,
    TaskListFilter,
    TaskUpdateInput,
)

__all__ = [
    "DEFAULT_STATUSES",
    "AcceptanceCriterion",
    "AcceptanceCriterionInput",
    "BacklogConfig",
    "ConfigDefaults",
    "Milestone",
    "MilestoneBucket",
    "MilestoneCreateInput",
    "MilestoneSummary",
    "MilestoneUpdateInput",
    "PaginatedResult",
    "PaginatedTasksBySource",
    "PaginatedTasksByStatus",
    "PaginationOptions",
    "SourcePaginationOptions",
    "Task",
    "TaskCreateInput",
    "TaskIndexEntry",
    "TaskListFilter",
    "TaskUpdateInput",
    "paginate_tasks",
    "parse_backlog_config",
    "serialize_backlog_config",
]

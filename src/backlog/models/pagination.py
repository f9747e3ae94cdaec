"""Pydantic models for paginated task listings."""

from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from backlog.models.task import Task

T = TypeVar("T")

SortField = Literal["title", "createdDate", "priority", "ordinal"]
SortDirection = Literal["asc", "desc"]


class PaginationOptions(BaseModel):
    """Page size, offset and ordering for a paginated query."""

    model_config = ConfigDict(populate_by_name=True)

    limit: int = Field(default=10, ge=0)
    offset: int = Field(default=0, ge=0)
    sort_by: SortField = Field(default="title", alias="sortBy")
    sort_direction: SortDirection = Field(default="asc", alias="sortDirection")


class PaginatedResult(BaseModel, Generic[T]):
    """One page of items plus the size of the full collection.

    Attributes:
        items: Items on this page.
        total: Number of items before pagination.
        has_more: Whether items exist past this page.
        offset: Offset of the first item on this page.
        limit: Requested page size.
    """

    model_config = ConfigDict(populate_by_name=True)

    items: list[T] = Field(default_factory=list)
    total: int = 0
    has_more: bool = Field(default=False, alias="hasMore")
    offset: int = 0
    limit: int = 10


class PaginatedTasksByStatus(BaseModel):
    """Independently paginated task lists per status column."""

    model_config = ConfigDict(populate_by_name=True)

    by_status: dict[str, PaginatedResult[Task]] = Field(
        default_factory=dict, alias="byStatus"
    )
    statuses: list[str] = Field(default_factory=list)


class PaginatedTasksBySource(BaseModel):
    """Independently paginated task lists for active and completed tasks."""

    model_config = ConfigDict(populate_by_name=True)

    by_source: dict[str, PaginatedResult[Task]] = Field(
        default_factory=dict, alias="bySource"
    )
    sources: list[str] = Field(default_factory=list)


class SourcePaginationOptions(BaseModel):
    """Per-source page sizes used when paginating active and completed tasks."""

    model_config = ConfigDict(populate_by_name=True)

    tasks_limit: int = Field(default=10, ge=0, alias="tasksLimit")
    completed_limit: int = Field(default=10, ge=0, alias="completedLimit")
    offset: int = Field(default=0, ge=0)
    tasks_sort_direction: SortDirection = Field(default="asc", alias="tasksSortDirection")
    completed_sort_by_id_desc: bool = Field(default=True, alias="completedSortByIdDesc")


def paginate_tasks(tasks: list[Task], limit: int, offset: int) -> PaginatedResult[Task]:
    """Slice an ordered task list into one page.

    Args:
        tasks: Full, already ordered collection.
        limit: Page size.
        offset: Index of the first task to return.

    Returns:
        PaginatedResult describing the requested page.
    """
    total = len(tasks)
    return PaginatedResult[Task](
        items=tasks[offset : offset + limit],
        total=total,
        has_more=offset + limit < total,
        offset=offset,
        limit=limit,
    )

"""Pydantic models for tasks and task mutation inputs.

This module defines the Task model parsed from task markdown files, the
lightweight TaskIndexEntry used for lazy loading, and the input models
accepted by the store's create/update/list operations.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Priority = Literal["high", "medium", "low"]
TaskSource = Literal["local", "remote", "completed", "local-branch"]
IndexSource = Literal["tasks", "completed"]


class AcceptanceCriterion(BaseModel):
    """A single checkbox item from a task's acceptance criteria.

    Attributes:
        index: 1-based position in document order.
        text: Criterion text.
        checked: Whether the checkbox is ticked.
    """

    index: int = Field(..., description="1-based position in document order")
    text: str = Field(..., description="Criterion text")
    checked: bool = Field(default=False, description="Whether the checkbox is ticked")


class AcceptanceCriterionInput(BaseModel):
    """Acceptance criterion supplied when creating or updating a task."""

    text: str
    checked: bool = False


class Task(BaseModel):
    """A unit of work backed by one markdown file.

    The id is derived from the filename and never regenerated on edit.
    file_path and source are derived from where the file lives and are
    not written into the file itself.

    Attributes:
        id: Task identifier, e.g. "42" or "42.1" for subtasks.
        title: Task title (first level-1 heading).
        status: Free-form status string.
        assignee: Assigned people.
        reporter: Person who reported the task.
        created_date: ISO creation date.
        updated_date: ISO date of the last programmatic update.
        labels: Labels in insertion order.
        milestone: Referenced milestone id, if any.
        dependencies: Ids of tasks this task depends on.
        raw_content: Body text after the metadata block (read-only).
        description: Free description text.
        implementation_plan: Implementation plan section.
        implementation_notes: Implementation notes section.
        acceptance_criteria_items: Structured acceptance criteria.
        parent_task_id: Parent task id for subtasks.
        subtasks: Ids of subtasks.
        priority: high, medium or low.
        branch: Branch the task is worked on.
        ordinal: Manual ordering hint.
        file_path: Path of the backing file.
        source: Where the task was loaded from.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    status: str
    assignee: list[str] = Field(default_factory=list)
    reporter: str | None = None
    created_date: str = Field(..., alias="createdDate")
    updated_date: str | None = Field(default=None, alias="updatedDate")
    labels: list[str] = Field(default_factory=list)
    milestone: str | None = None
    dependencies: list[str] = Field(default_factory=list)
    raw_content: str | None = Field(default=None, alias="rawContent")
    description: str | None = None
    implementation_plan: str | None = Field(default=None, alias="implementationPlan")
    implementation_notes: str | None = Field(default=None, alias="implementationNotes")
    acceptance_criteria_items: list[AcceptanceCriterion] = Field(
        default_factory=list, alias="acceptanceCriteriaItems"
    )
    parent_task_id: str | None = Field(default=None, alias="parentTaskId")
    subtasks: list[str] | None = None
    priority: Priority | None = None
    branch: str | None = None
    ordinal: int | None = None
    file_path: str | None = Field(default=None, alias="filePath")
    source: TaskSource | None = None

    def is_local_editable(self) -> bool:
        """Return True if the task lives in the local tasks or completed directory."""
        return self.source is None or self.source in ("local", "completed")


class TaskIndexEntry(BaseModel):
    """Lightweight index entry derived from a file path alone.

    Attributes:
        id: Task id extracted from the filename.
        file_path: Path to the task file as supplied by the caller.
        title: Title extracted from the filename.
        source: "tasks" or "completed" depending on the directory.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    file_path: str = Field(..., alias="filePath")
    title: str
    source: IndexSource


class TaskCreateInput(BaseModel):
    """Fields accepted by BacklogStore.create_task."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str | None = None
    status: str | None = None
    priority: Priority | None = None
    labels: list[str] = Field(default_factory=list)
    assignee: list[str] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)
    parent_task_id: str | None = Field(default=None, alias="parentTaskId")
    milestone: str | None = None
    ordinal: int | None = None
    implementation_plan: str | None = Field(default=None, alias="implementationPlan")
    implementation_notes: str | None = Field(default=None, alias="implementationNotes")
    acceptance_criteria: list[AcceptanceCriterionInput] = Field(
        default_factory=list, alias="acceptanceCriteria"
    )


class TaskUpdateInput(BaseModel):
    """Fields accepted by BacklogStore.update_task.

    Only fields that were explicitly set are applied. Setting milestone,
    priority or ordinal to None clears them. For labels, dependencies and
    acceptance criteria a full replace wins over add/remove when both are set.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = None
    description: str | None = None
    status: str | None = None
    priority: Priority | None = None
    milestone: str | None = None
    ordinal: int | None = None
    assignee: list[str] | None = None

    labels: list[str] | None = None
    add_labels: list[str] = Field(default_factory=list, alias="addLabels")
    remove_labels: list[str] = Field(default_factory=list, alias="removeLabels")

    dependencies: list[str] | None = None
    add_dependencies: list[str] = Field(default_factory=list, alias="addDependencies")
    remove_dependencies: list[str] = Field(default_factory=list, alias="removeDependencies")

    implementation_plan: str | None = Field(default=None, alias="implementationPlan")
    append_implementation_plan: list[str] = Field(
        default_factory=list, alias="appendImplementationPlan"
    )
    clear_implementation_plan: bool = Field(default=False, alias="clearImplementationPlan")

    implementation_notes: str | None = Field(default=None, alias="implementationNotes")
    append_implementation_notes: list[str] = Field(
        default_factory=list, alias="appendImplementationNotes"
    )
    clear_implementation_notes: bool = Field(default=False, alias="clearImplementationNotes")

    acceptance_criteria: list[AcceptanceCriterionInput] | None = Field(
        default=None, alias="acceptanceCriteria"
    )
    add_acceptance_criteria: list[AcceptanceCriterionInput | str] = Field(
        default_factory=list, alias="addAcceptanceCriteria"
    )
    remove_acceptance_criteria: list[int] = Field(
        default_factory=list, alias="removeAcceptanceCriteria"
    )
    check_acceptance_criteria: list[int] = Field(
        default_factory=list, alias="checkAcceptanceCriteria"
    )
    uncheck_acceptance_criteria: list[int] = Field(
        default_factory=list, alias="uncheckAcceptanceCriteria"
    )


class TaskListFilter(BaseModel):
    """Independent predicates applied conjunctively by list_tasks."""

    model_config = ConfigDict(populate_by_name=True)

    status: str | None = None
    assignee: str | None = None
    priority: Priority | None = None
    milestone: str | None = None
    labels: list[str] = Field(default_factory=list)
    parent_task_id: str | None = Field(default=None, alias="parentTaskId")

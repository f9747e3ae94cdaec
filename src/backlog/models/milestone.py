"""Pydantic models for milestones and milestone progress summaries."""

from pydantic import BaseModel, ConfigDict, Field

from backlog.models.task import Task


class Milestone(BaseModel):
    """A release or phase grouping tasks.

    The tasks list is the membership stored in the milestone's own file.
    It is kept in sync with each task's milestone field by the store.

    Attributes:
        id: Milestone id of the form "m-N".
        title: Milestone title.
        description: Description section text.
        raw_content: Body text after the metadata block.
        tasks: Ids of member tasks.
        file_path: Path of the backing file, when loaded from disk.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str = ""
    raw_content: str = Field(default="", alias="rawContent")
    tasks: list[str] = Field(default_factory=list)
    file_path: str | None = Field(default=None, alias="filePath")


class MilestoneCreateInput(BaseModel):
    """Fields accepted by BacklogStore.create_milestone."""

    title: str
    description: str = ""


class MilestoneUpdateInput(BaseModel):
    """Fields accepted by BacklogStore.update_milestone. Unset means no change."""

    title: str | None = None
    description: str | None = None


class MilestoneBucket(BaseModel):
    """Tasks sharing one milestone reference, with aggregated progress.

    Attributes:
        key: Normalised milestone key ("__none" for the no-milestone bucket).
        label: Display label (milestone title or raw id).
        milestone: Milestone reference as written on the tasks.
        is_no_milestone: True for the bucket of tasks without a milestone.
        tasks: Tasks in the bucket.
        status_counts: Task count per status, seeded with every configured status.
        total: Number of tasks in the bucket.
        done_count: Number of tasks whose status looks finished.
        progress: Rounded percentage of done tasks.
    """

    model_config = ConfigDict(populate_by_name=True)

    key: str
    label: str
    milestone: str | None = None
    is_no_milestone: bool = Field(default=False, alias="isNoMilestone")
    tasks: list[Task] = Field(default_factory=list)
    status_counts: dict[str, int] = Field(default_factory=dict, alias="statusCounts")
    total: int = 0
    done_count: int = Field(default=0, alias="doneCount")
    progress: int = 0


class MilestoneSummary(BaseModel):
    """All known milestone references plus one bucket per reference."""

    milestones: list[str] = Field(default_factory=list)
    buckets: list[MilestoneBucket] = Field(default_factory=list)

"""Milestone bucketing and progress computation.

Tasks are grouped by their milestone reference, compared by a trimmed,
lower-cased key. Progress counts a task as done when its status contains
"done" or "complete", case-insensitively. That is a heuristic and does
not consult the configured statuses.
"""

from backlog.models.milestone import Milestone, MilestoneBucket, MilestoneSummary
from backlog.models.task import Task

NO_MILESTONE_KEY = "__none"
NO_MILESTONE_LABEL = "Tasks without milestone"


def normalize_milestone_name(name: str) -> str:
    return name.strip()


def milestone_key(name: str | None) -> str:
    """Return the comparison key for a milestone reference."""
    return normalize_milestone_name(name or "").lower()


def is_done_status(status: str | None) -> bool:
    normalized = (status or "").lower()
    return "done" in normalized or "complete" in normalized


def get_milestone_label(milestone_id: str | None, milestones: list[Milestone]) -> str:
    """Return the milestone title for a reference, falling back to the reference itself."""
    if not milestone_id:
        return NO_MILESTONE_LABEL
    key = milestone_key(milestone_id)
    for milestone in milestones:
        if milestone_key(milestone.id) == key:
            return milestone.title or milestone_id
    return milestone_id


def _merge_unique(values: list[str]) -> list[str]:
    merged: list[str] = []
    seen: set[str] = set()
    for value in values:
        normalized = normalize_milestone_name(value)
        key = milestone_key(normalized)
        if not normalized or key in seen:
            continue
        seen.add(key)
        merged.append(normalized)
    return merged


def collect_milestone_ids(tasks: list[Task], milestones: list[Milestone]) -> list[str]:
    """Collect unique milestone references, milestone entities first."""
    return _merge_unique([m.id for m in milestones] + [t.milestone or "" for t in tasks])


def collect_milestones(tasks: list[Task], config_milestones: list[str]) -> list[str]:
    """Collect unique milestone references from the config list and tasks."""
    return _merge_unique(list(config_milestones) + [t.milestone or "" for t in tasks])


def _build_bucket(
    milestone_id: str | None,
    tasks: list[Task],
    statuses: list[str],
    milestones: list[Milestone],
) -> MilestoneBucket:
    key = milestone_key(milestone_id)
    bucket_tasks = [task for task in tasks if milestone_key(task.milestone) == key]

    counts = {status: 0 for status in statuses}
    for task in bucket_tasks:
        counts[task.status] = counts.get(task.status, 0) + 1

    done_count = sum(1 for task in bucket_tasks if is_done_status(task.status))
    total = len(bucket_tasks)
    progress = round(done_count / total * 100) if total else 0

    return MilestoneBucket(
        key=key or NO_MILESTONE_KEY,
        label=get_milestone_label(milestone_id, milestones),
        milestone=milestone_id,
        is_no_milestone=not key,
        tasks=bucket_tasks,
        status_counts=counts,
        total=total,
        done_count=done_count,
        progress=progress,
    )


def build_milestone_buckets(
    tasks: list[Task], milestones: list[Milestone], statuses: list[str]
) -> list[MilestoneBucket]:
    """Build one bucket per milestone reference, with the no-milestone bucket first.

    Args:
        tasks: Tasks to group.
        milestones: Known milestone entities, used for ordering and labels.
        statuses: Configured statuses used to seed status counts.

    Returns:
        List of buckets.
    """
    buckets = [_build_bucket(None, tasks, statuses, milestones)]
    for milestone_id in collect_milestone_ids(tasks, milestones):
        buckets.append(_build_bucket(milestone_id, tasks, statuses, milestones))
    return buckets


def build_milestone_summary(
    tasks: list[Task], milestones: list[Milestone], statuses: list[str]
) -> MilestoneSummary:
    """Return all milestone references plus their buckets."""
    return MilestoneSummary(
        milestones=collect_milestone_ids(tasks, milestones),
        buckets=build_milestone_buckets(tasks, milestones, statuses),
    )


def group_tasks_by_milestone(
    tasks: list[Task], config_milestones: list[str], statuses: list[str]
) -> MilestoneSummary:
    """Summarise tasks using the legacy milestone list from config.yml."""
    entities = [Milestone(id=name, title=name) for name in config_milestones]
    return MilestoneSummary(
        milestones=collect_milestones(tasks, config_milestones),
        buckets=build_milestone_buckets(tasks, entities, statuses),
    )

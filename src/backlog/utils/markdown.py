"""Markdown codec for task and milestone files.

A file starts with a metadata block delimited by "---" lines holding
"key: value" pairs, followed by a markdown body. For tasks the body holds
the "# Title" heading, a free description and optional "## Acceptance
Criteria", "## Implementation Plan" and "## Implementation Notes" sections.

Serializing regenerates the body from structured fields, so body text
outside the recognised sections is not preserved across a rewrite.
"""

import logging
import re
from datetime import date

from backlog.models.milestone import Milestone
from backlog.models.task import AcceptanceCriterion, Task
from backlog.utils.paths import extract_id_from_path
from backlog.utils.scalars import format_list_value, quote, split_list_value, unquote

logger = logging.getLogger(__name__)

# Status assigned to tasks whose metadata has no status line
FALLBACK_STATUS = "backlog"

ACCEPTANCE_CRITERIA = "Acceptance Criteria"
IMPLEMENTATION_PLAN = "Implementation Plan"
IMPLEMENTATION_NOTES = "Implementation Notes"
DESCRIPTION = "Description"

_FRONTMATTER_PATTERN = re.compile(r"\A---[ \t]*\n(.*?)^---[ \t]*$\n?", re.DOTALL | re.MULTILINE)
_METADATA_LINE_PATTERN = re.compile(r"^(\w+):[ \t]*(.+)$")
_TITLE_PATTERN = re.compile(r"^#[ \t]+(.+)$", re.MULTILINE)
_CHECKBOX_PATTERN = re.compile(r"^-[ \t]*\[([ xX])\][ \t]*(.+)$", re.MULTILINE)

_PRIORITIES = ("high", "medium", "low")
_SCALAR_KEYS = {
    "status": "status",
    "reporter": "reporter",
    "milestone": "milestone",
    "branch": "branch",
    "parentTaskId": "parent_task_id",
    "parent_task_id": "parent_task_id",
    "createdDate": "created_date",
    "created_date": "created_date",
    "updatedDate": "updated_date",
    "updated_date": "updated_date",
}
_LIST_KEYS = ("assignee", "labels", "dependencies", "subtasks")


def _section_pattern(name: str) -> re.Pattern[str]:
    """Match a "## name" section up to the next level-2 heading or end of text."""
    return re.compile(
        rf"^##[ \t]+{re.escape(name)}[ \t]*(?:\n|\Z)(.*?)(?=^##[ \t]|\Z)",
        re.DOTALL | re.MULTILINE | re.IGNORECASE,
    )


def split_frontmatter(content: str) -> tuple[str | None, str]:
    """Split file content into the metadata block and the body.

    Args:
        content: Full file text.

    Returns:
        Tuple of (metadata text or None if absent, body text).
    """
    normalized = content.replace("\r\n", "\n")
    match = _FRONTMATTER_PATTERN.match(normalized)
    if not match:
        return None, normalized
    return match.group(1), normalized[match.end() :]


def _metadata_pairs(raw: str) -> list[tuple[str, str]]:
    pairs = []
    for line in raw.split("\n"):
        match = _METADATA_LINE_PATTERN.match(line)
        if match:
            pairs.append((match.group(1), match.group(2).strip()))
    return pairs


def parse_task_frontmatter(raw: str) -> dict[str, object]:
    """Parse task metadata lines into Task field values.

    Unknown keys are ignored. Invalid priorities and non-integer ordinals
    are dropped.

    Args:
        raw: Text between the "---" delimiters.

    Returns:
        Mapping of Task attribute name to parsed value.
    """
    result: dict[str, object] = {}
    for key, value in _metadata_pairs(raw):
        if key in _SCALAR_KEYS:
            result[_SCALAR_KEYS[key]] = unquote(value)
        elif key in _LIST_KEYS:
            result[key] = split_list_value(value)
        elif key == "priority":
            priority = unquote(value).lower()
            if priority in _PRIORITIES:
                result["priority"] = priority
            else:
                logger.debug("Ignoring unknown priority %r", value)
        elif key == "ordinal":
            try:
                result["ordinal"] = int(unquote(value))
            except ValueError:
                logger.debug("Ignoring non-integer ordinal %r", value)
    return result


def extract_section(body: str, name: str) -> str | None:
    """Return the stripped text of a "## name" section, or None if absent or empty."""
    match = _section_pattern(name).search(body)
    if not match:
        return None
    text = match.group(1).strip()
    return text or None


def parse_acceptance_criteria(body: str) -> list[AcceptanceCriterion]:
    """Collect every checkbox list item in the body, in document order.

    The scan ignores headings, so checkbox items anywhere in the body are
    captured and numbered from 1.
    """
    return [
        AcceptanceCriterion(index=i, checked=match.group(1).lower() == "x", text=match.group(2).strip())
        for i, match in enumerate(_CHECKBOX_PATTERN.finditer(body), start=1)
    ]


def _extract_description(body: str, title_match: re.Match[str] | None) -> str:
    explicit = extract_section(body, DESCRIPTION)
    if explicit is not None:
        return explicit

    if title_match:
        body = body[: title_match.start()] + body[title_match.end() :]
    for name in (ACCEPTANCE_CRITERIA, IMPLEMENTATION_PLAN, IMPLEMENTATION_NOTES):
        body = _section_pattern(name).sub("", body)
    return body.strip()


def parse_task_markdown(content: str, file_path: str) -> Task:
    """Parse task file content into a Task.

    The id comes from the filename. Missing status falls back to
    FALLBACK_STATUS, missing creation date to today, missing title to
    "Task {id}".

    Args:
        content: Full file text.
        file_path: Path of the file, used to derive the id.

    Returns:
        The parsed Task with raw_content set to the trimmed body.
    """
    raw_frontmatter, body = split_frontmatter(content)
    fields = parse_task_frontmatter(raw_frontmatter) if raw_frontmatter is not None else {}
    task_id = extract_id_from_path(file_path)

    title_match = _TITLE_PATTERN.search(body)
    title = title_match.group(1).strip() if title_match else ""

    fields.setdefault("status", FALLBACK_STATUS)
    if not fields.get("created_date"):
        fields["created_date"] = date.today().isoformat()

    return Task(
        id=task_id,
        title=title or f"Task {task_id}",
        raw_content=body.strip(),
        description=_extract_description(body, title_match) or None,
        implementation_plan=extract_section(body, IMPLEMENTATION_PLAN),
        implementation_notes=extract_section(body, IMPLEMENTATION_NOTES),
        acceptance_criteria_items=parse_acceptance_criteria(body),
        file_path=file_path,
        **fields,
    )


def _render_sections(task: Task, lines: list[str]) -> None:
    """Append description, acceptance criteria and implementation sections."""
    if task.description:
        lines.append(task.description)
        lines.append("")

    if task.acceptance_criteria_items:
        lines.append(f"## {ACCEPTANCE_CRITERIA}")
        lines.append("")
        for criterion in task.acceptance_criteria_items:
            checkbox = "[x]" if criterion.checked else "[ ]"
            lines.append(f"- {checkbox} {criterion.text}")
        lines.append("")

    if task.implementation_plan:
        lines.append(f"## {IMPLEMENTATION_PLAN}")
        lines.append("")
        lines.append(task.implementation_plan)
        lines.append("")

    if task.implementation_notes:
        lines.append(f"## {IMPLEMENTATION_NOTES}")
        lines.append("")
        lines.append(task.implementation_notes)
        lines.append("")


def serialize_task_markdown(task: Task) -> str:
    """Serialize a Task to file content.

    Only fields with a value are written to the metadata block. The body
    is rebuilt from structured fields; raw_content is not consulted.

    Args:
        task: Task to serialize.

    Returns:
        File text ending with a newline.
    """
    lines = ["---", f"status: {task.status}"]

    if task.priority:
        lines.append(f"priority: {task.priority}")
    if task.assignee:
        lines.append(f"assignee: {format_list_value(task.assignee)}")
    if task.reporter:
        lines.append(f"reporter: {task.reporter}")
    if task.labels:
        lines.append(f"labels: {format_list_value(task.labels)}")
    if task.milestone:
        lines.append(f"milestone: {task.milestone}")
    if task.dependencies:
        lines.append(f"dependencies: {format_list_value(task.dependencies)}")
    if task.parent_task_id:
        lines.append(f"parentTaskId: {task.parent_task_id}")
    if task.subtasks:
        lines.append(f"subtasks: {format_list_value(task.subtasks)}")
    if task.branch:
        lines.append(f"branch: {task.branch}")
    if task.ordinal is not None:
        lines.append(f"ordinal: {task.ordinal}")
    if task.created_date:
        lines.append(f"createdDate: {task.created_date}")
    if task.updated_date:
        lines.append(f"updatedDate: {task.updated_date}")

    lines.extend(["---", "", f"# {task.title}", ""])
    _render_sections(task, lines)
    return "\n".join(lines)


def get_task_body_markdown(task: Task, include_title: bool = False) -> str:
    """Return the markdown body of a task for display.

    Uses raw_content when present, otherwise rebuilds the body from the
    structured fields.

    Args:
        task: Task to render.
        include_title: Whether to keep the "# Title" heading.

    Returns:
        Markdown text without the metadata block.
    """
    if task.raw_content:
        body = task.raw_content
        if not include_title and task.title:
            pattern = re.compile(rf"^#[ \t]+{re.escape(task.title)}[ \t]*\n?", re.MULTILINE)
            body = pattern.sub("", body, count=1)
        return body.strip()

    lines: list[str] = []
    if include_title and task.title:
        lines.extend([f"# {task.title}", ""])
    _render_sections(task, lines)
    return "\n".join(lines).strip()


def parse_milestone_markdown(content: str, file_path: str | None = None) -> Milestone:
    """Parse milestone file content into a Milestone.

    Args:
        content: Full file text.
        file_path: Path of the file, recorded on the result.

    Returns:
        The parsed Milestone.
    """
    raw_frontmatter, body = split_frontmatter(content)
    fields: dict[str, object] = {}
    for key, value in _metadata_pairs(raw_frontmatter or ""):
        if key in ("id", "title"):
            fields[key] = unquote(value)
        elif key == "tasks" and value.startswith("[") and value.endswith("]"):
            fields["tasks"] = split_list_value(value)

    raw_content = body.strip()
    return Milestone(
        id=fields.get("id", ""),
        title=fields.get("title", ""),
        description=extract_section(raw_content, DESCRIPTION) or "",
        raw_content=raw_content,
        tasks=fields.get("tasks", []),
        file_path=file_path,
    )


def serialize_milestone_markdown(milestone: Milestone) -> str:
    """Serialize a Milestone to file content.

    An empty description is rendered as "Milestone: {title}".
    """
    lines = [
        "---",
        f"id: {milestone.id}",
        f"title: {quote(milestone.title)}",
        f"tasks: {format_list_value(milestone.tasks)}",
        "---",
        "",
        f"## {DESCRIPTION}",
        "",
        milestone.description or f"Milestone: {milestone.title}",
        "",
    ]
    return "\n".join(lines)

"""Pydantic models and codec for the project configuration file.

This module parses and serializes backlog/config.yml. The file is read
line by line as "key: value" pairs with bracketed arrays, matching the
format Backlog.md writes, rather than as general-purpose YAML.
"""

import logging
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from backlog.utils.scalars import format_list_value, quote, split_list_value, unquote

logger = logging.getLogger(__name__)

DEFAULT_STATUSES = ("To Do", "In Progress", "Done")


class ConfigDefaults(BaseModel):
    """Fallback values used when config.yml omits a required field.

    Attributes:
        project_name: Project name used when project_name is missing.
        statuses: Status columns used when statuses is missing.
        date_format: Date format used when date_format is missing.
    """

    project_name: str = "Backlog"
    statuses: list[str] = Field(default_factory=lambda: list(DEFAULT_STATUSES))
    date_format: str = "YYYY-MM-DD"


class BacklogConfig(BaseModel):
    """Per-project settings read from backlog/config.yml.

    statuses defines both the valid statuses and the kanban column order.
    The optional operational flags are opaque pass-through values.
    """

    model_config = ConfigDict(populate_by_name=True)

    project_name: str = Field(default="Backlog", alias="projectName")
    statuses: list[str] = Field(default_factory=lambda: list(DEFAULT_STATUSES))
    labels: list[str] = Field(default_factory=list)
    milestones: list[str] = Field(default_factory=list)
    default_status: str | None = Field(default=None, alias="defaultStatus")
    date_format: str = Field(default="YYYY-MM-DD", alias="dateFormat")

    default_assignee: str | None = Field(default=None, alias="defaultAssignee")
    default_reporter: str | None = Field(default=None, alias="defaultReporter")
    max_column_width: int | None = Field(default=None, alias="maxColumnWidth")
    task_resolution_strategy: Literal["most_recent", "most_progressed"] | None = Field(
        default=None, alias="taskResolutionStrategy"
    )
    default_editor: str | None = Field(default=None, alias="defaultEditor")
    auto_open_browser: bool | None = Field(default=None, alias="autoOpenBrowser")
    default_port: int | None = Field(default=None, alias="defaultPort")
    remote_operations: bool | None = Field(default=None, alias="remoteOperations")
    auto_commit: bool | None = Field(default=None, alias="autoCommit")
    zero_padded_ids: int | None = Field(default=None, alias="zeroPaddedIds")
    timezone_preference: str | None = Field(default=None, alias="timezonePreference")
    include_date_time_in_dates: bool | None = Field(
        default=None, alias="includeDateTimeInDates"
    )
    bypass_git_hooks: bool | None = Field(default=None, alias="bypassGitHooks")
    check_active_branches: bool | None = Field(default=None, alias="checkActiveBranches")
    active_branch_days: int | None = Field(default=None, alias="activeBranchDays")
    on_status_change: str | None = Field(default=None, alias="onStatusChange")

    @property
    def effective_default_status(self) -> str:
        """Return the status assigned to new tasks without a valid status."""
        if self.default_status:
            return self.default_status
        return self.statuses[0] if self.statuses else DEFAULT_STATUSES[0]


# config.yml key -> (attribute name, value kind)
_CONFIG_KEYS: dict[str, tuple[str, str]] = {
    "project_name": ("project_name", "str"),
    "default_status": ("default_status", "str"),
    "statuses": ("statuses", "list"),
    "labels": ("labels", "list"),
    "milestones": ("milestones", "list"),
    "date_format": ("date_format", "str"),
    "default_assignee": ("default_assignee", "str"),
    "default_reporter": ("default_reporter", "str"),
    "default_editor": ("default_editor", "str"),
    "max_column_width": ("max_column_width", "int"),
    "task_resolution_strategy": ("task_resolution_strategy", "str"),
    "auto_open_browser": ("auto_open_browser", "bool"),
    "default_port": ("default_port", "int"),
    "remote_operations": ("remote_operations", "bool"),
    "auto_commit": ("auto_commit", "bool"),
    "zero_padded_ids": ("zero_padded_ids", "int"),
    "timezone_preference": ("timezone_preference", "str"),
    "include_date_time_in_dates": ("include_date_time_in_dates", "bool"),
    "bypass_git_hooks": ("bypass_git_hooks", "bool"),
    "check_active_branches": ("check_active_branches", "bool"),
    "active_branch_days": ("active_branch_days", "int"),
    "on_status_change": ("on_status_change", "str"),
}

# Keys always written, followed by optional keys in this order
_SERIALIZE_ORDER = [
    "project_name",
    "default_status",
    "statuses",
    "labels",
    "milestones",
    "date_format",
    "default_assignee",
    "default_reporter",
    "default_editor",
    "max_column_width",
    "task_resolution_strategy",
    "auto_commit",
    "zero_padded_ids",
    "auto_open_browser",
    "default_port",
    "remote_operations",
    "timezone_preference",
    "include_date_time_in_dates",
    "bypass_git_hooks",
    "check_active_branches",
    "active_branch_days",
    "on_status_change",
]


def _parse_value(kind: str, value: str) -> str | int | bool | list[str] | None:
    """Convert a raw value to the kind declared for its key, or None if invalid."""
    if kind == "list":
        if value.startswith("[") and value.endswith("]"):
            return split_list_value(value)
        return None
    if kind == "int":
        try:
            return int(unquote(value))
        except ValueError:
            return None
    if kind == "bool":
        return unquote(value).lower() == "true"
    return unquote(value)


def parse_backlog_config(content: str, defaults: ConfigDefaults | None = None) -> BacklogConfig:
    """Parse config.yml content.

    Blank lines, comment lines and unknown keys are skipped. Values that
    cannot be converted to their key's kind are ignored. Missing required
    fields fall back to the given defaults.

    Args:
        content: Text of the config file.
        defaults: Fallback values (ConfigDefaults() when omitted).

    Returns:
        BacklogConfig with defaults applied.
    """
    defaults = defaults or ConfigDefaults()
    values: dict[str, object] = {}

    for line in content.replace("\r\n", "\n").split("\n"):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        key, sep, raw_value = trimmed.partition(":")
        if not sep:
            continue
        known = _CONFIG_KEYS.get(key.strip())
        if known is None:
            continue

        attr, kind = known
        parsed = _parse_value(kind, raw_value.strip())
        if parsed is None:
            logger.debug("Ignoring invalid value for config key %s: %r", key, raw_value)
            continue
        values[attr] = parsed

    if values.get("task_resolution_strategy") not in (None, "most_recent", "most_progressed"):
        logger.debug("Ignoring unknown task_resolution_strategy %r", values["task_resolution_strategy"])
        values.pop("task_resolution_strategy")

    statuses = values.get("statuses") or list(defaults.statuses)
    values["statuses"] = statuses
    values["project_name"] = values.get("project_name") or defaults.project_name
    values["date_format"] = values.get("date_format") or defaults.date_format
    values["default_status"] = values.get("default_status") or (
        statuses[0] if statuses else DEFAULT_STATUSES[0]
    )
    return BacklogConfig(**values)


def serialize_backlog_config(config: BacklogConfig) -> str:
    """Serialize a BacklogConfig to config.yml text.

    Only keys with a defined value are written, in a stable order.
    Strings are double-quoted and lists use bracketed array syntax.

    Args:
        config: Configuration to serialize.

    Returns:
        The config file text, ending with a newline.
    """
    lines: list[str] = []
    for key in _SERIALIZE_ORDER:
        attr, kind = _CONFIG_KEYS[key]
        value = getattr(config, attr)
        if value is None:
            continue
        if kind == "list":
            lines.append(f"{key}: {format_list_value(value, quoted=True)}")
        elif kind == "bool":
            lines.append(f"{key}: {'true' if value else 'false'}")
        elif kind == "int":
            lines.append(f"{key}: {value}")
        else:
            lines.append(f"{key}: {quote(value)}")
    return "\n".join(lines) + "\n"

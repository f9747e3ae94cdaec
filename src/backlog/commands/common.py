"""Helpers shared by the CLI commands.

Each command resolves the project root, builds a BacklogStore on the
local disk and runs one coroutine against it. Store failures are turned
into an error message and exit code 1.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

import typer

from backlog.services import (
    BacklogError,
    BacklogStore,
    Diagnostic,
    LocalStorageAdapter,
    NotAProjectError,
)
from backlog.utils import get_project_root, print_error, print_warning

logger = logging.getLogger(__name__)

T = TypeVar("T")


def resolve_root(root: Path | None) -> Path:
    """Return the explicit root, or the nearest directory holding backlog/config.yml."""
    if root is not None:
        return root.resolve()
    return get_project_root()


def report_diagnostic(diagnostic: Diagnostic) -> None:
    """Show a store diagnostic as a warning."""
    print_warning(diagnostic.message)


def create_store(root: Path | None) -> BacklogStore:
    """Build a store for the local disk rooted at the resolved project root."""
    return BacklogStore(
        project_root=str(resolve_root(root)),
        adapter=LocalStorageAdapter(),
        on_diagnostic=report_diagnostic,
    )


def run_with_store(root: Path | None, operation: Callable[[BacklogStore], Awaitable[T]]) -> T:
    """Initialise a store and run an operation against it.

    Args:
        root: Explicit project root, or None to search upwards from the cwd.
        operation: Coroutine function receiving the initialised store.

    Returns:
        Whatever the operation returns.

    Raises:
        typer.Exit: With code 1 if the project is missing or an I/O error occurs.
    """
    store = create_store(root)

    async def _main() -> T:
        await store.initialize()
        return await operation(store)

    try:
        return asyncio.run(_main())
    except NotAProjectError as e:
        print_error(f"{e}")
        print_error("Run 'backlog init' to create a project.")
        raise typer.Exit(1) from e
    except (BacklogError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        print_error(f"{e}")
        raise typer.Exit(1) from e


def split_csv(value: str | None) -> list[str]:
    """Split a comma-separated option value, dropping empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]

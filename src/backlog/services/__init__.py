"""Backlog services."""

from backlog.services.adapters import InMemoryStorageAdapter, LocalStorageAdapter, StorageAdapter
from backlog.services.store import (
    BacklogError,
    BacklogStore,
    Diagnostic,
    NotAProjectError,
    NotInitializedError,
)

__all__ = [
    "BacklogError",
    "BacklogStore",
    "Diagnostic",
    "InMemoryStorageAdapter",
    "LocalStorageAdapter",
    "NotAProjectError",
    "NotInitializedError",
    "StorageAdapter",
]

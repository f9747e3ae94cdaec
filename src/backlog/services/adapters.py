"""Storage adapters consumed by the backlog store.

The store never touches the filesystem directly. It talks to an object
implementing StorageAdapter, so the same logic runs against local disk,
an in-memory tree in tests, or a backend supplied by an embedding host.
"""

import asyncio
import logging
import posixpath
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, PrivateAttr

from backlog.utils.files import delete_file, ensure_dir, list_dir, read_file, write_file

logger = logging.getLogger(__name__)


@runtime_checkable
class StorageAdapter(Protocol):
    """Narrow I/O capability used by BacklogStore.

    All I/O methods are coroutines and may raise OSError. Path helpers
    are synchronous and pure.
    """

    async def exists(self, path: str) -> bool: ...

    async def read_file(self, path: str) -> str: ...

    async def write_file(self, path: str, content: str) -> None: ...

    async def create_dir(self, path: str, recursive: bool = False) -> None: ...

    async def delete_file(self, path: str) -> None: ...

    async def read_dir(self, path: str) -> list[str]: ...

    async def is_directory(self, path: str) -> bool: ...

    def join(self, *parts: str) -> str: ...

    def dirname(self, path: str) -> str: ...

    def basename(self, path: str) -> str: ...


class LocalStorageAdapter(BaseModel):
    """Storage adapter for the local disk.

    Blocking pathlib calls run in a worker thread so the event loop is
    never blocked on disk I/O.
    """

    encoding: str = "utf-8"

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(Path(path).exists)

    async def read_file(self, path: str) -> str:
        return await asyncio.to_thread(read_file, path, self.encoding)

    async def write_file(self, path: str, content: str) -> None:
        await asyncio.to_thread(write_file, path, content, self.encoding)

    async def create_dir(self, path: str, recursive: bool = False) -> None:
        await asyncio.to_thread(ensure_dir, path, recursive)

    async def delete_file(self, path: str) -> None:
        await asyncio.to_thread(delete_file, path)

    async def read_dir(self, path: str) -> list[str]:
        return await asyncio.to_thread(list_dir, path)

    async def is_directory(self, path: str) -> bool:
        return await asyncio.to_thread(Path(path).is_dir)

    def join(self, *parts: str) -> str:
        return str(Path(*parts))

    def dirname(self, path: str) -> str:
        return str(Path(path).parent)

    def basename(self, path: str) -> str:
        return Path(path).name


class InMemoryStorageAdapter(BaseModel):
    """Storage adapter backed by a dict of POSIX paths to file contents.

    Directories exist implicitly when a file lives below them, or
    explicitly once created with create_dir. Every read, write and delete
    is recorded so tests can assert on the I/O a store performed.

    Attributes:
        files: Mapping of file path to content.
        directories: Explicitly created directories.
    """

    files: dict[str, str] = {}
    directories: set[str] = set()

    _reads: list[str] = PrivateAttr(default_factory=list)
    _writes: list[str] = PrivateAttr(default_factory=list)
    _deletes: list[str] = PrivateAttr(default_factory=list)

    @property
    def reads(self) -> list[str]:
        """Paths read, in order."""
        return list(self._reads)

    @property
    def writes(self) -> list[str]:
        """Paths written, in order."""
        return list(self._writes)

    @property
    def deletes(self) -> list[str]:
        """Paths deleted, in order."""
        return list(self._deletes)

    def _is_dir(self, path: str) -> bool:
        path = posixpath.normpath(path)
        if path in self.directories:
            return True
        prefix = path.rstrip("/") + "/"
        return any(f.startswith(prefix) for f in self.files) or any(
            d.startswith(prefix) for d in self.directories
        )

    async def exists(self, path: str) -> bool:
        return posixpath.normpath(path) in self.files or self._is_dir(path)

    async def read_file(self, path: str) -> str:
        path = posixpath.normpath(path)
        self._reads.append(path)
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    async def write_file(self, path: str, content: str) -> None:
        path = posixpath.normpath(path)
        if self._is_dir(path):
            raise IsADirectoryError(path)
        self.files[path] = content
        self._writes.append(path)

    async def create_dir(self, path: str, recursive: bool = False) -> None:
        path = posixpath.normpath(path)
        parent = posixpath.dirname(path)
        if not recursive and parent and parent != path and not self._is_dir(parent):
            raise FileNotFoundError(parent)
        while path and path not in ("/", "."):
            self.directories.add(path)
            if not recursive:
                break
            path = posixpath.dirname(path)

    async def delete_file(self, path: str) -> None:
        path = posixpath.normpath(path)
        if path not in self.files:
            raise FileNotFoundError(path)
        del self.files[path]
        self._deletes.append(path)

    async def read_dir(self, path: str) -> list[str]:
        path = posixpath.normpath(path)
        if not self._is_dir(path):
            raise FileNotFoundError(path)
        prefix = path.rstrip("/") + "/"
        names = set()
        for candidate in list(self.files) + list(self.directories):
            if candidate.startswith(prefix):
                names.add(candidate[len(prefix) :].split("/", 1)[0])
        return sorted(names)

    async def is_directory(self, path: str) -> bool:
        return self._is_dir(path)

    def join(self, *parts: str) -> str:
        return posixpath.join(*parts)

    def dirname(self, path: str) -> str:
        return posixpath.dirname(path)

    def basename(self, path: str) -> str:
        return posixpath.basename(path)

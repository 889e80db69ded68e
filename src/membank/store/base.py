"""Repository protocol and shared types."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class Found:
    """A lookup that produced content."""

    content: str


@dataclass(frozen=True)
class NotFound:
    """A lookup that produced nothing. Not an error."""

    def __bool__(self) -> bool:
        return False


NOT_FOUND = NotFound()

Lookup = Found | NotFound


@dataclass(frozen=True)
class VersionInfo:
    """Metadata for one stored version. Never carries content."""

    version_id: str
    timestamp: datetime
    size: int


@runtime_checkable
class FileRepository(Protocol):
    """Protocol shared by the filesystem store and its cache."""

    async def list_projects(self) -> list[str]: ...

    async def list_files(self, project: str) -> list[str]: ...

    async def load(self, project: str, file_name: str) -> Lookup: ...

    async def create(self, project: str, file_name: str, content: str) -> Lookup:
        """Write a new file. NOT_FOUND if it already exists."""
        ...

    async def update(
        self, project: str, file_name: str, content: str, keep_last: int | None = None
    ) -> Lookup:
        """Snapshot the current content as a version, then overwrite."""
        ...

    async def append(self, project: str, file_name: str, content: str) -> None: ...

    async def log(self, project: str, file_name: str, content: str) -> None: ...

    async def list_versions(self, project: str, file_name: str) -> list[VersionInfo]: ...

    async def get_version(self, project: str, file_name: str, version_id: str) -> Lookup: ...

    async def revert(self, project: str, file_name: str, version_id: str) -> Lookup: ...

    async def cleanup(
        self, project: str, file_name: str, keep_last: int | None = None
    ) -> None: ...

"""Filesystem-backed project/file store with snapshot versioning.

Plain files are the source of truth. The current content of a file lives at
`root/<project>/<file>`; every update first copies the previous content to
`root/<project>/<file>.<YYYYMMDDTHHMMSS>Z`, and at most `keep_last` such
snapshots survive per file.

There is no locking. Two updates of the same file within one second mint the
same version id: the later snapshot overwrites the earlier one and the last
content write wins.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from membank.store.base import NOT_FOUND, Found, Lookup, VersionInfo
from membank.store.versions import (
    is_version_artifact,
    make_version_id,
    parse_version_timestamp,
    version_pattern,
)

logger = logging.getLogger(__name__)

DEFAULT_KEEP_LAST = 10

LOG_DELIMITER = "=================="


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _write(path: Path, content: str) -> None:
    path.write_text(content, encoding="utf-8")


def _append(path: Path, content: str) -> None:
    """Append to `path`, creating it with `content` alone when it is new."""
    entry = f"\n{content}" if path.exists() else content
    with path.open("a", encoding="utf-8") as f:
        f.write(entry)


def _append_raw(path: Path, content: str) -> None:
    with path.open("a", encoding="utf-8") as f:
        f.write(content)


class FsFileRepository:
    """Read/write access to project files and their versions."""

    def __init__(
        self,
        root: Path,
        keep_last: int = DEFAULT_KEEP_LAST,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if keep_last < 0:
            raise ValueError("keep_last must be >= 0")
        self.root = root
        self.keep_last = keep_last
        self._clock = clock or _utcnow

    def _project_dir(self, project: str) -> Path:
        return self.root / project

    # ── Listing ──────────────────────────────────────────────

    async def list_projects(self) -> list[str]:
        """Names of all project directories under the root."""

        def scan() -> list[str]:
            if not self.root.is_dir():
                return []
            return sorted(p.name for p in self.root.iterdir() if p.is_dir())

        return await asyncio.to_thread(scan)

    async def list_files(self, project: str) -> list[str]:
        """Current file names in a project. Version artifacts are excluded."""
        project_dir = self._project_dir(project)

        def scan() -> list[str]:
            if not project_dir.is_dir():
                return []
            return sorted(
                p.name
                for p in project_dir.iterdir()
                if p.is_file() and not is_version_artifact(p.name)
            )

        return await asyncio.to_thread(scan)

    # ── Current content ──────────────────────────────────────

    async def load(self, project: str, file_name: str) -> Lookup:
        path = self._project_dir(project) / file_name
        if not await asyncio.to_thread(path.is_file):
            return NOT_FOUND
        return Found(await asyncio.to_thread(_read, path))

    async def create(self, project: str, file_name: str, content: str) -> Lookup:
        """Create a new file. Never overwrites: NOT_FOUND if it already exists."""
        project_dir = self._project_dir(project)
        await asyncio.to_thread(project_dir.mkdir, parents=True, exist_ok=True)

        path = project_dir / file_name
        if await asyncio.to_thread(path.exists):
            logger.info("Refusing to overwrite %s/%s", project, file_name)
            return NOT_FOUND

        await asyncio.to_thread(_write, path, content)
        logger.info("Created %s/%s (%d chars)", project, file_name, len(content))
        return Found(content)

    async def update(
        self, project: str, file_name: str, content: str, keep_last: int | None = None
    ) -> Lookup:
        """Snapshot the current content as a new version, overwrite, then prune.

        Returns NOT_FOUND if the file does not exist. If the snapshot is written
        but the overwrite fails, the snapshot stays on disk.
        """
        project_dir = self._project_dir(project)
        path = project_dir / file_name
        if not await asyncio.to_thread(path.is_file):
            return NOT_FOUND

        previous = await asyncio.to_thread(_read, path)
        version_id = make_version_id(file_name, self._clock())
        await asyncio.to_thread(_write, project_dir / version_id, previous)
        await asyncio.to_thread(_write, path, content)
        logger.info("Updated %s/%s (snapshot %s)", project, file_name, version_id)

        await self.cleanup(project, file_name, keep_last)
        return Found(content)

    async def append(self, project: str, file_name: str, content: str) -> None:
        """Append a line of content. Creates the file if needed; no version is kept."""
        project_dir = self._project_dir(project)
        await asyncio.to_thread(project_dir.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(_append, project_dir / file_name, content)

    async def log(self, project: str, file_name: str, content: str) -> None:
        """Append a timestamped, delimited log block. No version is kept."""
        project_dir = self._project_dir(project)
        await asyncio.to_thread(project_dir.mkdir, parents=True, exist_ok=True)
        ts = self._clock().astimezone(timezone.utc).isoformat(timespec="milliseconds")
        ts = ts.replace("+00:00", "Z")
        entry = f"\n=== LOG ENTRY {ts} ===\n{content}\n{LOG_DELIMITER}"
        await asyncio.to_thread(_append_raw, project_dir / file_name, entry)

    # ── Versions ─────────────────────────────────────────────

    def _scan_versions(self, project: str, file_name: str) -> list[VersionInfo]:
        """Stat every version of `file_name`, newest first."""
        project_dir = self._project_dir(project)
        if not project_dir.is_dir():
            return []
        pattern = version_pattern(file_name)
        versions = [
            VersionInfo(
                version_id=p.name,
                timestamp=parse_version_timestamp(p.name),
                size=p.stat().st_size,
            )
            for p in project_dir.iterdir()
            if pattern.match(p.name)
        ]
        versions.sort(key=lambda v: v.timestamp, reverse=True)
        return versions

    async def list_versions(self, project: str, file_name: str) -> list[VersionInfo]:
        return await asyncio.to_thread(self._scan_versions, project, file_name)

    async def get_version(self, project: str, file_name: str, version_id: str) -> Lookup:
        """Content of one version, or NOT_FOUND if it is missing or not a version of this file."""
        if not version_pattern(file_name).match(version_id):
            return NOT_FOUND
        path = self._project_dir(project) / version_id
        if not await asyncio.to_thread(path.is_file):
            return NOT_FOUND
        return Found(await asyncio.to_thread(_read, path))

    async def revert(self, project: str, file_name: str, version_id: str) -> Lookup:
        """Make a past version current again through the regular update path.

        The content being replaced is itself snapshotted, so a revert never
        loses state.
        """
        version = await self.get_version(project, file_name, version_id)
        if not isinstance(version, Found):
            return NOT_FOUND
        logger.info("Reverting %s/%s to %s", project, file_name, version_id)
        return await self.update(project, file_name, version.content)

    async def cleanup(
        self, project: str, file_name: str, keep_last: int | None = None
    ) -> None:
        """Delete all but the `keep_last` newest versions of a file. Idempotent."""
        keep = self.keep_last if keep_last is None else keep_last
        if keep < 0:
            raise ValueError("keep_last must be >= 0")

        project_dir = self._project_dir(project)

        def prune() -> int:
            stale = self._scan_versions(project, file_name)[keep:]
            for v in stale:
                (project_dir / v.version_id).unlink(missing_ok=True)
            return len(stale)

        removed = await asyncio.to_thread(prune)
        if removed:
            logger.info(
                "Pruned %d old version(s) of %s/%s (keep_last=%d)",
                removed,
                project,
                file_name,
                keep,
            )

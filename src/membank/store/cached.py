"""Read-through TTL cache in front of a FileRepository.

Reads of current content and of versions are served from an in-memory map
while fresh. Every mutation evicts the affected keys first and then delegates
to the wrapped repository; nothing is cached on the write path, so the next
read always goes back to disk. Expired entries are dropped lazily.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from membank.store.base import NOT_FOUND, FileRepository, Found, Lookup, VersionInfo
from membank.store.versions import version_pattern

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30 * 60


@dataclass
class _CacheEntry:
    content: str
    stored_at: float


class CachedFileRepository:
    """FileRepository wrapper with per-instance TTL caching."""

    def __init__(
        self,
        repository: FileRepository,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        self.repository = repository
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._cache: dict[str, _CacheEntry] = {}

    # ── Keys & eviction ──────────────────────────────────────

    @staticmethod
    def _key(project: str, name: str) -> str:
        return f"{project}/{name}"

    def _get_fresh(self, key: str) -> str | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self.ttl_seconds:
            del self._cache[key]
            logger.debug("cache expired key=%s", key)
            return None
        logger.debug("cache hit key=%s", key)
        return entry.content

    def _store(self, key: str, result: Lookup) -> None:
        if isinstance(result, Found):
            self._cache[key] = _CacheEntry(result.content, self._clock())
        else:
            self._cache.pop(key, None)

    def _invalidate(self, project: str, name: str) -> None:
        self._cache.pop(self._key(project, name), None)

    def _invalidate_project(self, project: str) -> None:
        prefix = f"{project}/"
        for key in [k for k in self._cache if k.startswith(prefix)]:
            del self._cache[key]
        logger.debug("cache evicted project=%s", project)

    def _invalidate_versions(self, project: str, file_name: str) -> None:
        pattern = version_pattern(file_name)
        prefix = f"{project}/"
        for key in [
            k for k in self._cache if k.startswith(prefix) and pattern.match(k[len(prefix):])
        ]:
            del self._cache[key]

    def clear(self) -> None:
        """Drop every cached entry."""
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

    # ── Reads ────────────────────────────────────────────────

    async def list_projects(self) -> list[str]:
        return await self.repository.list_projects()

    async def list_files(self, project: str) -> list[str]:
        """Never cached. Evicts the whole project, since files may have changed on disk."""
        self._invalidate_project(project)
        return await self.repository.list_files(project)

    async def load(self, project: str, file_name: str) -> Lookup:
        key = self._key(project, file_name)
        content = self._get_fresh(key)
        if content is not None:
            return Found(content)

        logger.debug("cache miss key=%s", key)
        result = await self.repository.load(project, file_name)
        self._store(key, result)
        return result

    async def list_versions(self, project: str, file_name: str) -> list[VersionInfo]:
        return await self.repository.list_versions(project, file_name)

    async def get_version(self, project: str, file_name: str, version_id: str) -> Lookup:
        # Keys carry no file name, so another file's cached version must not answer
        if not version_pattern(file_name).match(version_id):
            return NOT_FOUND

        key = self._key(project, version_id)
        content = self._get_fresh(key)
        if content is not None:
            return Found(content)

        logger.debug("cache miss key=%s", key)
        result = await self.repository.get_version(project, file_name, version_id)
        self._store(key, result)
        return result

    # ── Writes ───────────────────────────────────────────────

    async def create(self, project: str, file_name: str, content: str) -> Lookup:
        self._invalidate(project, file_name)
        return await self.repository.create(project, file_name, content)

    async def update(
        self, project: str, file_name: str, content: str, keep_last: int | None = None
    ) -> Lookup:
        self._invalidate(project, file_name)
        self._invalidate_versions(project, file_name)
        return await self.repository.update(project, file_name, content, keep_last)

    async def append(self, project: str, file_name: str, content: str) -> None:
        self._invalidate(project, file_name)
        await self.repository.append(project, file_name, content)

    async def log(self, project: str, file_name: str, content: str) -> None:
        self._invalidate(project, file_name)
        await self.repository.log(project, file_name, content)

    async def revert(self, project: str, file_name: str, version_id: str) -> Lookup:
        self._invalidate(project, file_name)
        self._invalidate(project, version_id)
        self._invalidate_versions(project, file_name)
        return await self.repository.revert(project, file_name, version_id)

    async def cleanup(
        self, project: str, file_name: str, keep_last: int | None = None
    ) -> None:
        self._invalidate_project(project)
        self._invalidate_versions(project, file_name)
        await self.repository.cleanup(project, file_name, keep_last)

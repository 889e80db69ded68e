"""Versioned project/file store and its read cache.

Layout:
    <root>/
    ├── demo/                              # one directory per project
    │   ├── notes.md                       # current content
    │   ├── notes.md.20261019T101500Z      # snapshots taken before each update
    │   └── notes.md.20261019T093000Z      # (10 newest kept per file)
    └── other-project/
"""

from membank.store.base import NOT_FOUND, FileRepository, Found, Lookup, NotFound, VersionInfo
from membank.store.cached import CachedFileRepository
from membank.store.fs import FsFileRepository

__all__ = [
    "NOT_FOUND",
    "CachedFileRepository",
    "FileRepository",
    "Found",
    "FsFileRepository",
    "Lookup",
    "NotFound",
    "VersionInfo",
]

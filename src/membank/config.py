"""Configuration loading from environment variables and membank.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

from membank.store import CachedFileRepository, FileRepository, FsFileRepository

_DEFAULT_ROOT_DIR = Path.home() / ".membank" / "projects"
_CONFIG_FILENAME = "membank.toml"


@dataclass
class StoreConfig:
    """Filesystem store configuration."""

    keep_last: int = 10


@dataclass
class CacheConfig:
    """Read cache configuration."""

    enabled: bool = True
    ttl_seconds: float = 30 * 60


@dataclass
class MembankConfig:
    """Top-level membank configuration."""

    root_dir: Path = _DEFAULT_ROOT_DIR
    store: StoreConfig = field(default_factory=StoreConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    log_level: str = "INFO"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off", "")


def load_config(config_path: Path | None = None) -> MembankConfig:
    """Load configuration from environment variables and optional membank.toml.

    Priority: environment variables > membank.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.membank/
        for candidate in [Path.cwd() / _CONFIG_FILENAME, Path.home() / ".membank" / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    store_data = file_data.get("store", {})
    cache_data = file_data.get("cache", {})

    return MembankConfig(
        root_dir=Path(
            os.getenv("MEMBANK_ROOT", file_data.get("root_dir", str(_DEFAULT_ROOT_DIR)))
        ).expanduser(),
        store=StoreConfig(
            keep_last=int(os.getenv("MEMBANK_KEEP_LAST", store_data.get("keep_last", 10))),
        ),
        cache=CacheConfig(
            enabled=_env_bool("MEMBANK_CACHE", bool(cache_data.get("enabled", True))),
            ttl_seconds=float(
                os.getenv("MEMBANK_CACHE_TTL", cache_data.get("ttl_seconds", 30 * 60))
            ),
        ),
        log_level=os.getenv("MEMBANK_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )


def build_repository(config: MembankConfig) -> FileRepository:
    """Wire the filesystem store, wrapped in the read cache unless disabled."""
    repository: FileRepository = FsFileRepository(
        config.root_dir, keep_last=config.store.keep_last
    )
    if config.cache.enabled:
        repository = CachedFileRepository(repository, ttl_seconds=config.cache.ttl_seconds)
    return repository

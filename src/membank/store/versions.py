"""Version id naming: `<file>.<YYYYMMDDTHHMMSS>Z`, UTC, second precision."""

from __future__ import annotations

import re
from datetime import datetime, timezone

VERSION_SUFFIX = re.compile(r"\.\d{8}T\d{6}Z$")

_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S"


def is_version_artifact(name: str) -> bool:
    """True for any name carrying a version suffix."""
    return VERSION_SUFFIX.search(name) is not None


def version_pattern(file_name: str) -> re.Pattern[str]:
    """Pattern matching the versions of exactly one file."""
    return re.compile(rf"^{re.escape(file_name)}\.\d{{8}}T\d{{6}}Z$")


def make_version_id(file_name: str, now: datetime) -> str:
    stamp = now.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT)
    return f"{file_name}.{stamp}Z"


def parse_version_timestamp(version_id: str) -> datetime:
    """Decode the trailing timestamp of a version id as an aware UTC datetime.

    The segment is sliced at fixed offsets into an ISO-8601 string, so
    callers must have matched the id against a version pattern first.
    """
    ts = version_id[-16:-1]
    iso = f"{ts[0:4]}-{ts[4:6]}-{ts[6:8]}T{ts[9:11]}:{ts[11:13]}:{ts[13:15]}+00:00"
    return datetime.fromisoformat(iso)

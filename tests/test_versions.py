"""Tests for version id naming."""

from datetime import datetime, timedelta, timezone

from membank.store.versions import (
    is_version_artifact,
    make_version_id,
    parse_version_timestamp,
    version_pattern,
)


class TestVersionIds:
    def test_make_version_id(self):
        now = datetime(2026, 10, 19, 9, 5, 7, 123456, tzinfo=timezone.utc)
        assert make_version_id("notes.md", now) == "notes.md.20261019T090507Z"

    def test_make_version_id_converts_to_utc(self):
        tz = timezone(timedelta(hours=8))
        now = datetime(2026, 10, 19, 17, 0, 0, tzinfo=tz)
        assert make_version_id("a", now) == "a.20261019T090000Z"

    def test_parse_round_trip(self):
        ts = parse_version_timestamp("notes.md.20261019T090507Z")
        assert ts == datetime(2026, 10, 19, 9, 5, 7, tzinfo=timezone.utc)
        assert ts.utcoffset() == timedelta(0)

    def test_lexicographic_is_chronological(self):
        ids = [
            make_version_id("f", datetime(2026, 1, 2, tzinfo=timezone.utc)),
            make_version_id("f", datetime(2025, 12, 31, 23, 59, 59, tzinfo=timezone.utc)),
            make_version_id("f", datetime(2026, 1, 1, 0, 0, 1, tzinfo=timezone.utc)),
        ]
        assert sorted(ids) == sorted(ids, key=parse_version_timestamp)


class TestMatching:
    def test_artifact_detection(self):
        assert is_version_artifact("notes.md.20261019T090507Z")
        assert not is_version_artifact("notes.md")
        assert not is_version_artifact("notes.md.20261019T090507")
        assert not is_version_artifact("notes.md.20261019T090507000Z")

    def test_pattern_is_exact(self):
        pattern = version_pattern("notes.md")
        assert pattern.match("notes.md.20261019T090507Z")
        assert not pattern.match("xnotes.md.20261019T090507Z")
        assert not pattern.match("notes.md.bak.20261019T090507Z")
        assert not pattern.match("notesxmd.20261019T090507Z")

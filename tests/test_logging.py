"""Tests for the failure audit log.

The logger records one structured entry per classified failure, so a
caller can see which primitive failed, with what host message, and
what it was classified as.
"""

from pathlib import Path

import pytest

from py_strictfs.errors import ErrorKind, FilesystemError
from py_strictfs.filesystem import Filesystem
from py_strictfs.logging import LogEntry, Logger, LogLevel


class TestLogLevel:
    """Verify log level ordering."""

    def test_levels_are_ordered(self) -> None:
        """DEBUG < INFO < WARNING < ERROR."""
        assert LogLevel.DEBUG < LogLevel.INFO
        assert LogLevel.INFO < LogLevel.WARNING
        assert LogLevel.WARNING < LogLevel.ERROR


class TestLogEntry:
    """Verify log entry structure."""

    def test_entry_has_fields(self) -> None:
        """A log entry should store level, message, source, and kind."""
        entry = LogEntry(
            level=LogLevel.DEBUG,
            message="unlink(/x): No such file or directory",
            source="unlink",
            kind=ErrorKind.DOES_NOT_EXIST,
        )
        assert entry.level is LogLevel.DEBUG
        assert entry.message == "unlink(/x): No such file or directory"
        assert entry.source == "unlink"
        assert entry.kind == "does_not_exist"

    def test_entry_str(self) -> None:
        """String representation should include level, message, and kind."""
        entry = LogEntry(
            level=LogLevel.WARNING,
            message="read(): Input/output error",
            source="read",
            kind="unknown_error",
        )
        assert str(entry) == "[WARNING] read: read(): Input/output error (unknown_error)"

    def test_entry_str_without_kind(self) -> None:
        """An entry with no kind should omit the suffix."""
        entry = LogEntry(level=LogLevel.INFO, message="m", source="s")
        assert str(entry) == "[INFO] s: m"

    def test_entry_is_frozen(self) -> None:
        """Log records are immutable."""
        entry = LogEntry(level=LogLevel.INFO, message="m", source="s")
        with pytest.raises(AttributeError):
            entry.message = "other"  # type: ignore[misc]


class TestLogger:
    """Verify the logger."""

    def test_log_stores_entries(self) -> None:
        """Logged entries should be retrievable."""
        logger = Logger()
        logger.log(LogLevel.INFO, "failed", source="rmdir")
        assert len(logger.entries) == 1
        assert logger.entries[0].message == "failed"

    def test_entries_are_ordered(self) -> None:
        """Entries should be in chronological order."""
        logger = Logger()
        logger.log(LogLevel.INFO, "first", source="test")
        logger.log(LogLevel.INFO, "second", source="test")
        assert logger.entries[0].message == "first"
        assert logger.entries[1].message == "second"

    def test_entries_returns_copy(self) -> None:
        """Mutating the returned list should not affect the log."""
        logger = Logger()
        logger.log(LogLevel.INFO, "kept", source="test")
        logger.entries.clear()
        assert len(logger) == 1

    def test_min_level_drops_lower_entries(self) -> None:
        """Entries below the logger's minimum level are not stored."""
        logger = Logger(min_level=LogLevel.WARNING)
        logger.log(LogLevel.DEBUG, "noise", source="unlink")
        logger.log(LogLevel.ERROR, "defect", source="unlink")
        assert [e.message for e in logger.entries] == ["defect"]
        assert logger.min_level is LogLevel.WARNING

    def test_filter_by_level(self) -> None:
        """Filtering should return only entries at or above the level."""
        logger = Logger()
        logger.log(LogLevel.DEBUG, "debug msg", source="test")
        logger.log(LogLevel.INFO, "info msg", source="test")
        logger.log(LogLevel.ERROR, "error msg", source="test")
        warnings_and_above = logger.filter(min_level=LogLevel.WARNING)
        assert len(warnings_and_above) == 1
        assert warnings_and_above[0].level is LogLevel.ERROR

    def test_filter_by_source(self) -> None:
        """Filtering by source should return matching entries."""
        logger = Logger()
        logger.log(LogLevel.INFO, "unlink event", source="unlink")
        logger.log(LogLevel.INFO, "rmdir event", source="rmdir")
        unlink_logs = logger.filter(source="unlink")
        assert len(unlink_logs) == 1
        assert unlink_logs[0].source == "unlink"

    def test_clear(self) -> None:
        """Clearing should remove all entries."""
        logger = Logger()
        logger.log(LogLevel.INFO, "test", source="test")
        logger.clear()
        assert len(logger.entries) == 0


class TestFilesystemLogging:
    """Verify that the facade logs compound-operation failures."""

    def test_purge_logs_each_classified_step(self, tmp_path: Path) -> None:
        """A recursive purge logs the failures it recovers from."""
        target = tmp_path / "d"
        target.mkdir()
        (target / "f").write_text("x")
        logger = Logger()
        Filesystem(logger=logger).purge(str(target), recursive=True)
        kinds = [(e.source, e.kind) for e in logger.entries]
        assert kinds == [
            ("unlink", ErrorKind.IS_A_DIRECTORY),
            ("rmdir", ErrorKind.DIRECTORY_NOT_EMPTY),
        ]

    def test_unknown_errors_are_findable(self, tmp_path: Path) -> None:
        """Table maintenance: unclassified messages show up at WARNING."""
        logger = Logger()
        fs = Filesystem(logger=logger)
        with pytest.raises(FilesystemError):
            fs.chown(str(tmp_path), "no-such-user-xyzzy")
        (entry,) = logger.filter(min_level=LogLevel.WARNING)
        assert entry.kind == ErrorKind.UNKNOWN_ERROR
        assert "Unable to find uid" in entry.message

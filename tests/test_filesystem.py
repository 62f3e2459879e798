"""Tests for the Filesystem facade.

Covers the derived attribute accessors (one stat, one field), the
strict pass-through primitives, and how the facade wires its config
into the interceptor and failure log.
"""

import errno
import os
from pathlib import Path
from typing import IO, Any

import pytest

from py_strictfs.config import FilesystemConfig
from py_strictfs.errors import ErrorKind, FilesystemError
from py_strictfs.failures import report_failure
from py_strictfs.filesystem import Filesystem
from py_strictfs.handles import LockOperation, SeekWhence, StatRecord
from py_strictfs.logging import Logger, LogLevel
from py_strictfs.primitives import HostPrimitives


class _TrackingPrimitives(HostPrimitives):
    """Host primitives that track open and close calls."""

    def __init__(self, *, fail_fstat: bool = False) -> None:
        self.opened = 0
        self.closed = 0
        self._fail_fstat = fail_fstat

    def open(self, path: str, mode: str = "r", *, encoding: str | None = None) -> IO[Any] | bool:
        self.opened += 1
        return super().open(path, mode, encoding=encoding)

    def close(self, handle: IO[Any]) -> bool:
        self.closed += 1
        return super().close(handle)

    def fstat(self, handle: IO[Any]) -> StatRecord | bool:
        if self._fail_fstat:
            report_failure("fstat(): Input/output error", errno=errno.EIO, primitive="fstat")
            return False
        return super().fstat(handle)


# -- Derived attribute accessors ---------------------------------------------


class TestAccessors:
    """Verify each accessor projects one field of a single stat."""

    def test_stat_record(self, tmp_path: Path) -> None:
        """stat should return a record matching the host's view."""
        target = tmp_path / "f"
        target.write_bytes(b"12345")
        record = Filesystem().stat(str(target))
        native = os.stat(target)
        assert isinstance(record, StatRecord)
        assert record.ino == native.st_ino
        assert record.uid == native.st_uid
        assert record.mode == native.st_mode

    def test_accessors_match_os_stat(self, tmp_path: Path) -> None:
        """Every accessor should agree with os.stat."""
        target = tmp_path / "f"
        target.write_bytes(b"12345")
        os.utime(target, (1_500_000_000, 1_600_000_000))
        fs = Filesystem()
        native = os.stat(target)
        expected_size = 5
        assert fs.size(str(target)) == expected_size
        assert fs.owner(str(target)) == native.st_uid
        assert fs.group(str(target)) == native.st_gid
        assert fs.inode(str(target)) == native.st_ino
        assert fs.permissions(str(target)) == native.st_mode
        assert fs.access_time(str(target)) == 1_500_000_000
        assert fs.modify_time(str(target)) == 1_600_000_000
        assert fs.change_time(str(target)) == int(native.st_ctime)

    def test_stat_closes_handle(self, tmp_path: Path) -> None:
        """The handle opened for stat should always be closed."""
        target = tmp_path / "f"
        target.write_text("x")
        host = _TrackingPrimitives()
        Filesystem(host).size(str(target))
        assert host.opened == host.closed == 1

    def test_stat_closes_handle_when_fstat_fails(self, tmp_path: Path) -> None:
        """A failing fstat should propagate and still close the handle."""
        target = tmp_path / "f"
        target.write_text("x")
        host = _TrackingPrimitives(fail_fstat=True)
        with pytest.raises(FilesystemError) as info:
            Filesystem(host).inode(str(target))
        assert info.value.kind is ErrorKind.UNKNOWN_ERROR
        assert host.closed == 1

    def test_missing_path_propagates_open_failure(self, tmp_path: Path) -> None:
        """Accessors should not invent their own kind for a missing file."""
        with pytest.raises(FilesystemError) as info:
            Filesystem().size(str(tmp_path / "missing"))
        assert info.value.kind is ErrorKind.DOES_NOT_EXIST
        assert info.value.primitive == "open"


# -- Pass-through primitives -------------------------------------------------


class TestStrictPrimitives:
    """Verify facade primitives raise instead of returning False."""

    def test_rmdir_on_file(self, tmp_path: Path) -> None:
        """rmdir on a file should raise NOT_A_DIRECTORY."""
        target = tmp_path / "f"
        target.write_text("x")
        with pytest.raises(FilesystemError) as info:
            Filesystem().rmdir(str(target))
        assert info.value.kind is ErrorKind.NOT_A_DIRECTORY

    def test_mkdir_existing(self, tmp_path: Path) -> None:
        """mkdir on an existing directory should raise ALREADY_EXISTS."""
        with pytest.raises(FilesystemError) as info:
            Filesystem().mkdir(str(tmp_path))
        assert info.value.kind is ErrorKind.ALREADY_EXISTS

    def test_mkdir_uses_configured_mode(self, tmp_path: Path) -> None:
        """Without an explicit mode, mkdir should use config.dir_mode."""
        target = tmp_path / "d"
        Filesystem(config=FilesystemConfig(dir_mode=0o700)).mkdir(str(target))
        assert target.stat().st_mode & 0o777 == 0o700

    def test_filetype_missing(self, tmp_path: Path) -> None:
        """filetype on a missing path should raise STAT_FAILED."""
        with pytest.raises(FilesystemError) as info:
            Filesystem().filetype(str(tmp_path / "missing"))
        assert info.value.kind is ErrorKind.STAT_FAILED

    def test_copy_onto_directory(self, tmp_path: Path) -> None:
        """copy onto a directory should raise IS_A_DIRECTORY."""
        source = tmp_path / "f"
        source.write_text("x")
        with pytest.raises(FilesystemError) as info:
            Filesystem().copy(str(source), str(tmp_path))
        assert info.value.kind is ErrorKind.IS_A_DIRECTORY

    def test_closed_handle(self, tmp_path: Path) -> None:
        """Reading a closed handle should raise NOT_A_STREAM."""
        fs = Filesystem()
        handle = fs.open(str(tmp_path / "f"), "wb")
        fs.close(handle)
        with pytest.raises(FilesystemError) as info:
            fs.read(handle, 1)
        assert info.value.kind is ErrorKind.NOT_A_STREAM

    def test_handle_round_trip(self, tmp_path: Path) -> None:
        """The handle primitives should work end to end through the facade."""
        fs = Filesystem()
        handle = fs.open(str(tmp_path / "f"), "w+b")
        try:
            assert fs.lock(handle, LockOperation.EXCLUSIVE) is True
            fs.write(handle, b"abcdef")
            fs.flush(handle)
            assert fs.seek(handle, -2, SeekWhence.END) == 4  # noqa: PLR2004
            assert fs.read(handle, 2) == b"ef"
            assert fs.rewind(handle) is True
            assert fs.getc(handle) == b"a"
            assert fs.tell(handle) == 1
            fs.truncate(handle, 3)
            assert fs.fstat(handle).size == 3  # noqa: PLR2004
            assert fs.lock(handle, LockOperation.UNLOCK) is True
        finally:
            fs.close(handle)

    def test_csv_records_and_eof(self, tmp_path: Path) -> None:
        """put_csv, get_csv, and eof should work through the facade."""
        fs = Filesystem()
        handle = fs.open(str(tmp_path / "rows.csv"), "w+")
        try:
            fs.put_csv(handle, ["name", "size"])
            fs.put_csv(handle, ["a b", 10], delimiter=";")
            fs.rewind(handle)
            assert fs.eof(handle) is False
            assert fs.get_csv(handle) == ["name", "size"]
            assert fs.get_csv(handle, delimiter=";") == ["a b", "10"]
            assert fs.eof(handle) is True
            assert fs.get_csv(handle) is None
        finally:
            fs.close(handle)

    def test_csv_on_closed_handle(self, tmp_path: Path) -> None:
        """get_csv on a closed handle should raise NOT_A_STREAM."""
        fs = Filesystem()
        handle = fs.open(str(tmp_path / "rows.csv"), "w")
        fs.close(handle)
        with pytest.raises(FilesystemError) as info:
            fs.get_csv(handle)
        assert info.value.kind is ErrorKind.NOT_A_STREAM
        assert info.value.primitive == "get_csv"

    def test_whole_file_and_listing(self, tmp_path: Path) -> None:
        """write_file, read_file, read_lines, scandir, glob, touch, rename."""
        fs = Filesystem()
        fs.write_file(str(tmp_path / "a.txt"), "1\n2\n")
        assert fs.read_file(str(tmp_path / "a.txt")) == b"1\n2\n"
        assert fs.read_lines(str(tmp_path / "a.txt"), keep_newlines=False) == ["1", "2"]
        fs.touch(str(tmp_path / "b.txt"))
        fs.rename(str(tmp_path / "b.txt"), str(tmp_path / "c.txt"))
        assert fs.scandir(str(tmp_path)) == [".", "..", "a.txt", "c.txt"]
        assert fs.glob(str(tmp_path / "*.txt")) == [str(tmp_path / "a.txt"), str(tmp_path / "c.txt")]
        assert fs.filetype(str(tmp_path / "c.txt")) == "file"

    def test_chmod_missing(self, tmp_path: Path) -> None:
        """chmod on a missing file should raise DOES_NOT_EXIST."""
        with pytest.raises(FilesystemError) as info:
            Filesystem().chmod(str(tmp_path / "missing"), 0o600)
        assert info.value.kind is ErrorKind.DOES_NOT_EXIST


# -- Configuration and logging -----------------------------------------------


class TestFacadeWiring:
    """Verify config and logger integration."""

    def test_default_logger_records_failures(self, tmp_path: Path) -> None:
        """A default facade should log classified failures."""
        fs = Filesystem()
        with pytest.raises(FilesystemError):
            fs.unlink(str(tmp_path / "missing"))
        assert fs.logger is not None
        (entry,) = fs.logger.entries
        assert entry.source == "unlink"
        assert entry.kind == ErrorKind.DOES_NOT_EXIST

    def test_logging_can_be_disabled(self, tmp_path: Path) -> None:
        """log_failures=False should leave the facade without a logger."""
        fs = Filesystem(config=FilesystemConfig(log_failures=False))
        assert fs.logger is None
        with pytest.raises(FilesystemError):
            fs.unlink(str(tmp_path / "missing"))

    def test_min_log_level_filters(self, tmp_path: Path) -> None:
        """Only failures at or above min_log_level should be recorded."""
        fs = Filesystem(config=FilesystemConfig(min_log_level=LogLevel.WARNING))
        with pytest.raises(FilesystemError):
            fs.unlink(str(tmp_path / "missing"))
        assert fs.logger is not None
        assert fs.logger.entries == []

    def test_shared_logger(self, tmp_path: Path) -> None:
        """A caller-supplied logger should receive the entries."""
        logger = Logger()
        fs = Filesystem(logger=logger)
        with pytest.raises(FilesystemError):
            fs.rmdir(str(tmp_path / "missing"))
        assert fs.logger is logger
        assert len(logger) == 1

    def test_errno_classifier(self) -> None:
        """The errno classifier should classify by native code."""

        class _Localised(HostPrimitives):
            def unlink(self, path: str) -> bool:
                report_failure(f"unlink({path}): Datei oder Verzeichnis nicht gefunden", errno=errno.ENOENT)
                return False

        fs = Filesystem(_Localised(), config=FilesystemConfig(classifier="errno"))
        with pytest.raises(FilesystemError) as info:
            fs.purge("/anything")
        assert info.value.kind is ErrorKind.DOES_NOT_EXIST

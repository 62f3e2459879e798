"""Host filesystem primitives, one native call per method.

Every method here wraps exactly one host operation and follows the
host's failure contract:

1. On success, return the call's native result.
2. On failure, *report* a ``RawFailure`` (message + severity) through
   ``report_failure`` and return ``False``.  The primitive itself never
   raises for a filesystem condition and never classifies anything.

Run bare, a failed primitive therefore just warns and returns
``False``.  Run through the interceptor, the report raises a typed
``FilesystemError`` instead.

Messages use the host's wording so the classifier can read them::

    unlink(/tmp/dir): Is a directory
    open(/nope/x): Failed to open stream: No such file or directory
    filetype(): Lstat failed for /nope
    read(): supplied resource is not a valid stream resource

Argument errors (wrong types, an invalid open mode) are programming
errors, not host failures, and propagate as ordinary exceptions.
"""

from __future__ import annotations

import csv
import errno
import fcntl
import glob as globbing
import io
import os
import shutil
import stat
from collections.abc import Iterable, Iterator
from typing import IO, Any, Literal, TypeAlias

from py_strictfs.config import DEFAULT_DIR_MODE
from py_strictfs.failures import report_failure
from py_strictfs.handles import LockOperation, SeekWhence, StatRecord, StreamContext, WriteFlags

WriteData: TypeAlias = str | bytes | bytearray | Iterable[str | bytes]

_FILE_TYPES: tuple[tuple[Any, str], ...] = (
    (stat.S_ISDIR, "dir"),
    (stat.S_ISREG, "file"),
    (stat.S_ISLNK, "link"),
    (stat.S_ISFIFO, "fifo"),
    (stat.S_ISCHR, "char"),
    (stat.S_ISBLK, "block"),
    (stat.S_ISSOCK, "socket"),
)


def _report_os_error(primitive: str, target: str, exc: OSError, *, prefix: str = "") -> Literal[False]:
    """Report an ``OSError`` in the host's ``name(target): reason`` form."""
    reason = exc.strerror or str(exc)
    report_failure(f"{primitive}({target}): {prefix}{reason}", errno=exc.errno, primitive=primitive)
    return False


def _report_bad_stream(primitive: str) -> Literal[False]:
    """Report that a handle argument is closed or not a stream at all."""
    report_failure(
        f"{primitive}(): supplied resource is not a valid stream resource",
        errno=errno.EBADF,
        primitive=primitive,
    )
    return False


def _is_stream(handle: object) -> bool:
    """Return True if *handle* is an open file object."""
    return isinstance(handle, io.IOBase) and not handle.closed


def _encode(data: WriteData, context: StreamContext) -> bytes:
    """Flatten write data into the bytes that go to disk."""
    if isinstance(data, str):
        return data.encode(context.encoding, context.errors)
    if isinstance(data, bytes | bytearray):
        return bytes(data)
    return b"".join(_encode(chunk, context) for chunk in data)


def _make_tree(path: str, mode: int) -> None:
    """Create *path* and each missing ancestor, top-down, all with *mode*."""
    missing: list[str] = []
    head = os.path.abspath(path)
    while not os.path.lexists(head):
        missing.append(head)
        parent = os.path.dirname(head)
        if parent == head:
            break
        head = parent
    if not missing:
        os.mkdir(path, mode)  # raises FileExistsError
        return
    leaf = missing[0]
    for directory in reversed(missing):
        try:
            os.mkdir(directory, mode)
        except FileExistsError:
            if directory == leaf or not os.path.isdir(directory):
                raise


def _open_for_write(path: str, *, append: bool, locked: bool) -> IO[bytes]:
    """Open *path* for a whole-file write.

    A locked overwrite opens without truncating; the caller empties the
    file once it holds the exclusive lock.
    """
    if append:
        return open(path, "ab")  # noqa: SIM115
    if locked:
        return os.fdopen(os.open(path, os.O_WRONLY | os.O_CREAT, 0o666), "wb")
    return open(path, "wb")  # noqa: SIM115


def _text_lines(handle: IO[Any]) -> Iterator[str]:
    """Yield the handle's remaining lines as text, one read at a time."""
    while True:
        line = handle.readline()
        if not line:
            return
        yield line.decode() if isinstance(line, bytes) else line


class HostPrimitives:
    """Host filesystem primitives with warning-style failure reporting.

    Stateless; one instance can be shared freely.  Subclass it to fake
    individual host calls in tests.
    """

    # -- Path operations ---------------------------------------------------

    def unlink(self, path: str) -> bool:
        """Delete a file (or a symlink, without following it)."""
        try:
            os.unlink(path)
        except OSError as exc:
            if exc.errno == errno.EPERM and os.path.isdir(path) and not os.path.islink(path):
                # BSD and macOS spell "is a directory" as EPERM.
                exc = IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR))
            return _report_os_error("unlink", path, exc)
        return True

    def rmdir(self, path: str) -> bool:
        """Remove an empty directory."""
        try:
            os.rmdir(path)
        except OSError as exc:
            return _report_os_error("rmdir", path, exc)
        return True

    def mkdir(self, path: str, mode: int = DEFAULT_DIR_MODE, *, recursive: bool = False) -> bool:
        """Create a directory, and with *recursive* all missing ancestors.

        Every directory created gets *mode* (less the umask), ancestors
        included.
        """
        try:
            if recursive:
                _make_tree(path, mode)
            else:
                os.mkdir(path, mode)
        except OSError as exc:
            return _report_os_error("mkdir", path, exc)
        return True

    def rename(self, old: str, new: str) -> bool:
        """Rename a file or directory, replacing *new* if it is a file."""
        try:
            os.replace(old, new)
        except OSError as exc:
            return _report_os_error("rename", f"{old},{new}", exc)
        return True

    def copy(self, source: str, dest: str) -> bool:
        """Copy a file's contents to *dest*, overwriting it."""
        if os.path.isdir(dest):
            report_failure(
                "copy(): The second argument to copy() function cannot be a directory",
                errno=errno.EISDIR,
                primitive="copy",
            )
            return False
        try:
            shutil.copyfile(source, dest)
        except OSError as exc:
            return _report_os_error("copy", source, exc)
        return True

    def touch(self, path: str, mtime: float | None = None, atime: float | None = None) -> bool:
        """Create *path* if missing and set its access/modification times.

        With no *mtime* both times become the current time.  With only
        *mtime*, the access time is set to the same value.
        """
        times = None if mtime is None else (mtime if atime is None else atime, mtime)
        try:
            with open(path, "ab"):
                pass
            os.utime(path, times)
        except OSError as exc:
            return _report_os_error("touch", path, exc, prefix="Unable to create file because ")
        return True

    def chmod(self, path: str, mode: int) -> bool:
        """Change a file's permission bits."""
        try:
            os.chmod(path, mode)
        except OSError as exc:
            return _report_os_error("chmod", path, exc)
        return True

    def chown(self, path: str, user: str | int) -> bool:
        """Change a file's owner by name or uid."""
        try:
            shutil.chown(path, user=user)
        except LookupError:
            report_failure(f"chown(): Unable to find uid for {user}", primitive="chown")
            return False
        except OSError as exc:
            return _report_os_error("chown", path, exc)
        return True

    def chgrp(self, path: str, group: str | int) -> bool:
        """Change a file's group by name or gid."""
        try:
            shutil.chown(path, group=group)
        except LookupError:
            report_failure(f"chgrp(): Unable to find gid for {group}", primitive="chgrp")
            return False
        except OSError as exc:
            return _report_os_error("chgrp", path, exc)
        return True

    def scandir(self, directory: str, *, descending: bool = False) -> list[str] | Literal[False]:
        """List a directory, sorted by name.

        Like ``readdir(3)`` the listing includes the ``.`` and ``..``
        entries.
        """
        try:
            names = os.listdir(directory)
        except OSError as exc:
            return _report_os_error("scandir", directory, exc)
        return sorted([os.curdir, os.pardir, *names], reverse=descending)

    def glob(self, pattern: str, *, recursive: bool = False, only_dirs: bool = False) -> list[str]:
        """Return the sorted paths matching a shell-style pattern."""
        matches = globbing.glob(pattern, recursive=recursive)
        if only_dirs:
            matches = [m for m in matches if os.path.isdir(m)]
        return sorted(matches)

    def filetype(self, path: str) -> str | Literal[False]:
        """Return the type of *path* without following a final symlink.

        One of ``dir``, ``file``, ``link``, ``fifo``, ``char``,
        ``block``, ``socket`` or ``unknown``.
        """
        try:
            mode = os.lstat(path).st_mode
        except OSError as exc:
            report_failure(f"filetype(): Lstat failed for {path}", errno=exc.errno, primitive="filetype")
            return False
        for predicate, name in _FILE_TYPES:
            if predicate(mode):
                return name
        return "unknown"

    # -- Whole-file operations ---------------------------------------------

    def read_file(
        self,
        path: str,
        offset: int = 0,
        length: int | None = None,
    ) -> bytes | Literal[False]:
        """Read a file's contents, optionally a slice of them."""
        try:
            with open(path, "rb") as handle:
                if offset:
                    handle.seek(offset)
                return handle.read(-1 if length is None else length)
        except OSError as exc:
            return _report_os_error("read_file", path, exc, prefix="Failed to open stream: ")

    def write_file(
        self,
        path: str,
        data: WriteData,
        flags: WriteFlags | None = None,
        context: StreamContext | None = None,
    ) -> int | Literal[False]:
        """Write *data* to a file, creating or truncating it.

        Returns:
            The number of bytes written.

        """
        flags = flags or WriteFlags.NONE
        payload = _encode(data, context or StreamContext())
        append = WriteFlags.APPEND in flags
        locked = WriteFlags.LOCK_EX in flags
        try:
            with _open_for_write(path, append=append, locked=locked) as handle:
                if locked:
                    fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
                    if not append:
                        handle.truncate(0)
                return handle.write(payload)
        except OSError as exc:
            return _report_os_error("write_file", path, exc, prefix="Failed to open stream: ")

    def read_lines(
        self,
        path: str,
        *,
        keep_newlines: bool = True,
        skip_empty: bool = False,
        context: StreamContext | None = None,
    ) -> list[str] | Literal[False]:
        """Read a file as a list of text lines."""
        context = context or StreamContext()
        try:
            with open(path, encoding=context.encoding, errors=context.errors, newline="") as handle:
                lines = handle.read().splitlines(keepends=keep_newlines)
        except OSError as exc:
            return _report_os_error("read_lines", path, exc, prefix="Failed to open stream: ")
        if skip_empty:
            lines = [line for line in lines if line.strip("\r\n")]
        return lines

    # -- Handle operations -------------------------------------------------

    def open(self, path: str, mode: str = "r", *, encoding: str | None = None) -> IO[Any] | Literal[False]:
        """Open a file and return its handle."""
        try:
            return open(path, mode, encoding=encoding)  # noqa: SIM115
        except OSError as exc:
            return _report_os_error("open", path, exc, prefix="Failed to open stream: ")

    def close(self, handle: IO[Any]) -> bool:
        """Close an open handle."""
        if not _is_stream(handle):
            return _report_bad_stream("close")
        try:
            handle.close()
        except OSError as exc:
            return _report_os_error("close", "", exc)
        return True

    def read(self, handle: IO[Any], length: int) -> Any:
        """Read up to *length* bytes (or characters) from a handle."""
        if not _is_stream(handle):
            return _report_bad_stream("read")
        try:
            return handle.read(length)
        except OSError as exc:
            return _report_os_error("read", "", exc)

    def write(self, handle: IO[Any], data: Any, length: int | None = None) -> int | Literal[False]:
        """Write *data* (truncated to *length*) and return the amount written."""
        if not _is_stream(handle):
            return _report_bad_stream("write")
        try:
            return handle.write(data if length is None else data[:length])
        except OSError as exc:
            return _report_os_error("write", "", exc)

    def gets(self, handle: IO[Any], length: int | None = None) -> Any:
        """Read one line; an empty result means end of file."""
        if not _is_stream(handle):
            return _report_bad_stream("gets")
        try:
            return handle.readline(-1 if length is None else length)
        except OSError as exc:
            return _report_os_error("gets", "", exc)

    def getc(self, handle: IO[Any]) -> Any:
        """Read a single byte (or character)."""
        return self.read(handle, 1)

    def eof(self, handle: IO[Any]) -> bool:
        """Return True if nothing is left to read from the handle."""
        if not _is_stream(handle):
            return _report_bad_stream("eof")
        try:
            position = handle.tell()
            at_end = not handle.read(1)
            handle.seek(position)
        except OSError as exc:
            return _report_os_error("eof", "", exc)
        return at_end

    def get_csv(
        self,
        handle: IO[Any],
        *,
        delimiter: str = ",",
        quotechar: str = '"',
    ) -> list[str] | Literal[False] | None:
        """Read one CSV record from a handle.

        A quoted field may span several lines.  Binary handles are
        decoded as UTF-8.

        Returns:
            The record's fields, or ``None`` at end of file.

        """
        if not _is_stream(handle):
            return _report_bad_stream("get_csv")
        reader = csv.reader(_text_lines(handle), delimiter=delimiter, quotechar=quotechar)
        try:
            return next(reader, None)
        except csv.Error as exc:
            report_failure(f"get_csv(): {exc}", primitive="get_csv")
            return False
        except OSError as exc:
            return _report_os_error("get_csv", "", exc)

    def put_csv(
        self,
        handle: IO[Any],
        fields: Iterable[object],
        *,
        delimiter: str = ",",
        quotechar: str = '"',
    ) -> int | Literal[False]:
        """Write *fields* as one newline-terminated CSV record.

        Returns:
            The length of the line written.

        """
        if not _is_stream(handle):
            return _report_bad_stream("put_csv")
        buffer = io.StringIO()
        csv.writer(buffer, delimiter=delimiter, quotechar=quotechar, lineterminator="\n").writerow(fields)
        line = buffer.getvalue()
        try:
            return handle.write(line if isinstance(handle, io.TextIOBase) else line.encode())
        except OSError as exc:
            return _report_os_error("put_csv", "", exc)

    def seek(self, handle: IO[Any], offset: int, whence: SeekWhence = SeekWhence.SET) -> int | Literal[False]:
        """Move the handle's offset and return the new absolute position."""
        if not _is_stream(handle):
            return _report_bad_stream("seek")
        try:
            return handle.seek(offset, whence.native)
        except OSError as exc:
            return _report_os_error("seek", "", exc)

    def tell(self, handle: IO[Any]) -> int | Literal[False]:
        """Return the handle's current offset."""
        if not _is_stream(handle):
            return _report_bad_stream("tell")
        try:
            return handle.tell()
        except OSError as exc:
            return _report_os_error("tell", "", exc)

    def rewind(self, handle: IO[Any]) -> bool:
        """Move the handle's offset back to the start of the file."""
        return self.seek(handle, 0) is not False

    def truncate(self, handle: IO[Any], size: int) -> bool:
        """Truncate (or extend) the file behind a handle to *size* bytes."""
        if not _is_stream(handle):
            return _report_bad_stream("truncate")
        try:
            handle.truncate(size)
        except OSError as exc:
            return _report_os_error("truncate", "", exc)
        return True

    def flush(self, handle: IO[Any]) -> bool:
        """Flush buffered output to the host."""
        if not _is_stream(handle):
            return _report_bad_stream("flush")
        try:
            handle.flush()
        except OSError as exc:
            return _report_os_error("flush", "", exc)
        return True

    def lock(self, handle: IO[Any], operation: LockOperation, *, non_blocking: bool = False) -> bool:
        """Apply an advisory lock to a handle.

        Returns ``False`` without reporting a failure when a
        non-blocking lock is already held elsewhere.
        """
        if not _is_stream(handle):
            return _report_bad_stream("lock")
        flags = operation.native | (fcntl.LOCK_NB if non_blocking else 0)
        try:
            fcntl.flock(handle.fileno(), flags)
        except BlockingIOError:
            return False
        except OSError as exc:
            return _report_os_error("lock", "", exc)
        return True

    def fstat(self, handle: IO[Any]) -> StatRecord | Literal[False]:
        """Return the status record of the file behind a handle."""
        if not _is_stream(handle):
            return _report_bad_stream("fstat")
        try:
            return StatRecord.from_stat_result(os.fstat(handle.fileno()))
        except OSError as exc:
            return _report_os_error("fstat", "", exc)

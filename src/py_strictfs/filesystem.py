"""Filesystem facade — strict primitives plus failure-aware compound operations.

``Filesystem`` is what callers use.  Every primitive method is a
one-line delegation to the primitive layer, routed through the
interceptor, so a failure always arrives as a ``FilesystemError``
instead of a warning and a ``False``.

On top of those sit two compound operations that use the *kind* of a
failure to decide what to do next:

- ``purge`` — delete a file or a directory, recursively on request::

      unlink ──IS_A_DIRECTORY──▶ rmdir ──DIRECTORY_NOT_EMPTY──▶ (recursive?)
                                                                 purge each entry
                                                                 rmdir again

- ``write_with_auto_create`` — write a file; if its parent directory
  is missing, create it (and any missing ancestors) and retry once.

And the derived attribute accessors (``size``, ``owner``, …), each of
which is one ``stat`` projected down to a single field.

Neither compound operation is atomic: the filesystem can change
between their steps.
"""

from __future__ import annotations

import os
from typing import IO, TYPE_CHECKING, Any

from py_strictfs.config import FilesystemConfig
from py_strictfs.errors import ErrorKind, FilesystemError
from py_strictfs.interceptor import Interceptor
from py_strictfs.logging import Logger
from py_strictfs.primitives import HostPrimitives, WriteData

if TYPE_CHECKING:
    from collections.abc import Iterable

    from py_strictfs.handles import LockOperation, SeekWhence, StatRecord, StreamContext, WriteFlags

_PSEUDO_ENTRIES = frozenset({os.curdir, os.pardir})


class Filesystem:
    """Strict filesystem access: every host failure raises a typed error.

    Args:
        primitives: The primitive layer to delegate to.
        config: Settings; defaults to ``FilesystemConfig()``.
        logger: Failure log to record into.  If omitted and the config
            enables failure logging, a fresh ``Logger`` is created.

    """

    def __init__(
        self,
        primitives: HostPrimitives | None = None,
        *,
        config: FilesystemConfig | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create a facade over *primitives* (the host by default)."""
        self._primitives = primitives or HostPrimitives()
        self._config = config or FilesystemConfig()
        if not self._config.log_failures:
            logger = None
        elif logger is None:
            logger = Logger(min_level=self._config.min_log_level)
        self._interceptor = Interceptor(self._config.resolve_classifier(), logger)

    @property
    def config(self) -> FilesystemConfig:
        """Return the active settings."""
        return self._config

    @property
    def logger(self) -> Logger | None:
        """Return the failure log, or None if logging is disabled."""
        return self._interceptor.logger

    # -- Compound operations -----------------------------------------------

    def purge(self, path: str, *, recursive: bool = False) -> bool:
        """Delete a file or a directory.

        A non-empty directory is only deleted with *recursive*; its
        entries are purged depth-first and the directory removed last.

        Args:
            path: File or directory to delete.
            recursive: Whether to delete a non-empty directory's contents.

        Returns:
            True once *path* is gone.

        Raises:
            FilesystemError: ``DIRECTORY_NOT_EMPTY`` for a non-empty
                directory without *recursive*; any other kind unchanged
                from the failing primitive.

        """
        try:
            return self.unlink(path)
        except FilesystemError as err:
            if err.kind is not ErrorKind.IS_A_DIRECTORY:
                raise

        try:
            return self.rmdir(path)
        except FilesystemError as err:
            if err.kind is not ErrorKind.DIRECTORY_NOT_EMPTY or not recursive:
                raise

        for entry in self.scandir(path):
            if entry not in _PSEUDO_ENTRIES:
                self.purge(os.path.join(path, entry), recursive=True)
        return self.rmdir(path)

    def write_with_auto_create(
        self,
        path: str,
        data: WriteData,
        flags: WriteFlags | None = None,
        context: StreamContext | None = None,
    ) -> int:
        """Write *data* to *path*, creating a missing parent directory.

        The parent (with any missing ancestors) is created with the
        configured ``dir_mode`` and the write is retried once.  A
        failure of the retry propagates as-is.

        Returns:
            The number of bytes written.

        Raises:
            FilesystemError: Any failure other than a missing parent, or
                any failure of the directory creation or the retry.

        """
        if not isinstance(data, str | bytes | bytearray):
            data = list(data)
        try:
            return self.write_file(path, data, flags, context)
        except FilesystemError as err:
            if err.kind is not ErrorKind.DOES_NOT_EXIST:
                raise
        self.mkdir(os.path.dirname(path), self._config.dir_mode, recursive=True)
        return self.write_file(path, data, flags, context)

    # -- Derived attribute accessors -----------------------------------------

    def stat(self, path: str) -> StatRecord:
        """Open *path*, read its status record, and close it again."""
        handle = self.open(path, "rb")
        try:
            return self.fstat(handle)
        finally:
            self.close(handle)

    def size(self, path: str) -> int:
        """Return the file size in bytes."""
        return self.stat(path).size

    def owner(self, path: str) -> int:
        """Return the owner's uid."""
        return self.stat(path).uid

    def group(self, path: str) -> int:
        """Return the group's gid."""
        return self.stat(path).gid

    def inode(self, path: str) -> int:
        """Return the inode number."""
        return self.stat(path).ino

    def permissions(self, path: str) -> int:
        """Return the full mode word (type and permission bits)."""
        return self.stat(path).mode

    def access_time(self, path: str) -> int:
        """Return the last access time as a Unix timestamp."""
        return self.stat(path).atime

    def modify_time(self, path: str) -> int:
        """Return the last modification time as a Unix timestamp."""
        return self.stat(path).mtime

    def change_time(self, path: str) -> int:
        """Return the last inode change time as a Unix timestamp."""
        return self.stat(path).ctime

    # -- Path primitives -----------------------------------------------------

    def unlink(self, path: str) -> bool:
        """Delete a file."""
        return self._interceptor.invoke(self._primitives.unlink, path)

    def rmdir(self, path: str) -> bool:
        """Remove an empty directory."""
        return self._interceptor.invoke(self._primitives.rmdir, path)

    def mkdir(self, path: str, mode: int | None = None, *, recursive: bool = False) -> bool:
        """Create a directory (with the configured mode unless given)."""
        mode = self._config.dir_mode if mode is None else mode
        return self._interceptor.invoke(self._primitives.mkdir, path, mode, recursive=recursive)

    def rename(self, old: str, new: str) -> bool:
        """Rename a file or directory."""
        return self._interceptor.invoke(self._primitives.rename, old, new)

    def copy(self, source: str, dest: str) -> bool:
        """Copy a file."""
        return self._interceptor.invoke(self._primitives.copy, source, dest)

    def touch(self, path: str, mtime: float | None = None, atime: float | None = None) -> bool:
        """Create a file if missing and set its times."""
        return self._interceptor.invoke(self._primitives.touch, path, mtime, atime)

    def chmod(self, path: str, mode: int) -> bool:
        """Change permission bits."""
        return self._interceptor.invoke(self._primitives.chmod, path, mode)

    def chown(self, path: str, user: str | int) -> bool:
        """Change the owner."""
        return self._interceptor.invoke(self._primitives.chown, path, user)

    def chgrp(self, path: str, group: str | int) -> bool:
        """Change the group."""
        return self._interceptor.invoke(self._primitives.chgrp, path, group)

    def scandir(self, directory: str, *, descending: bool = False) -> list[str]:
        """List a directory, including ``.`` and ``..``."""
        return self._interceptor.invoke(self._primitives.scandir, directory, descending=descending)

    def glob(self, pattern: str, *, recursive: bool = False, only_dirs: bool = False) -> list[str]:
        """Return the paths matching *pattern*."""
        return self._interceptor.invoke(
            self._primitives.glob, pattern, recursive=recursive, only_dirs=only_dirs
        )

    def filetype(self, path: str) -> str:
        """Return the type of *path* (``file``, ``dir``, ``link``, …)."""
        return self._interceptor.invoke(self._primitives.filetype, path)

    # -- Whole-file primitives -----------------------------------------------

    def read_file(self, path: str, offset: int = 0, length: int | None = None) -> bytes:
        """Read a file's contents."""
        return self._interceptor.invoke(self._primitives.read_file, path, offset, length)

    def write_file(
        self,
        path: str,
        data: WriteData,
        flags: WriteFlags | None = None,
        context: StreamContext | None = None,
    ) -> int:
        """Write a file and return the number of bytes written."""
        return self._interceptor.invoke(self._primitives.write_file, path, data, flags, context)

    def read_lines(
        self,
        path: str,
        *,
        keep_newlines: bool = True,
        skip_empty: bool = False,
        context: StreamContext | None = None,
    ) -> list[str]:
        """Read a file as text lines."""
        return self._interceptor.invoke(
            self._primitives.read_lines,
            path,
            keep_newlines=keep_newlines,
            skip_empty=skip_empty,
            context=context,
        )

    # -- Handle primitives ---------------------------------------------------

    def open(self, path: str, mode: str = "r", *, encoding: str | None = None) -> IO[Any]:
        """Open a file and return its handle."""
        return self._interceptor.invoke(self._primitives.open, path, mode, encoding=encoding)

    def close(self, handle: IO[Any]) -> bool:
        """Close a handle."""
        return self._interceptor.invoke(self._primitives.close, handle)

    def read(self, handle: IO[Any], length: int) -> Any:
        """Read up to *length* units from a handle."""
        return self._interceptor.invoke(self._primitives.read, handle, length)

    def write(self, handle: IO[Any], data: Any, length: int | None = None) -> int:
        """Write to a handle."""
        return self._interceptor.invoke(self._primitives.write, handle, data, length)

    def gets(self, handle: IO[Any], length: int | None = None) -> Any:
        """Read one line from a handle."""
        return self._interceptor.invoke(self._primitives.gets, handle, length)

    def getc(self, handle: IO[Any]) -> Any:
        """Read one unit from a handle."""
        return self._interceptor.invoke(self._primitives.getc, handle)

    def eof(self, handle: IO[Any]) -> bool:
        """Return True if a handle has nothing left to read."""
        return self._interceptor.invoke(self._primitives.eof, handle)

    def get_csv(self, handle: IO[Any], *, delimiter: str = ",", quotechar: str = '"') -> list[str] | None:
        """Read one CSV record from a handle, or None at end of file."""
        return self._interceptor.invoke(
            self._primitives.get_csv, handle, delimiter=delimiter, quotechar=quotechar
        )

    def put_csv(
        self,
        handle: IO[Any],
        fields: Iterable[object],
        *,
        delimiter: str = ",",
        quotechar: str = '"',
    ) -> int:
        """Write one CSV record to a handle."""
        return self._interceptor.invoke(
            self._primitives.put_csv, handle, fields, delimiter=delimiter, quotechar=quotechar
        )

    def seek(self, handle: IO[Any], offset: int, whence: SeekWhence | None = None) -> int:
        """Reposition a handle."""
        if whence is None:
            return self._interceptor.invoke(self._primitives.seek, handle, offset)
        return self._interceptor.invoke(self._primitives.seek, handle, offset, whence)

    def tell(self, handle: IO[Any]) -> int:
        """Return a handle's offset."""
        return self._interceptor.invoke(self._primitives.tell, handle)

    def rewind(self, handle: IO[Any]) -> bool:
        """Reposition a handle to the start."""
        return self._interceptor.invoke(self._primitives.rewind, handle)

    def truncate(self, handle: IO[Any], size: int) -> bool:
        """Truncate the file behind a handle."""
        return self._interceptor.invoke(self._primitives.truncate, handle, size)

    def flush(self, handle: IO[Any]) -> bool:
        """Flush a handle."""
        return self._interceptor.invoke(self._primitives.flush, handle)

    def lock(self, handle: IO[Any], operation: LockOperation, *, non_blocking: bool = False) -> bool:
        """Apply an advisory lock; False if a non-blocking lock would block."""
        return self._interceptor.invoke(
            self._primitives.lock, handle, operation, non_blocking=non_blocking
        )

    def fstat(self, handle: IO[Any]) -> StatRecord:
        """Return the status record behind a handle."""
        return self._interceptor.invoke(self._primitives.fstat, handle)

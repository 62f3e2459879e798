"""Handle-level enums and records shared by primitives and the facade.

Handle-based primitives work the Unix way:

1. ``open(path, mode)`` → a handle (a Python file object).
2. ``read`` / ``write`` → operate at the handle's current offset.
3. ``seek(handle, offset, whence)`` → reposition the offset.
4. ``lock(handle, operation)`` → advisory whole-file lock.
5. ``fstat(handle)`` → a ``StatRecord`` snapshot.
6. ``close(handle)`` → release it.

This module holds the small types those calls take and return, so the
primitive layer and the facade agree on them without importing each
other.
"""

from __future__ import annotations

import fcntl
import os
from dataclasses import dataclass
from enum import IntFlag, StrEnum


class SeekWhence(StrEnum):
    """Direction for seek operations.

    - SET — absolute offset from the beginning of the file.
    - CUR — relative offset from the current position.
    - END — relative offset from the end of the file.
    """

    SET = "set"
    CUR = "cur"
    END = "end"

    @property
    def native(self) -> int:
        """Return the ``os.SEEK_*`` constant for this direction."""
        return _NATIVE_WHENCE[self]


_NATIVE_WHENCE = {
    SeekWhence.SET: os.SEEK_SET,
    SeekWhence.CUR: os.SEEK_CUR,
    SeekWhence.END: os.SEEK_END,
}


class LockOperation(StrEnum):
    """Advisory lock operations.

    - SHARED — a reader lock; many holders allowed.
    - EXCLUSIVE — a writer lock; one holder only.
    - UNLOCK — release whatever lock the handle holds.
    """

    SHARED = "shared"
    EXCLUSIVE = "exclusive"
    UNLOCK = "unlock"

    @property
    def native(self) -> int:
        """Return the ``fcntl.LOCK_*`` constant for this operation."""
        return _NATIVE_LOCK[self]


_NATIVE_LOCK = {
    LockOperation.SHARED: fcntl.LOCK_SH,
    LockOperation.EXCLUSIVE: fcntl.LOCK_EX,
    LockOperation.UNLOCK: fcntl.LOCK_UN,
}


class WriteFlags(IntFlag):
    """Flags for whole-file writes.

    - APPEND — append to the file instead of truncating it.
    - LOCK_EX — hold an exclusive lock while writing.
    """

    NONE = 0
    APPEND = 1
    LOCK_EX = 2


@dataclass(frozen=True)
class StreamContext:
    """Options for whole-file reads and writes of text.

    Attributes:
        encoding: Codec used to encode ``str`` data on write.
        errors: Codec error handling scheme.

    """

    encoding: str = "utf-8"
    errors: str = "strict"


@dataclass(frozen=True)
class StatRecord:
    """Read-only snapshot of a file's status record (returned by fstat).

    Times are Unix timestamps in whole seconds.
    """

    dev: int
    ino: int
    mode: int
    nlink: int
    uid: int
    gid: int
    rdev: int
    size: int
    atime: int
    mtime: int
    ctime: int
    blksize: int
    blocks: int

    @classmethod
    def from_stat_result(cls, result: os.stat_result) -> StatRecord:
        """Build a record from an ``os.stat_result``."""
        return cls(
            dev=result.st_dev,
            ino=result.st_ino,
            mode=result.st_mode,
            nlink=result.st_nlink,
            uid=result.st_uid,
            gid=result.st_gid,
            rdev=getattr(result, "st_rdev", 0),
            size=result.st_size,
            atime=int(result.st_atime),
            mtime=int(result.st_mtime),
            ctime=int(result.st_ctime),
            blksize=getattr(result, "st_blksize", -1),
            blocks=getattr(result, "st_blocks", -1),
        )

"""Error taxonomy — one typed error for every host failure.

The host reports filesystem failures as *warnings*: a human-readable
message plus a numeric severity, after which the call simply returns a
falsy value.  That is easy to miss and impossible to ``except``.  This
module defines what those warnings become once they are intercepted:

- ``ErrorKind`` — the closed set of categories a failure can fall into.
- ``FilesystemError`` — the single exception type raised for every
  classified failure.  It carries the kind plus the original message
  and code, so nothing the host said is lost.
- ``FilesystemWarning`` — what an *uncaught* failure looks like when a
  primitive runs without an interceptor (the host's silent behaviour).

Why one exception with a ``kind`` instead of a class per kind?
    The set of kinds is closed and the payload is identical for every
    kind.  A tagged error keeps the classifier a plain table lookup and
    lets callers branch with ``err.kind is ErrorKind.X``.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """The closed set of categories a host failure is classified into.

    ``NOT_A_WARNING`` is special: it means the interception layer was
    handed a failure of an unexpected severity, which is an integration
    defect rather than a filesystem condition.  ``UNKNOWN_ERROR`` means
    the host message matched no known pattern.
    """

    PERMISSION_DENIED = "permission_denied"
    ALREADY_EXISTS = "already_exists"
    DOES_NOT_EXIST = "does_not_exist"
    IS_A_DIRECTORY = "is_a_directory"
    NOT_A_DIRECTORY = "not_a_directory"
    DIRECTORY_NOT_EMPTY = "directory_not_empty"
    STAT_FAILED = "stat_failed"
    NOT_A_STREAM = "not_a_stream"
    UNKNOWN_ERROR = "unknown_error"
    NOT_A_WARNING = "not_a_warning"

    @property
    def is_defect(self) -> bool:
        """Return True if this kind signals a programming error, not I/O."""
        return self is ErrorKind.NOT_A_WARNING


class FilesystemError(Exception):
    """Raise when an intercepted filesystem primitive fails.

    Attributes:
        kind: The classified category of the failure.
        message: The host's original failure message.
        code: The host's numeric severity for the failure.
        errno: The native error number, when the host supplied one.
        primitive: Name of the primitive that failed.

    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        code: int,
        *,
        errno: int | None = None,
        primitive: str = "",
    ) -> None:
        """Create an error of the given kind from a host failure."""
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.code = code
        self.errno = errno
        self.primitive = primitive

    def __str__(self) -> str:
        """Return the original host message."""
        return self.message

    def __repr__(self) -> str:
        """Return a debug representation including the kind and code."""
        return f"{type(self).__name__}({self.kind.value!r}, {self.message!r}, code={self.code})"


class FilesystemWarning(UserWarning):
    """Emitted when a primitive fails with no failure handler installed."""

"""Error classifier — map a raw host failure to one ``ErrorKind``.

The host describes a failure only in prose: ``"unlink(/tmp/x): Is a
directory"``.  Classification is therefore a substring lookup over an
ordered table of ``(pattern, kind)`` pairs:

1. A failure whose severity is not ``WARNING`` is ``NOT_A_WARNING`` —
   the caller tried to classify something that was never a soft
   filesystem failure.
2. Otherwise the **first** pattern found in the message wins.
3. Nothing matched → ``UNKNOWN_ERROR``.

Order matters.  Host messages can contain more than one pattern (a
path may itself contain "Is a directory"), so earlier entries take
precedence.  The table is a parameter, never hard-coded into control
flow, so a caller can substitute a locale-specific table or a
different classifier altogether.

``classify_errno`` is such an alternative: it classifies by the native
error number when the host supplied one, falling back to the message
table otherwise.
"""

from __future__ import annotations

import errno as errno_codes
from collections.abc import Callable
from typing import TypeAlias

from py_strictfs.errors import ErrorKind
from py_strictfs.failures import RawFailure, Severity

ClassificationTable: TypeAlias = tuple[tuple[str, ErrorKind], ...]
Classifier: TypeAlias = Callable[[RawFailure], ErrorKind]

CLASSIFICATION_TABLE: ClassificationTable = (
    ("Permission denied", ErrorKind.PERMISSION_DENIED),
    ("File exists", ErrorKind.ALREADY_EXISTS),
    ("Operation not permitted", ErrorKind.PERMISSION_DENIED),
    ("No such file or directory", ErrorKind.DOES_NOT_EXIST),
    ("Is a directory", ErrorKind.IS_A_DIRECTORY),
    ("cannot be a directory", ErrorKind.IS_A_DIRECTORY),
    ("Not a directory", ErrorKind.NOT_A_DIRECTORY),
    ("Directory not empty", ErrorKind.DIRECTORY_NOT_EMPTY),
    ("stat failed for", ErrorKind.STAT_FAILED),
    ("is not a valid stream resource", ErrorKind.NOT_A_STREAM),
)
"""Default message patterns, in precedence order."""

ERRNO_TABLE: dict[int, ErrorKind] = {
    errno_codes.EACCES: ErrorKind.PERMISSION_DENIED,
    errno_codes.EPERM: ErrorKind.PERMISSION_DENIED,
    errno_codes.EEXIST: ErrorKind.ALREADY_EXISTS,
    errno_codes.ENOENT: ErrorKind.DOES_NOT_EXIST,
    errno_codes.EISDIR: ErrorKind.IS_A_DIRECTORY,
    errno_codes.ENOTDIR: ErrorKind.NOT_A_DIRECTORY,
    errno_codes.ENOTEMPTY: ErrorKind.DIRECTORY_NOT_EMPTY,
    errno_codes.EBADF: ErrorKind.NOT_A_STREAM,
}
"""Native error numbers with an unambiguous kind."""


def classify(
    message: str,
    severity: Severity,
    table: ClassificationTable = CLASSIFICATION_TABLE,
) -> ErrorKind:
    """Classify a host failure message.

    Args:
        message: The host failure message.
        severity: The host error level of the failure.
        table: Ordered ``(pattern, kind)`` pairs; the first match wins.

    Returns:
        The kind of the first matching pattern, ``UNKNOWN_ERROR`` if
        none match, or ``NOT_A_WARNING`` if *severity* is not a warning.

    """
    if severity != Severity.WARNING:
        return ErrorKind.NOT_A_WARNING
    for pattern, kind in table:
        if pattern in message:
            return kind
    return ErrorKind.UNKNOWN_ERROR


def classify_failure(failure: RawFailure) -> ErrorKind:
    """Classify a raw failure by its message using the default table."""
    return classify(failure.message, failure.severity)


def classify_errno(failure: RawFailure) -> ErrorKind:
    """Classify a raw failure by its native error number.

    Failures without an errno, or with one not in ``ERRNO_TABLE``, are
    classified by message instead.
    """
    if failure.severity != Severity.WARNING:
        return ErrorKind.NOT_A_WARNING
    kind = ERRNO_TABLE.get(failure.errno) if failure.errno is not None else None
    if kind is None:
        return classify_failure(failure)
    return kind


_CLASSIFIERS: dict[str, Classifier] = {
    "message": classify_failure,
    "errno": classify_errno,
}


def get_classifier(name: str) -> Classifier:
    """Return the classifier registered under *name*.

    Raises:
        ValueError: If no classifier has that name.

    """
    try:
        return _CLASSIFIERS[name]
    except KeyError:
        choices = ", ".join(sorted(_CLASSIFIERS))
        msg = f"Unknown classifier {name!r} (expected one of: {choices})"
        raise ValueError(msg) from None

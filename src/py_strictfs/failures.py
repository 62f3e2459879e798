"""Raw failures and the scoped failure-handler stack.

A primitive never raises on a host failure.  It *reports* one, the way
the host reports a non-fatal warning: a message plus a severity level.
What happens next depends on whether a failure handler is installed:

- **No handler** — the failure is emitted as a ``FilesystemWarning``
  and the primitive returns ``False``.  Silent, easy to ignore.
- **Handler installed** — the handler receives the ``RawFailure`` and
  is expected to raise.  The interceptor installs one that raises a
  classified ``FilesystemError``.

Handlers are installed with the ``failure_handler`` context manager.
The active handler lives in a ``ContextVar`` and every installation
keeps the reset token of the one it replaced, so nested installations
unwind in the right order on every exit path and concurrent threads
never see each other's handlers.
"""

from __future__ import annotations

import warnings
from collections.abc import Callable
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, TypeAlias

from py_strictfs.errors import FilesystemWarning

if TYPE_CHECKING:
    from collections.abc import Iterator


class Severity(IntEnum):
    """Host error levels attached to a raw failure.

    The values follow the host's error-level bitmask.  Only ``WARNING``
    is the recoverable class that filesystem primitives report with.
    """

    ERROR = 1
    WARNING = 2
    PARSE = 4
    NOTICE = 8
    DEPRECATED = 8192


@dataclass(frozen=True)
class RawFailure:
    """An unclassified failure signal produced by a primitive.

    Attributes:
        message: The host's human-readable failure message.
        severity: The host error level.
        errno: The native error number, if the host supplied one.
        primitive: Name of the primitive that reported the failure.

    """

    message: str
    severity: Severity
    errno: int | None = None
    primitive: str = ""


FailureHandler: TypeAlias = Callable[[RawFailure], None]

_active_handler: ContextVar[FailureHandler | None] = ContextVar(
    "py_strictfs_failure_handler", default=None
)


def current_handler() -> FailureHandler | None:
    """Return the failure handler active in this context, if any."""
    return _active_handler.get()


@contextmanager
def failure_handler(handler: FailureHandler) -> Iterator[FailureHandler]:
    """Install *handler* for the duration of the ``with`` block.

    The previously active handler is restored when the block exits,
    whether it exits normally or by an exception.

    Args:
        handler: Callable receiving every failure reported in the block.

    Yields:
        The installed handler.

    """
    token = _active_handler.set(handler)
    try:
        yield handler
    finally:
        _active_handler.reset(token)


def report_failure(
    message: str,
    severity: Severity = Severity.WARNING,
    *,
    errno: int | None = None,
    primitive: str = "",
) -> None:
    """Report a host failure to the active handler.

    With no handler installed the failure is emitted as a
    ``FilesystemWarning`` and this function returns normally; the
    reporting primitive is then expected to return ``False``.

    Args:
        message: The host failure message.
        severity: The host error level.
        errno: The native error number, if known.
        primitive: Name of the reporting primitive.

    """
    failure = RawFailure(message=message, severity=severity, errno=errno, primitive=primitive)
    handler = _active_handler.get()
    if handler is None:
        warnings.warn(message, FilesystemWarning, stacklevel=3)
        return
    handler(failure)

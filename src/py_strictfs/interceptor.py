"""Failure interceptor — run one primitive and turn its failure into an error.

This is the single choke-point every primitive passes through.  For
exactly one call it installs a failure handler that classifies the
raw failure and raises a ``FilesystemError``; when the call ends the
previous handler is back in place, whichever way the call ended.

    result = invoke(primitives.unlink, "/tmp/file")

- Success → the primitive's native result, unchanged.
- Failure → ``FilesystemError`` with the classified kind, the host's
  message, and its severity as ``code``.

``Interceptor`` binds a classifier and an optional failure log so a
``Filesystem`` can route every primitive through the same policy.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NoReturn, TypeVar

from py_strictfs.classifier import Classifier, classify_failure
from py_strictfs.errors import ErrorKind, FilesystemError
from py_strictfs.failures import RawFailure, failure_handler
from py_strictfs.logging import Logger, LogLevel

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")


def _log_level_for(kind: ErrorKind) -> LogLevel:
    """Pick the log level a failure of *kind* is recorded at."""
    if kind.is_defect:
        return LogLevel.ERROR
    if kind is ErrorKind.UNKNOWN_ERROR:
        # Unmatched host messages are what the classification table is missing.
        return LogLevel.WARNING
    return LogLevel.DEBUG


class Interceptor:
    """Run primitives under a classifying failure handler.

    Args:
        classifier: Maps a raw failure to its error kind.
        logger: If set, every classified failure is recorded here.

    """

    def __init__(
        self,
        classifier: Classifier = classify_failure,
        logger: Logger | None = None,
    ) -> None:
        """Create an interceptor with the given classification policy."""
        self._classifier = classifier
        self._logger = logger

    @property
    def classifier(self) -> Classifier:
        """Return the classifier used for raw failures."""
        return self._classifier

    @property
    def logger(self) -> Logger | None:
        """Return the failure log, if one is attached."""
        return self._logger

    def invoke(self, primitive: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
        """Call *primitive* with a classifying failure handler installed.

        Args:
            primitive: The primitive operation to run.
            *args: Positional arguments for the primitive.
            **kwargs: Keyword arguments for the primitive.

        Returns:
            Whatever the primitive returns on success.

        Raises:
            FilesystemError: If the primitive reports a failure.

        """
        name = getattr(primitive, "__name__", type(primitive).__name__)

        def _raise_classified(failure: RawFailure) -> NoReturn:
            kind = self._classifier(failure)
            source = failure.primitive or name
            if self._logger is not None:
                self._logger.log(_log_level_for(kind), failure.message, source=source, kind=kind)
            raise FilesystemError(
                kind,
                failure.message,
                int(failure.severity),
                errno=failure.errno,
                primitive=source,
            )

        with failure_handler(_raise_classified):
            return primitive(*args, **kwargs)


_default = Interceptor()


def invoke(primitive: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
    """Run *primitive* under the default message-classifying interceptor.

    Raises:
        FilesystemError: If the primitive reports a failure.

    """
    return _default.invoke(primitive, *args, **kwargs)

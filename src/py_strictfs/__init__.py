"""Strict filesystem access — host failures as typed errors.

Re-exports public symbols so callers can write::

    from py_strictfs import Filesystem, FilesystemError, ErrorKind
"""

from py_strictfs.classifier import (
    CLASSIFICATION_TABLE,
    ClassificationTable,
    Classifier,
    classify,
    classify_errno,
    classify_failure,
    get_classifier,
)
from py_strictfs.config import DEFAULT_DIR_MODE, FilesystemConfig
from py_strictfs.errors import ErrorKind, FilesystemError, FilesystemWarning
from py_strictfs.failures import RawFailure, Severity, failure_handler, report_failure
from py_strictfs.filesystem import Filesystem
from py_strictfs.handles import LockOperation, SeekWhence, StatRecord, StreamContext, WriteFlags
from py_strictfs.interceptor import Interceptor, invoke
from py_strictfs.logging import LogEntry, Logger, LogLevel
from py_strictfs.primitives import HostPrimitives

__all__ = [
    "CLASSIFICATION_TABLE",
    "DEFAULT_DIR_MODE",
    "ClassificationTable",
    "Classifier",
    "ErrorKind",
    "Filesystem",
    "FilesystemConfig",
    "FilesystemError",
    "FilesystemWarning",
    "HostPrimitives",
    "Interceptor",
    "LockOperation",
    "LogEntry",
    "LogLevel",
    "Logger",
    "RawFailure",
    "SeekWhence",
    "Severity",
    "StatRecord",
    "StreamContext",
    "WriteFlags",
    "classify",
    "classify_errno",
    "classify_failure",
    "failure_handler",
    "get_classifier",
    "invoke",
    "report_failure",
]

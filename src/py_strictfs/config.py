"""Filesystem configuration with environment overrides.

Settings are a frozen dataclass so a ``Filesystem`` can hold one
without worrying about it changing underneath it.  The defaults suit
most callers; ``FilesystemConfig.from_env`` reads overrides from an
environment mapping (``os.environ`` by default):

- ``STRICTFS_DIR_MODE`` — octal mode for auto-created directories.
- ``STRICTFS_CLASSIFIER`` — ``message`` or ``errno``.
- ``STRICTFS_LOG_FAILURES`` — ``1``/``0``/``true``/``false``.
- ``STRICTFS_LOG_LEVEL`` — minimum level name to record (``DEBUG``…).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from py_strictfs.classifier import Classifier, get_classifier
from py_strictfs.logging import LogLevel

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_DIR_MODE = 0o770
"""Owner and group get full access, others none."""

ENV_PREFIX = "STRICTFS_"

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off"})
_MAX_MODE = 0o7777


def _parse_mode(text: str) -> int:
    """Parse an octal permission mode such as ``"0750"`` or ``"0o750"``."""
    try:
        mode = int(text, 8)
    except ValueError:
        msg = f"Invalid directory mode {text!r} (expected octal, e.g. 0770)"
        raise ValueError(msg) from None
    if not 0 <= mode <= _MAX_MODE:
        msg = f"Directory mode out of range: {text!r}"
        raise ValueError(msg)
    return mode


def _parse_bool(text: str) -> bool:
    """Parse a boolean flag value."""
    word = text.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    msg = f"Invalid boolean {text!r}"
    raise ValueError(msg)


def _parse_level(text: str) -> LogLevel:
    """Parse a log level name."""
    try:
        return LogLevel[text.strip().upper()]
    except KeyError:
        msg = f"Invalid log level {text!r}"
        raise ValueError(msg) from None


@dataclass(frozen=True)
class FilesystemConfig:
    """Settings for a ``Filesystem``.

    Attributes:
        dir_mode: Permission mode for directories created on demand.
        classifier: Name of the failure classifier (``message``/``errno``).
        log_failures: Whether classified failures are recorded.
        min_log_level: Lowest level recorded in the failure log.

    """

    dir_mode: int = DEFAULT_DIR_MODE
    classifier: str = "message"
    log_failures: bool = True
    min_log_level: LogLevel = LogLevel.DEBUG

    def __post_init__(self) -> None:
        """Validate field values.

        Raises:
            ValueError: If the mode is out of range or the classifier
                name is unknown.

        """
        if not 0 <= self.dir_mode <= _MAX_MODE:
            msg = f"Directory mode out of range: {oct(self.dir_mode)}"
            raise ValueError(msg)
        get_classifier(self.classifier)

    def resolve_classifier(self) -> Classifier:
        """Return the classifier callable this config names."""
        return get_classifier(self.classifier)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> FilesystemConfig:
        """Build a config from ``STRICTFS_*`` variables.

        Args:
            environ: Variables to read; defaults to ``os.environ``.

        Returns:
            A config with every unset variable left at its default.

        Raises:
            ValueError: If a variable holds an invalid value.

        """
        env = os.environ if environ is None else environ
        defaults = cls()
        mode = env.get(f"{ENV_PREFIX}DIR_MODE")
        classifier = env.get(f"{ENV_PREFIX}CLASSIFIER")
        log_failures = env.get(f"{ENV_PREFIX}LOG_FAILURES")
        level = env.get(f"{ENV_PREFIX}LOG_LEVEL")
        return cls(
            dir_mode=_parse_mode(mode) if mode else defaults.dir_mode,
            classifier=classifier.strip().lower() if classifier else defaults.classifier,
            log_failures=_parse_bool(log_failures) if log_failures else defaults.log_failures,
            min_log_level=_parse_level(level) if level else defaults.min_log_level,
        )

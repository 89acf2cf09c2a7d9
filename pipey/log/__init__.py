"""
Logging for pipey.

Extends Python's standard logging with:
- A custom TRACE level for per-request detail
- Colored console output with ANSI escape sequences
- Optional microsecond precision timestamps
- Structured logging with extra fields rendered as [key:value]
- Hierarchical "/" named loggers sharing the root's handlers
"""

import logging
from typing import TextIO

from .config import LogConfig, resolve_level
from .constants import LogConstants
from .exceptions import FormatterError, InvalidLogLevelError, LogError
from .factory import LoggerFactory
from .formatters import LogFormatter
from .logger import Logger

logging.addLevelName(LogConstants.CUSTOM_LEVELS["TRACE"], "TRACE")
LogConstants.LEVEL_NAMES["trace"] = LogConstants.CUSTOM_LEVELS["TRACE"]


def create_root_lg(
    level: str | int | bool = "info",
    micros: bool = False,
    colors: bool = True,
    stream: TextIO | None = None,
) -> Logger:
    """
    Create a root logger with the specified configuration.

    Example:
        >>> lg = create_root_lg("debug", colors=False)
    """
    config = LogConfig.from_params(level, micros=micros, colors=colors)
    return LoggerFactory.create_root(config, stream=stream)


def derive_lg(lg: Logger, tags: str | list[str]) -> Logger:
    """Derive a tagged logger from a parent logger."""
    return LoggerFactory.derive(lg, tags)


__all__ = [
    "Logger",
    "LoggerFactory",
    "LogConfig",
    "LogConstants",
    "LogFormatter",
    "LogError",
    "InvalidLogLevelError",
    "FormatterError",
    "resolve_level",
    "create_root_lg",
    "derive_lg",
]

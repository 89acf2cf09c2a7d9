"""
Custom exceptions for the logging system.
"""

from typing import Any

from ..exceptions import PipeyError


class LogError(PipeyError):
    """Base exception for logging-related errors."""

    pass


class InvalidLogLevelError(LogError):
    """Raised when an invalid log level is specified."""

    def __init__(self, level: Any) -> None:
        self.level = level
        super().__init__(f"Invalid log level: {level}")


class FormatterError(LogError):
    """Raised when there's an error in log formatting."""

    pass

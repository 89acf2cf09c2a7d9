"""
Unified exception hierarchy for pipey.

Startup and shutdown problems are raised as exceptions. Failures of a single
pipe read are not: they are returned as Outcome values so that one request
can never affect another.
"""

from typing import Any


class PipeyError(Exception):
    """
    Base exception for all pipey errors.

    Example:
        try:
            app.run()
        except PipeyError as e:
            lg.error("fatal", extra={"exception": e})
    """

    def __init__(self, message: str, **context: Any) -> None:
        """
        Initialize the exception with a message and optional context.

        Args:
            message: Human-readable error message
            **context: Additional context information (stored in self.context)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """String representation with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ConfigError(PipeyError):
    """
    Configuration-related errors.

    Examples:
        - Config file not found or unreadable
        - Invalid YAML syntax
        - Port or timeout out of range
    """

    pass


class PipeError(PipeyError):
    """Base exception for named pipe lifecycle errors."""

    pass


class CreationError(PipeError):
    """
    The named pipe could not be (re)created.

    Fatal at startup: the server does not start without its pipe.
    """

    pass


class CleanupError(PipeError):
    """
    The named pipe could not be removed at shutdown.

    Only ever logged, never propagated.
    """

    pass

"""
Custom exceptions for the pipey.net package.

Kept in their own module to avoid circular imports between the transport
and the request handler.
"""

from ..exceptions import PipeyError


class ServerError(PipeyError):
    """Base exception for server-related errors."""

    pass


class ServerStartupError(ServerError):
    """Raised when server fails to start (bind or listen failure)."""

    pass


class ServerShutdownError(ServerError):
    """Raised when server fails to shutdown gracefully."""

    pass


class HandlerError(ServerError):
    """Raised when request handler encounters an unexpected error."""

    pass

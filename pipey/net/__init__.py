"""HTTP serving of the named pipe."""

from .exceptions import (
    HandlerError,
    ServerError,
    ServerShutdownError,
    ServerStartupError,
)
from .handler import PipeHandler, validate_json
from .http import RequestHandler as HTTPRequestHandler
from .tcp import Server as TCPServer

__all__ = [
    "TCPServer",
    "HTTPRequestHandler",
    "PipeHandler",
    "validate_json",
    "ServerError",
    "ServerStartupError",
    "ServerShutdownError",
    "HandlerError",
]

"""
HTTP request plumbing.

The stdlib handler class is instantiated per connection by socketserver; it
only parses the request and delegates to the long-lived application handler
stored on the server, which sees it as ``instance``.

Every method is routed to the same application handler, so any path and any
method reach the pipe.
"""

import http.server
from typing import Any, Protocol, cast

from .exceptions import HandlerError


class ServerWithHandler(Protocol):
    """Protocol defining expected server interface with custom handler and logger."""

    _handler: Any
    _lg: Any


class RequestHandler(http.server.BaseHTTPRequestHandler):
    """
    HTTP request handler that delegates to the server's application handler.

    Attributes:
        server: Server instance with _handler and _lg attributes
    """

    server_version = "pipey"
    _response_started = False

    def send_response(self, code: int, message: str | None = None) -> None:
        self._response_started = True
        super().send_response(code, message)

    def _delegate(self, method: str) -> None:
        server = cast(ServerWithHandler, self.server)
        self._response_started = False
        try:
            server._handler.handle(self, method)
        except Exception as e:
            server._lg.error(
                f"{method} request handler error", extra={"exception": e}
            )
            # Only answer 500 while no status line has gone out
            if not self._response_started:
                self.send_error(500)
            raise HandlerError(f"{method} request handler failed: {e}") from e

    def do_GET(self) -> None:
        self._delegate("GET")

    def do_HEAD(self) -> None:
        self._delegate("HEAD")

    def do_POST(self) -> None:
        self._delegate("POST")

    def do_PUT(self) -> None:
        self._delegate("PUT")

    def do_DELETE(self) -> None:
        self._delegate("DELETE")

    def do_PATCH(self) -> None:
        self._delegate("PATCH")

    def do_OPTIONS(self) -> None:
        self._delegate("OPTIONS")

    def log_message(self, format: str, *args: Any) -> None:
        """Route http.server access lines to the application logger."""
        server = cast(ServerWithHandler, self.server)
        server._lg.trace(format % args)

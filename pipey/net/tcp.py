"""
Threaded TCP server carrying the HTTP endpoint.

One worker thread is spawned per connection. Worker threads are daemons so
that a shutdown never waits for an in-flight pipe read.

Example Usage:
    server = Server(lg, "localhost", 8080, PipeHandler(lg, path, 1.0))
    server.bind()
    try:
        server.serve_forever()
    finally:
        server.close()
"""

import socketserver
from typing import Any

from .exceptions import ServerShutdownError, ServerStartupError
from .http import RequestHandler as HTTPRequestHandler


class _Server(socketserver.ThreadingMixIn, socketserver.TCPServer):
    """
    Internal threaded TCP server.

    Carries the application handler and logger for HTTPRequestHandler to
    delegate to.
    """

    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, lg: Any, handler: Any, *args: Any, **kwargs: Any) -> None:
        """
        Initialize the TCP server.

        Args:
            lg: Logger instance for server operations
            handler: Application handler instance
            *args: Arguments passed to TCPServer
            **kwargs: Keyword arguments passed to TCPServer

        Raises:
            ServerStartupError: If binding the address fails
        """
        self._lg = lg
        self._handler = handler
        try:
            super().__init__(*args, **kwargs)
        except OSError as e:
            raise ServerStartupError(
                "server initialization failed", address=args[0], error=e.strerror
            ) from e
        self._lg.debug("TCP server initialized successfully")

    def handle_error(self, request: Any, client_address: Any) -> None:
        """Log errors escaping a request instead of printing to stderr."""
        self._lg.error(
            "request failed", extra={"client": _format_address(client_address)}
        )


def _format_address(address: Any) -> str:
    """Format a socket address as host:port."""
    if isinstance(address, tuple) and len(address) >= 2:
        return f"{address[0]}:{address[1]}"
    return str(address)


class Server:
    """
    HTTP server for the application handler.

    Binding is separate from serving so that a startup failure is reported
    before the caller commits to the serve loop.
    """

    def __init__(self, lg: Any, host: str, port: int, handler: Any) -> None:
        """
        Args:
            lg: Logger instance for server operations
            host: Host address to bind to
            port: Port number to listen on (0 picks a free port)
            handler: Application handler instance

        Raises:
            ValueError: If invalid parameters are provided
        """
        if lg is None:
            raise ValueError("Logger cannot be None")
        if not isinstance(port, int) or isinstance(port, bool) or port < 0:
            raise ValueError(f"Port must be a non-negative integer, got: {port}")
        if handler is None:
            raise ValueError("Handler cannot be None")

        self._lg = lg
        self._host = host
        self._port = port
        self._handler = handler
        self._httpd: _Server | None = None

    @property
    def address(self) -> tuple[str, int]:
        """Bound (host, port), or the requested one before bind()."""
        if self._httpd is None:
            return self._host, self._port
        host, port = self._httpd.server_address[:2]
        return str(host), int(port)

    def bind(self) -> None:
        """
        Bind and listen.

        Raises:
            ServerStartupError: If the address cannot be bound
        """
        self._httpd = _Server(
            self._lg, self._handler, (self._host, self._port), HTTPRequestHandler
        )
        host, port = self.address
        self._lg.info(f"server started on {host}:{port}")

    def serve_forever(self, poll_interval: float = 0.5) -> None:
        """Serve until shutdown() is called or the main thread is interrupted."""
        if self._httpd is None:
            raise ServerStartupError("server is not bound")
        self._httpd.serve_forever(poll_interval)

    def shutdown(self) -> None:
        """Stop serve_forever() running in another thread."""
        if self._httpd is not None:
            self._httpd.shutdown()

    def close(self) -> None:
        """
        Close the listening socket.

        Raises:
            ServerShutdownError: If the socket cannot be closed
        """
        if self._httpd is None:
            return
        try:
            self._httpd.server_close()
        except OSError as e:
            raise ServerShutdownError("error during server shutdown", error=e) from e
        finally:
            self._httpd = None
        self._lg.info("closed server")

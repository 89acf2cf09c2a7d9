"""
Process lifecycle of the pipe server.

Startup order: create the pipe, bind the HTTP server, install the signal
handlers, serve. A failure before serving is fatal and yields exit status 1.
A termination signal removes the pipe and yields exit status 0.
"""

from typing import Any

from ..config import Settings
from ..exceptions import CreationError
from ..log import derive_lg
from ..net import PipeHandler, ServerStartupError, TCPServer
from ..pipe import BoundedPipeReader, ExclusivityToken, PipeLifecycle
from .shutdown import ShutdownManager

EXIT_OK = 0
EXIT_FATAL = 1


class App:
    """
    Wires the pipe, the reader, the HTTP server and signal handling together.

    Example:
        lg = create_root_lg("info")
        settings = load_settings(pipe="/tmp/status.pipe")
        exit(App(lg, settings).run())
    """

    def __init__(self, lg: Any, settings: Settings) -> None:
        self._lg = lg
        self._settings = settings
        pipe_lg = derive_lg(lg, "pipe")
        http_lg = derive_lg(lg, "http")

        self.pipe = PipeLifecycle(pipe_lg, settings.pipe)
        self.token = ExclusivityToken()
        self.handler = PipeHandler(
            http_lg,
            settings.pipe,
            settings.timeout,
            reader=BoundedPipeReader(pipe_lg),
            token=self.token,
        )
        self.server = TCPServer(http_lg, settings.host, settings.port, self.handler)
        self.shutdown = ShutdownManager()

    def run(self) -> int:
        """
        Run until a termination signal arrives.

        Returns:
            Process exit status
        """
        try:
            self.pipe.create()
        except CreationError as e:
            self._lg.critical("failed to create named pipe", extra={"exception": e})
            return EXIT_FATAL

        try:
            self.server.bind()
        except ServerStartupError as e:
            self._lg.critical("failed to start server", extra={"exception": e})
            self.pipe.destroy()
            return EXIT_FATAL

        self._lg.debug(
            "serving pipe",
            extra={"pipe": self._settings.pipe, "timeout": self._settings.timeout},
        )
        self.shutdown.register_signal_handlers()
        try:
            self.server.serve_forever()
        except KeyboardInterrupt:
            signame = self.shutdown.signal_name or "SIGINT"
            self._lg.info("received signal", extra={"signal": signame})
        finally:
            self.pipe.destroy()
            self.shutdown.restore_signal_handlers()
            self.server.close()

        return EXIT_OK

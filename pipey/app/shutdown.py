"""
Shutdown manager for handling termination signals.

SIGTERM and SIGINT are turned into KeyboardInterrupt in the main thread,
which is parked in the server's accept loop. The stack unwinds through the
application's ``finally`` block, which removes the pipe before the process
exits. Request threads are never involved, so an in-flight pipe read cannot
delay or prevent the cleanup.
"""

import signal
from typing import Any


class ShutdownManager:
    """
    Manages shutdown signal handling.

    Usage:
        manager = ShutdownManager()
        manager.register_signal_handlers()
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            lg.info("received signal", extra={"signal": manager.signal_name})
        finally:
            pipe.destroy()
            manager.restore_signal_handlers()
    """

    SIGNALS = (signal.SIGTERM, signal.SIGINT)

    def __init__(self) -> None:
        """Initialize shutdown manager."""
        self._shutting_down = False
        self._signum: int | None = None
        self._original_handlers: dict[signal.Signals, Any] = {}

    def register_signal_handlers(self) -> None:
        """Register signal handlers for SIGTERM and SIGINT."""
        for signum in self.SIGNALS:
            self._original_handlers[signum] = signal.signal(signum, self._handle_signal)

    def restore_signal_handlers(self) -> None:
        """Reinstate the handlers that were active before registration."""
        for signum, handler in self._original_handlers.items():
            signal.signal(signum, handler)
        self._original_handlers.clear()

    def _handle_signal(self, signum: int, frame: Any) -> None:
        """
        Handle shutdown signal by raising KeyboardInterrupt.

        Args:
            signum: Signal number (SIGINT=2, SIGTERM=15)
            frame: Current stack frame (unused)
        """
        if self._shutting_down:
            return  # Ignore duplicate signals

        self._shutting_down = True
        self._signum = signum
        raise KeyboardInterrupt()

    def is_shutting_down(self) -> bool:
        """Check if shutdown is in progress."""
        return self._shutting_down

    @property
    def signal_name(self) -> str | None:
        """Name of the signal that triggered shutdown, if any."""
        if self._signum is None:
            return None
        return signal.Signals(self._signum).name

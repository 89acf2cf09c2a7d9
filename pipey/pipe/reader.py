"""
Bounded-time reads of a named pipe.

Opening a FIFO for reading blocks until a writer connects, so the pipe is
opened non-blocking and readiness is awaited with a deadline instead. Once
readable, the pipe is drained until the writer closes its end, which marks
the end of one message.

Attempt states:

    Opening -> WaitingReadable -> Timeout
                               -> Reading -> Success | ReadFailure
            -> OpenFailure
"""

import os
import selectors
import time
from collections.abc import Callable
from typing import Any

from .outcome import Outcome, ReadAttempt

CHUNK_SIZE = 64 * 1024

# Longest single readiness wait the selector is asked for
MAX_TIMEOUT = 24 * 60 * 60.0

WaitReadable = Callable[[int, float], bool]


def wait_readable(fd: int, timeout: float) -> bool:
    """
    Wait until ``fd`` is readable or ``timeout`` seconds elapse.

    A timeout of 0 polls once and returns immediately. Waits longer than
    MAX_TIMEOUT are shortened to it.

    Returns:
        True if the descriptor became readable, False on timeout
    """
    with selectors.DefaultSelector() as sel:
        sel.register(fd, selectors.EVENT_READ)
        return bool(sel.select(max(0.0, min(timeout, MAX_TIMEOUT))))


class _Incomplete(Exception):
    """Deadline passed while the writer was still mid-message."""

    def __init__(self, data: bytes) -> None:
        super().__init__(f"incomplete message after {len(data)} bytes")
        self.data = data


class BoundedPipeReader:
    """
    Reads one message from a named pipe without blocking past a deadline.

    The readiness wait is injectable so callers can substitute any
    "wait-for-readable(fd, seconds) -> bool" capability.
    """

    def __init__(self, lg: Any, wait: WaitReadable = wait_readable) -> None:
        self._lg = lg
        self._wait = wait

    def read_with_timeout(self, path: str, timeout: float) -> Outcome:
        """
        Read one complete message from the pipe at ``path``.

        Args:
            path: Filesystem path of the named pipe
            timeout: Deadline in seconds (fractions allowed, 0 = do not wait)

        Returns:
            Outcome with the raw bytes on success
        """
        return self.attempt(path, timeout).outcome

    def attempt(self, path: str, timeout: float) -> ReadAttempt:
        """Run one read attempt and return it along with its elapsed time."""
        start = time.monotonic()
        outcome = self._read(path, timeout, start + timeout)
        return ReadAttempt(
            path=path,
            timeout=timeout,
            outcome=outcome,
            elapsed=time.monotonic() - start,
        )

    def _read(self, path: str, timeout: float, deadline: float) -> Outcome:
        try:
            fd = os.open(path, os.O_RDONLY | os.O_NONBLOCK)
        except OSError as e:
            self._lg.error("error opening pipe", extra={"exception": e})
            return Outcome.open_failure(str(e))

        try:
            try:
                ready = self._wait(fd, timeout)
            except OSError as e:
                self._lg.error("readiness wait failed", extra={"exception": e})
                return Outcome.read_failure(str(e))

            if not ready:
                self._lg.trace("timeout reading from pipe", extra={"timeout": timeout})
                return Outcome.timeout()

            try:
                data = self._drain(fd, deadline)
            except _Incomplete as e:
                if not e.data:
                    return Outcome.timeout()
                self._lg.error("incomplete message in pipe", extra={"error": e})
                return Outcome.read_failure(str(e), data=e.data)
            except OSError as e:
                self._lg.error("error reading from pipe", extra={"exception": e})
                return Outcome.read_failure(str(e))

            self._lg.trace("read from pipe", extra={"bytes": len(data)})
            return Outcome.success(data)
        finally:
            os.close(fd)

    def _drain(self, fd: int, deadline: float) -> bytes:
        """Read until EOF, waiting out short gaps while the writer is mid-message."""
        chunks: list[bytes] = []
        while True:
            try:
                chunk = os.read(fd, CHUNK_SIZE)
            except BlockingIOError:
                if not self._wait(fd, max(0.0, deadline - time.monotonic())):
                    raise _Incomplete(b"".join(chunks)) from None
                continue
            if not chunk:
                return b"".join(chunks)
            chunks.append(chunk)

"""
Process-wide single-reader guard.

All request threads share one ExclusivityToken, so at most one read of the
pipe is in flight at any time. The token is held for the whole attempt,
including the readiness wait.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class ExclusivityToken:
    """
    Mutual-exclusion guard around pipe reads.

    Usage:
        token = ExclusivityToken()
        with token.hold():
            outcome = reader.read_with_timeout(path, timeout)

    The holder thread and the number of completed acquisitions are tracked
    so that callers can verify reads never overlap.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._holder: int | None = None
        self._acquisitions = 0

    @contextmanager
    def hold(self) -> Iterator[None]:
        """
        Block until the token is free, then hold it for the ``with`` body.

        The token is released on every exit path, including exceptions.

        Raises:
            RuntimeError: If the calling thread already holds the token
        """
        if self._holder == threading.get_ident():
            raise RuntimeError("re-entrant acquisition of pipe exclusivity token")

        with self._lock:
            self._holder = threading.get_ident()
            self._acquisitions += 1
            try:
                yield
            finally:
                self._holder = None

    @property
    def holder(self) -> int | None:
        """Thread ident of the current holder, or None when free."""
        return self._holder

    @property
    def acquisitions(self) -> int:
        return self._acquisitions

    def locked(self) -> bool:
        return self._lock.locked()

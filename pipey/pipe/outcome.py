"""
Result values of a single bounded pipe read.

A ReadAttempt is created per HTTP request and discarded once the response
is written. Failures are carried as OutcomeKind values instead of raised,
which keeps them contained to the request that produced them.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from http import HTTPStatus


class OutcomeKind(enum.Enum):
    """Terminal states of a read attempt."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    OPEN_FAILURE = "open_failure"
    READ_FAILURE = "read_failure"
    VALIDATION_FAILURE = "validation_failure"

    @property
    def http_status(self) -> HTTPStatus:
        """HTTP status a request ending in this state is answered with."""
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    OutcomeKind.SUCCESS: HTTPStatus.OK,
    OutcomeKind.TIMEOUT: HTTPStatus.NOT_FOUND,
    OutcomeKind.OPEN_FAILURE: HTTPStatus.INTERNAL_SERVER_ERROR,
    OutcomeKind.READ_FAILURE: HTTPStatus.INTERNAL_SERVER_ERROR,
    OutcomeKind.VALIDATION_FAILURE: HTTPStatus.INTERNAL_SERVER_ERROR,
}


@dataclass(frozen=True)
class Outcome:
    """
    Outcome of one read attempt.

    Attributes:
        kind: Terminal state
        data: Raw bytes read (only meaningful for SUCCESS and VALIDATION_FAILURE)
        error: Server-side detail for failures, never sent to clients
    """

    kind: OutcomeKind
    data: bytes = b""
    error: str | None = None

    @classmethod
    def success(cls, data: bytes) -> Outcome:
        return cls(OutcomeKind.SUCCESS, data=data)

    @classmethod
    def timeout(cls) -> Outcome:
        return cls(OutcomeKind.TIMEOUT, error="no data within timeout")

    @classmethod
    def open_failure(cls, error: str) -> Outcome:
        return cls(OutcomeKind.OPEN_FAILURE, error=error)

    @classmethod
    def read_failure(cls, error: str, data: bytes = b"") -> Outcome:
        return cls(OutcomeKind.READ_FAILURE, data=data, error=error)

    @classmethod
    def validation_failure(cls, data: bytes, error: str) -> Outcome:
        return cls(OutcomeKind.VALIDATION_FAILURE, data=data, error=error)

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @property
    def http_status(self) -> HTTPStatus:
        return self.kind.http_status


@dataclass(frozen=True)
class ReadAttempt:
    """One bounded read of the pipe at ``path`` with a ``timeout`` deadline."""

    path: str
    timeout: float
    outcome: Outcome
    elapsed: float

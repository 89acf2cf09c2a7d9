"""
Serving the pipe over HTTP.

Each request takes the exclusivity token, performs one bounded read of the
pipe, validates the bytes as JSON and writes the response, then releases the
token. Requests are therefore served strictly one at a time.

Outcome to status mapping:
    SUCCESS            -> 200, raw bytes, application/json
    TIMEOUT            -> 404
    OPEN_FAILURE       -> 500
    READ_FAILURE       -> 500
    VALIDATION_FAILURE -> 500

Error bodies are the bare status phrase; details stay in the server log.
"""

import json
from typing import Any

from ..pipe import BoundedPipeReader, ExclusivityToken, Outcome

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant: {name}")


def validate_json(outcome: Outcome) -> Outcome:
    """
    Check that a successful outcome carries a well-formed JSON document.

    NaN and Infinity literals are rejected since they are not JSON.

    Returns:
        The outcome unchanged, or a VALIDATION_FAILURE carrying the bytes
    """
    if not outcome.ok:
        return outcome
    try:
        json.loads(outcome.data, parse_constant=_reject_constant)
    except ValueError as e:
        return Outcome.validation_failure(outcome.data, str(e))
    return outcome


class PipeHandler:
    """
    Application handler answering every request from the named pipe.

    Args:
        lg: Logger instance
        path: Filesystem path of the named pipe
        timeout: Read deadline in seconds
        reader: Pipe reader (a BoundedPipeReader when None)
        token: Exclusivity token shared by all requests (a new one when None)
    """

    def __init__(
        self,
        lg: Any,
        path: str,
        timeout: float,
        reader: BoundedPipeReader | None = None,
        token: ExclusivityToken | None = None,
    ) -> None:
        self._lg = lg
        self._path = path
        self._timeout = timeout
        self._reader = reader or BoundedPipeReader(lg)
        self._token = token or ExclusivityToken()

    @property
    def token(self) -> ExclusivityToken:
        return self._token

    def handle(self, instance: Any, method: str) -> None:
        """
        Serve one HTTP request.

        Args:
            instance: The per-connection http.server request handler
            method: HTTP method; HEAD responses carry headers only
        """
        with self._token.hold():
            self._log_request(instance, method)
            outcome = self.fetch()
            self._respond(instance, outcome, body=method != "HEAD")

    def fetch(self) -> Outcome:
        """Read the pipe once and validate what was read."""
        attempt = self._reader.attempt(self._path, self._timeout)
        outcome = validate_json(attempt.outcome)

        extra: dict[str, Any] = {
            "outcome": outcome.kind.value,
            "status": int(outcome.http_status),
            "bytes": len(outcome.data),
            "elapsed": round(attempt.elapsed, 6),
        }
        if outcome.ok:
            self._lg.info("served from pipe", extra=extra)
        else:
            self._lg.warning(outcome.error or "read failed", extra=extra)
        return outcome

    def _log_request(self, instance: Any, method: str) -> None:
        host, port = instance.client_address[:2]
        self._lg.info(
            "received request",
            extra={
                "method": method,
                "remote": f"{host}:{port}",
                "user_agent": instance.headers.get("User-Agent", ""),
            },
        )

    def _respond(self, instance: Any, outcome: Outcome, body: bool) -> None:
        status = outcome.http_status
        if outcome.ok:
            payload = outcome.data
            content_type = JSON_CONTENT_TYPE
        else:
            payload = f"{status.phrase}\n".encode()
            content_type = TEXT_CONTENT_TYPE

        instance.send_response(status)
        instance.send_header("Content-Type", content_type)
        instance.send_header("Content-Length", str(len(payload)))
        if not outcome.ok:
            instance.send_header("X-Content-Type-Options", "nosniff")
        instance.end_headers()
        if body:
            instance.wfile.write(payload)

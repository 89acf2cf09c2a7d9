"""
Pytest configuration and shared fixtures.

This module provides central pytest configuration, custom markers,
and shared fixtures for the pipey test suite.
"""

import errno
import logging
import os
import threading
import time
from collections.abc import Callable, Generator, Sequence
from io import BytesIO, StringIO
from pathlib import Path
from unittest.mock import Mock

import pytest

# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, isolated, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (real FIFOs, sockets, threads)"
    )
    config.addinivalue_line("markers", "property: Property-based tests")
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests (pipey run as a subprocess)"
    )
    config.addinivalue_line("markers", "slow: Tests that take >1 second to run")


def pytest_collection_modifyitems(config, items):
    """Add 'unit' marker to tests without other markers."""
    for item in items:
        if not any(
            mark.name in ["integration", "e2e"] for mark in item.iter_markers()
        ):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Logging Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_logging_state() -> Generator[None, None, None]:
    """
    Reset Python logging global state after each test.

    Removes the "/" named loggers created by pipey so tests don't share
    handlers or levels.
    """
    yield

    for name in list(logging.root.manager.loggerDict.keys()):
        if name.startswith("/"):
            del logging.root.manager.loggerDict[name]


@pytest.fixture
def log_stream() -> StringIO:
    """Stream capturing output of loggers created with root_lg."""
    return StringIO()


@pytest.fixture
def root_lg(log_stream: StringIO):
    """Real root logger at trace level writing plain text to log_stream."""
    from pipey.log import create_root_lg

    return create_root_lg("trace", colors=False, stream=log_stream)


@pytest.fixture
def mock_logger() -> Mock:
    """Create mock logger."""
    logger = Mock()
    logger.trace = Mock()
    logger.debug = Mock()
    logger.info = Mock()
    logger.warning = Mock()
    logger.error = Mock()
    logger.critical = Mock()
    return logger


# =============================================================================
# Named Pipe Fixtures
# =============================================================================


@pytest.fixture
def pipe_path(tmp_path: Path) -> str:
    """Path for a named pipe inside a per-test temporary directory (not created)."""
    return str(tmp_path / "test.pipe")


@pytest.fixture
def fifo(pipe_path: str) -> Generator[str, None, None]:
    """An existing named pipe."""
    os.mkfifo(pipe_path, 0o600)
    yield pipe_path
    if os.path.exists(pipe_path):
        os.unlink(pipe_path)


def _open_writer(path: str, timeout: float) -> int | None:
    """Open the pipe for writing once a reader is present."""
    deadline = time.monotonic() + timeout
    while True:
        try:
            return os.open(path, os.O_WRONLY | os.O_NONBLOCK)
        except OSError as e:
            if e.errno != errno.ENXIO or time.monotonic() > deadline:
                return None
            time.sleep(0.002)


def _write_all(fd: int, data: bytes) -> None:
    view = memoryview(data)
    while view:
        n = os.write(fd, view)
        view = view[n:]


def feed_pipe(
    path: str,
    parts: Sequence[bytes],
    delay: float = 0.0,
    gap: float = 0.0,
    hold: float = 0.0,
    connect_timeout: float = 5.0,
) -> None:
    """
    Act as a producer: wait for a reader, write ``parts`` and close.

    Args:
        path: Pipe path
        parts: Byte strings written in order
        delay: Seconds to wait before connecting
        gap: Seconds between parts
        hold: Seconds to keep the pipe open after the last part
        connect_timeout: Give up if no reader shows up within this many seconds
    """
    time.sleep(delay)
    fd = _open_writer(path, connect_timeout)
    if fd is None:
        return
    try:
        os.set_blocking(fd, True)
        for i, part in enumerate(parts):
            if i and gap:
                time.sleep(gap)
            _write_all(fd, part)
        time.sleep(hold)
    except BrokenPipeError:
        pass
    finally:
        os.close(fd)


@pytest.fixture
def pipe_writer() -> Generator[Callable[..., threading.Thread], None, None]:
    """
    Start producers on background threads.

    Usage:
        pipe_writer(fifo, [b'{"a":1}'], delay=0.2)
    """
    threads: list[threading.Thread] = []

    def start(path: str, parts: Sequence[bytes], **kwargs) -> threading.Thread:
        t = threading.Thread(
            target=feed_pipe, args=(path, parts), kwargs=kwargs, daemon=True
        )
        t.start()
        threads.append(t)
        return t

    yield start

    for t in threads:
        t.join(timeout=10)


# =============================================================================
# HTTP Fixtures
# =============================================================================


@pytest.fixture
def http_instance() -> Mock:
    """Stand-in for a per-connection http.server request handler."""
    instance = Mock()
    instance.client_address = ("127.0.0.1", 54321)
    instance.headers = {"User-Agent": "pytest"}
    instance.wfile = BytesIO()
    return instance

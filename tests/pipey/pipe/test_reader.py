"""
Tests for pipe/reader.py.

Tests bounded pipe reads including:
- Timeout with no writer, including a zero timeout
- Byte-exact reads of a complete message
- Messages written in several parts
- Incomplete messages at the deadline
- Open, readiness and read failures
- Descriptor release on every path
"""

import os
import time
from unittest.mock import patch

import pytest

from pipey.pipe import BoundedPipeReader, OutcomeKind, wait_readable

# =============================================================================
# Test wait_readable
# =============================================================================


class TestWaitReadable:
    """Test the readiness primitive."""

    def test_times_out_without_data(self):
        r, w = os.pipe()
        try:
            start = time.monotonic()
            assert wait_readable(r, 0.05) is False
            assert time.monotonic() - start >= 0.04
        finally:
            os.close(r)
            os.close(w)

    def test_readable_with_data(self):
        r, w = os.pipe()
        try:
            os.write(w, b"x")
            assert wait_readable(r, 1.0) is True
        finally:
            os.close(r)
            os.close(w)

    def test_zero_timeout_polls(self):
        r, w = os.pipe()
        try:
            start = time.monotonic()
            assert wait_readable(r, 0) is False
            assert time.monotonic() - start < 0.1
        finally:
            os.close(r)
            os.close(w)

    @pytest.mark.parametrize("timeout", [float("inf"), 1e10])
    def test_oversized_timeout_is_capped(self, timeout):
        r, w = os.pipe()
        try:
            os.write(w, b"x")
            assert wait_readable(r, timeout) is True
        finally:
            os.close(r)
            os.close(w)

    def test_negative_timeout_treated_as_zero(self):
        r, w = os.pipe()
        try:
            assert wait_readable(r, -1.0) is False
        finally:
            os.close(r)
            os.close(w)


# =============================================================================
# Test BoundedPipeReader against real FIFOs
# =============================================================================


@pytest.mark.integration
class TestReadWithTimeout:
    """Test reads of a real named pipe."""

    def test_no_writer_times_out(self, fifo, mock_logger):
        reader = BoundedPipeReader(mock_logger)

        start = time.monotonic()
        outcome = reader.read_with_timeout(fifo, 0.2)
        elapsed = time.monotonic() - start

        assert outcome.kind is OutcomeKind.TIMEOUT
        assert 0.15 <= elapsed < 1.0

    def test_zero_timeout_returns_immediately(self, fifo, mock_logger):
        reader = BoundedPipeReader(mock_logger)

        start = time.monotonic()
        outcome = reader.read_with_timeout(fifo, 0)

        assert outcome.kind is OutcomeKind.TIMEOUT
        assert time.monotonic() - start < 0.2

    def test_reads_complete_message(self, fifo, mock_logger, pipe_writer):
        pipe_writer(fifo, [b'{"a":1}'], delay=0.05)

        outcome = BoundedPipeReader(mock_logger).read_with_timeout(fifo, 2.0)

        assert outcome.kind is OutcomeKind.SUCCESS
        assert outcome.data == b'{"a":1}'

    @pytest.mark.parametrize("timeout", [float("inf"), 1e10])
    def test_oversized_timeout_still_reads(
        self, fifo, mock_logger, pipe_writer, timeout
    ):
        pipe_writer(fifo, [b'{"a":1}'], delay=0.2)

        outcome = BoundedPipeReader(mock_logger).read_with_timeout(fifo, timeout)

        assert outcome.kind is OutcomeKind.SUCCESS
        assert outcome.data == b'{"a":1}'

    def test_reads_message_written_in_parts(self, fifo, mock_logger, pipe_writer):
        pipe_writer(fifo, [b'{"a":', b"[1,2,", b"3]}"], gap=0.05)

        outcome = BoundedPipeReader(mock_logger).read_with_timeout(fifo, 2.0)

        assert outcome.kind is OutcomeKind.SUCCESS
        assert outcome.data == b'{"a":[1,2,3]}'

    def test_reads_message_larger_than_pipe_buffer(
        self, fifo, mock_logger, pipe_writer
    ):
        payload = bytes(range(256)) * 1024  # 256 KiB
        pipe_writer(fifo, [payload])

        outcome = BoundedPipeReader(mock_logger).read_with_timeout(fifo, 5.0)

        assert outcome.kind is OutcomeKind.SUCCESS
        assert outcome.data == payload

    def test_writer_closing_without_data_reads_empty(
        self, fifo, mock_logger, pipe_writer
    ):
        pipe_writer(fifo, [])

        outcome = BoundedPipeReader(mock_logger).read_with_timeout(fifo, 2.0)

        assert outcome.kind is OutcomeKind.SUCCESS
        assert outcome.data == b""

    def test_incomplete_message_is_read_failure(self, fifo, mock_logger, pipe_writer):
        pipe_writer(fifo, [b'{"a":'], hold=0.8)

        start = time.monotonic()
        outcome = BoundedPipeReader(mock_logger).read_with_timeout(fifo, 0.3)

        assert outcome.kind is OutcomeKind.READ_FAILURE
        assert outcome.data == b'{"a":'
        assert time.monotonic() - start < 0.7

    def test_silent_writer_times_out(self, fifo, mock_logger, pipe_writer):
        pipe_writer(fifo, [], hold=0.6)

        outcome = BoundedPipeReader(mock_logger).read_with_timeout(fifo, 0.2)

        assert outcome.kind is OutcomeKind.TIMEOUT

    def test_missing_path_is_open_failure(self, pipe_path, mock_logger):
        outcome = BoundedPipeReader(mock_logger).read_with_timeout(pipe_path, 0.1)

        assert outcome.kind is OutcomeKind.OPEN_FAILURE
        assert outcome.error
        mock_logger.error.assert_called()

    def test_attempt_records_path_timeout_and_elapsed(self, fifo, mock_logger):
        attempt = BoundedPipeReader(mock_logger).attempt(fifo, 0.05)

        assert attempt.path == fifo
        assert attempt.timeout == 0.05
        assert attempt.outcome.kind is OutcomeKind.TIMEOUT
        assert attempt.elapsed >= 0.04


# =============================================================================
# Test failure paths with an injected readiness wait
# =============================================================================


class TestFailurePaths:
    """Test readiness and read failures."""

    def test_wait_error_is_read_failure(self, fifo, mock_logger):
        def failing_wait(fd, timeout):
            raise OSError(5, "Input/output error")

        reader = BoundedPipeReader(mock_logger, wait=failing_wait)
        outcome = reader.read_with_timeout(fifo, 1.0)

        assert outcome.kind is OutcomeKind.READ_FAILURE
        assert "Input/output error" in outcome.error

    def test_read_error_is_read_failure(self, tmp_path, mock_logger):
        # read() on a directory descriptor fails with EISDIR
        reader = BoundedPipeReader(mock_logger, wait=lambda fd, timeout: True)
        outcome = reader.read_with_timeout(str(tmp_path), 1.0)

        assert outcome.kind is OutcomeKind.READ_FAILURE
        mock_logger.error.assert_called()

    def test_wait_receives_configured_timeout(self, fifo, mock_logger):
        seen = []

        def recording_wait(fd, timeout):
            seen.append(timeout)
            return False

        BoundedPipeReader(mock_logger, wait=recording_wait).read_with_timeout(
            fifo, 0.123456
        )

        assert seen == [0.123456]



# =============================================================================
# Test descriptor release
# =============================================================================


class TestDescriptorRelease:
    """The pipe descriptor is closed on every exit path."""

    def test_closed_after_timeout(self, fifo, mock_logger):
        with patch("pipey.pipe.reader.os.close", wraps=os.close) as close:
            BoundedPipeReader(mock_logger).read_with_timeout(fifo, 0)
        close.assert_called_once()

    def test_closed_after_wait_error(self, fifo, mock_logger):
        def failing_wait(fd, timeout):
            raise OSError(5, "Input/output error")

        with patch("pipey.pipe.reader.os.close", wraps=os.close) as close:
            BoundedPipeReader(mock_logger, wait=failing_wait).read_with_timeout(
                fifo, 0.1
            )
        close.assert_called_once()

    def test_closed_after_unexpected_error(self, fifo, mock_logger):
        def broken_wait(fd, timeout):
            raise RuntimeError("boom")

        with patch("pipey.pipe.reader.os.close", wraps=os.close) as close:
            with pytest.raises(RuntimeError):
                BoundedPipeReader(mock_logger, wait=broken_wait).read_with_timeout(
                    fifo, 0.1
                )
        close.assert_called_once()

    def test_not_closed_when_open_fails(self, pipe_path, mock_logger):
        with patch("pipey.pipe.reader.os.close", wraps=os.close) as close:
            BoundedPipeReader(mock_logger).read_with_timeout(pipe_path, 0.1)
        close.assert_not_called()

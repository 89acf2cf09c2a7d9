"""Named pipe lifecycle and bounded reads."""

from .lifecycle import DEFAULT_MODE, PipeLifecycle
from .outcome import Outcome, OutcomeKind, ReadAttempt
from .reader import MAX_TIMEOUT, BoundedPipeReader, wait_readable
from .token import ExclusivityToken

__all__ = [
    "PipeLifecycle",
    "DEFAULT_MODE",
    "BoundedPipeReader",
    "wait_readable",
    "MAX_TIMEOUT",
    "ExclusivityToken",
    "Outcome",
    "OutcomeKind",
    "ReadAttempt",
]

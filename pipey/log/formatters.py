"""
Log formatters for the logging system.

Renders records as a fixed-width message column followed by structured
``[key:value]`` fields, the process id and the logger name.
"""

import logging
import re
import sys
import traceback
from typing import Any

from .colors import ColorManager
from .config import LogConfig
from .constants import LogConstants
from .exceptions import FormatterError

# Pattern to match ANSI escape sequences
_ANSI_PATTERN = re.compile(r"\x1b\[[0-9;]*m")


def _visual_len(text: str) -> int:
    """Calculate visual width of text, excluding ANSI escape codes."""
    if "\x1b" not in text:
        return len(text)
    return len(_ANSI_PATTERN.sub("", text))


def _extra_of(record: logging.LogRecord) -> dict[str, Any]:
    return getattr(record, "__pipey__extra", None) or {}


def _render_exception(e: BaseException) -> str:
    """Render exception with traceback when one is being handled."""
    if not isinstance(e, BaseException):
        raise FormatterError(f"Not an exception: {type(e)}")

    exc_type, exc_value, exc_traceback = sys.exc_info()
    if exc_value is not e:
        return f"{e.__class__.__name__}: {e}"

    out = f"{exc_type.__name__}: {exc_value}"  # type: ignore[union-attr]
    for filename, lineno, function_name, text in traceback.extract_tb(exc_traceback):
        out += f'\n  File "{filename}", line {lineno}, in {function_name}'
        if text:
            out += f"\n    {text.strip()}"
    return out


class PreFormatter(logging.Formatter):
    """
    Formatter that optionally adds sub-millisecond digits to timestamps.
    """

    def __init__(self, fmt: str, micros: bool) -> None:
        self._micros = micros
        super().__init__(fmt)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        s = super().formatTime(record)
        if self._micros:
            micros = int((record.created % 1) * 1000000) % 1000
            s += f".{micros:03d}"
        return s


class FieldFormatter:
    """Handles individual field formatting with colors and brackets."""

    def __init__(self, config: LogConfig):
        self._config = config

    def format_field(
        self, value: Any, col: str, bold: str, name: str = "", quote: bool = False
    ) -> str:
        """
        Format a single field with color and brackets.

        Args:
            value: The value to format
            col: Color escape sequence
            bold: Bold color escape sequence
            name: Field name (empty for anonymous fields)
            quote: Whether to escape % characters for logging safety

        Returns:
            Formatted field string
        """
        if isinstance(value, (list, tuple)):
            mid = ",".join(str(v) for v in value)
        elif isinstance(value, BaseException):
            mid = value.__class__.__name__
        else:
            mid = str(value)
        if quote:
            mid = mid.replace("%", "%%")

        if not self._config.colors:
            return f"[{name}:{mid}]" if name else f"[{mid}]"

        head = ColorManager.RESET + col + (name + ":" if name else "") + "["
        return head + bold + mid + ColorManager.RESET + col + "]"

    def format_fields(self, fields: dict[str, Any], col: str, bold: str) -> str:
        """Format a dictionary of fields, rendering any exception last."""
        s = " ".join(
            self.format_field(v, col, bold, k, quote=True)
            for k, v in sorted(fields.items())
        )
        if "exception" in fields and isinstance(fields["exception"], BaseException):
            s += "\n" + _render_exception(fields["exception"]).replace("%", "%%")
        return s


class LogFormatter(logging.Formatter):
    """
    Log formatter with colored output and structured field formatting.

    Provides console output with:
    - ANSI color codes for different log levels
    - Structured field formatting with brackets
    - Exception traceback rendering
    - Process and logger name information
    """

    def __init__(self, config: LogConfig):
        super().__init__()
        self._config = config
        self._field_formatter = FieldFormatter(config)
        self._pre_formatter = PreFormatter(LogConstants.DEFAULT_FORMAT, config.micros)

    def format(self, record: logging.LogRecord) -> str:
        width = self._calculate_width(record)
        if self._config.colors:
            fmt = self._format_colored(record, width)
        else:
            fmt = self._format_plain(record, width)

        self._pre_formatter._fmt = fmt
        self._pre_formatter._style._fmt = fmt
        return self._pre_formatter.format(record)

    def _calculate_width(self, record: logging.LogRecord) -> int:
        """Display width of "[HH:MM:SS,mmm] [L] message"."""
        timestamp_len = 16 if self._config.micros else 12
        return 1 + timestamp_len + 4 + 1 + 2 + _visual_len(record.getMessage())

    def _rule(self, width: int) -> str:
        rule = (
            LogConstants.MICRO_RULE_WIDTH
            if self._config.micros
            else LogConstants.DEFAULT_RULE_WIDTH
        )
        return " " * max(1, rule - width)

    def _format_plain(self, record: logging.LogRecord, width: int) -> str:
        fmt = LogConstants.DEFAULT_FORMAT + self._rule(width)
        extra = _extra_of(record)
        if extra:
            fmt += self._field_formatter.format_fields(extra, "", "") + " "
        return fmt + "[%(process)d] [%(name)s]"

    def _format_colored(self, record: logging.LogRecord, width: int) -> str:
        col = ColorManager.get_color_for_level(record.levelno) or ColorManager.DEFAULT
        bold = ColorManager.create_bold_color(col)
        col += "m"

        fmt = self._field_formatter.format_field("%(asctime)s", col, "")
        fmt += " " + self._field_formatter.format_field("%(levelname).1s", col, bold)
        fmt += " " + bold + "%(message)s" + self._rule(width)

        extra = _extra_of(record)
        if extra:
            fmt += self._field_formatter.format_fields(extra, col, bold) + " "

        gray = ColorManager.create_gray_level(9)
        fmt += self._field_formatter.format_field("%(process)d", gray + "m", gray + ";1m")
        fmt += " " + self._field_formatter.format_field(
            "%(name)s", gray + "m", gray + ";1m"
        )
        return col + fmt + ColorManager.RESET

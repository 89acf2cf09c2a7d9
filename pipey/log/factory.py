"""
Factory for creating and configuring loggers.

Logger names follow a "/" hierarchy: the root is "/" and derived loggers
are "/pipe", "/http" and so on.
"""

import logging
import sys
from typing import Any, TextIO, cast

from .config import LogConfig
from .formatters import LogFormatter
from .logger import Logger


class LoggerFactory:
    """Factory for creating and configuring loggers."""

    @staticmethod
    def create_root(config: LogConfig, stream: TextIO | None = None) -> Logger:
        """
        Create the root "/" logger with a console handler.

        Example:
            >>> lg = LoggerFactory.create_root(LogConfig.from_params("debug"))
            >>> lg.info("started", extra={"port": 8080})
            [12:34:56,789] [I] started            [port:8080] [1234] [/]
        """
        return LoggerFactory.create("/", config, stream=stream)

    @staticmethod
    def create(
        name: str,
        config: LogConfig,
        extra: dict[str, Any] | None = None,
        stream: TextIO | None = None,
    ) -> Logger:
        """
        Create a logger with its own console handler.

        An existing logger of the same name is reconfigured rather than
        duplicated.

        Args:
            name: Logger name
            config: Logger configuration
            extra: Pre-populated extra fields to include in all log records
            stream: Output stream (stdout when None)
        """
        existing = logging.root.manager.loggerDict.get(name)
        if isinstance(existing, Logger):
            for handler in list(existing.handlers):
                existing.removeHandler(handler)
            lg = existing
            lg._config = config
            lg._logging_disabled = config.level is False
        else:
            lg = Logger(name, config, extra)

        if config.level is not False:
            lg.setLevel(cast(int, config.level))

        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setFormatter(LogFormatter(config))
        lg.addHandler(handler)
        lg.propagate = False
        lg.parent = logging.root

        logging.root.manager.loggerDict[name] = lg
        return lg

    @staticmethod
    def derive(parent: Logger, tags: str | list[str]) -> Logger:
        """
        Derive a "view" logger that delegates to root's handlers.

        Examples:
            >>> LoggerFactory.derive(root, "pipe").name
            '/pipe'
            >>> LoggerFactory.derive(root, ["http", "access"]).name
            '/http/access'

        Args:
            parent: Parent logger instance
            tags: Single tag string OR list of tag strings to form hierarchy
        """
        if isinstance(tags, str):
            tags = [tags]

        prefix = parent.name if parent.name == "/" else parent.name + "/"
        name = prefix + "/".join(tags)
        root = parent._root_logger or parent

        existing = logging.root.manager.loggerDict.get(name)
        if isinstance(existing, Logger) and existing._root_logger is root:
            return existing

        lg = Logger(name, parent.config, dict(parent._extra))
        lg.setLevel(parent.level)
        lg._root_logger = root
        lg.parent = parent
        lg.propagate = False

        logging.root.manager.loggerDict[name] = lg
        return lg

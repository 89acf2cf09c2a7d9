"""
Command line interface.

Usage:
    pipey /tmp/status.pipe
    pipey /tmp/status.pipe --host 0.0.0.0 --port 9000 --timeout 0.25
    pipey /tmp/status.pipe --config etc/pipey.yaml --log-level debug
"""

import argparse
import math
import sys

from .app import EXIT_FATAL, App
from .config import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT, load_settings
from .exceptions import PipeyError
from .log import create_root_lg
from .pipe import MAX_TIMEOUT
from .version import version_string


class DefaultsHelpFormatter(argparse.HelpFormatter):
    """
    Help formatter that appends default values to help text.

    Defaults of None are omitted since they mean "taken from the config file
    or environment".
    """

    def _get_help_string(self, action: argparse.Action) -> str:
        help_text = action.help or ""
        if action.default is not argparse.SUPPRESS and action.default is not None:
            return help_text + f" (default: {action.default})"
        return help_text


def _timeout(value: str) -> float:
    try:
        secs = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid timeout: {value!r}") from None
    if not math.isfinite(secs) or secs < 0:
        raise argparse.ArgumentTypeError(
            f"timeout must be a finite number >= 0: {value!r}"
        )
    if secs > MAX_TIMEOUT:
        raise argparse.ArgumentTypeError(
            f"timeout must be at most {MAX_TIMEOUT:g}: {value!r}"
        )
    return secs


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="pipey",
        description="HTTP server that reads from a named pipe and exposes it over HTTP",
        formatter_class=DefaultsHelpFormatter,
    )
    parser.add_argument("pipe", metavar="PIPE_NAME", help="path of the named pipe")
    parser.add_argument(
        "-H", "--host", help=f"host address to bind to [{DEFAULT_HOST}]"
    )
    parser.add_argument(
        "-p", "--port", type=int, help=f"port to listen on [{DEFAULT_PORT}]"
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=_timeout,
        help=f"seconds to wait for pipe data per request [{DEFAULT_TIMEOUT:g}]",
    )
    parser.add_argument("-c", "--config", help="YAML configuration file")
    parser.add_argument(
        "-l",
        "--log-level",
        help="log level: trace, debug, info, warning, error, critical or false",
    )
    parser.add_argument(
        "--no-colors",
        dest="log_colors",
        action="store_false",
        default=None,
        help="disable colored log output",
    )
    parser.add_argument("--version", action="version", version=version_string())
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Run pipey.

    Returns:
        Process exit status
    """
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(
            args.config,
            pipe=args.pipe,
            host=args.host,
            port=args.port,
            timeout=args.timeout,
            log_level=args.log_level,
            log_colors=args.log_colors,
        )
    except PipeyError as e:
        lg = create_root_lg("info", colors=sys.stdout.isatty())
        lg.critical("invalid configuration", extra={"exception": e})
        return EXIT_FATAL

    lg = create_root_lg(
        settings.log_level, micros=settings.log_micros, colors=settings.log_colors
    )
    return App(lg, settings).run()

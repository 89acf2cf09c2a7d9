"""
pipey - serve the contents of a named pipe over HTTP.

A producer writes one JSON document to the pipe and closes it; each HTTP
request performs one bounded read of the pipe and returns the document.
"""

from .config import Settings, load_settings
from .exceptions import CleanupError, ConfigError, CreationError, PipeError, PipeyError
from .version import package_version

__version__ = package_version()

__all__ = [
    "__version__",
    "Settings",
    "load_settings",
    "PipeyError",
    "ConfigError",
    "PipeError",
    "CreationError",
    "CleanupError",
]

"""Application shell: startup, serving and signal-driven shutdown."""

from .app import EXIT_FATAL, EXIT_OK, App
from .shutdown import ShutdownManager

__all__ = ["App", "ShutdownManager", "EXIT_OK", "EXIT_FATAL"]

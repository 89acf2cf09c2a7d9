"""
Creation and removal of the named pipe.

The pipe is created once at startup, replacing whatever stale entry exists
at its path, and removed once at shutdown. Removal is best effort: it runs
on a shutdown path where an exception has no one to report to.
"""

import os
import shutil
import stat
from typing import Any

from ..exceptions import CleanupError, CreationError

DEFAULT_MODE = 0o666


def _remove_entry(path: str) -> None:
    """Remove the filesystem entry at ``path``, directories included."""
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    else:
        os.unlink(path)


class PipeLifecycle:
    """
    Owns the named pipe at a filesystem path.

    Example:
        pipe = PipeLifecycle(lg, "/tmp/status.pipe")
        pipe.create()
        try:
            serve()
        finally:
            pipe.destroy()
    """

    def __init__(self, lg: Any, path: str, mode: int = DEFAULT_MODE) -> None:
        """
        Args:
            lg: Logger instance
            path: Filesystem path of the named pipe
            mode: Permission bits of the pipe
        """
        self._lg = lg
        self._path = path
        self._mode = mode

    @property
    def path(self) -> str:
        return self._path

    def exists(self) -> bool:
        """Check whether a named pipe currently exists at the path."""
        try:
            return stat.S_ISFIFO(os.lstat(self._path).st_mode)
        except OSError:
            return False

    def create(self) -> None:
        """
        Create the named pipe, replacing any stale entry at the path.

        Raises:
            CreationError: If the stale entry cannot be removed or mkfifo fails
        """
        try:
            _remove_entry(self._path)
            self._lg.debug("removed stale entry", extra={"path": self._path})
        except FileNotFoundError:
            pass
        except OSError as e:
            raise CreationError(
                "failed to remove stale entry", path=self._path, error=e.strerror
            ) from e

        try:
            os.mkfifo(self._path, self._mode)
            # mkfifo is subject to the umask
            os.chmod(self._path, self._mode)
        except OSError as e:
            raise CreationError(
                "failed to create named pipe", path=self._path, error=e.strerror
            ) from e

        self._lg.info(
            "created named pipe", extra={"path": self._path, "mode": oct(self._mode)}
        )

    def destroy(self) -> None:
        """Remove the named pipe. Failures are logged, never raised."""
        self._lg.info("cleaning up", extra={"pipe": self._path})
        try:
            _remove_entry(self._path)
        except FileNotFoundError:
            pass
        except OSError as e:
            err = CleanupError(
                "could not remove named pipe", path=self._path, error=e.strerror
            )
            self._lg.error(str(err))

    def __enter__(self) -> "PipeLifecycle":
        self.create()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.destroy()

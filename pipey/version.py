"""
Version reporting.

The package version comes from installed metadata. When the package was
built from a git checkout, setup.py also generates ``pipey/_build_info.py``
holding the commit, which is appended to the version string.
"""

import importlib
import importlib.util
from importlib.metadata import PackageNotFoundError, version

PACKAGE = "pipey"


def package_version() -> str:
    try:
        return version(PACKAGE)
    except PackageNotFoundError:
        # Package not installed, running from a source tree
        return "0.1.0-dev"


def build_commit() -> str | None:
    """Short commit hash recorded at build time, if any."""
    module_name = f"{PACKAGE}._build_info"
    if importlib.util.find_spec(module_name) is None:
        return None
    build_info = importlib.import_module(module_name)
    commit = getattr(build_info, "COMMIT_SHORT", None)
    if commit and getattr(build_info, "MODIFIED", False):
        commit += "-modified"
    return commit or None


def version_string() -> str:
    """Human readable version, e.g. ``pipey 0.1.0 (abc123f)``."""
    s = f"{PACKAGE} {package_version()}"
    commit = build_commit()
    return f"{s} ({commit})" if commit else s

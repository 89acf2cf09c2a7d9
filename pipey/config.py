"""
Configuration loading for pipey.

Settings come from, lowest to highest precedence:

1. Built-in defaults
2. An optional YAML file with ``server`` and ``logging`` sections
3. ``PIPEY_<SECTION>_<KEY>`` environment variables
4. Explicit command line flags

Example file:

    server:
      pipe: /run/status.pipe
      host: 0.0.0.0
      port: 8080
      timeout: 0.5
    logging:
      level: debug
      colors: false
"""

import math
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from .exceptions import ConfigError
from .log import InvalidLogLevelError, resolve_level
from .pipe import MAX_TIMEOUT

# Config files are small; anything bigger is a mistake
MAX_CONFIG_SIZE_BYTES = 1024 * 1024

ENV_PREFIX = "PIPEY_"

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8080
DEFAULT_TIMEOUT = 1.0

# Maps (section, key) of the file and env layout to Settings fields
_LAYOUT: dict[tuple[str, str], str] = {
    ("server", "pipe"): "pipe",
    ("server", "host"): "host",
    ("server", "port"): "port",
    ("server", "timeout"): "timeout",
    ("logging", "level"): "log_level",
    ("logging", "colors"): "log_colors",
    ("logging", "micros"): "log_micros",
}


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings."""

    pipe: str = ""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = "info"
    log_colors: bool = True
    log_micros: bool = False

    def validate(self) -> "Settings":
        """
        Check value ranges.

        Returns:
            Self for chaining

        Raises:
            ConfigError: If any value is out of range
        """
        if not self.pipe:
            raise ConfigError("pipe path is required")
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ConfigError("port must be an integer", port=self.port)
        if not 0 <= self.port <= 65535:
            raise ConfigError("port out of range", port=self.port)
        if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)):
            raise ConfigError("timeout must be a number", timeout=self.timeout)
        if not math.isfinite(self.timeout) or self.timeout < 0:
            raise ConfigError(
                "timeout must be a finite number >= 0", timeout=self.timeout
            )
        if self.timeout > MAX_TIMEOUT:
            raise ConfigError(
                "timeout too large", timeout=self.timeout, limit=MAX_TIMEOUT
            )
        for name in ("log_colors", "log_micros"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(
                    f"{name} must be true or false", value=getattr(self, name)
                )
        try:
            resolve_level(self.log_level)
        except InvalidLogLevelError as e:
            raise ConfigError("invalid log level", level=self.log_level) from e
        return self


def _convert_env_value(value: str) -> bool | int | float | str:
    """
    Convert environment variable string to appropriate type.

    Args:
        value: Environment variable value as string

    Returns:
        Converted value with appropriate type
    """
    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        pass

    return value


def _check_file_size(path: Path) -> None:
    size = path.stat().st_size
    if size > MAX_CONFIG_SIZE_BYTES:
        raise ConfigError(
            "configuration file too large", path=str(path), size=size
        )


def load_file(fname: str | os.PathLike) -> dict[str, Any]:
    """
    Load settings overrides from a YAML file.

    Args:
        fname: Path to the YAML configuration file

    Returns:
        Mapping of Settings field names to values

    Raises:
        ConfigError: If the file is missing, too large, malformed or has unknown keys
    """
    path = Path(fname)
    try:
        _check_file_size(path)
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(
            "cannot read configuration file", path=str(path), error=e.strerror
        ) from e
    except yaml.YAMLError as e:
        raise ConfigError("invalid YAML", path=str(path), error=e) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("configuration root must be a mapping", path=str(path))

    overrides: dict[str, Any] = {}
    for section, values in data.items():
        if not isinstance(values, dict):
            raise ConfigError("section must be a mapping", section=section)
        for key, value in values.items():
            field = _LAYOUT.get((str(section), str(key)))
            if field is None:
                raise ConfigError("unknown configuration key", key=f"{section}.{key}")
            overrides[field] = value
    return overrides


def load_env(environ: dict[str, str] | None = None) -> dict[str, Any]:
    """
    Collect PIPEY_* overrides from the environment.

    PIPEY_SERVER_TIMEOUT=0.5 sets ``timeout``, PIPEY_LOGGING_LEVEL=debug sets
    ``log_level``. Unknown PIPEY_* names are ignored.
    """
    environ = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    for (section, key), field in _LAYOUT.items():
        name = f"{ENV_PREFIX}{section}_{key}".upper()
        if name in environ:
            overrides[field] = _convert_env_value(environ[name])
    return overrides


def _coerce(overrides: dict[str, Any]) -> dict[str, Any]:
    """Coerce loosely typed file and env values to the Settings field types."""
    out = dict(overrides)
    if "pipe" in out:
        out["pipe"] = str(out["pipe"])
    if "host" in out:
        out["host"] = str(out["host"])
    if "log_level" in out:
        out["log_level"] = str(out["log_level"]).lower()
    if isinstance(out.get("timeout"), int) and not isinstance(out["timeout"], bool):
        out["timeout"] = float(out["timeout"])
    return out


def load_settings(
    config_file: str | os.PathLike | None = None,
    environ: dict[str, str] | None = None,
    **cli: Any,
) -> Settings:
    """
    Resolve settings from all sources.

    Args:
        config_file: Optional YAML file
        environ: Environment mapping (os.environ when None)
        **cli: Explicit command line values; None means "not given"

    Returns:
        Validated Settings

    Raises:
        ConfigError: On any invalid source or value
    """
    known = {f.name for f in fields(Settings)}
    unknown = set(cli) - known
    if unknown:
        raise ConfigError("unknown settings", keys=",".join(sorted(unknown)))

    settings = Settings()
    if config_file is not None:
        settings = replace(settings, **_coerce(load_file(config_file)))
    settings = replace(settings, **_coerce(load_env(environ)))
    given = {k: v for k, v in cli.items() if v is not None}
    settings = replace(settings, **_coerce(given))
    return settings.validate()

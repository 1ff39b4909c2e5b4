"""Runtime settings for jx.

Values come from built-in defaults, overridden by environment variables
prefixed with ``JX_``:

* ``JX_HOME`` — application directory (default ``~/.jx``).
* ``JX_LOG_LEVEL`` — standard logging level name (default ``WARNING``).
* ``JX_POLL_INTERVAL`` — spinner poll interval in seconds (default ``0.1``).

The result is exposed as an immutable dataclass.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from jx.exceptions import ConfigError

ENV_PREFIX = "JX_"
HOME_ENV_VAR = f"{ENV_PREFIX}HOME"
LOG_LEVEL_ENV_VAR = f"{ENV_PREFIX}LOG_LEVEL"
POLL_INTERVAL_ENV_VAR = f"{ENV_PREFIX}POLL_INTERVAL"

REGISTRY_FILENAME = "config.json"
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_POLL_INTERVAL = 0.1

_LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved jx settings."""

    app_dir: Path
    """Directory holding the registry file and every project clone."""

    log_level: str = DEFAULT_LOG_LEVEL
    """Upper-case logging level name."""

    poll_interval: float = DEFAULT_POLL_INTERVAL
    """Seconds between progress-display polls."""

    @property
    def registry_file(self) -> Path:
        """Path of the persisted registry document."""
        return self.app_dir / REGISTRY_FILENAME


def default_app_dir() -> Path:
    """Return ``~/.jx`` for the current user."""
    return Path.home() / ".jx"


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from *environ* (``os.environ`` by default).

    Raises
    ------
    ConfigError
        When ``JX_LOG_LEVEL`` or ``JX_POLL_INTERVAL`` hold invalid values.
    """
    env = os.environ if environ is None else environ

    raw_home = env.get(HOME_ENV_VAR, "").strip()
    app_dir = Path(raw_home).expanduser() if raw_home else default_app_dir()

    return Settings(
        app_dir=app_dir.absolute(),
        log_level=normalize_log_level(env.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL)),
        poll_interval=_parse_poll_interval(env.get(POLL_INTERVAL_ENV_VAR)),
    )


def normalize_log_level(value: str) -> str:
    """Return *value* as an upper-case logging level name.

    Raises
    ------
    ConfigError
        When *value* is not a standard logging level.
    """
    level = value.strip().upper()
    if level not in _LOG_LEVELS:
        raise ConfigError(
            f"Unknown log level {value!r}.",
            hint=f"Use one of: {', '.join(_LOG_LEVELS)}.",
        )
    return level


def setup_logging(level: str) -> None:
    """Configure the root logger for a CLI invocation."""
    logging.basicConfig(
        level=getattr(logging, normalize_log_level(level)),
        format="[%(levelname)s] %(message)s",
        force=True,
    )


def _parse_poll_interval(raw: str | None) -> float:
    if raw is None or not raw.strip():
        return DEFAULT_POLL_INTERVAL
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{POLL_INTERVAL_ENV_VAR} must be a number, got {raw!r}.") from exc
    if value <= 0:
        raise ConfigError(f"{POLL_INTERVAL_ENV_VAR} must be positive, got {raw!r}.")
    return value

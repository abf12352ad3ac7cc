"""Runtime settings read from environment variables.

Recognised variables
--------------------
``VIDFIT_FFMPEG``
    Explicit path to the ffmpeg binary.  When unset, ffmpeg is looked
    up on ``PATH``.
``VIDFIT_LOG_LEVEL``
    One of ``debug``, ``info``, ``warning``, ``error``.
``VIDFIT_WORK_DIR``
    Directory for temporary encoder output.  Defaults to the system
    temp directory.

The reader accepts an injected mapping so tests never touch
``os.environ``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

LOG_LEVELS: tuple[str, ...] = ("debug", "info", "warning", "error")
DEFAULT_LOG_LEVEL: str = "warning"


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved runtime settings."""

    ffmpeg_path: Path | None = None
    log_level: str = DEFAULT_LOG_LEVEL
    work_dir: Path | None = None


class EnvReader:
    """Environment variable reader with type conversion and validation.

    Example::

        reader = EnvReader({"VIDFIT_LOG_LEVEL": "debug"})
        reader.get_choice("VIDFIT_LOG_LEVEL", LOG_LEVELS, "warning")  # "debug"
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def get_str(self, var: str, default: str | None = None) -> str | None:
        value = self._env.get(var)
        if value is None or not value.strip():
            return default
        return value.strip()

    def get_choice(self, var: str, choices: tuple[str, ...], default: str) -> str:
        """Get a lower-cased value restricted to *choices*.

        Logs a warning and returns *default* for any other value.
        """
        value = self.get_str(var)
        if value is None:
            return default
        normalized = value.lower()
        if normalized not in choices:
            logger.warning(
                "Invalid value for %s: %s (expected one of %s)",
                var,
                value,
                ", ".join(choices),
            )
            return default
        return normalized

    def get_path(self, var: str) -> Path | None:
        value = self.get_str(var)
        if value is None:
            return None
        return Path(value).expanduser()


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from *env* (``os.environ`` by default)."""
    reader = EnvReader(env)
    return Settings(
        ffmpeg_path=reader.get_path("VIDFIT_FFMPEG"),
        log_level=reader.get_choice("VIDFIT_LOG_LEVEL", LOG_LEVELS, DEFAULT_LOG_LEVEL),
        work_dir=reader.get_path("VIDFIT_WORK_DIR"),
    )

"""Runtime settings read from the environment.

A ``.env`` file in the working directory (or the path given to
:func:`load_settings`) is loaded first; real environment variables win.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

from selftrack.correlation.alignment import MIN_POINTS
from selftrack.errors import SelftrackError


@dataclass(frozen=True)
class Settings:
    """Tunables for the CLI and the correlation cache."""

    min_points: int = MIN_POINTS
    cache_size: int = 128
    log_level: str = "WARNING"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise SelftrackError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise SelftrackError(f"{name} must be at least 1, got {value}")
    return value


def load_settings(env_file: str | None = None) -> Settings:
    """Build Settings from SELFTRACK_* environment variables."""
    load_dotenv(env_file or find_dotenv(usecwd=True))
    return Settings(
        min_points=_int_env("SELFTRACK_MIN_POINTS", MIN_POINTS),
        cache_size=_int_env("SELFTRACK_CACHE_SIZE", 128),
        log_level=os.getenv("SELFTRACK_LOG_LEVEL", "WARNING").upper(),
    )

"""
Utilities for locating and reading the optional BookVerse TOML configuration.

Environment variables (and ``.env``) are the primary configuration source; a
TOML file can overlay deployment-specific values that are awkward to pass as
flat variables.  The file is looked up in this order:

1. ``BOOKVERSE_CONFIG`` environment variable (path to the file, or to a
   directory containing ``bookverse.toml``).
2. ``config/bookverse.toml`` relative to the project root.

A missing default file is not an error; a missing file named explicitly via the
environment variable is.
"""

from __future__ import annotations

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

CONFIG_ENV_VAR = "BOOKVERSE_CONFIG"
CONFIG_FILENAME = "bookverse.toml"


def _candidate_from_env() -> Optional[Path]:
    env_value = os.getenv(CONFIG_ENV_VAR)
    if not env_value:
        return None

    candidate = Path(env_value).expanduser().resolve()
    if candidate.is_dir():
        candidate = candidate / CONFIG_FILENAME
    if not candidate.exists():
        raise RuntimeError(
            f"{CONFIG_ENV_VAR}={env_value!r} does not point at a readable "
            f"{CONFIG_FILENAME}; mount the configuration or adjust the variable."
        )
    return candidate


def resolve_config_path() -> Optional[Path]:
    """Return the TOML file to load, or ``None`` when no file is present."""
    env_path = _candidate_from_env()
    if env_path is not None:
        return env_path

    default = Path(__file__).resolve().parents[2] / "config" / CONFIG_FILENAME
    return default if default.exists() else None


@lru_cache(maxsize=1)
def get_config() -> Dict[str, Any]:
    """Load and cache the TOML configuration as a plain dictionary."""
    path = resolve_config_path()
    if path is None:
        return {}
    with path.open("rb") as fh:
        return tomllib.load(fh)


def reload_config() -> Dict[str, Any]:
    get_config.cache_clear()
    return get_config()

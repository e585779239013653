"""User cache directory and persistent configuration helpers."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from .constants import DEFAULT_CONFIG, PROGRAM_NAME

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"


def get_user_cache_path(folder: str | None = None) -> Path:
    """Get the user cache directory, optionally a sub folder of it.

    ``PYBERTCHUNKER_CACHE_DIR`` overrides the default location.
    """
    override = os.getenv("PYBERTCHUNKER_CACHE_DIR")
    if override:
        base = Path(override)
    else:
        xdg = os.getenv("XDG_CACHE_HOME")
        base = (Path(xdg) if xdg else Path.home() / ".cache") / PROGRAM_NAME
    path = base / folder if folder else base
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_user_config_path() -> Path:
    return get_user_cache_path() / CONFIG_FILENAME


def load_config() -> dict[str, Any]:
    """Load the user config merged over ``DEFAULT_CONFIG``.

    A missing or unreadable file yields the defaults.
    """
    config = dict(DEFAULT_CONFIG)
    path = get_user_config_path()
    if not path.exists():
        return config
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring unreadable config file {path}: {e}")
        return config
    if isinstance(data, dict):
        config.update({k: v for k, v in data.items() if k in DEFAULT_CONFIG})
    return config


def save_config(config: dict[str, Any]) -> Path:
    path = get_user_config_path()
    merged = {**DEFAULT_CONFIG, **config}
    path.write_text(json.dumps(merged, indent=2), encoding="utf-8")
    return path

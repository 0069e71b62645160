"""
User configuration file support.

Reads/writes ``~/.cfspeedtest/config.json``.  Values here become the CLI
defaults; explicit command-line flags always win.

Supported keys::

    timeout = 10.0           # per-request timeout in seconds
    csv_file = ""            # auto-append CSV path
    json_file = ""           # auto-append JSON path
    force_new = false        # start export files from scratch
    metadata = true          # show the metadata panel
    summary = true           # show the summary panel
    json = false             # show the result as JSON
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

from .constants import DEFAULT_TIMEOUT

LOGGER = logging.getLogger(__name__)

_CONFIG_DIR = os.path.join(Path.home(), ".cfspeedtest")
_CONFIG_FILE = "config.json"


def _config_path() -> str:
    return os.path.join(_CONFIG_DIR, _CONFIG_FILE)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULTS: Dict[str, Any] = {
    "timeout": DEFAULT_TIMEOUT,
    "csv_file": "",
    "json_file": "",
    "force_new": False,
    "metadata": True,
    "summary": True,
    "json": False,
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


# ---------------------------------------------------------------------------
# Read / Write
# ---------------------------------------------------------------------------

def load_config() -> Dict[str, Any]:
    """Load config from disk, returning defaults for missing keys."""
    path = _config_path()
    config = dict(DEFAULTS)

    if not os.path.isfile(path):
        return config

    try:
        with open(path, encoding="utf-8") as fh:
            user = json.load(fh)
    except (json.JSONDecodeError, IOError) as exc:
        LOGGER.warning("Ignoring unreadable config %s: %s", path, exc)
        return config

    if not isinstance(user, dict):
        LOGGER.warning("Ignoring config %s: expected a JSON object", path)
        return config

    for key, value in user.items():
        if key not in DEFAULTS:
            LOGGER.warning("Ignoring unknown config key %r in %s", key, path)
            continue
        try:
            config[key] = _checked(key, value)
        except ValueError as exc:
            LOGGER.warning("Ignoring config value %r in %s: %s", key, path, exc)

    return config


def _checked(key: str, value: Any) -> Any:
    """Return *value* if it fits the type of ``DEFAULTS[key]``."""
    default = DEFAULTS[key]
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
    elif isinstance(default, float):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        if isinstance(value, str):
            return coerce_value(key, value)
    elif isinstance(value, str):
        return value
    raise ValueError(f"{key} expects {type(default).__name__}, got {value!r}")


def save_config(config: Dict[str, Any]) -> str:
    """Write *config* to disk.  Returns the file path."""
    path = _config_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as fh:
        json.dump(config, fh, indent=2, ensure_ascii=False)

    return path


def get_config_value(key: str) -> Any:
    """Get a single config value."""
    return load_config().get(key, DEFAULTS.get(key))


def set_config_value(key: str, value: Any) -> str:
    """Set a single config value and persist.  Returns file path."""
    if key not in DEFAULTS:
        raise KeyError(f"Unknown config key: {key}")
    config = load_config()
    config[key] = value
    return save_config(config)


def coerce_value(key: str, text: str) -> Any:
    """Parse *text* into the type of ``DEFAULTS[key]``."""
    if key not in DEFAULTS:
        raise KeyError(f"Unknown config key: {key}")

    default = DEFAULTS[key]
    if isinstance(default, bool):
        lowered = text.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"{key} expects a boolean, got {text!r}")
    if isinstance(default, float):
        return float(text)
    return text


def config_path() -> str:
    """Return the config file path (for display purposes)."""
    return _config_path()

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml  # type: ignore

DEFAULT_SETTINGS: Dict[str, Any] = {
    "config_file": None,
    "node_test_dir": None,
    "platform": None,
}

# Settings holding paths, resolved against the settings file's directory.
_PATH_KEYS = ("config_file", "node_test_dir")


def load_settings(path: str | Path | None) -> Dict[str, Any]:
    """Load tool settings from a YAML file, falling back to defaults."""
    if path is None:
        return DEFAULT_SETTINGS.copy()

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise yaml.YAMLError(f"{path}: settings must be a mapping")

    base_dir = os.path.dirname(os.path.abspath(path))
    settings = {
        key: data.get(key) or default for key, default in DEFAULT_SETTINGS.items()
    }
    for key in _PATH_KEYS:
        value = settings[key]
        if value and not os.path.isabs(value):
            settings[key] = os.path.normpath(os.path.join(base_dir, value))
    return settings

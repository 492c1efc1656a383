"""Configuration management for the objective."""
from __future__ import annotations

from objective.config.paths import ObjectivePaths, get_paths, reset_paths
from objective.config.settings import (
    PromptPresetError,
    Settings,
    get_settings_path,
    settings,
)

__all__ = [
    "ObjectivePaths",
    "PromptPresetError",
    "Settings",
    "get_paths",
    "get_settings_path",
    "reset_paths",
    "settings",
]

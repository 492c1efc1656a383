"""Centralized path management for the objective.

Follows XDG Base Directory Specification for global files:
- Config: $XDG_CONFIG_HOME/objective (default: ~/.config/objective)

Per-chat state lives in the workspace:
- .objective/chats/<chat_id>.json
- .objective/debug.log
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


def _xdg_config_home() -> Path:
    """Get XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


@dataclass
class ObjectivePaths:
    """Centralized path management following XDG spec."""

    workspace: Path  # Current working directory

    _config_home: Path = field(default_factory=_xdg_config_home)

    # === WORKSPACE PATHS ===

    @property
    def workspace_config(self) -> Path:
        """Workspace .objective/ directory."""
        return self.workspace / ".objective"

    @property
    def chats_dir(self) -> Path:
        """Directory holding one state file per chat."""
        return self.workspace_config / "chats"

    @property
    def debug_log(self) -> Path:
        """Debug log: .objective/debug.log"""
        return self.workspace_config / "debug.log"

    # === GLOBAL PATHS (XDG compliant) ===

    @property
    def global_config_dir(self) -> Path:
        """Global config: ~/.config/objective/"""
        return self._config_home / "objective"

    @property
    def global_settings(self) -> Path:
        """Global settings file: ~/.config/objective/settings.json"""
        return self.global_config_dir / "settings.json"


# Singleton instance
_paths: ObjectivePaths | None = None


def get_paths(workspace: Path | None = None) -> ObjectivePaths:
    """Get the paths singleton.

    On first call, optionally set the workspace directory.
    Subsequent calls return the same instance.

    Args:
        workspace: The workspace directory. If not provided on first call,
                   defaults to current working directory.
    """
    global _paths
    if _paths is None:
        _paths = ObjectivePaths(workspace=workspace or Path.cwd())
    return _paths


def reset_paths() -> None:
    """Reset paths singleton (for testing)."""
    global _paths
    _paths = None

"""Configuration and settings persistence."""

import json
import logging
import os
from pathlib import Path
from typing import Any

from objective.config.paths import get_paths
from objective.llm.prompts import ObjectivePrompts

logger = logging.getLogger(__name__)

DEFAULT_PRESET = "default"
DEFAULT_GROUP_WAIT_TIMEOUT = 1.0
DEFAULT_SEND_WAIT_TIMEOUT = 30.0


class PromptPresetError(ValueError):
    """Raised for invalid prompt preset operations."""


def get_config_dir() -> Path:
    """Get the objective config directory, creating if needed.

    Returns XDG-compliant path: ~/.config/objective/
    """
    config_dir = get_paths().global_config_dir
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_settings_path() -> Path:
    """Get the path to the settings file."""
    return get_paths().global_settings


def _positive_float(raw: Any, default: float) -> float:
    if raw in (None, ""):
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    if value <= 0:
        return default
    return value


class Settings:
    """Persistent settings shared by every chat."""

    _defaults: dict[str, Any] = {
        "group_wait_timeout": DEFAULT_GROUP_WAIT_TIMEOUT,
        "send_wait_timeout": DEFAULT_SEND_WAIT_TIMEOUT,
    }

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        """Load settings from disk."""
        path = get_settings_path()
        if path.exists():
            try:
                self._data = json.loads(path.read_text(encoding="utf-8"))
            except (json.JSONDecodeError, OSError):
                self._data = {}
        else:
            self._data = {}

    def _save(self) -> None:
        """Save settings to disk."""
        path = get_settings_path()
        try:
            get_config_dir()
            path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
            logger.info("Saved settings to %s", path)
        except OSError as e:
            logger.error("Failed to save settings: %s", e)

    def get(self, key: str) -> Any:
        """Get a setting value, falling back to default."""
        return self._data.get(key, self._defaults.get(key))

    def set(self, key: str, value: Any) -> None:
        """Set a setting value and persist to disk."""
        self._data[key] = value
        self._save()

    # --- LLM Provider Settings ---

    @property
    def llm_provider(self) -> str:
        """Get the LLM provider name ('anthropic' or 'openai')."""
        llm = self._data.get("llm", {})
        return str(llm.get("provider", "anthropic"))

    @llm_provider.setter
    def llm_provider(self, value: str) -> None:
        llm = self._data.get("llm", {})
        llm["provider"] = value
        self.set("llm", llm)

    @property
    def llm_model(self) -> str | None:
        """Get the configured model, or None for the provider default."""
        llm = self._data.get("llm", {})
        model = llm.get("model")
        return str(model) if model else None

    @llm_model.setter
    def llm_model(self, value: str | None) -> None:
        llm = self._data.get("llm", {})
        if value:
            llm["model"] = value
        else:
            llm.pop("model", None)
        self.set("llm", llm)

    @property
    def openai_api_key(self) -> str | None:
        """Get OpenAI API key from settings or environment.

        Priority: settings > OPENAI_API_KEY env var
        """
        llm = self._data.get("llm", {})
        key = llm.get("openai_api_key")
        if key:
            return str(key)
        return os.environ.get("OPENAI_API_KEY")

    @openai_api_key.setter
    def openai_api_key(self, value: str | None) -> None:
        llm = self._data.get("llm", {})
        if value:
            llm["openai_api_key"] = value
        elif "openai_api_key" in llm:
            del llm["openai_api_key"]
        self.set("llm", llm)

    @property
    def anthropic_api_key(self) -> str | None:
        """Get Anthropic API key from settings or environment.

        Priority: settings > ANTHROPIC_API_KEY env var.
        None means the provider falls back to web auth.
        """
        llm = self._data.get("llm", {})
        key = llm.get("anthropic_api_key")
        if key:
            return str(key)
        return os.environ.get("ANTHROPIC_API_KEY")

    @anthropic_api_key.setter
    def anthropic_api_key(self, value: str | None) -> None:
        llm = self._data.get("llm", {})
        if value:
            llm["anthropic_api_key"] = value
        elif "anthropic_api_key" in llm:
            del llm["anthropic_api_key"]
        self.set("llm", llm)

    def api_key_for(self, provider: str) -> str | None:
        """API key for the named provider, if any."""
        if provider == "openai":
            return self.openai_api_key
        if provider == "anthropic":
            return self.anthropic_api_key
        return None

    # --- Busy-wait budgets ---

    @property
    def group_wait_timeout(self) -> float:
        """Seconds to wait for a group reply to finish before a check."""
        return _positive_float(
            self._data.get("group_wait_timeout"), DEFAULT_GROUP_WAIT_TIMEOUT
        )

    @group_wait_timeout.setter
    def group_wait_timeout(self, value: float) -> None:
        self.set(
            "group_wait_timeout", _positive_float(value, DEFAULT_GROUP_WAIT_TIMEOUT)
        )

    @property
    def send_wait_timeout(self) -> float:
        """Seconds to wait for a pending send before a check."""
        return _positive_float(
            self._data.get("send_wait_timeout"), DEFAULT_SEND_WAIT_TIMEOUT
        )

    @send_wait_timeout.setter
    def send_wait_timeout(self, value: float) -> None:
        self.set(
            "send_wait_timeout", _positive_float(value, DEFAULT_SEND_WAIT_TIMEOUT)
        )

    # --- Custom prompt presets ---

    def _get_custom_prompts(self) -> dict[str, Any]:
        raw = self._data.get("custom_prompts", {})
        if isinstance(raw, dict):
            return raw
        return {}

    def list_prompt_presets(self) -> list[str]:
        """Names of every preset, "default" first."""
        names = sorted(n for n in self._get_custom_prompts() if n != DEFAULT_PRESET)
        return [DEFAULT_PRESET, *names]

    def save_prompt_preset(self, name: str, prompts: ObjectivePrompts) -> None:
        """Store a named copy of a prompt set.

        Raises:
            PromptPresetError: If the name is blank or reserved.
        """
        name = name.strip()
        if not name:
            raise PromptPresetError("Please provide a name for the prompt preset")
        if name == DEFAULT_PRESET:
            raise PromptPresetError("Cannot overwrite the default prompt preset")
        presets = self._get_custom_prompts()
        presets[name] = prompts.to_dict()
        self.set("custom_prompts", presets)
        logger.info("Saved prompt preset '%s'", name)

    def load_prompt_preset(self, name: str) -> ObjectivePrompts:
        """Return the named prompt set. "default" gives the built-in prompts.

        Raises:
            PromptPresetError: If no preset has that name.
        """
        if name == DEFAULT_PRESET:
            return ObjectivePrompts()
        presets = self._get_custom_prompts()
        if name not in presets:
            raise PromptPresetError(f"No prompt preset named '{name}'")
        return ObjectivePrompts.from_dict(presets[name])

    def delete_prompt_preset(self, name: str) -> None:
        """Remove a named preset.

        Raises:
            PromptPresetError: For "default" or an unknown name.
        """
        if name == DEFAULT_PRESET:
            raise PromptPresetError("Cannot delete the default prompt preset")
        presets = self._get_custom_prompts()
        if name not in presets:
            raise PromptPresetError(f"No prompt preset named '{name}'")
        del presets[name]
        self.set("custom_prompts", presets)
        logger.info("Deleted prompt preset '%s'", name)


# Global settings instance
settings = Settings()

"""Tests for global settings and prompt presets."""

import json
import sys
from pathlib import Path

import pytest

from objective.config.paths import get_paths, reset_paths
from objective.config.settings import PromptPresetError, Settings, settings
from objective.llm.prompts import ObjectivePrompts


def test_settings_fixture_prevents_disk_writes(monkeypatch, tmp_path: Path) -> None:
    """The autouse fixture keeps settings writes off disk."""
    target = tmp_path / "settings.json"
    monkeypatch.setattr(
        sys.modules["objective.config.settings"], "get_settings_path", lambda: target
    )
    settings.llm_model = "test-model"
    assert not target.exists()


class TestSettingsFile:
    """Tests for loading and saving the settings file."""

    def test_reads_xdg_config_home(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        reset_paths()
        try:
            config = tmp_path / "objective"
            config.mkdir()
            (config / "settings.json").write_text(
                json.dumps({"llm": {"provider": "openai"}}), encoding="utf-8"
            )
            assert get_paths().global_settings == config / "settings.json"
            assert Settings().llm_provider == "openai"
        finally:
            reset_paths()

    def test_corrupt_file_gives_defaults(self, monkeypatch, tmp_path: Path) -> None:
        path = tmp_path / "settings.json"
        path.write_text("{nope", encoding="utf-8")
        monkeypatch.setattr(
            sys.modules["objective.config.settings"], "get_settings_path", lambda: path
        )
        loaded = Settings()
        assert loaded.llm_provider == "anthropic"
        assert loaded.llm_model is None


class TestLLMSettings:
    """Tests for provider, model and key settings."""

    def test_api_key_prefers_settings(self, monkeypatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "env-key")
        assert settings.api_key_for("openai") == "env-key"
        settings.openai_api_key = "stored-key"
        assert settings.api_key_for("openai") == "stored-key"

    def test_empty_model_resets_to_default(self) -> None:
        settings.llm_model = "gpt-x"
        assert settings.llm_model == "gpt-x"
        settings.llm_model = ""
        assert settings.llm_model is None

    def test_wait_timeouts_reject_non_positive(self) -> None:
        settings.group_wait_timeout = 2.5
        assert settings.group_wait_timeout == 2.5
        settings.send_wait_timeout = -1
        assert settings.send_wait_timeout == 30.0


class TestPromptPresets:
    """Tests for named prompt presets."""

    def test_save_list_load_delete(self) -> None:
        custom = ObjectivePrompts(current_task="Focus: {{task}}")
        settings.save_prompt_preset("  focused  ", custom)

        assert "focused" in settings.list_prompt_presets()
        assert settings.list_prompt_presets()[0] == "default"
        assert settings.load_prompt_preset("focused") == custom

        settings.delete_prompt_preset("focused")
        assert "focused" not in settings.list_prompt_presets()

    def test_default_loads_builtin_prompts(self) -> None:
        assert settings.load_prompt_preset("default") == ObjectivePrompts()

    def test_default_is_reserved(self) -> None:
        with pytest.raises(PromptPresetError, match="default"):
            settings.save_prompt_preset("default", ObjectivePrompts())
        with pytest.raises(PromptPresetError, match="default"):
            settings.delete_prompt_preset("default")

    def test_blank_name_rejected(self) -> None:
        with pytest.raises(PromptPresetError, match="name"):
            settings.save_prompt_preset("   ", ObjectivePrompts())

    def test_unknown_preset(self) -> None:
        with pytest.raises(PromptPresetError):
            settings.load_prompt_preset("missing")

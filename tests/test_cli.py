"""Tests for CLI parsing and command handlers."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path

import pytest

from fakes import FakeProvider
from objective.cli.app import run
from objective.cli.parser import parse_args
from objective.config.paths import reset_paths
from objective.config.settings import settings


@pytest.fixture
def workspace(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[Path]:
    monkeypatch.chdir(tmp_path)
    reset_paths()
    yield tmp_path
    reset_paths()


def _cli(workspace: Path, *argv: str) -> int:
    return run(["--workdir", str(workspace), "--chat", "test", *argv])


def _state(workspace: Path) -> dict:
    path = workspace / ".objective" / "chats" / "test.json"
    return json.loads(path.read_text(encoding="utf-8"))


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self) -> None:
        args = parse_args([])
        assert args.command is None
        assert args.workdir is None
        assert args.chat is None

    def test_add_after(self) -> None:
        args = parse_args(["add", "Sharpen", "--after", "3"])
        assert args.description == "Sharpen"
        assert args.after == 3
        assert args.index is None

    def test_add_rejects_index_and_after(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["add", "x", "--index", "0", "--after", "1"])

    def test_move_direction_choices(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["move", "1", "sideways"])

    def test_complete_task_id_optional(self) -> None:
        assert parse_args(["complete"]).task_id is None
        assert parse_args(["complete", "4"]).task_id == 4

    def test_config_hide_flags(self) -> None:
        assert parse_args(["config"]).hide_tasks is None
        assert parse_args(["config", "--hide-tasks"]).hide_tasks is True
        assert parse_args(["config", "--show-tasks"]).hide_tasks is False

    def test_prompts_set(self) -> None:
        args = parse_args(["prompts", "set", "current_task", "Do {{task}}"])
        assert args.prompts_command == "set"
        assert args.field == "current_task"


class TestTaskCommands:
    """Tests for the task editing commands."""

    def test_objective_add_show(self, workspace: Path, capsys) -> None:
        assert _cli(workspace, "objective", "Forge a blade") == 0
        assert _cli(workspace, "add", "Mine ore") == 0
        assert _cli(workspace, "add", "Smelt") == 0
        capsys.readouterr()

        assert _cli(workspace, "show") == 0
        out = capsys.readouterr().out
        assert "Forge a blade" in out
        assert "Current task: Mine ore" in out

        tree = _state(workspace)["taskTree"]
        assert [c["description"] for c in tree["children"]] == ["Mine ore", "Smelt"]

    def test_complete_current_task(self, workspace: Path) -> None:
        _cli(workspace, "add", "A")
        _cli(workspace, "add", "B")
        assert _cli(workspace, "complete") == 0
        children = _state(workspace)["taskTree"]["children"]
        assert [c["completed"] for c in children] == [True, False]

        assert _cli(workspace, "uncomplete", "1") == 0
        children = _state(workspace)["taskTree"]["children"]
        assert children[0]["completed"] is False

    def test_move_edit_remove(self, workspace: Path) -> None:
        _cli(workspace, "add", "A")
        _cli(workspace, "add", "B")
        assert _cli(workspace, "move", "2", "up") == 0
        assert _cli(workspace, "edit", "1", "Alpha") == 0
        assert _cli(workspace, "remove", "2") == 0
        children = _state(workspace)["taskTree"]["children"]
        assert [c["description"] for c in children] == ["Alpha"]

    def test_unknown_task_is_error(self, workspace: Path, capsys) -> None:
        assert _cli(workspace, "remove", "42") == 1
        assert "Error: Task 42 not found" in capsys.readouterr().err

    def test_remove_root_is_error(self, workspace: Path, capsys) -> None:
        assert _cli(workspace, "remove", "0") == 1
        assert "Error:" in capsys.readouterr().err

    def test_add_index_out_of_range(self, workspace: Path, capsys) -> None:
        assert _cli(workspace, "add", "x", "--index", "3") == 1
        assert "out of range" in capsys.readouterr().err

    def test_branch_and_parent(self, workspace: Path, capsys) -> None:
        _cli(workspace, "add", "A")
        assert _cli(workspace, "branch", "1") == 0
        assert _cli(workspace, "add", "A1") == 0
        assert _state(workspace)["currentObjectiveId"] == 1
        assert _cli(workspace, "parent") == 0
        assert _cli(workspace, "parent") == 1
        assert "already the top-level" in capsys.readouterr().err

    def test_corrupt_state_is_error(self, workspace: Path, capsys) -> None:
        chats = workspace / ".objective" / "chats"
        chats.mkdir(parents=True)
        (chats / "test.json").write_text("[]", encoding="utf-8")
        assert _cli(workspace, "show") == 1
        assert "Could not load objective state" in capsys.readouterr().err

    def test_chat_id_with_path_is_error(self, workspace: Path, capsys) -> None:
        code = run(["--workdir", str(workspace), "--chat", "../../escaped", "show"])
        assert code == 1
        assert "Invalid chat id" in capsys.readouterr().err
        assert not (workspace.parent / "escaped.json").exists()


class TestBackendCommands:
    """Tests for generate and check with a fake provider."""

    def test_generate(self, workspace: Path, monkeypatch, capsys) -> None:
        provider = FakeProvider("1. Find the sword\n2. Talk to the blacksmith")
        monkeypatch.setattr(
            "objective.cli.commands.backend.provider_from_settings", lambda: provider
        )
        _cli(workspace, "objective", "Become a knight")
        assert _cli(workspace, "generate") == 0
        assert "Created 2 tasks" in capsys.readouterr().out
        children = _state(workspace)["taskTree"]["children"]
        assert [c["description"] for c in children] == [
            "Find the sword",
            "Talk to the blacksmith",
        ]

    def test_check_completes(self, workspace: Path, monkeypatch, capsys) -> None:
        provider = FakeProvider("true")
        monkeypatch.setattr(
            "objective.cli.commands.backend.provider_from_settings", lambda: provider
        )
        _cli(workspace, "add", "A")
        assert _cli(workspace, "check") == 0
        assert "Task 1 completed" in capsys.readouterr().out
        assert _state(workspace)["taskTree"]["completed"] is True

    def test_check_backend_failure(self, workspace: Path, monkeypatch, capsys) -> None:
        provider = FakeProvider(RuntimeError("bad request"))
        monkeypatch.setattr(
            "objective.cli.commands.backend.provider_from_settings", lambda: provider
        )
        _cli(workspace, "add", "A")
        assert _cli(workspace, "check") == 1
        assert "aborted" in capsys.readouterr().err


class TestConfigAndPrompts:
    """Tests for config and prompt commands."""

    def test_chat_config(self, workspace: Path) -> None:
        code = _cli(workspace, "config", "--check-frequency", "0", "--hide-tasks")
        assert code == 0
        state = _state(workspace)
        assert state["checkFrequency"] == 0
        assert state["hideTasks"] is True

    def test_negative_chat_depth_rejected(self, workspace: Path, capsys) -> None:
        assert _cli(workspace, "config", "--chat-depth", "-1") == 1
        assert "Error:" in capsys.readouterr().err

    def test_global_config(self, workspace: Path) -> None:
        code = _cli(workspace, "config", "--provider", "openai", "--group-wait", "2")
        assert code == 0
        assert settings.llm_provider == "openai"
        assert settings.group_wait_timeout == 2.0

    def test_prompt_preset_round(self, workspace: Path, capsys) -> None:
        code = _cli(workspace, "prompts", "set", "current_task", "Now: {{task}}")
        assert code == 0
        assert _cli(workspace, "prompts", "save", "terse") == 0
        assert _cli(workspace, "prompts", "load", "default") == 0
        assert _state(workspace)["prompts"]["currentTask"] != "Now: {{task}}"
        assert _cli(workspace, "prompts", "load", "terse") == 0
        assert _state(workspace)["prompts"]["currentTask"] == "Now: {{task}}"

    def test_prompt_preset_errors(self, workspace: Path, capsys) -> None:
        assert _cli(workspace, "prompts", "delete", "default") == 1
        assert "Cannot delete the default" in capsys.readouterr().err

    def test_debug_dump(self, workspace: Path, capsys) -> None:
        _cli(workspace, "add", "A")
        capsys.readouterr()
        assert _cli(workspace, "debug") == 0
        dump = json.loads(capsys.readouterr().out)
        assert dump["currentTask"]["description"] == "A"

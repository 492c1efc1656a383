"""Tests for ObjectiveState persistence and the per-chat store."""

import json
from pathlib import Path

import pytest

from objective.llm.prompts import CURRENT_TASK_PROMPT, ObjectivePrompts
from objective.models.schema import InvalidSchemaError
from objective.models.state import NO_CHAT_ID, ObjectiveState, StateStore
from objective.models.tree import TaskTree


def _state() -> ObjectiveState:
    tree = TaskTree.new("Goal")
    a = tree.insert_child(tree.root, "A")
    tree.insert_child(a, "A1")
    return ObjectiveState(
        task_tree=tree,
        current_objective_id=a.id,
        check_frequency=4,
        chat_depth=1,
        hide_tasks=True,
        prompts=ObjectivePrompts(current_task="Do [{{task}}]"),
    )


class TestObjectiveStateSerialization:
    """Tests for to_dict/from_dict."""

    def test_layout(self) -> None:
        data = ObjectiveState().to_dict()
        assert data["_schema"] == "objective_state"
        assert data["_version"] == "1.0"
        assert data["currentObjectiveId"] == 0
        assert data["checkFrequency"] == 3
        assert data["chatDepth"] == 2
        assert data["hideTasks"] is False
        assert data["taskTree"]["parentId"] is None
        assert data["prompts"]["currentTask"] == CURRENT_TASK_PROMPT

    def test_round_trip(self) -> None:
        state = _state()
        restored = ObjectiveState.from_dict(state.to_dict())
        assert restored.to_dict() == state.to_dict()

    def test_missing_settings_use_defaults(self) -> None:
        restored = ObjectiveState.from_dict({"taskTree": None})
        assert restored.check_frequency == 3
        assert restored.chat_depth == 2
        assert restored.task_tree.root.children == []

    def test_unknown_objective_falls_back_to_root(self, caplog) -> None:
        data = _state().to_dict()
        data["currentObjectiveId"] = 77
        restored = ObjectiveState.from_dict(data)
        assert restored.current_objective_id == 0
        assert "falling back to root" in caplog.text

    def test_broken_tree_rejected(self) -> None:
        data = _state().to_dict()
        data["taskTree"]["children"][0]["parentId"] = 42
        with pytest.raises(InvalidSchemaError):
            ObjectiveState.from_dict(data)

    def test_non_numeric_setting_rejected(self) -> None:
        data = _state().to_dict()
        data["checkFrequency"] = "often"
        with pytest.raises(InvalidSchemaError):
            ObjectiveState.from_dict(data)

    def test_negative_setting_rejected(self) -> None:
        data = _state().to_dict()
        data["chatDepth"] = -1
        with pytest.raises(InvalidSchemaError, match="non-negative"):
            ObjectiveState.from_dict(data)

    def test_legacy_document_loads(self) -> None:
        legacy = {
            "objective": "Goal",
            "tasks": [{"description": "a", "completed": False}],
            "checkFrequency": "2",
            "chatDepth": "6",
        }
        restored = ObjectiveState.from_dict(legacy)
        assert restored.task_tree.root.description == "Goal"
        assert restored.task_tree.root.children[0].id == 1
        assert restored.check_frequency == 2
        assert restored.chat_depth == 6

    def test_stale_parent_completion_is_rederived(self, caplog) -> None:
        data = _state().to_dict()
        data["taskTree"]["completed"] = True
        data["taskTree"]["children"][0]["completed"] = True

        restored = ObjectiveState.from_dict(data)

        tree = restored.task_tree
        assert not tree.root.completed
        assert not tree.root.children[0].completed
        assert tree.next_incomplete_task().description == "A1"
        assert "did not match its sub-tasks" in caplog.text

    def test_non_boolean_completed_rejected(self) -> None:
        data = _state().to_dict()
        data["taskTree"]["children"][0]["children"][0]["completed"] = "false"
        with pytest.raises(InvalidSchemaError, match="non-boolean"):
            ObjectiveState.from_dict(data)


class TestStateStore:
    """Tests for the per-chat JSON store."""

    def test_load_missing_returns_none(self, tmp_path: Path) -> None:
        assert StateStore(tmp_path).load("chat-1") is None

    def test_save_and_load(self, tmp_path: Path) -> None:
        store = StateStore(tmp_path / "chats")
        state = _state()
        store.save("chat-1", state)
        assert store.exists("chat-1")
        loaded = store.load("chat-1")
        assert loaded is not None
        assert loaded.to_dict() == state.to_dict()
        assert list((tmp_path / "chats").glob("*.tmp")) == []

    def test_missing_chat_id_uses_placeholder(self, tmp_path: Path) -> None:
        store = StateStore(tmp_path)
        assert store.path_for(None).name == f"{NO_CHAT_ID}.json"

    def test_invalid_json_raises(self, tmp_path: Path) -> None:
        store = StateStore(tmp_path)
        store.path_for("bad").write_text("{not json", encoding="utf-8")
        with pytest.raises(InvalidSchemaError, match="Invalid JSON"):
            store.load("bad")

    def test_saved_file_is_versioned_json(self, tmp_path: Path) -> None:
        store = StateStore(tmp_path)
        store.save("c", ObjectiveState())
        data = json.loads(store.path_for("c").read_text(encoding="utf-8"))
        assert data["_schema"] == "objective_state"

    @pytest.mark.parametrize("chat_id", ["../../escaped", "a/b", "a\\b", ".."])
    def test_chat_id_cannot_leave_directory(self, tmp_path: Path, chat_id) -> None:
        store = StateStore(tmp_path / "chats")
        with pytest.raises(ValueError, match="Invalid chat id"):
            store.save(chat_id, ObjectiveState())
        assert list(tmp_path.rglob("*.json")) == []

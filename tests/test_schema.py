"""Tests for schema versioning and migration."""

import pytest

from objective.models import schema
from objective.models.schema import (
    CURRENT_VERSIONS,
    InvalidSchemaError,
    MigrationNotFoundError,
    SchemaHeader,
    migrate_if_needed,
    read_schema_header,
    register_migrator,
    write_schema_fields,
)


class TestSchemaHeader:
    """Tests for SchemaHeader dataclass."""

    def test_is_legacy_true(self) -> None:
        """Test that version 0.0 is legacy."""
        header = SchemaHeader(schema_type="objective_state", schema_version="0.0")
        assert header.is_legacy is True
        assert header.is_current is False

    def test_is_current_true(self) -> None:
        """Test that current version matches CURRENT_VERSIONS."""
        header = SchemaHeader(schema_type="objective_state", schema_version="1.0")
        assert header.is_current is True
        assert header.is_legacy is False


class TestWriteSchemaFields:
    """Tests for write_schema_fields function."""

    def test_returns_schema_and_version(self) -> None:
        fields = write_schema_fields("objective_state")
        assert fields == {"_schema": "objective_state", "_version": "1.0"}

    def test_unknown_schema_type(self) -> None:
        """Test that unknown schema type raises ValueError."""
        with pytest.raises(ValueError, match="Unknown schema type"):
            write_schema_fields("chat_log")


class TestReadSchemaHeader:
    """Tests for read_schema_header."""

    def test_document_without_fields_is_legacy(self) -> None:
        header = read_schema_header({"taskTree": {}}, "objective_state")
        assert header.is_legacy

    def test_wrong_type_rejected(self) -> None:
        data = {"_schema": "flight_plan", "_version": "1.0"}
        with pytest.raises(InvalidSchemaError, match="Expected schema"):
            read_schema_header(data, "objective_state", "chat.json")

    def test_non_mapping_rejected(self) -> None:
        with pytest.raises(InvalidSchemaError, match="not a JSON object"):
            read_schema_header([], "objective_state")  # type: ignore[arg-type]


class TestMigrateIfNeeded:
    """Tests for the migration entry point."""

    def test_current_document_unchanged(self) -> None:
        data = {**write_schema_fields("objective_state"), "checkFrequency": 3}
        assert migrate_if_needed(data, "objective_state") is data

    def test_unknown_version_raises(self) -> None:
        data = {"_schema": "objective_state", "_version": "0.5"}
        with pytest.raises(MigrationNotFoundError):
            migrate_if_needed(data, "objective_state")

    def test_registered_migrator_is_used(self, monkeypatch) -> None:
        """A migrator registered for a version path is applied."""
        monkeypatch.setitem(CURRENT_VERSIONS, "test_doc", "2.0")
        monkeypatch.setattr(schema, "MIGRATORS", dict(schema.MIGRATORS))

        @register_migrator("test_doc", "1.0", "2.0")
        def _upgrade(data: dict) -> dict:
            return {**data, "_version": "2.0", "upgraded": True}

        assert schema.MIGRATORS[("test_doc", "1.0", "2.0")] is _upgrade
        data = {"_schema": "test_doc", "_version": "1.0"}
        assert migrate_if_needed(data, "test_doc")["upgraded"] is True

    def test_input_is_not_mutated(self) -> None:
        legacy = {"objective": "Goal", "tasks": [{"description": "a"}]}
        migrate_if_needed(legacy, "objective_state")
        assert legacy == {"objective": "Goal", "tasks": [{"description": "a"}]}


class TestLegacyObjectiveMigration:
    """Tests for the 0.0 -> 1.0 objective_state migration."""

    def test_flat_shape_becomes_tree(self) -> None:
        legacy = {
            "objective": "Find the treasure",
            "tasks": [
                {"description": "Get a map", "completed": True},
                {"description": "Dig", "completed": False},
            ],
            "checkFrequency": "5",
        }
        result = migrate_if_needed(legacy, "objective_state")
        tree = result["taskTree"]
        assert result["_version"] == "1.0"
        assert tree["id"] == 0
        assert tree["parentId"] is None
        assert tree["description"] == "Find the treasure"
        assert tree["completed"] is False
        assert [(c["id"], c["description"]) for c in tree["children"]] == [
            (1, "Get a map"),
            (2, "Dig"),
        ]
        assert all(c["parentId"] == 0 for c in tree["children"])
        assert result["currentObjectiveId"] == 0
        assert result["checkFrequency"] == 5
        assert "objective" not in result
        assert "tasks" not in result

    def test_flat_shape_all_done_completes_root(self) -> None:
        legacy = {"objective": "x", "tasks": [{"description": "a", "completed": True}]}
        result = migrate_if_needed(legacy, "objective_state")
        assert result["taskTree"]["completed"] is True

    def test_empty_string_root_parent_cleared(self) -> None:
        legacy = {
            "currentObjectiveId": 0,
            "taskTree": {
                "id": 0,
                "description": "Goal",
                "completed": False,
                "parentId": "",
                "children": [
                    {
                        "id": 1,
                        "description": "a",
                        "completed": False,
                        "parentId": 0,
                        "children": [],
                    }
                ],
            },
            "chatDepth": "4",
        }
        result = migrate_if_needed(legacy, "objective_state")
        assert result["taskTree"]["parentId"] is None
        assert result["taskTree"]["children"][0]["parentId"] == 0
        assert result["chatDepth"] == 4

    def test_unreadable_numbers_dropped(self) -> None:
        legacy = {"taskTree": None, "checkFrequency": "often"}
        result = migrate_if_needed(legacy, "objective_state")
        assert "checkFrequency" not in result

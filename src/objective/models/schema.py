"""Schema versioning for persisted objective state.

Every state document carries ``_schema`` and ``_version`` fields so that it
can be validated on load and upgraded explicitly. Documents written before
versioning existed have neither field and are read as version "0.0".

Schema Types:
- objective_state: Task tree plus per-chat objective settings
"""
from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

# Current schema versions
CURRENT_VERSIONS: dict[str, str] = {
    "objective_state": "1.0",
}


class SchemaError(Exception):
    """Base exception for schema-related errors."""

    pass


class MigrationNotFoundError(SchemaError):
    """Raised when no migration path exists."""

    def __init__(self, schema_type: str, from_version: str, to_version: str) -> None:
        self.schema_type = schema_type
        self.from_version = from_version
        self.to_version = to_version
        super().__init__(
            f"No migration for {schema_type} from {from_version} to {to_version}"
        )


class InvalidSchemaError(SchemaError):
    """Raised when schema validation fails."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        super().__init__(f"Invalid schema in {source}: {message}")


@dataclass
class SchemaHeader:
    """Schema fields read from a state document."""

    schema_type: str
    schema_version: str

    @property
    def is_legacy(self) -> bool:
        """Check if this is a legacy document (version 0.0)."""
        return self.schema_version == "0.0"

    @property
    def is_current(self) -> bool:
        """Check if this document is at the current version."""
        current = CURRENT_VERSIONS.get(self.schema_type)
        return self.schema_version == current


def read_schema_header(
    data: dict[str, Any], expected_type: str, source: str = "<state>"
) -> SchemaHeader:
    """Read and validate the schema fields of a document.

    Args:
        data: The decoded document.
        expected_type: The expected schema type (e.g., "objective_state").
        source: Label used in error messages (usually a file path).

    Returns:
        SchemaHeader with version "0.0" for legacy documents without schema fields.

    Raises:
        InvalidSchemaError: If the document is not a mapping or has the wrong
            schema type.
    """
    if not isinstance(data, dict):
        raise InvalidSchemaError(source, "Document is not a JSON object")

    schema_type = data.get("_schema")
    schema_version = data.get("_version")

    if schema_type is None or schema_version is None:
        logger.debug("Legacy document detected (no schema fields): %s", source)
        return SchemaHeader(schema_type=expected_type, schema_version="0.0")

    if schema_type != expected_type:
        raise InvalidSchemaError(
            source, f"Expected schema '{expected_type}', got '{schema_type}'"
        )

    return SchemaHeader(schema_type=schema_type, schema_version=str(schema_version))


def write_schema_fields(schema_type: str) -> dict[str, str]:
    """Get schema fields to include in a document.

    Raises:
        ValueError: If schema_type is unknown.
    """
    if schema_type not in CURRENT_VERSIONS:
        raise ValueError(f"Unknown schema type: {schema_type}")

    return {
        "_schema": schema_type,
        "_version": CURRENT_VERSIONS[schema_type],
    }


# Migration registry
Migrator = Callable[[dict[str, Any]], dict[str, Any]]
MIGRATORS: dict[tuple[str, str, str], Migrator] = {}


def register_migrator(
    schema_type: str, from_version: str, to_version: str
) -> Callable[[Migrator], Migrator]:
    """Decorator to register a migration function.

    Example:
        @register_migrator("objective_state", "1.0", "2.0")
        def migrate_state_1_to_2(data: dict) -> dict:
            ...
    """

    def decorator(fn: Migrator) -> Migrator:
        key = (schema_type, from_version, to_version)
        MIGRATORS[key] = fn
        logger.debug(
            "Registered migrator: %s %s -> %s", schema_type, from_version, to_version
        )
        return fn

    return decorator


def migrate_if_needed(
    data: dict[str, Any], schema_type: str, source: str = "<state>"
) -> dict[str, Any]:
    """Upgrade a document to the current version if needed.

    The input is never modified; migrators work on a deep copy.

    Returns:
        The document at the current version.

    Raises:
        MigrationNotFoundError: If no migration path exists.
        InvalidSchemaError: If the document is malformed.
    """
    header = read_schema_header(data, schema_type, source)

    if header.is_current:
        return data

    current_version = CURRENT_VERSIONS[schema_type]
    migrator_key = (schema_type, header.schema_version, current_version)

    migrator = MIGRATORS.get(migrator_key)
    if migrator is None:
        raise MigrationNotFoundError(
            schema_type, header.schema_version, current_version
        )

    logger.info(
        "Migrating %s from %s to %s: %s",
        schema_type,
        header.schema_version,
        current_version,
        source,
    )
    return migrator(copy.deepcopy(data))


# =============================================================================
# Legacy Migrations (0.0 -> 1.0)
# =============================================================================


def _coerce_int(data: dict[str, Any], key: str) -> None:
    """Convert a numeric setting stored as text, dropping unreadable values."""
    if key not in data:
        return
    try:
        data[key] = int(data[key])
    except (TypeError, ValueError):
        del data[key]


def _clear_root_parent(node: dict[str, Any], is_root: bool = True) -> None:
    """Legacy trees marked the root with an empty-string parentId."""
    if is_root and node.get("parentId") in ("", None):
        node["parentId"] = None
    for child in node.get("children", []):
        _clear_root_parent(child, is_root=False)


@register_migrator("objective_state", "0.0", "1.0")
def _migrate_objective_state_legacy(data: dict[str, Any]) -> dict[str, Any]:
    """Add schema fields to legacy objective state.

    Two legacy shapes exist:
    - flat: {"objective": "...", "tasks": [{"description", "completed"}]}
    - unversioned tree: {"taskTree": {..., "parentId": ""}, ...}
    Settings inputs were stored as strings in both.
    """
    if "objective" in data and not data.get("taskTree"):
        tasks = data.pop("tasks", None) or []
        data["taskTree"] = {
            "id": 0,
            "description": data.pop("objective") or "",
            "completed": bool(tasks) and all(t.get("completed") for t in tasks),
            "parentId": None,
            "children": [
                {
                    "id": index,
                    "description": task.get("description") or "",
                    "completed": bool(task.get("completed", False)),
                    "parentId": 0,
                    "children": [],
                }
                for index, task in enumerate(tasks, start=1)
            ],
        }
        data.setdefault("currentObjectiveId", 0)
    else:
        data.pop("objective", None)
        data.pop("tasks", None)

    if data.get("taskTree"):
        _clear_root_parent(data["taskTree"])

    _coerce_int(data, "checkFrequency")
    _coerce_int(data, "chatDepth")
    return {**write_schema_fields("objective_state"), **data}

"""Data models for the objective task tree."""

from .schema import InvalidSchemaError, MigrationNotFoundError, SchemaError
from .state import NO_CHAT_ID, ObjectiveState, StateStore
from .task import NO_PARENT, ROOT_ID, TaskNode
from .tree import (
    MissingIdentifierError,
    NodeNotFoundError,
    OrphanedNodeError,
    TaskTree,
    TaskTreeError,
    TreeIntegrityError,
)

__all__ = [
    "InvalidSchemaError",
    "MigrationNotFoundError",
    "MissingIdentifierError",
    "NO_CHAT_ID",
    "NO_PARENT",
    "NodeNotFoundError",
    "ObjectiveState",
    "OrphanedNodeError",
    "ROOT_ID",
    "SchemaError",
    "StateStore",
    "TaskNode",
    "TaskTree",
    "TaskTreeError",
    "TreeIntegrityError",
]

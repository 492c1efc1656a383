"""Task node data model for the objective tree."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Self

# The tree root always carries this id
ROOT_ID = 0

# parent_id value reserved for the tree root
NO_PARENT: None = None


@dataclass(slots=True, eq=False)
class TaskNode:
    """A single task in the objective tree.

    Nodes compare by identity: two tasks with the same text are still
    different tasks. Use ``to_dict()`` to compare structure.
    """

    id: int
    description: str = ""
    completed: bool = False
    parent_id: int | None = NO_PARENT
    children: list[TaskNode] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        description: str | None = "",
        *,
        completed: bool = False,
        parent_id: int | None = NO_PARENT,
        id: int | None = None,
        root: TaskNode | None = None,
    ) -> Self:
        """Allocate a new node.

        Args:
            description: Task text. None is stored as an empty string.
            completed: Initial completion flag.
            parent_id: Id of the containing node, NO_PARENT for a tree root.
            id: Explicit id. When omitted the id is one more than the
                highest id found under ``root``.
            root: Tree to allocate the id against. Without a root the
                node starts a new tree and receives ROOT_ID.

        Raises:
            ValueError: If an explicit id is negative.
        """
        if id is None:
            id = root.max_id() + 1 if root is not None else ROOT_ID
        elif id < 0:
            raise ValueError(f"Task id must be non-negative, got {id}")
        return cls(
            id=id,
            description=description or "",
            completed=completed,
            parent_id=parent_id,
        )

    @property
    def is_leaf(self) -> bool:
        """True when the node has no sub-tasks."""
        return not self.children

    @property
    def is_root(self) -> bool:
        """True for the tree root (the only node without a parent)."""
        return self.parent_id is NO_PARENT

    def walk(self) -> Iterator[TaskNode]:
        """Yield this node and every descendant in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def max_id(self) -> int:
        """Highest id in this subtree."""
        return max(node.id for node in self.walk())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "description": self.description,
            "completed": self.completed,
            "parentId": self.parent_id,
            "children": [child.to_dict() for child in self.children],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Rebuild a node and its subtree, keeping the stored ids.

        Raises:
            ValueError: If ``completed`` is present but not a boolean.
        """
        completed = data.get("completed", False)
        if not isinstance(completed, bool):
            raise ValueError(
                f"Task {data.get('id')} has non-boolean completed flag {completed!r}"
            )
        node = cls(
            id=int(data["id"]),
            description=data.get("description") or "",
            completed=completed,
            parent_id=data.get("parentId"),
        )
        node.children = [cls.from_dict(child) for child in data.get("children", [])]
        return node

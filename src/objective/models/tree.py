"""TaskTree container: lookup, mutation and completion propagation.

All structural changes to the objective tree go through ``TaskTree`` so the
completion invariant (an internal task is completed exactly when all of its
sub-tasks are) and the parent links stay consistent. Each successful mutation
fires the ``on_change`` callback once, which is how the owning session
persists the tree.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

from objective.models.task import NO_PARENT, ROOT_ID, TaskNode

logger = logging.getLogger(__name__)


class TaskTreeError(Exception):
    """Base exception for task tree errors."""

    pass


class MissingIdentifierError(TaskTreeError):
    """Raised when a lookup is attempted without an id."""

    def __init__(self) -> None:
        super().__init__("Task id is required for lookup")


class NodeNotFoundError(TaskTreeError):
    """Raised when a required task is not present in the tree."""

    def __init__(self, task_id: int) -> None:
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found in tree")


class OrphanedNodeError(TaskTreeError):
    """Raised when an operation that needs a parent is used on the root."""

    def __init__(self, node: TaskNode) -> None:
        self.node = node
        super().__init__(f"Task '{node.description}' ({node.id}) has no parent")


class TreeIntegrityError(TaskTreeError):
    """Raised when the tree violates one of its structural invariants."""

    pass


class TaskTree:
    """Owns the root task and every operation that changes the tree."""

    def __init__(
        self,
        root: TaskNode | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.root = root if root is not None else TaskNode.create()
        self.on_change = on_change

    @classmethod
    def new(cls, objective: str = "") -> TaskTree:
        """Create a tree holding only a root objective."""
        return cls(TaskNode.create(objective, id=ROOT_ID))

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()

    # --- Lookup ---

    def find_by_id(self, task_id: int | None) -> TaskNode | None:
        """Find a task by id using a pre-order depth-first search.

        Returns:
            The first matching task, or None if no task has the id.

        Raises:
            MissingIdentifierError: If task_id is None.
        """
        if task_id is None:
            raise MissingIdentifierError()
        for node in self.root.walk():
            if node.id == task_id:
                return node
        return None

    def get_by_id(self, task_id: int | None) -> TaskNode:
        """Find a task by id, raising NodeNotFoundError when absent."""
        node = self.find_by_id(task_id)
        if node is None:
            raise NodeNotFoundError(task_id)  # type: ignore[arg-type]
        return node

    def contains(self, node: TaskNode) -> bool:
        """Check whether this exact node object is part of the tree."""
        return any(candidate is node for candidate in self.root.walk())

    def parent_of(self, node: TaskNode) -> TaskNode:
        """Get the parent of a task.

        Raises:
            OrphanedNodeError: If node is the root.
            TreeIntegrityError: If the recorded parent is not in the tree.
        """
        if node.parent_id is NO_PARENT:
            raise OrphanedNodeError(node)
        parent = self.find_by_id(node.parent_id)
        if parent is None:
            logger.error(
                "Task %d claims missing parent %d", node.id, node.parent_id
            )
            raise TreeIntegrityError(
                f"Parent {node.parent_id} of task {node.id} not found in tree"
            )
        return parent

    def index_in_parent(self, node: TaskNode) -> int:
        """Locate a task's position among its siblings.

        Raises:
            OrphanedNodeError: If node is the root.
            TreeIntegrityError: If the parent does not list this node.
        """
        parent = self.parent_of(node)
        for index, sibling in enumerate(parent.children):
            if sibling is node:
                return index
        logger.error(
            "Task '%s' (%d) not found in parent task '%s' (%d)",
            node.description,
            node.id,
            parent.description,
            parent.id,
        )
        raise TreeIntegrityError(
            f"Task '{node.description}' not found in parent task "
            f"'{parent.description}'"
        )

    def ancestors(self, node: TaskNode) -> list[TaskNode]:
        """Parent chain of a task, nearest first, excluding the tree root."""
        chain: list[TaskNode] = []
        current = node
        while not current.is_root:
            current = self.parent_of(current)
            if current.is_root:
                break
            chain.append(current)
        return chain

    def iterate_in_order(
        self, start: TaskNode | None = None
    ) -> Iterator[tuple[TaskNode, int]]:
        """Iterate tasks below ``start`` in display order with depth level.

        Yields:
            Tuple of (task, depth); direct children of ``start`` have depth 0.
        """

        def _iterate(node: TaskNode, depth: int) -> Iterator[tuple[TaskNode, int]]:
            for child in node.children:
                yield (child, depth)
                yield from _iterate(child, depth + 1)

        yield from _iterate(start or self.root, 0)

    # --- Current task ---

    def next_incomplete_task(self, start: TaskNode | None = None) -> TaskNode | None:
        """Find the next actionable task.

        A task is actionable when it is incomplete, has no sub-tasks and is
        not the tree root. Completed subtrees are skipped entirely.

        Args:
            start: Node to search from. Defaults to the tree root.

        Returns:
            The first actionable task in pre-order, or None.
        """

        def _search(node: TaskNode) -> TaskNode | None:
            if not node.completed and node.is_leaf and not node.is_root:
                return node
            for child in node.children:
                if child.completed:
                    continue
                found = _search(child)
                if found is not None:
                    return found
            return None

        return _search(start or self.root)

    # --- Structure ---

    def insert_child(
        self, parent: TaskNode, description: str = "", index: int | None = None
    ) -> TaskNode:
        """Create a new sub-task of ``parent``.

        Args:
            parent: Task that receives the new child.
            description: Text of the new task.
            index: Position among the children. Defaults to appending.

        Returns:
            The new task.

        Raises:
            IndexError: If index is outside [0, len(parent.children)].
        """
        if index is None:
            index = len(parent.children)
        elif not 0 <= index <= len(parent.children):
            raise IndexError(
                f"Insert position {index} out of range for task {parent.id} "
                f"with {len(parent.children)} children"
            )
        node = TaskNode.create(description, parent_id=parent.id, root=self.root)
        parent.children.insert(index, node)
        self._recompute_from(parent)
        logger.debug("Added task %d under %d at %d", node.id, parent.id, index)
        self._changed()
        return node

    def insert_after(self, node: TaskNode, description: str = "") -> TaskNode:
        """Create a sibling task directly after ``node``."""
        index = self.index_in_parent(node)
        return self.insert_child(self.parent_of(node), description, index + 1)

    def remove_child(self, node: TaskNode) -> None:
        """Remove a task and its subtree from its parent.

        Raises:
            OrphanedNodeError: If node is the root.
            TreeIntegrityError: If the parent does not list this node.
        """
        index = self.index_in_parent(node)
        parent = self.parent_of(node)
        del parent.children[index]
        if parent.children:
            self._recompute_from(parent)
        logger.debug("Removed task %d from %d", node.id, parent.id)
        self._changed()

    def move_up(self, node: TaskNode) -> bool:
        """Swap a task with its previous sibling.

        Returns:
            True if the task moved, False if it was already first.
        """
        index = self.index_in_parent(node)
        if index == 0:
            return False
        siblings = self.parent_of(node).children
        siblings[index - 1], siblings[index] = siblings[index], siblings[index - 1]
        self._changed()
        return True

    def move_down(self, node: TaskNode) -> bool:
        """Swap a task with its next sibling.

        Returns:
            True if the task moved, False if it was already last.
        """
        index = self.index_in_parent(node)
        siblings = self.parent_of(node).children
        if index >= len(siblings) - 1:
            return False
        siblings[index + 1], siblings[index] = siblings[index], siblings[index + 1]
        self._changed()
        return True

    def replace_children(
        self, parent: TaskNode, descriptions: list[str]
    ) -> list[TaskNode]:
        """Discard a task's sub-tasks and add one new task per description.

        Returns:
            The new tasks, in order.
        """
        parent.children.clear()
        created: list[TaskNode] = []
        for description in descriptions:
            node = TaskNode.create(description, parent_id=parent.id, root=self.root)
            parent.children.append(node)
            created.append(node)
        self._recompute_from(parent)
        self._changed()
        return created

    def set_description(self, node: TaskNode, description: str) -> None:
        """Replace a task's text."""
        node.description = description or ""
        self._changed()

    # --- Completion ---

    def set_completed(self, node: TaskNode, completed: bool) -> None:
        """Set a task's flag and force the same value onto all sub-tasks."""
        for descendant in node.walk():
            descendant.completed = completed

    def propagate_completion_upward(self, node: TaskNode) -> None:
        """Recompute every ancestor's flag from its children, up to the root."""
        current = node
        while not current.is_root:
            parent = self.parent_of(current)
            all_completed = all(child.completed for child in parent.children)
            if all_completed and not parent.completed:
                logger.info(
                    "Parent task '%s' completed after all child tasks completed.",
                    parent.description,
                )
            parent.completed = all_completed
            current = parent

    def complete_task(self, node: TaskNode) -> None:
        """Mark a task done, cascade to its subtree and update ancestors."""
        self.toggle_completed(node, True)
        logger.info("Task successfully completed: %r", node.description)

    def toggle_completed(self, node: TaskNode, completed: bool) -> None:
        """Set a task's completion, cascade, propagate and persist."""
        self.set_completed(node, completed)
        self.propagate_completion_upward(node)
        self._changed()

    def _recompute_from(self, parent: TaskNode) -> None:
        """Re-derive ``parent`` and its ancestors after its children changed."""
        if parent.children:
            parent.completed = all(child.completed for child in parent.children)
        self.propagate_completion_upward(parent)

    def rederive_completion(self) -> list[TaskNode]:
        """Recompute every internal node's flag from its children, bottom-up.

        Returns:
            The internal nodes whose stored flag disagreed and was corrected.
        """
        corrected: list[TaskNode] = []

        def _derive(node: TaskNode) -> bool:
            if node.is_leaf:
                return node.completed
            derived = all([_derive(child) for child in node.children])
            if node.completed != derived:
                node.completed = derived
                corrected.append(node)
            return derived

        _derive(self.root)
        return corrected

    # --- Validation ---

    def validate(self) -> None:
        """Check the structural invariants of the whole tree.

        Raises:
            TreeIntegrityError: On a non-root top node, a duplicate or
                negative id, or a child whose parent_id does not match.
        """
        if not self.root.is_root:
            raise TreeIntegrityError(
                f"Tree root {self.root.id} has parent {self.root.parent_id}"
            )
        seen: set[int] = set()

        def _check(node: TaskNode) -> None:
            if node.id < 0:
                raise TreeIntegrityError(f"Task id {node.id} is negative")
            if node.id in seen:
                raise TreeIntegrityError(f"Duplicate task id {node.id}")
            seen.add(node.id)
            for child in node.children:
                if child.parent_id is NO_PARENT:
                    raise TreeIntegrityError(
                        f"Task {child.id} under {node.id} has no parent id"
                    )
                if child.parent_id != node.id:
                    raise TreeIntegrityError(
                        f"Task {child.id} claims parent {child.parent_id} "
                        f"but is listed under {node.id}"
                    )
                _check(child)

        _check(self.root)

    def to_dict(self) -> dict:
        """Serialize the whole tree."""
        return self.root.to_dict()

    @classmethod
    def from_dict(cls, data: dict) -> TaskTree:
        """Rebuild a tree from its serialized root."""
        return cls(TaskNode.from_dict(data))

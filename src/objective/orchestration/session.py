"""Per-chat objective session.

An ``ObjectiveSession`` owns one chat's task tree, the active objective and
the persistence/injection wiring around them. The current task is never
stored: it is recomputed from the tree whenever it is read, so it cannot go
stale after a mutation. Switching chats means building a new session.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from objective.llm.prompts import substitute_prompt
from objective.models.state import ObjectiveState, StateStore
from objective.models.task import TaskNode
from objective.models.tree import NodeNotFoundError, TaskTree
from objective.orchestration.current_task import CurrentTaskInjector, PromptSink

logger = logging.getLogger(__name__)


class ObjectiveSession:
    """Active objective state for a single chat."""

    def __init__(
        self,
        state: ObjectiveState | None = None,
        *,
        chat_id: str | None = None,
        store: StateStore | None = None,
        sink: PromptSink | None = None,
        substitute_global: Callable[[str], str] | None = None,
    ) -> None:
        self.state = state or ObjectiveState()
        self.chat_id = chat_id
        self.store = store
        self.injector = CurrentTaskInjector(sink)
        self.substitute_global = substitute_global
        # Serializes every backend request made on behalf of this chat
        self.backend_lock = asyncio.Lock()
        self.tree.on_change = self._on_tree_changed

    @classmethod
    def load(
        cls,
        store: StateStore,
        chat_id: str | None,
        *,
        sink: PromptSink | None = None,
        substitute_global: Callable[[str], str] | None = None,
        objective: str = "",
    ) -> ObjectiveSession:
        """Restore a chat's session, or start a fresh tree if none is saved.

        Args:
            store: Where chat state lives.
            chat_id: Chat to load.
            sink: Prompt sink that receives current-task context.
            substitute_global: Host substitution for rendered prompts.
            objective: Root objective text for a fresh tree.
        """
        state = store.load(chat_id)
        if state is None:
            logger.info("No saved objective for chat %s, starting fresh", chat_id)
            state = ObjectiveState(task_tree=TaskTree.new(objective))
        session = cls(
            state,
            chat_id=chat_id,
            store=store,
            sink=sink,
            substitute_global=substitute_global,
        )
        session.refresh_current_task(save=False)
        return session

    # --- Derived state ---

    @property
    def tree(self) -> TaskTree:
        return self.state.task_tree

    @property
    def objective(self) -> TaskNode:
        """The active objective (falls back to the root if it disappeared)."""
        node = self.tree.find_by_id(self.state.current_objective_id)
        return node if node is not None else self.tree.root

    @property
    def current_task(self) -> TaskNode | None:
        """The next actionable task, recomputed on every access."""
        return self.tree.next_incomplete_task()

    def current_task_parent(self) -> TaskNode | None:
        """Parent of the current task, if there is a current task."""
        task = self.current_task
        if task is None or task.is_root:
            return None
        return self.tree.parent_of(task)

    def highlighted_ids(self) -> list[int]:
        """Ids on the path to the current task (task first, root excluded)."""
        task = self.current_task
        if task is None:
            return []
        return [task.id] + [node.id for node in self.tree.ancestors(task)]

    def render_prompt(self, template: str, substitute_global: bool = True) -> str:
        """Fill a template from the current objective and task."""
        task = self.current_task
        parent = self.current_task_parent()
        return substitute_prompt(
            template,
            objective=self.objective.description,
            task=task.description if task else None,
            parent=parent.description if parent else None,
            substitute_global=self.substitute_global if substitute_global else None,
        )

    # --- Persistence and injection ---

    def save(self) -> None:
        """Persist the state if the session has a store."""
        if self.store is not None:
            self.store.save(self.chat_id, self.state)

    def refresh_current_task(self, save: bool = True) -> TaskNode | None:
        """Recompute the current task and push its prompt to the host.

        Returns:
            The current task, or None when everything is done.
        """
        task = self.current_task
        text = self.render_prompt(self.state.prompts.current_task) if task else None
        self.injector.update(text, self.state.chat_depth)
        if save:
            self.save()
        return task

    def _on_tree_changed(self) -> None:
        self.refresh_current_task()

    # --- Objective navigation ---

    def branch(self, node: TaskNode) -> None:
        """Make ``node`` the active objective."""
        if not self.tree.contains(node):
            raise NodeNotFoundError(node.id)
        self.state.current_objective_id = node.id
        logger.info("Objective branched to '%s' (%d)", node.description, node.id)
        self.refresh_current_task()

    def go_to_parent(self) -> TaskNode:
        """Make the active objective's parent the new objective.

        Raises:
            OrphanedNodeError: If the objective is already the root.
        """
        parent = self.tree.parent_of(self.objective)
        self.state.current_objective_id = parent.id
        self.refresh_current_task()
        return parent

    def set_objective_description(self, description: str) -> None:
        self.tree.set_description(self.objective, description)

    # --- Task editing ---

    def add_task(self, description: str = "", index: int | None = None) -> TaskNode:
        """Add a task under the active objective."""
        return self.tree.insert_child(self.objective, description, index)

    def add_task_after(self, node: TaskNode, description: str = "") -> TaskNode:
        """Add a sibling task directly after ``node``."""
        return self.tree.insert_after(node, description)

    def remove_task(self, node: TaskNode) -> None:
        """Delete a task; the objective moves up if it was inside the subtree.

        Raises:
            OrphanedNodeError: If node is the root.
        """
        objective = self.objective
        moves_objective = objective is node or node in self.tree.ancestors(objective)
        parent = self.tree.parent_of(node)
        self.tree.remove_child(node)
        if moves_objective:
            self.state.current_objective_id = parent.id
            self.refresh_current_task()

    def edit_task(self, node: TaskNode, description: str) -> None:
        self.tree.set_description(node, description)

    def move_task_up(self, node: TaskNode) -> bool:
        return self.tree.move_up(node)

    def move_task_down(self, node: TaskNode) -> bool:
        return self.tree.move_down(node)

    def set_task_completed(self, node: TaskNode, completed: bool) -> None:
        """Manually tick or untick a task (cascades to sub-tasks)."""
        self.tree.toggle_completed(node, completed)

    def replace_objective_tasks(
        self, descriptions: list[str], objective: TaskNode | None = None
    ) -> list[TaskNode]:
        """Discard an objective's sub-tasks and add one task per description.

        Args:
            descriptions: New task texts, in order.
            objective: Target node. Defaults to the active objective.
        """
        return self.tree.replace_children(objective or self.objective, descriptions)

    # --- Settings ---

    def set_check_frequency(self, frequency: int) -> None:
        if frequency < 0:
            raise ValueError("Check frequency must be non-negative")
        self.state.check_frequency = frequency
        self.save()

    def set_chat_depth(self, depth: int) -> None:
        if depth < 0:
            raise ValueError("Chat depth must be non-negative")
        self.state.chat_depth = depth
        self.refresh_current_task()

    def set_hide_tasks(self, hidden: bool) -> None:
        self.state.hide_tasks = hidden
        self.save()

    def debug_dump(self) -> dict[str, Any]:
        """Snapshot of the session for debugging."""
        task = self.current_task
        return {
            "chatId": self.chat_id,
            "currentTask": task.to_dict() if task else None,
            "currentObjective": self.objective.to_dict(),
            "state": self.state.to_dict(),
        }

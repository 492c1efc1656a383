"""Current-task context injection.

The host exposes named "extension prompt" slots that are inserted into the
generation context at a relative position and depth. The objective keeps one
slot up to date with the rendered ``currentTask`` template, and clears it when
there is nothing left to do.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

logger = logging.getLogger(__name__)

EXTENSION_PROMPT_NAME = "Objective"

# Relative position of the slot: inside the chat history, ``depth`` messages up
IN_CHAT = 1


class PromptSink(Protocol):
    """Host-side receiver for injected context."""

    def set_extension_prompt(
        self, name: str, text: str, position: int, depth: int
    ) -> None: ...


@dataclass(frozen=True, slots=True)
class InjectedPrompt:
    """A single injected context entry."""

    text: str
    position: int
    depth: int


@dataclass
class MemoryPromptSink:
    """Prompt sink that keeps the latest injection per slot in memory."""

    prompts: dict[str, InjectedPrompt] = field(default_factory=dict)

    def set_extension_prompt(
        self, name: str, text: str, position: int, depth: int
    ) -> None:
        self.prompts[name] = InjectedPrompt(text=text, position=position, depth=depth)

    def get(self, name: str = EXTENSION_PROMPT_NAME) -> str:
        """Get the text currently injected into a slot ("" when empty)."""
        entry = self.prompts.get(name)
        return entry.text if entry else ""


class CurrentTaskInjector:
    """Pushes the current-task prompt into the host's prompt slot."""

    def __init__(self, sink: PromptSink | None = None) -> None:
        self.sink = sink

    def update(self, text: str | None, depth: int) -> None:
        """Inject ``text`` at ``depth``, or clear the slot when text is empty."""
        if self.sink is None:
            return
        if text:
            self.sink.set_extension_prompt(EXTENSION_PROMPT_NAME, text, IN_CHAT, depth)
            logger.info("Current task prompt set: %r", text)
        else:
            self.sink.set_extension_prompt(EXTENSION_PROMPT_NAME, "", IN_CHAT, depth)
            logger.info("No current task")

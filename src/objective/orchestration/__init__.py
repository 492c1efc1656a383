"""Session, completion and generation workflows."""

from objective.orchestration.completion import (
    CheckOutcome,
    CheckState,
    CompletionWorkflow,
    Verdict,
    classify_response,
)
from objective.orchestration.current_task import (
    EXTENSION_PROMPT_NAME,
    IN_CHAT,
    CurrentTaskInjector,
    MemoryPromptSink,
    PromptSink,
)
from objective.orchestration.generation import (
    GenerationOutcome,
    TaskGenerator,
    parse_numbered_list,
)
from objective.orchestration.session import ObjectiveSession

__all__ = [
    "CheckOutcome",
    "CheckState",
    "CompletionWorkflow",
    "CurrentTaskInjector",
    "EXTENSION_PROMPT_NAME",
    "GenerationOutcome",
    "IN_CHAT",
    "MemoryPromptSink",
    "ObjectiveSession",
    "PromptSink",
    "TaskGenerator",
    "Verdict",
    "classify_response",
    "parse_numbered_list",
]

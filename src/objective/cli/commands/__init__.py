"""CLI command handlers."""

from .backend import cmd_check, cmd_generate
from .config import cmd_config
from .objective import cmd_branch, cmd_objective, cmd_parent
from .prompts import cmd_prompts
from .tasks import (
    cmd_add,
    cmd_complete,
    cmd_edit,
    cmd_move,
    cmd_remove,
    cmd_uncomplete,
)
from .view import cmd_debug, cmd_show

__all__ = [
    "cmd_add",
    "cmd_branch",
    "cmd_check",
    "cmd_complete",
    "cmd_config",
    "cmd_debug",
    "cmd_edit",
    "cmd_generate",
    "cmd_move",
    "cmd_objective",
    "cmd_parent",
    "cmd_prompts",
    "cmd_remove",
    "cmd_show",
    "cmd_uncomplete",
]

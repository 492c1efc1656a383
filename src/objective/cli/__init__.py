"""Command-line interface for the objective."""

from objective.cli.app import dispatch, run
from objective.cli.parser import build_parser, parse_args

__all__ = ["build_parser", "dispatch", "parse_args", "run"]

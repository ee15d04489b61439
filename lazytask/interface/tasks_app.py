#!/usr/bin/env python3
"""
lazytask: task tracker CLI and dashboard entry point.

Tasks live in one JSON file (tasks.json by default); every command reads the
whole list and writes it back.
"""

import sys
from typing import List, Optional

from lazytask import __version__
from lazytask.config import load_settings
from lazytask.infrastructure.file_repository import JsonTaskRepository
from lazytask.interface import cli_commands
from lazytask.interface.cli_commands import CliDeps
from lazytask.interface.cli_io import Reporter
from lazytask.interface.cli_parser import build_parser as build_cli_parser
from lazytask.interface.tui_themes import DEFAULT_THEME, THEMES


def build_parser():
    return build_cli_parser(cli_commands, THEMES, DEFAULT_THEME, __version__)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not getattr(args, "command", None):
        args.command = "dashboard"
    settings = load_settings()
    repository = JsonTaskRepository(args.file or settings.data_file)
    deps = CliDeps(repository=repository, settings=settings, reporter=Reporter(as_json=args.json))
    return args.func(args, deps)


if __name__ == "__main__":
    sys.exit(main())

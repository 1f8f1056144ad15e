"""
Main Entry Point for decorator-importer CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in `decorator_importer.cli.commands`.
"""

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from decorator_importer import __version__
from decorator_importer.cli import commands
from decorator_importer.utils.console import console


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="decorator-importer: auto-import registered decorators")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
  parser.add_argument("-v", "--verbose", action="store_true", help="Log every rewritten decorator")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: CONVERT ---
  cmd_conv = subparsers.add_parser("convert", help="Rewrite decorators in a Python file or directory")
  cmd_conv.add_argument("path", type=Path, help="Input source file or directory")
  cmd_conv.add_argument("--out", type=Path, help="Output destination (file or dir). Files print to stdout if omitted.")
  cmd_conv.add_argument(
    "--definitions",
    type=Path,
    default=None,
    help="JSON or TOML file of decorator definitions (merged over pyproject.toml)",
  )
  cmd_conv.add_argument(
    "--include-functions",
    action="store_true",
    default=None,
    help="Also rewrite decorators on plain functions (Overrides config)",
  )
  cmd_conv.add_argument(
    "--check",
    action="store_true",
    help="Write nothing; exit with 1 if any file would be rewritten",
  )

  # --- Command: LIST ---
  cmd_list = subparsers.add_parser("list", help="Show and validate the configured decorator definitions")
  cmd_list.add_argument("--definitions", type=Path, default=None, help="JSON or TOML file of decorator definitions")

  args = parser.parse_args(argv)

  if args.verbose:
    console.set_level(logging.DEBUG)

  if args.command == "convert":
    return commands.handle_convert(
      args.path,
      args.out,
      args.definitions,
      args.include_functions,
      args.check,
    )

  if args.command == "list":
    return commands.handle_list(args.definitions)

  return 0

"""
Convert Command Handler.

This module implements the logic for the `decorator-importer convert` command.
It orchestrates:
1. Configuration loading (pyproject.toml, definitions file, CLI overrides).
2. Engine construction.
3. Rewriting single files or whole directory trees.
4. Output writing, or change detection in `--check` mode.
"""

from pathlib import Path
from typing import Dict, Optional

from rich.markup import escape
from rich.table import Table

from decorator_importer.config import RuntimeConfig
from decorator_importer.core.engine import DecoratorImportEngine
from decorator_importer.core.transform_result import TransformResult
from decorator_importer.utils.console import (
  console,
  log_error,
  log_info,
  log_success,
  log_warning,
)


def handle_convert(
  input_path: Path,
  output_path: Optional[Path],
  definitions_file: Optional[Path],
  include_functions: Optional[bool],
  check: bool = False,
) -> int:
  """
  Handles the 'convert' command execution.

  Args:
      input_path: Path to the source file or directory to rewrite.
      output_path: Where rewritten code is saved. For a single file, None prints
          to stdout. Required for directories unless `check` is set.
      definitions_file: Optional JSON/TOML file of decorator definitions.
      include_functions: Override for rewriting decorators on plain functions.
      check: If True, nothing is written; exit code 1 signals pending rewrites.

  Returns:
      int: Exit code (0 for success, 1 for failure or pending changes in check mode).
  """
  if not input_path.exists():
    log_error(f"Input not found: {input_path}")
    return 1

  try:
    config = RuntimeConfig.load(
      definitions_file=definitions_file,
      include_functions=include_functions,
      search_path=input_path if input_path.is_dir() else input_path.parent,
    )
  except ValueError as e:
    log_error(escape(str(e)))
    return 1

  if not config.decorators:
    log_warning("No decorator definitions configured; files will be left unchanged.")

  engine = DecoratorImportEngine(config=config)
  batch_results: Dict[str, TransformResult] = {}

  if input_path.is_file():
    result = _convert_single_file(input_path, output_path, engine, check)
    batch_results[input_path.name] = result
    if not result.success:
      return 1
    if check:
      return 1 if result.changed else 0
    return 0

  if not output_path and not check:
    log_error("Directory conversion requires --out destination directory (or --check).")
    return 1

  py_files = sorted(input_path.rglob("*.py"))
  if not py_files:
    log_warning(f"No .py files found in {input_path}")
    return 0

  log_info(f"Processing {len(py_files)} files from [path]{input_path}[/path]...")

  for src_file in py_files:
    rel_path = src_file.relative_to(input_path)
    dest_file = output_path / rel_path if output_path else None
    batch_results[str(rel_path)] = _convert_single_file(src_file, dest_file, engine, check)

  _print_batch_summary(batch_results, check)

  if any(not r.success for r in batch_results.values()):
    return 1
  if check and any(r.changed for r in batch_results.values()):
    return 1
  return 0


def _convert_single_file(
  input_path: Path,
  output_path: Optional[Path],
  engine: DecoratorImportEngine,
  check: bool = False,
) -> TransformResult:
  """
  Helper to execute the transform on a single file.

  Args:
      input_path: Source file path.
      output_path: Destination file path, or None to print to stdout.
      engine: The configured engine.
      check: If True, only report whether the file would change.

  Returns:
      TransformResult: Result object containing status and code.
  """
  try:
    with open(input_path, "rt", encoding="utf-8") as f:
      code = f.read()
  except (OSError, UnicodeDecodeError) as e:
    log_error(f"Failed to read {input_path}: {escape(str(e))}")
    return TransformResult(success=False, errors=[str(e)])

  result = engine.run(code)

  if not result.success:
    for error in result.errors:
      log_error(f"[path]{input_path}[/path]: {escape(error)}")
    return result

  if check:
    if result.changed:
      log_warning(f"Would rewrite [path]{input_path}[/path] ({result.rewritten_decorators} decorator(s))")
    return result

  if output_path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "wt", encoding="utf-8") as f:
      f.write(result.code)
    log_success(f"Rewrote: [path]{input_path}[/path] -> [path]{output_path}[/path]")
  else:
    print(result.code, end="")

  return result


def _print_batch_summary(results: Dict[str, TransformResult], check: bool = False) -> None:
  """
  Renders a summary table of transform results to the console.

  Args:
      results: Dictionary mapping filenames to transform results.
      check: Whether the batch ran in check mode (changes are reported, not written).
  """
  total = len(results)
  failures = sum(1 for r in results.values() if not r.success)
  changed = sum(1 for r in results.values() if r.success and r.changed)

  if failures == 0 and not (check and changed):
    log_success(f"Batch Complete: {total} file(s) processed, {changed} rewritten.")
    return

  table = Table(title="Decorator Import Report")
  table.add_column("File", style="cyan")
  table.add_column("Status", justify="center")
  table.add_column("Details", style="red")

  for filename, res in results.items():
    if not res.success:
      table.add_row(filename, "❌ Failed", escape("; ".join(res.errors) or "Unknown Error"))
    elif check and res.changed:
      table.add_row(filename, "✏️ Would Rewrite", f"{res.rewritten_decorators} decorator(s)")

  console.print(table)
  console.print(f"\n[bold]Summary:[/bold] {total - failures} Passed, {failures} Failed, {changed} Changed.")

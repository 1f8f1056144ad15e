"""
List Command Handler.

Renders the effective decorator registry (after pyproject.toml, definitions
file and legacy-shape normalization) as a table. Every entry is validated, so
this command doubles as a configuration lint.
"""

from pathlib import Path
from typing import Optional

from rich.markup import escape
from rich.table import Table

from decorator_importer.config import RuntimeConfig
from decorator_importer.core.registry import DecoratorRegistry
from decorator_importer.errors import ConfigurationError
from decorator_importer.utils.console import console, log_error, log_warning


def handle_list(definitions_file: Optional[Path], search_path: Optional[Path] = None) -> int:
  """
  Handles the 'list' command.

  Args:
      definitions_file: Optional JSON/TOML file of decorator definitions.
      search_path: Directory to start the pyproject.toml search from.

  Returns:
      int: 0 if every definition is valid, 1 otherwise.
  """
  try:
    config = RuntimeConfig.load(definitions_file=definitions_file, search_path=search_path)
  except ValueError as e:
    log_error(escape(str(e)))
    return 1

  registry = DecoratorRegistry.build(config.decorators)
  if not len(registry):
    log_warning("No decorator definitions configured.")
    return 0

  table = Table(title="Decorator Definitions")
  table.add_column("Decorator", style="cyan")
  table.add_column("Import")
  table.add_column("Inherits")
  table.add_column("Options")

  invalid = 0
  for name in registry.names():
    try:
      definition = registry.lookup(name)
    except ConfigurationError as e:
      invalid += 1
      table.add_row(f"@{name}", "[error]invalid[/error]", "", escape(e.detail or str(e)))
      continue

    inherits = ""
    if definition.inherits:
      inherits = f"{definition.inherits.module}:{definition.inherits.export}"

    options = []
    if definition.needs_class_name:
      options.append("needsClassName")
    if definition.intercepts_super:
      options.append("interceptsSuper")
    if definition.hot_reload:
      options.append(f"hotReload={definition.hot_reload}")

    table.add_row(f"@{name}", f"{definition.module}:{definition.export}", inherits, ", ".join(options))

  console.print(table)
  if invalid:
    log_error(f"{invalid} invalid definition(s).")
    return 1
  return 0

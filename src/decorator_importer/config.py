"""
Runtime Configuration Store.

Decorator definitions reach the engine from three layers, later layers winning
per decorator name:

1.  ``[tool.decorator_importer.decorators]`` in the nearest ``pyproject.toml``.
2.  A definitions file (``.json`` or ``.toml``), named in the TOML section as
    ``definitions_file`` or passed on the command line.
3.  Definitions passed programmatically.

Example ``pyproject.toml``::

    [tool.decorator_importer]
    include_functions = false

    [tool.decorator_importer.decorators]
    Logged = { module = "app.logging", export = "Logger" }
    Component = { module = "app.ui", needsClassName = true, hotReload = "app.hot" }
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field

if sys.version_info >= (3, 11):
  import tomllib
else:
  import tomli as tomllib

TOOL_SECTION = "decorator_importer"


class RuntimeConfig(BaseModel):
  """
  Global configuration container for the transform engine.
  """

  decorators: Dict[str, Any] = Field(
    default_factory=dict,
    description="Raw decorator definitions (name -> module string or definition table).",
  )
  include_functions: bool = Field(
    False,
    description="If True, decorators on module-level and nested functions are rewritten too.",
  )
  definitions_file: Optional[Path] = Field(None, description="JSON/TOML file holding extra definitions.")

  @classmethod
  def load(
    cls,
    decorators: Optional[Dict[str, Any]] = None,
    definitions_file: Optional[Path] = None,
    include_functions: Optional[bool] = None,
    search_path: Optional[Path] = None,
  ) -> "RuntimeConfig":
    """
    Loads configuration from pyproject.toml and overrides with explicit arguments.

    Args:
        decorators (Optional[Dict]): Extra definitions, highest precedence.
        definitions_file (Optional[Path]): Override for the definitions file.
        include_functions (Optional[bool]): Override for function-site handling.
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        RuntimeConfig: The fully resolved configuration object.

    Raises:
        ValueError: If a definitions file cannot be read or parsed.
    """
    start_dir = search_path or Path.cwd()
    toml_config, toml_dir = _load_toml_settings(start_dir)

    # 1. pyproject.toml definitions
    merged: Dict[str, Any] = dict(toml_config.get("decorators", {}))

    # 2. Definitions file (CLI path wins over TOML path)
    final_file = definitions_file
    if not final_file and "definitions_file" in toml_config:
      raw_path = Path(toml_config["definitions_file"])
      final_file = (toml_dir / raw_path).resolve() if toml_dir else raw_path.resolve()
    if final_file:
      merged.update(load_definitions_file(final_file))

    # 3. Programmatic definitions
    merged.update(decorators or {})

    if include_functions is not None:
      final_functions = include_functions
    else:
      final_functions = bool(toml_config.get("include_functions", False))

    return cls(decorators=merged, include_functions=final_functions, definitions_file=final_file)


def load_definitions_file(path: Path) -> Dict[str, Any]:
  """
  Reads raw decorator definitions from a JSON or TOML file.

  A TOML file may either hold the definitions at top level or nest them under a
  ``decorators`` table. A JSON file must hold a top-level object.

  Args:
      path (Path): The file to read.

  Returns:
      Dict[str, Any]: Mapping of decorator name to raw definition.

  Raises:
      ValueError: If the file is missing, malformed, or not a mapping.
  """
  if not path.is_file():
    raise ValueError(f"Definitions file not found: {path}")

  try:
    if path.suffix == ".toml":
      with open(path, "rb") as f:
        data = tomllib.load(f)
      data = data.get("decorators", data)
    else:
      with open(path, "rt", encoding="utf-8") as f:
        data = json.load(f)
  except (json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
    raise ValueError(f"Could not parse definitions file {path}: {e}") from e

  if not isinstance(data, dict):
    raise ValueError(f"Definitions file {path} must contain an object mapping names to definitions.")
  return data


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches the start directory and its parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory it was found in.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError):
        return {}, None

      tool_section = data.get("tool", {})
      return tool_section.get(TOOL_SECTION, {}), parent

  return {}, None

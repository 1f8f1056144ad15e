"""
Decorator Definition Registry.

This module turns the heterogeneous decorator definitions supplied by the host
configuration into canonical records. It is split into two independent steps:

1.  **Normalization** (eager, at build time): coerces legacy input shapes into a
    single dictionary layout. Nothing is rejected here.
2.  **Validation** (lazy, on first lookup): checks the normalized layout against
    the ``DecoratorDefinition`` Pydantic schema and caches the result.

Deferring validation means a malformed definition only fails the run when a
decorator actually references it.

Accepted input shapes::

    {"Logged": "log"}                                   # bare module string
    {"Logged": {"module": "log", "export": "Logger"}}   # canonical
    {"Logged": {"classPath": "log"}}                    # legacy module alias
    {"Widget": {"module": "w", "inherits": "base"}}     # string inherits
"""

import logging
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from decorator_importer.errors import ConfigurationError

log = logging.getLogger(__name__)

DEFAULT_EXPORT = "default"

# Keys accepted in place of `module`, checked in order after `module` itself.
LEGACY_MODULE_KEYS = ("classPath", "class_path", "path")


class SuperclassRef(BaseModel):
  """
  The superclass a decorator injects via ``inherits``.
  """

  model_config = ConfigDict(frozen=True)

  module: StrictStr = Field(..., min_length=1, description="Module providing the superclass.")
  export: StrictStr = Field(..., min_length=1, description="Name of the superclass inside `module`.")


class DecoratorDefinition(BaseModel):
  """
  Canonical, validated definition of a single auto-imported decorator.
  """

  model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

  module: StrictStr = Field(..., min_length=1, description="Module providing the decorator.")
  export: StrictStr = Field(DEFAULT_EXPORT, min_length=1, description="Name imported from `module`.")
  inherits: Optional[SuperclassRef] = Field(None, description="Superclass to attach when the class has none.")
  needs_class_name: bool = Field(
    False,
    alias="needsClassName",
    description="If True, the class name is passed as the first decorator argument.",
  )
  intercepts_super: bool = Field(
    False,
    alias="interceptsSuper",
    description="If True, an empty class is inserted between the class and its bases.",
  )
  hot_reload: Optional[StrictStr] = Field(
    None,
    alias="hotReload",
    description="Module whose `default` export wraps the decorator call.",
  )


def normalize_definition(raw: Any) -> Dict[str, Any]:
  """
  Coerces one raw definition into the canonical dictionary layout.

  The input is never mutated. Values that cannot be coerced are carried through
  untouched so that validation can report them verbatim later.

  Args:
      raw: A module string, a definition mapping, or any other (invalid) value.

  Returns:
      Dict[str, Any]: A new dictionary with `module`, `export` and, when present,
      a mapping-shaped `inherits`.
  """
  if not isinstance(raw, Mapping):
    # Bare strings are the module path; anything else fails validation as `module`.
    return {"module": raw, "export": DEFAULT_EXPORT}

  entry = dict(raw)

  module = entry.get("module")
  if not module:
    for key in LEGACY_MODULE_KEYS:
      if entry.get(key):
        module = entry[key]
        break
  for key in LEGACY_MODULE_KEYS:
    entry.pop(key, None)
  entry["module"] = module

  if not entry.get("export"):
    entry["export"] = DEFAULT_EXPORT

  inherits = entry.get("inherits")
  if isinstance(inherits, str):
    entry["inherits"] = {"module": inherits, "export": DEFAULT_EXPORT}

  return entry


class DecoratorRegistry:
  """
  Read-only mapping of decorator name to definition.

  Built once per transform run. Lookups validate on first use and memoize the
  validated ``DecoratorDefinition``.
  """

  def __init__(self, entries: Mapping[str, Dict[str, Any]]) -> None:
    """
    Initializes the registry from already-normalized entries.

    Args:
        entries: Mapping of decorator name to normalized definition dictionary.
    """
    self._entries: Mapping[str, Dict[str, Any]] = MappingProxyType(dict(entries))
    self._validated: Dict[str, DecoratorDefinition] = {}

  @classmethod
  def build(cls, raw_definitions: Optional[Mapping[str, Any]]) -> "DecoratorRegistry":
    """
    Normalizes caller-supplied definitions into a new registry.

    Args:
        raw_definitions: Mapping of decorator name to raw definition. None is empty.

    Returns:
        DecoratorRegistry: The registry, with validation still pending.
    """
    entries = {str(name): normalize_definition(raw) for name, raw in (raw_definitions or {}).items()}
    log.debug("Built decorator registry with %d definition(s)", len(entries))
    return cls(entries)

  def __contains__(self, name: object) -> bool:
    return name in self._entries

  def __len__(self) -> int:
    return len(self._entries)

  def names(self) -> List[str]:
    """Returns the registered decorator names, sorted."""
    return sorted(self._entries)

  def raw(self, name: str) -> Optional[Dict[str, Any]]:
    """
    Returns the normalized (unvalidated) entry for a decorator.

    Args:
        name: Decorator name.

    Returns:
        Optional[Dict[str, Any]]: A copy of the entry, or None if not registered.
    """
    entry = self._entries.get(name)
    return dict(entry) if entry is not None else None

  def lookup(self, name: str) -> Optional[DecoratorDefinition]:
    """
    Resolves a decorator name to its validated definition.

    Args:
        name: Decorator name, as written in source.

    Returns:
        Optional[DecoratorDefinition]: The definition, or None when the name is
        not registered (the decorator was imported by hand).

    Raises:
        ConfigurationError: If the registered entry is structurally invalid.
    """
    cached = self._validated.get(name)
    if cached is not None:
      return cached

    entry = self._entries.get(name)
    if entry is None:
      return None

    try:
      definition = DecoratorDefinition.model_validate(entry)
    except ValidationError as e:
      raise ConfigurationError(name, entry, _describe(e)) from e

    self._validated[name] = definition
    return definition


def _describe(error: ValidationError) -> str:
  """Summarizes the first validation failure as `field.path: message`."""
  first = error.errors()[0]
  loc = ".".join(str(part) for part in first.get("loc", ()))
  if loc.startswith("inherits"):
    return f'"inherits" property is invalid at {loc}: {first.get("msg")}'
  return f"{loc}: {first.get('msg')}" if loc else str(first.get("msg"))

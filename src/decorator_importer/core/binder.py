"""
Import Binding Acquisition.

Provides ``ImportBinder``, the primitive the rewriter uses to obtain a local
name for an export of another module. The binder:

1.  Reuses bindings the author already imported at module level.
2.  Allocates collision-free local names (``_Logger``, ``_Logger2``, ...) for new
    bindings, mirroring unique-identifier generation in scope-aware transforms.
3.  De-duplicates: the same ``(export, module)`` pair always yields the same name.
4.  Defers statement insertion to ``apply``, which delegates to LibCST's
    ``AddImportsVisitor`` so placement respects docstrings, ``__future__``
    imports and existing import blocks.
"""

import logging
import re
from typing import Dict, Set, Tuple

import libcst as cst
from libcst.codemod import CodemodContext
from libcst.codemod.visitors import AddImportsVisitor

from decorator_importer.core.registry import DEFAULT_EXPORT
from decorator_importer.core.scanners import NameCollector, TopLevelImportScanner

log = logging.getLogger(__name__)

_NON_IDENTIFIER = re.compile(r"\W")


class ImportBinder:
  """
  Hands out local import bindings for a single module.

  One binder belongs to exactly one transform run; it must not be shared
  across modules.
  """

  def __init__(self, module: cst.Module) -> None:
    """
    Indexes the names and top-level imports already present in ``module``.

    Args:
        module: The module that will receive the injected imports.
    """
    collector = NameCollector()
    module.visit(collector)
    self._used_names: Set[str] = set(collector.names)

    existing = TopLevelImportScanner().scan(module)
    self._named: Dict[Tuple[str, str], str] = dict(existing.from_bindings)
    self._modules: Dict[str, str] = dict(existing.module_bindings)

    self.context = CodemodContext()
    self._pending = 0

  @property
  def pending_imports(self) -> int:
    """Number of import statements scheduled but not yet applied."""
    return self._pending

  def generate_uid(self, hint: str) -> str:
    """
    Allocates an identifier not used anywhere in the module.

    Args:
        hint: The preferred name. Non-identifier characters become underscores.

    Returns:
        str: ``hint`` itself if free, else ``hint2``, ``hint3``, ...
    """
    base = _NON_IDENTIFIER.sub("_", hint) or "_"
    if base[0].isdigit():
      base = f"_{base}"

    candidate = base
    counter = 2
    while candidate in self._used_names:
      candidate = f"{base}{counter}"
      counter += 1

    self._used_names.add(candidate)
    return candidate

  def add_named(self, export: str, module: str) -> str:
    """
    Returns a local name bound to ``export`` of ``module``, importing it if needed.

    Args:
        export: The attribute to import (``"default"`` is imported literally).
        module: Dotted module path; leading dots make the import relative.

    Returns:
        str: The local binding name.
    """
    key = (module, export)
    if key in self._named:
      return self._named[key]

    if export == DEFAULT_EXPORT:
      hint = module.strip(".").rsplit(".", 1)[-1] or export
    else:
      hint = export
    local = self.generate_uid(f"_{hint}")

    AddImportsVisitor.add_needed_import(self.context, module, export, local)
    self._named[key] = local
    self._pending += 1
    log.debug("Scheduled import: from %s import %s as %s", module, export, local)
    return local

  def add_module(self, module: str) -> str:
    """
    Returns a local name bound to the module object ``module``, importing it if needed.

    Args:
        module: Absolute dotted module path.

    Returns:
        str: The local binding name (the module name itself when it is free).
    """
    if module in self._modules:
      return self._modules[module]

    if "." not in module and module not in self._used_names:
      self._used_names.add(module)
      AddImportsVisitor.add_needed_import(self.context, module)
      local = module
    else:
      local = self.generate_uid(f"_{module.replace('.', '_')}")
      AddImportsVisitor.add_needed_import(self.context, module, None, local)

    self._modules[module] = local
    self._pending += 1
    log.debug("Scheduled import: import %s (bound as %s)", module, local)
    return local

  def apply(self, module: cst.Module) -> cst.Module:
    """
    Inserts every scheduled import statement into ``module``.

    Args:
        module: The (already rewritten) module.

    Returns:
        cst.Module: The module with imports added.
    """
    if not self._pending:
      return module
    return AddImportsVisitor(self.context).transform_module(module)

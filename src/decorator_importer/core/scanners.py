"""
AST Scanners for Name and Import Discovery.

These helpers inspect a module before rewriting so that freshly allocated
bindings never shadow a name the module already uses, and so that imports the
author wrote by hand are reused instead of duplicated.
"""

from typing import Dict, Optional, Set, Tuple, Union

import libcst as cst


def get_full_name(node: Optional[Union[cst.Name, cst.Attribute]]) -> str:
  """
  Recursively resolves a CST Name or Attribute chain to a dot-separated string.

  Args:
    node: The CST node representing the identifier (e.g. `x` or `x.y`).

  Returns:
    str: The dotted string (e.g., "pkg.widgets"), or "" for unsupported nodes.

  Example:
    >>> get_full_name(cst.Attribute(value=cst.Name("pkg"), attr=cst.Name("widgets")))
    'pkg.widgets'
  """
  if isinstance(node, cst.Name):
    return node.value
  elif isinstance(node, cst.Attribute):
    return f"{get_full_name(node.value)}.{node.attr.value}"
  return ""


def get_import_from_module(node: cst.ImportFrom) -> str:
  """
  Renders the module of a ``from ... import`` statement, keeping relative dots.

  Args:
    node: The ImportFrom node.

  Returns:
    str: E.g. "pkg.log", ".log" or "..".
  """
  dots = "." * len(node.relative)
  return f"{dots}{get_full_name(node.module)}"


class NameCollector(cst.CSTVisitor):
  """
  Collects every identifier spelled anywhere in a module.

  This deliberately over-approximates the set of bound names (attribute names
  and keyword names are included) since it is only used to avoid collisions.

  Attributes:
    names (Set[str]): All identifier strings seen.
  """

  def __init__(self) -> None:
    self.names: Set[str] = set()

  def visit_Name(self, node: cst.Name) -> None:
    self.names.add(node.value)


class TopLevelImportScanner:
  """
  Indexes the import bindings declared directly in a module body.

  Attributes:
    from_bindings (Dict[Tuple[str, str], str]): (module, export) -> local name,
      for ``from module import export [as local]``.
    module_bindings (Dict[str, str]): module -> local name, for
      ``import module [as local]``.
  """

  def __init__(self) -> None:
    self.from_bindings: Dict[Tuple[str, str], str] = {}
    self.module_bindings: Dict[str, str] = {}

  def scan(self, module: cst.Module) -> "TopLevelImportScanner":
    """
    Walks the top-level statements of ``module``.

    Args:
      module: The module to index.

    Returns:
      TopLevelImportScanner: self, for chaining.
    """
    for stmt in module.body:
      if not isinstance(stmt, cst.SimpleStatementLine):
        continue
      for small in stmt.body:
        if isinstance(small, cst.ImportFrom):
          self._track_from(small)
        elif isinstance(small, cst.Import):
          self._track_import(small)
    return self

  def _track_from(self, node: cst.ImportFrom) -> None:
    if isinstance(node.names, cst.ImportStar):
      return
    module_name = get_import_from_module(node)
    for alias in node.names:
      export = get_full_name(alias.name)
      local = _asname(alias) or export
      self.from_bindings.setdefault((module_name, export), local)

  def _track_import(self, node: cst.Import) -> None:
    for alias in node.names:
      full_name = get_full_name(alias.name)
      local = _asname(alias)
      if local:
        self.module_bindings.setdefault(full_name, local)
      elif "." not in full_name:
        # `import a.b` binds `a`, not a name for `a.b`.
        self.module_bindings.setdefault(full_name, full_name)


def _asname(alias: cst.ImportAlias) -> Optional[str]:
  if alias.asname is None:
    return None
  target = alias.asname.name
  if isinstance(target, cst.Name):
    return target.value
  return None

"""
Orchestration Engine for Decorator Import Rewriting.

This module provides the `DecoratorImportEngine`, the driver that wires the
registry, traversal, rewriter and import binder together for one module.

The pipeline for each run:

1.  **Parsing**: source text -> LibCST module.
2.  **Registry**: a fresh `DecoratorRegistry` is built from the configured
    definitions, so separate runs never share validation state.
3.  **Traversal & Rewriting**: every decorator is visited through the work queue
    and handed to the `DecoratorRewriter`.
4.  **Commit**: drafts are written back into the tree.
5.  **Import Injection**: scheduled bindings are inserted by the `ImportBinder`.
"""

import logging
from typing import Any, Dict, Optional

import libcst as cst

from decorator_importer.config import RuntimeConfig
from decorator_importer.core.binder import ImportBinder
from decorator_importer.core.registry import DecoratorRegistry
from decorator_importer.core.rewriter import DecoratorRewriter
from decorator_importer.core.transform_result import TransformResult
from decorator_importer.core.traversal import DecoratorTraversal
from decorator_importer.errors import DecoratorImportError

log = logging.getLogger(__name__)


class DecoratorImportEngine:
  """
  The main transform unit.

  Holds configuration only; all per-module state (registry, binder, queue) is
  created inside each run.
  """

  def __init__(
    self,
    definitions: Optional[Dict[str, Any]] = None,
    config: Optional[RuntimeConfig] = None,
  ) -> None:
    """
    Initializes the Engine.

    Args:
        definitions (Dict, optional): Raw decorator definitions. Merged over
            `config.decorators` when both are given.
        config (RuntimeConfig, optional): The runtime configuration object.
    """
    self.config = config or RuntimeConfig()
    self.definitions: Dict[str, Any] = {**self.config.decorators, **(definitions or {})}

  def parse(self, code: str) -> cst.Module:
    """
    Parses source string into a LibCST Module.

    Args:
        code (str): Python source code.

    Returns:
        cst.Module: The parsed tree.

    Raises:
        libcst.ParserSyntaxError: If the input code is invalid Python.
    """
    return cst.parse_module(code)

  def transform_module(self, module: cst.Module) -> cst.Module:
    """
    Rewrites every registered decorator in ``module``.

    Args:
        module (cst.Module): The parsed module.

    Returns:
        cst.Module: The rewritten module, with imports injected.

    Raises:
        ConfigurationError: A referenced definition is invalid.
        UnsupportedExpressionError: A decorator expression cannot be resolved.
    """
    module, _rewriter, _binder = self._transform(module)
    return module

  def _transform(self, module: cst.Module):
    registry = DecoratorRegistry.build(self.definitions)
    binder = ImportBinder(module)
    rewriter = DecoratorRewriter(registry, binder)

    traversal = DecoratorTraversal(module, include_functions=self.config.include_functions)
    traversal.run(rewriter)
    rewritten = traversal.commit()

    log.debug(
      "Visited %d decorator(s) on %d site(s); rewrote %d",
      traversal.visited_decorators,
      traversal.visited_sites,
      rewriter.rewritten,
    )
    return binder.apply(rewritten), rewriter, binder

  def run(self, code: str) -> TransformResult:
    """
    Executes the full pipeline on a source string.

    Fatal errors do not raise here; they are reported in the result and the
    original code is returned unchanged.

    Args:
        code (str): The input source string.

    Returns:
        TransformResult: Object containing transformed code and error logs.
    """
    try:
      tree = self.parse(code)
    except cst.ParserSyntaxError as e:
      return TransformResult(code=code, errors=[f"Parse Error: {e}"], success=False)

    try:
      new_tree, rewriter, binder = self._transform(tree)
    except DecoratorImportError as e:
      return TransformResult(code=code, errors=[str(e)], success=False)

    new_code = new_tree.code
    return TransformResult(
      code=new_code,
      success=True,
      changed=new_code != code,
      rewritten_decorators=rewriter.rewritten,
      injected_imports=binder.pending_imports,
    )

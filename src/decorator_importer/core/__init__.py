"""
Core rewriting components.

- ``registry``: normalization and lazy validation of decorator definitions.
- ``resolver``: leftmost-identifier resolution of decorator expressions.
- ``traversal``: queue-driven, single-pass walk over decorator sites.
- ``rewriter``: the ordered per-decorator mutations.
- ``binder``: local import binding acquisition.
- ``engine``: orchestration of one module transform.
"""

from decorator_importer.core.binder import ImportBinder
from decorator_importer.core.engine import DecoratorImportEngine
from decorator_importer.core.registry import DecoratorDefinition, DecoratorRegistry
from decorator_importer.core.resolver import get_leftmost_identifier
from decorator_importer.core.rewriter import DecoratorRewriter
from decorator_importer.core.transform_result import TransformResult
from decorator_importer.core.traversal import DecoratorTraversal, SiteDraft, visit_all

__all__ = [
  "DecoratorDefinition",
  "DecoratorImportEngine",
  "DecoratorRegistry",
  "DecoratorRewriter",
  "DecoratorTraversal",
  "ImportBinder",
  "SiteDraft",
  "TransformResult",
  "get_leftmost_identifier",
  "visit_all",
]

"""
Decorator Rewrite Engine.

For every decorator whose leftmost identifier names a registered definition,
``DecoratorRewriter.apply`` performs, in this fixed order:

1.  **Resolution**: find the identifier and look it up (unknown names are left alone).
2.  **Validation**: lazily checked by the registry on first lookup.
3.  **Import Injection**: bind the definition's export and rename the identifier.
4.  **Inheritance Injection**: give a base-less class the ``inherits`` superclass.
5.  **Class Name Injection**: call the decorator with the class name as argument 0.
6.  **Hot Reload Wrapping**: wrap the whole expression in the hot-reload helper.
7.  **Superclass Interception**: slot a fresh empty class between the class (for
    a method, its enclosing class) and its bases, and schedule it for traversal.

Example::

    @Component                      from ui import Component as _Component
    class Bar:             ->       @_Component("Bar")
        ...                         class Bar: ...
"""

import logging
from typing import List

import libcst as cst

from decorator_importer.core.binder import ImportBinder
from decorator_importer.core.registry import DEFAULT_EXPORT, DecoratorDefinition, DecoratorRegistry
from decorator_importer.core.resolver import get_leftmost_identifier
from decorator_importer.core.traversal import SiteDraft
from decorator_importer.enums import SiteKind
from decorator_importer.errors import UnsupportedSiteError
from decorator_importer.utils.node_diff import capture_node_source

log = logging.getLogger(__name__)

INTERCEPT_SUFFIX = "_SuperIntercept"


def _string_literal(value: str) -> cst.SimpleString:
  escaped = value.replace("\\", "\\\\").replace('"', '\\"')
  return cst.SimpleString(f'"{escaped}"')


def _strip_trailing_comma(bases: List[cst.Arg]) -> List[cst.Arg]:
  if not bases:
    return bases
  return [*bases[:-1], bases[-1].with_changes(comma=cst.MaybeSentinel.DEFAULT)]


class DecoratorRewriter:
  """
  Applies registered decorator definitions to attachment sites.

  Attributes:
      registry: Definitions for this run.
      binder: Import binding primitive for the module being rewritten.
      rewritten (int): Number of decorators matched and rewritten so far.
  """

  def __init__(self, registry: DecoratorRegistry, binder: ImportBinder) -> None:
    self.registry = registry
    self.binder = binder
    self.rewritten = 0

  def __call__(self, site: SiteDraft, index: int) -> List[SiteDraft]:
    return self.apply(site, index)

  def apply(self, site: SiteDraft, index: int) -> List[SiteDraft]:
    """
    Rewrites the decorator at ``index`` of ``site`` in place.

    Args:
        site: The attachment site draft.
        index: Position of the decorator in ``site.decorators``.

    Returns:
        List[SiteDraft]: Newly synthesized sites that must be traversed.

    Raises:
        ConfigurationError: If the matched definition is invalid.
        UnsupportedSiteError: If one of its options cannot apply to this kind of site.
        UnsupportedExpressionError: If the decorator expression cannot be resolved.
    """
    expression = site.expression(index)
    identifier = get_leftmost_identifier(expression)
    decorator_name = identifier.value

    definition = self.registry.lookup(decorator_name)
    if definition is None:
      return []

    before = capture_node_source(expression)
    class_name = site.class_name

    # 3. Import injection
    local = self.binder.add_named(definition.export, definition.module)
    expression = expression.deep_replace(identifier, identifier.with_changes(value=local))

    # 4. Inheritance injection
    if definition.inherits is not None and site.is_class and not site.bases:
      base = self.binder.add_named(definition.inherits.export, definition.inherits.module)
      site.bases = [cst.Arg(value=cst.Name(base))]

    # 5. Class name injection
    if definition.needs_class_name:
      self._require_class(site, decorator_name, definition, "needsClassName")
      if not isinstance(expression, cst.Call):
        expression = cst.Call(func=expression)
      expression = expression.with_changes(args=[cst.Arg(value=_string_literal(class_name)), *expression.args])

    # 6. Hot reload wrapping
    if definition.hot_reload and class_name:
      expression = self._wrap_hot_reload(expression, definition.hot_reload, class_name)

    site.set_expression(index, expression)

    # 7. Superclass interception (member decorators act on the enclosing class)
    created: List[SiteDraft] = []
    if definition.intercepts_super:
      target = site if site.is_class else site.owner
      if target is None:
        self._require_class(site, decorator_name, definition, "interceptsSuper")
      created.append(self._intercept_super(target))

    self.rewritten += 1
    log.debug("Rewrote @%s -> @%s", before, capture_node_source(site.expression(index)))
    return created

  def _require_class(
    self, site: SiteDraft, decorator_name: str, definition: DecoratorDefinition, option: str
  ) -> None:
    if site.is_class:
      return
    raise UnsupportedSiteError(
      decorator_name,
      definition.model_dump(by_alias=True),
      f'"{option}" requires a class, but @{decorator_name} decorates {site.kind.value} {site.name!r}',
    )

  def _wrap_hot_reload(self, expression: cst.BaseExpression, hot_module: str, class_name: str) -> cst.Call:
    """
    Builds ``<hr>(<expression>, <sys>.modules[__name__], "<class_name>")``.
    """
    wrapper = self.binder.add_named(DEFAULT_EXPORT, hot_module)
    sys_name = self.binder.add_module("sys")
    module_ref = cst.Subscript(
      value=cst.Attribute(value=cst.Name(sys_name), attr=cst.Name("modules")),
      slice=[cst.SubscriptElement(slice=cst.Index(value=cst.Name("__name__")))],
    )
    return cst.Call(
      func=cst.Name(wrapper),
      args=[
        cst.Arg(value=expression),
        cst.Arg(value=module_ref),
        cst.Arg(value=_string_literal(class_name)),
      ],
    )

  def _intercept_super(self, site: SiteDraft) -> SiteDraft:
    """
    Inserts ``class <Name>_SuperIntercept(<old bases>): pass`` before class ``site``.
    """
    intercept_name = self.binder.generate_uid(f"{site.name}{INTERCEPT_SUFFIX}")
    old_bases = _strip_trailing_comma(site.bases)

    blank_lines = [line for line in site.node.leading_lines if line.comment is None]
    intercept_node = cst.ClassDef(
      name=cst.Name(intercept_name),
      body=cst.IndentedBlock(body=[cst.SimpleStatementLine(body=[cst.Pass()])]),
      bases=old_bases,
      leading_lines=blank_lines,
    )
    intercept = SiteDraft.from_node(intercept_node, SiteKind.CLASS, synthesized=True)

    site.bases = [cst.Arg(value=cst.Name(intercept_name))]
    site.inserted_before.append(intercept)
    log.debug("Inserted %s between %s and its bases", intercept_name, site.name)
    return intercept


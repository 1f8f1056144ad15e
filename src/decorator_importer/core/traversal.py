"""
Deterministic Program Traversal.

LibCST trees are immutable, so the traversal works in three phases anchored at
the module root:

1.  **Collect**: a single ``CSTVisitor`` pass records every decorated attachment
    site (classes, methods, and optionally plain functions) in source order.
    Each site becomes a mutable ``SiteDraft`` stored in an arena keyed by the
    identity of its original node. Method drafts link to a draft of their
    enclosing class (``owner``), so member decorators can edit that class.
2.  **Drain**: an explicit work queue hands every decorator of every site, in
    declaration order, to the caller's callback. The callback edits the draft in
    place and may return newly synthesized sites; those are appended to the
    queue and visited later in the same pass instead of recursively.
3.  **Commit**: a ``CSTTransformer`` rebuilds the tree, replacing each original
    site with its materialized draft and splicing inserted sibling statements in
    front of it.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, Iterable, List, Optional, Union

import libcst as cst

from decorator_importer.enums import SiteKind

log = logging.getLogger(__name__)

SiteNode = Union[cst.ClassDef, cst.FunctionDef]


@dataclass
class SiteDraft:
  """
  Mutable working copy of a decorator attachment site.

  Attributes:
      node: The node the draft was created from (original or synthesized).
      kind: Whether the site is a class, method or function.
      decorators: Current decorator list, edited in place by the rewriter.
      bases: Current positional base classes (classes only).
      inserted_before: Synthesized sites to place immediately before this one.
      synthesized: True when the node did not exist in the parsed source.
      owner: Draft of the enclosing class (methods only).
  """

  node: SiteNode
  kind: SiteKind
  decorators: List[cst.Decorator]
  bases: List[cst.Arg] = field(default_factory=list)
  inserted_before: List["SiteDraft"] = field(default_factory=list)
  synthesized: bool = False
  owner: Optional["SiteDraft"] = field(default=None, repr=False, compare=False)

  @classmethod
  def from_node(cls, node: SiteNode, kind: SiteKind, synthesized: bool = False) -> "SiteDraft":
    bases = list(node.bases) if isinstance(node, cst.ClassDef) else []
    return cls(node=node, kind=kind, decorators=list(node.decorators), bases=bases, synthesized=synthesized)

  @property
  def is_class(self) -> bool:
    return self.kind is SiteKind.CLASS

  @property
  def name(self) -> str:
    return self.node.name.value

  @property
  def class_name(self) -> Optional[str]:
    """The class name for class sites, None otherwise."""
    return self.name if self.is_class else None

  def expression(self, index: int) -> cst.BaseExpression:
    """Returns the current expression of the decorator at ``index``."""
    return self.decorators[index].decorator

  def set_expression(self, index: int, expression: cst.BaseExpression) -> None:
    """Replaces the expression of the decorator at ``index``, keeping its whitespace."""
    self.decorators[index] = self.decorators[index].with_changes(decorator=expression)

  def materialize(self, node: Optional[SiteNode] = None) -> SiteNode:
    """
    Applies the draft onto ``node`` (defaults to the draft's own node).

    Args:
        node: The node to update; the committer passes the child-updated node.

    Returns:
        SiteNode: A new node with the drafted decorators and bases.
    """
    target = node if node is not None else self.node
    if self.is_class:
      return target.with_changes(decorators=self.decorators, bases=self.bases)
    return target.with_changes(decorators=self.decorators)

  def flatten(self, node: Optional[SiteNode] = None) -> List[SiteNode]:
    """Materializes inserted siblings (recursively) followed by this site."""
    statements: List[SiteNode] = []
    for sibling in self.inserted_before:
      statements.extend(sibling.flatten())
    statements.append(self.materialize(node))
    return statements


# Callback contract: (site, decorator index) -> sites synthesized while rewriting.
DecoratorCallback = Callable[[SiteDraft, int], Optional[Iterable[SiteDraft]]]


class SiteCollector(cst.CSTVisitor):
  """
  Records decorated attachment sites in source (pre-order) order.

  Attributes:
      sites (List[SiteDraft]): Drafts for every decorated site found.
      owners (Dict[int, SiteDraft]): Drafts of classes that enclose decorated
          methods, keyed by node identity. Decorated classes appear in both.
  """

  def __init__(self, include_functions: bool = False) -> None:
    """
    Args:
        include_functions: If True, functions outside class bodies are sites too.
    """
    self.include_functions = include_functions
    self.sites: List[SiteDraft] = []
    self.owners: Dict[int, SiteDraft] = {}
    self._scope: List[SiteKind] = []
    self._classes: List[SiteDraft] = []

  def visit_ClassDef(self, node: cst.ClassDef) -> Optional[bool]:
    draft = SiteDraft.from_node(node, SiteKind.CLASS)
    if node.decorators:
      self.sites.append(draft)
    self._classes.append(draft)
    self._scope.append(SiteKind.CLASS)
    return True

  def leave_ClassDef(self, original_node: cst.ClassDef) -> None:
    self._classes.pop()
    self._scope.pop()

  def visit_FunctionDef(self, node: cst.FunctionDef) -> Optional[bool]:
    if self._scope and self._scope[-1] is SiteKind.CLASS:
      self._collect(node, SiteKind.METHOD, owner=self._classes[-1])
    elif self.include_functions:
      self._collect(node, SiteKind.FUNCTION)
    self._scope.append(SiteKind.FUNCTION)
    return True

  def leave_FunctionDef(self, original_node: cst.FunctionDef) -> None:
    self._scope.pop()

  def _collect(self, node: SiteNode, kind: SiteKind, owner: Optional[SiteDraft] = None) -> None:
    if not node.decorators:
      return
    site = SiteDraft.from_node(node, kind)
    site.owner = owner
    self.sites.append(site)
    if owner is not None:
      self.owners[id(owner.node)] = owner


class DraftCommitter(cst.CSTTransformer):
  """
  Writes drafts back into the tree by original-node identity.
  """

  def __init__(self, arena: Dict[int, SiteDraft]) -> None:
    self._arena = arena

  def leave_ClassDef(
    self, original_node: cst.ClassDef, updated_node: cst.ClassDef
  ) -> Union[cst.ClassDef, cst.FlattenSentinel]:
    return self._commit(original_node, updated_node)

  def leave_FunctionDef(
    self, original_node: cst.FunctionDef, updated_node: cst.FunctionDef
  ) -> Union[cst.FunctionDef, cst.FlattenSentinel]:
    return self._commit(original_node, updated_node)

  def _commit(self, original: SiteNode, updated: SiteNode):
    draft = self._arena.get(id(original))
    if draft is None:
      return updated
    if not draft.inserted_before:
      return draft.materialize(updated)
    return cst.FlattenSentinel(draft.flatten(updated))


class DecoratorTraversal:
  """
  Single-pass, queue-driven walk over every decorator in a module.
  """

  def __init__(self, module: cst.Module, include_functions: bool = False) -> None:
    """
    Collects the attachment sites of ``module``.

    Args:
        module: The parsed module. It is not modified; ``commit`` returns a new one.
        include_functions: If True, plain functions are attachment sites too.
    """
    self.module = module
    self._arena: Dict[int, SiteDraft] = {}
    self._queue: Deque[SiteDraft] = deque()
    self.visited_sites = 0
    self.visited_decorators = 0

    collector = SiteCollector(include_functions=include_functions)
    module.visit(collector)
    for site in collector.sites:
      self._arena[id(site.node)] = site
      self._queue.append(site)
    # Enclosing classes are edited through their members but never queued.
    for key, owner in collector.owners.items():
      self._arena.setdefault(key, owner)

  def schedule(self, site: SiteDraft) -> None:
    """Appends a synthesized site to the end of the work queue."""
    self._queue.append(site)

  def run(self, on_decorator: DecoratorCallback) -> None:
    """
    Drains the work queue, invoking ``on_decorator`` for each decorator.

    Args:
        on_decorator: Called with (site, index); any sites it returns are scheduled.
    """
    while self._queue:
      site = self._queue.popleft()
      self.visited_sites += 1
      for index in range(len(site.decorators)):
        self.visited_decorators += 1
        created = on_decorator(site, index)
        for new_site in created or ():
          self.schedule(new_site)

  def commit(self) -> cst.Module:
    """
    Returns the module with all drafts applied.
    """
    log.debug(
      "Committing %d site(s) after visiting %d decorator(s)",
      len(self._arena),
      self.visited_decorators,
    )
    return self.module.visit(DraftCommitter(self._arena))


def visit_all(module: cst.Module, on_decorator: DecoratorCallback, include_functions: bool = False) -> cst.Module:
  """
  Collects, drains and commits in one call.

  Args:
      module: The parsed module.
      on_decorator: Callback receiving (site, decorator index).
      include_functions: If True, plain functions are attachment sites too.

  Returns:
      cst.Module: The rewritten module.
  """
  traversal = DecoratorTraversal(module, include_functions=include_functions)
  traversal.run(on_decorator)
  return traversal.commit()

"""
Tests for the queue-driven decorator traversal.

Verifies:
1. Sites are visited in source order, decorators in declaration order.
2. Plain functions are only sites when `include_functions` is set.
3. Sites returned by the callback are visited later in the same pass.
4. Committing without edits round-trips the source exactly.
5. Draft edits and sibling insertions are written back by node identity.
6. Methods link to a draft of their enclosing class.
"""

import textwrap

import libcst as cst

from decorator_importer.core.traversal import DecoratorTraversal, SiteCollector, SiteDraft, visit_all
from decorator_importer.enums import SiteKind

SOURCE = textwrap.dedent(
  """\
  @a
  @b
  class A:
      @c
      def m(self):
          @inner
          def helper():
              pass

      @property
      def p(self):
          return 1

      class Nested:
          @e
          def n(self):
              pass

  @f
  def g():
      pass

  class Undecorated:
      pass
  """
)


def _record(calls):
  def _on_decorator(site, index):
    calls.append((site.name, site.kind, index, site.expression(index).value))

  return _on_decorator


def test_visits_in_source_and_declaration_order():
  calls = []
  DecoratorTraversal(cst.parse_module(SOURCE)).run(_record(calls))

  assert calls == [
    ("A", SiteKind.CLASS, 0, "a"),
    ("A", SiteKind.CLASS, 1, "b"),
    ("m", SiteKind.METHOD, 0, "c"),
    ("p", SiteKind.METHOD, 0, "property"),
    ("n", SiteKind.METHOD, 0, "e"),
  ]


def test_include_functions_adds_function_sites():
  calls = []
  DecoratorTraversal(cst.parse_module(SOURCE), include_functions=True).run(_record(calls))

  names = [(name, kind) for name, kind, _, _ in calls]
  assert ("helper", SiteKind.FUNCTION) in names
  assert ("g", SiteKind.FUNCTION) in names
  assert names.index(("helper", SiteKind.FUNCTION)) < names.index(("p", SiteKind.METHOD))


def test_collector_skips_undecorated():
  collector = SiteCollector()
  cst.parse_module(SOURCE).visit(collector)
  assert "Undecorated" not in [site.name for site in collector.sites]


def test_scheduled_sites_are_visited_after_queue():
  extra_node = cst.ClassDef(
    name=cst.Name("Extra"),
    body=cst.IndentedBlock(body=[cst.SimpleStatementLine(body=[cst.Pass()])]),
    decorators=[cst.Decorator(decorator=cst.Name("z"))],
  )
  extra = SiteDraft.from_node(extra_node, SiteKind.CLASS, synthesized=True)
  calls = []

  def on_decorator(site, index):
    calls.append(site.name)
    if site.name == "A" and index == 0:
      return [extra]
    return None

  traversal = DecoratorTraversal(cst.parse_module(SOURCE))
  traversal.run(on_decorator)

  assert calls == ["A", "A", "m", "p", "n", "Extra"]
  assert traversal.visited_sites == 5
  assert traversal.visited_decorators == 6


def test_commit_without_edits_round_trips():
  module = cst.parse_module(SOURCE)
  assert visit_all(module, lambda site, index: None).code == SOURCE


def test_commit_applies_decorator_edits():
  module = cst.parse_module("@a\nclass A:\n    @b\n    def m(self):\n        pass\n")

  def rename(site, index):
    expr = site.expression(index)
    site.set_expression(index, expr.with_changes(value=expr.value.upper()))

  assert visit_all(module, rename).code == "@A\nclass A:\n    @B\n    def m(self):\n        pass\n"


def test_commit_inserts_siblings_before_site():
  module = cst.parse_module("x = 1\n@a\nclass A(Base):\n    pass\n")

  def insert(site, index):
    sibling_node = cst.ClassDef(
      name=cst.Name("Before"),
      body=cst.IndentedBlock(body=[cst.SimpleStatementLine(body=[cst.Pass()])]),
    )
    sibling = SiteDraft.from_node(sibling_node, SiteKind.CLASS, synthesized=True)
    site.inserted_before.append(sibling)
    site.bases = [cst.Arg(value=cst.Name("Before"))]
    return [sibling]

  code = visit_all(module, insert).code

  assert code == "x = 1\nclass Before:\n    pass\n@a\nclass A(Before):\n    pass\n"


def test_draft_class_name_is_none_for_methods():
  module = cst.parse_module("class A:\n    @b\n    def m(self):\n        pass\n")
  collector = SiteCollector()
  module.visit(collector)

  (site,) = collector.sites
  assert site.kind is SiteKind.METHOD
  assert site.class_name is None
  assert not site.is_class
  assert site.owner.name == "A"


def test_methods_link_to_enclosing_class_draft():
  module = cst.parse_module(
    "class A(Base):\n    @b\n    def m(self):\n        pass\n\n    @c\n    def n(self):\n        pass\n"
  )
  traversal = DecoratorTraversal(module)
  owners = []
  traversal.run(lambda site, index: owners.append(site.owner))

  assert owners[0] is owners[1]
  assert owners[0].name == "A"
  assert owners[0].is_class
  # Undecorated enclosing classes are never queued themselves.
  assert traversal.visited_sites == 2


def test_commit_applies_edits_to_enclosing_class():
  module = cst.parse_module("class A(Base):\n    @b\n    def m(self):\n        pass\n")

  def rebase(site, index):
    site.owner.bases = [cst.Arg(value=cst.Name("Other"))]

  assert visit_all(module, rebase).code == "class A(Other):\n    @b\n    def m(self):\n        pass\n"

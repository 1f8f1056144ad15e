"""
Identifier Resolution for Decorator Expressions.

Given an arbitrary decorator expression, finds the single leftmost ``cst.Name``
that identifies the decorator. That node is both the registry lookup key and
the node later renamed to the imported local binding.

Examples::

    @Logged                 -> Logged
    @Logged(level=2)        -> Logged
    @Logged.strict("x")     -> Logged
    @[Logged, Other]        -> Logged
"""

from typing import Optional

import libcst as cst

from decorator_importer.enums import ExpressionKind
from decorator_importer.errors import UnsupportedExpressionError


def classify(expression: cst.CSTNode) -> Optional[ExpressionKind]:
  """
  Maps a LibCST expression to the closed set of resolvable kinds.

  Args:
      expression: Any decorator expression node.

  Returns:
      Optional[ExpressionKind]: The kind, or None if the shape is unsupported.
  """
  if isinstance(expression, cst.Call):
    return ExpressionKind.CALL
  if isinstance(expression, cst.List):
    return ExpressionKind.LIST
  if isinstance(expression, cst.Attribute):
    return ExpressionKind.ATTRIBUTE
  if isinstance(expression, cst.Name):
    return ExpressionKind.NAME
  return None


def get_leftmost_identifier(expression: cst.CSTNode) -> cst.Name:
  """
  Recursively unwraps call, list and attribute layers down to the root name.

  Args:
      expression: The decorator expression (``cst.Decorator.decorator``).

  Returns:
      cst.Name: The identifier node, by identity, inside ``expression``.

  Raises:
      UnsupportedExpressionError: If a layer is not one of the handled kinds,
          or a list literal is empty.
  """
  kind = classify(expression)

  if kind is ExpressionKind.CALL:
    return get_leftmost_identifier(expression.func)
  if kind is ExpressionKind.LIST:
    if not expression.elements:
      raise UnsupportedExpressionError("empty List")
    first = expression.elements[0]
    if not isinstance(first, cst.Element):
      raise UnsupportedExpressionError(type(first).__name__)
    return get_leftmost_identifier(first.value)
  if kind is ExpressionKind.ATTRIBUTE:
    return get_leftmost_identifier(expression.value)
  if kind is ExpressionKind.NAME:
    return expression

  raise UnsupportedExpressionError(type(expression).__name__)

"""
Enumerations for decorator-importer.

This module defines the closed sets of node kinds the engine reasons about.
"""

from enum import Enum


class ExpressionKind(str, Enum):
  """
  Decorator expression shapes the identifier resolver can descend through.

  Any expression outside this set is rejected with ``UnsupportedExpressionError``.
  """

  CALL = "Call"  # @foo(...) -> func
  LIST = "List"  # @[foo, bar] -> first element
  ATTRIBUTE = "Attribute"  # @foo.bar -> value
  NAME = "Name"  # @foo


class SiteKind(str, Enum):
  """
  Kinds of nodes that carry decorators and are visited by the traversal.
  """

  CLASS = "class"
  METHOD = "method"
  FUNCTION = "function"  # Only visited when `include_functions` is enabled.

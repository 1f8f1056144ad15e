"""
Error Taxonomy for decorator-importer.

Both concrete errors are fatal: they propagate synchronously out of the
traversal and abort the transform run. Decorators rewritten before the failure
are left as they are; there is no rollback.
"""

import json
from typing import Any


class DecoratorImportError(Exception):
  """Base class for all fatal errors raised during a transform run."""


class ConfigurationError(DecoratorImportError):
  """
  A referenced decorator definition is structurally invalid.

  Attributes:
      decorator_name (str): The decorator whose definition failed validation.
      raw_value (Any): The offending (normalized) definition, echoed for diagnostics.
      detail (str): Optional description of which part of the definition is wrong.
  """

  def __init__(self, decorator_name: str, raw_value: Any, detail: str = "") -> None:
    self.decorator_name = decorator_name
    self.raw_value = raw_value
    self.detail = detail
    super().__init__(self._format())

  def _format(self) -> str:
    message = (
      f"DecoratorImporter received an invalid definition for @{self.decorator_name}. "
      f'Expected an object with "module" and "export" string keys; got {_dump(self.raw_value)}'
    )
    if self.detail:
      message = f"{message} ({self.detail})"
    return message


class UnsupportedSiteError(ConfigurationError):
  """
  A well-formed definition uses an option the decorated site cannot support.

  For example ``needsClassName`` on a method, or ``interceptsSuper`` on a
  function outside any class.
  """

  def _format(self) -> str:
    return f"DecoratorImporter cannot apply @{self.decorator_name} here: {self.detail}"


class UnsupportedExpressionError(DecoratorImportError):
  """
  A decorator expression has a shape the resolver cannot descend through.

  Attributes:
      kind (str): The LibCST node class name of the unhandled expression.
  """

  def __init__(self, kind: str) -> None:
    self.kind = kind
    super().__init__(f"DecoratorImporter.get_leftmost_identifier() doesn't know what '{kind}' is.")


def _dump(value: Any) -> str:
  try:
    return json.dumps(value, sort_keys=True, default=repr)
  except (TypeError, ValueError):
    return repr(value)

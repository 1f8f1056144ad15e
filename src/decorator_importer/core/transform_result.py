"""
Data structures representing the output of a transform run.

This module defines the `TransformResult` Pydantic model, which encapsulates
the generated code, any errors encountered, and rewrite statistics.
"""

from typing import List

from pydantic import BaseModel, Field


class TransformResult(BaseModel):
  """
  Container for the results of a single module transform.
  """

  code: str = Field(default="", description="The generated source code.")
  errors: List[str] = Field(default_factory=list, description="List of error messages encountered.")
  success: bool = Field(
    default=True,
    description="True if the run completed without fatal errors.",
  )
  changed: bool = Field(default=False, description="True if the output differs from the input.")
  rewritten_decorators: int = Field(default=0, description="Number of decorators matched and rewritten.")
  injected_imports: int = Field(default=0, description="Number of import bindings newly scheduled.")

  @property
  def has_errors(self) -> bool:
    """
    Check if the result contains any error messages.

    Returns:
        True if one or more errors are present.
    """
    return len(self.errors) > 0

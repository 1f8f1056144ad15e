"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Shared decorator definitions mirroring typical host configuration.
- A helper fixture that runs the full transform on a source string.
"""

import sys
import textwrap
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import pytest

# Add src to path so we can import 'decorator_importer' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from decorator_importer import transform  # noqa: E402


@pytest.fixture
def definitions() -> Dict[str, Any]:
  """A registry covering every augmentation."""
  return {
    "Logged": {"module": "log", "export": "Logger"},
    "Component": {"module": "c", "export": "default", "needsClassName": True},
    "Widget": {"module": "w", "export": "default", "inherits": "base"},
    "Live": {"module": "x", "export": "default", "hotReload": "hr"},
    "Bridge": {"module": "b", "export": "default", "interceptsSuper": True},
  }


@pytest.fixture
def rewrite(definitions) -> Callable[..., str]:
  """
  Returns a helper that dedents source, runs `transform`, and returns the code.
  """

  def _rewrite(code: str, defs: Optional[Dict[str, Any]] = None, include_functions: bool = False) -> str:
    source = textwrap.dedent(code).lstrip("\n")
    return transform(source, defs if defs is not None else definitions, include_functions=include_functions)

  return _rewrite

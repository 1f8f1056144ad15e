"""
decorator-importer Package.

A LibCST transform that backs short decorator names with the imports they
need. Given a registry such as ``{"Logged": {"module": "log", "export": "Logger"}}``,
source like::

    @Logged
    class Foo:
        ...

becomes::

    from log import Logger as _Logger

    @_Logger
    class Foo:
        ...

Definitions can additionally inject a superclass, pass the class name to the
decorator, wrap it for hot reloading, or insert an interception class between
the decorated class and its bases.

Usage
-----

Simple String Transform
^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    import decorator_importer as di
    code = di.transform("@Logged\\nclass Foo: pass\\n", {"Logged": "log"})

Advanced Usage (Engine)
^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from decorator_importer import DecoratorImportEngine, RuntimeConfig

    config = RuntimeConfig.load()  # reads [tool.decorator_importer]
    res = DecoratorImportEngine(config=config).run(source)
    if not res.success:
        print(res.errors)
"""

from typing import Any, Dict, Optional

from decorator_importer.config import RuntimeConfig
from decorator_importer.core.engine import DecoratorImportEngine
from decorator_importer.core.transform_result import TransformResult
from decorator_importer.errors import (
  ConfigurationError,
  DecoratorImportError,
  UnsupportedExpressionError,
  UnsupportedSiteError,
)

__version__ = "0.1.0"


def transform(
  code: str,
  definitions: Optional[Dict[str, Any]] = None,
  include_functions: bool = False,
) -> str:
  """
  Rewrites the decorators of a Python source string.

  Unlike `DecoratorImportEngine.run`, fatal errors propagate to the caller.

  Args:
      code (str): The source code to transform.
      definitions (dict, optional): Raw decorator definitions
          (name -> module string or definition mapping).
      include_functions (bool): If True, decorators on plain functions are
          rewritten as well as those on classes and methods.

  Returns:
      str: The transformed source code.

  Raises:
      ConfigurationError: A referenced decorator definition is invalid.
      UnsupportedExpressionError: A decorator expression cannot be resolved.
      libcst.ParserSyntaxError: The input is not valid Python.
  """
  config = RuntimeConfig(include_functions=include_functions)
  engine = DecoratorImportEngine(definitions=definitions, config=config)
  return engine.transform_module(engine.parse(code)).code


__all__ = [
  "ConfigurationError",
  "DecoratorImportEngine",
  "DecoratorImportError",
  "RuntimeConfig",
  "TransformResult",
  "UnsupportedExpressionError",
  "UnsupportedSiteError",
  "transform",
  "__version__",
]

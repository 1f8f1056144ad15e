"""
Tests for the DecoratorImportEngine orchestration.

Verifies:
1. `run` reports statistics for successful transforms.
2. Parse and fatal rewrite errors are captured, returning the original code.
3. Runs are independent (no registry or binding state leaks between runs).
4. Config definitions and explicit definitions are merged.
"""

import libcst as cst
import pytest

from decorator_importer.config import RuntimeConfig
from decorator_importer.core.engine import DecoratorImportEngine
from decorator_importer.errors import ConfigurationError


def test_run_success_statistics(definitions):
  engine = DecoratorImportEngine(definitions)
  res = engine.run("@Live\nclass Q:\n    pass\n")

  assert res.success
  assert res.changed
  assert not res.has_errors
  assert res.rewritten_decorators == 1
  # x, hr and sys
  assert res.injected_imports == 3


def test_run_unchanged(definitions):
  code = "class Plain:\n    pass\n"
  res = DecoratorImportEngine(definitions).run(code)

  assert res.success
  assert not res.changed
  assert res.code == code
  assert res.rewritten_decorators == 0
  assert res.injected_imports == 0


def test_run_parse_error(definitions):
  code = "class Broken(:\n"
  res = DecoratorImportEngine(definitions).run(code)

  assert not res.success
  assert res.code == code
  assert res.errors[0].startswith("Parse Error")


def test_run_configuration_error_returns_original(definitions):
  code = "@Logged\nclass A:\n    pass\n\n@Broken\nclass B:\n    pass\n"
  engine = DecoratorImportEngine({**definitions, "Broken": {"path": ""}})
  res = engine.run(code)

  assert not res.success
  assert res.code == code
  assert "@Broken" in res.errors[0]


def test_run_unsupported_expression(definitions):
  res = DecoratorImportEngine(definitions).run("@registry['x']\nclass A:\n    pass\n")

  assert not res.success
  assert "Subscript" in res.errors[0]


def test_transform_module_raises(definitions):
  engine = DecoratorImportEngine({"Broken": {"export": "x"}})
  with pytest.raises(ConfigurationError):
    engine.transform_module(engine.parse("@Broken\nclass A:\n    pass\n"))


def test_runs_are_independent(definitions):
  engine = DecoratorImportEngine(definitions)
  first = engine.run("@Logged\nclass A:\n    pass\n")
  second = engine.run("_Logger = 1\n@Logged\nclass B:\n    pass\n")

  assert "@_Logger\nclass A:" in first.code
  assert "@_Logger2\nclass B:" in second.code
  assert second.injected_imports == 1


def test_config_and_explicit_definitions_merge():
  config = RuntimeConfig(decorators={"Logged": "from_config", "Other": "other"})
  engine = DecoratorImportEngine({"Logged": {"module": "explicit", "export": "Logger"}}, config=config)

  assert engine.definitions["Logged"] == {"module": "explicit", "export": "Logger"}
  assert engine.definitions["Other"] == "other"


def test_include_functions_from_config(definitions):
  code = "@Logged\ndef f():\n    pass\n"
  assert DecoratorImportEngine(definitions).run(code).code == code

  config = RuntimeConfig(include_functions=True)
  assert "@_Logger\ndef f():" in DecoratorImportEngine(definitions, config=config).run(code).code


def test_transform_module_returns_module(definitions):
  engine = DecoratorImportEngine(definitions)
  module = engine.transform_module(cst.parse_module("@Logged\nclass A:\n    pass\n"))
  assert isinstance(module, cst.Module)

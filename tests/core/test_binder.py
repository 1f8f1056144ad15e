"""
Tests for ImportBinder and the import scanners it relies on.

Verifies:
1. Existing top-level imports are indexed and reused.
2. Fresh bindings avoid every name used in the module.
3. Repeated requests for the same (export, module) pair share one binding.
4. Scheduled imports are inserted by `apply`.
"""

import libcst as cst

from decorator_importer.core.binder import ImportBinder
from decorator_importer.core.scanners import NameCollector, TopLevelImportScanner, get_full_name


def _binder(code: str) -> ImportBinder:
  return ImportBinder(cst.parse_module(code))


def test_get_full_name():
  assert get_full_name(cst.parse_expression("pkg.widgets.base")) == "pkg.widgets.base"
  assert get_full_name(cst.Name("x")) == "x"
  assert get_full_name(None) == ""


def test_name_collector_over_approximates():
  collector = NameCollector()
  cst.parse_module("x = obj.attr\ndef f(kw=1): pass\n").visit(collector)
  assert {"x", "obj", "attr", "f", "kw"} <= collector.names


def test_scanner_indexes_top_level_imports():
  code = (
    "import os\n"
    "import numpy as np\n"
    "import a.b\n"
    "from log import Logger, Other as O\n"
    "from .widgets import default as _widgets\n"
    "from star import *\n"
    "def f():\n"
    "    from inner import Hidden\n"
  )
  scanner = TopLevelImportScanner().scan(cst.parse_module(code))

  assert scanner.module_bindings == {"os": "os", "numpy": "np"}
  assert scanner.from_bindings == {
    ("log", "Logger"): "Logger",
    ("log", "Other"): "O",
    (".widgets", "default"): "_widgets",
  }


def test_generate_uid_avoids_used_names():
  binder = _binder("_Logger = 1\n_Logger2 = 2\n")
  assert binder.generate_uid("_Logger") == "_Logger3"
  assert binder.generate_uid("_Logger") == "_Logger4"
  assert binder.generate_uid("fresh") == "fresh"


def test_generate_uid_sanitizes_hint():
  binder = _binder("")
  assert binder.generate_uid("my-pkg") == "my_pkg"
  assert binder.generate_uid("3d") == "_3d"


def test_add_named_dedupes():
  binder = _binder("")
  first = binder.add_named("Logger", "log")
  second = binder.add_named("Logger", "log")

  assert first == second == "_Logger"
  assert binder.pending_imports == 1


def test_add_named_default_export_uses_module_segment():
  binder = _binder("")
  assert binder.add_named("default", "pkg.ui") == "_ui"
  assert binder.add_named("default", ".widgets") == "_widgets"


def test_add_named_same_export_different_modules():
  binder = _binder("")
  assert binder.add_named("default", "a.ui") == "_ui"
  assert binder.add_named("default", "b.ui") == "_ui2"


def test_add_named_reuses_existing_import():
  binder = _binder("from log import Logger\n")
  assert binder.add_named("Logger", "log") == "Logger"
  assert binder.pending_imports == 0


def test_add_module_binds_plain_name():
  binder = _binder("")
  assert binder.add_module("sys") == "sys"
  assert binder.add_module("sys") == "sys"
  assert binder.pending_imports == 1


def test_add_module_avoids_shadowed_name():
  binder = _binder("sys = None\n")
  assert binder.add_module("sys") == "_sys"


def test_add_module_reuses_existing_import():
  binder = _binder("import sys as system\n")
  assert binder.add_module("sys") == "system"
  assert binder.pending_imports == 0


def test_apply_inserts_imports():
  module = cst.parse_module('"""Doc."""\nx = 1\n')
  binder = ImportBinder(module)
  binder.add_named("Logger", "log")
  binder.add_module("sys")

  code = binder.apply(module).code

  assert code.startswith('"""Doc."""\nimport sys\nfrom log import Logger as _Logger\n')
  assert code.endswith("x = 1\n")


def test_apply_relative_import():
  module = cst.parse_module("x = 1\n")
  binder = ImportBinder(module)
  binder.add_named("Widget", ".widgets")

  assert "from .widgets import Widget as _Widget" in binder.apply(module).code


def test_apply_without_pending_returns_same_module():
  module = cst.parse_module("x = 1\n")
  assert ImportBinder(module).apply(module) is module

"""
Entry point for module execution (``python -m decorator_importer``).

This module delegates execution to the CLI handler in ``decorator_importer.cli.__main__``.
"""

import sys
from decorator_importer.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())

"""
CLI Command Handlers Facade.

This module re-exports handlers from `decorator_importer.cli.handlers` so the
dispatcher (and tests patching it) have a single lookup point.
"""

from decorator_importer.cli.handlers.convert import handle_convert
from decorator_importer.cli.handlers.listing import handle_list

__all__ = [
  "handle_convert",
  "handle_list",
]

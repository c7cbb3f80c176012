"""
gridbase: owner-scoped spreadsheet-like tables with a virtualized, editable grid.

This package provides:
- store: bases, tables, columns and rows behind an owner-scoped data-access
  contract, with capacity limits and batched bulk row insertion
- grid: row/column virtualization, cursor-paginated row cache, keyboard
  navigation and optimistic cell edits
- workspace: the base list and table screen state, bound to a signed-in user
- ui: a NiceGUI renderer for the table screen (import ``gridbase.ui``)

For logging configuration in standalone scripts/demos:
    ```python
    from gridbase.utils.logging import configure_logging
    configure_logging(level="DEBUG")
    ```

When used as a library, logging is handled by the application's configuration.
"""

import logging

from gridbase.utils.logging import configure_logging, get_logger

from gridbase.grid import GridConfig
from gridbase.store import CapacityLimits, DataAccess, InMemoryStore
from gridbase.workspace import BasesWorkspace, Session, StaticSessionProvider, StoreClient, TableWorkspace

# Ensure gridbase logger has NullHandler so logs don't propagate to root
# when no application has configured logging.
_logger = logging.getLogger("gridbase")
if not _logger.handlers:
    _logger.addHandler(logging.NullHandler())

__all__ = [
    "BasesWorkspace",
    "CapacityLimits",
    "DataAccess",
    "GridConfig",
    "InMemoryStore",
    "Session",
    "StaticSessionProvider",
    "StoreClient",
    "TableWorkspace",
    "configure_logging",
    "get_logger",
]

__version__ = "0.1.0"

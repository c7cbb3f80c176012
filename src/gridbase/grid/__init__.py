"""Client-side grid engine: virtualization, row cache, navigation and optimistic edits."""

from gridbase.grid.columns import ColumnLayout, ColumnSlot, HorizontalWindow
from gridbase.grid.config import ADD_COLUMN_ID, REQUIRED_COLUMNS, GridConfig
from gridbase.grid.edits import CellRef, EditBuffers
from gridbase.grid.events import (
    ErrorRaised,
    EventBus,
    LayoutChanged,
    MetaChanged,
    RowsChanged,
    SelectionChanged,
    TableSwitched,
)
from gridbase.grid.mutations import CellEdit, CellSnapshot, MutationLayer
from gridbase.grid.navigation import (
    CellState,
    FrameScheduler,
    GridNavigator,
    RequiredColumnsMigration,
    missing_required_columns,
    next_cell,
)
from gridbase.grid.row_cache import RowCache
from gridbase.grid.virtualizer import VirtualItem, Virtualizer, needs_next_page

__all__ = [
    "ADD_COLUMN_ID",
    "REQUIRED_COLUMNS",
    "CellEdit",
    "CellRef",
    "CellSnapshot",
    "CellState",
    "ColumnLayout",
    "ColumnSlot",
    "EditBuffers",
    "ErrorRaised",
    "EventBus",
    "FrameScheduler",
    "GridConfig",
    "GridNavigator",
    "HorizontalWindow",
    "LayoutChanged",
    "MetaChanged",
    "MutationLayer",
    "RequiredColumnsMigration",
    "RowCache",
    "RowsChanged",
    "SelectionChanged",
    "TableSwitched",
    "VirtualItem",
    "Virtualizer",
    "missing_required_columns",
    "needs_next_page",
    "next_cell",
]

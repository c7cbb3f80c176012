# src/gridbase/grid/config.py

from __future__ import annotations

from dataclasses import dataclass, field


REQUIRED_COLUMNS: tuple[str, ...] = ("Name", "Notes", "Assignee", "Status", "Attachments")
ADD_COLUMN_ID = "__add__"


@dataclass
class GridConfig:
    """Declarative configuration for the grid engine.

    Attributes:
        page_size: Rows requested per page from the row fetcher.
        row_height: Pixel height of every data row.
        row_overscan: Rows rendered above and below the visible window.
        column_overscan: Columns rendered left and right of the visible window.
        default_column_width: Width given to a column the first time it is seen.
        min_column_width: Lower clamp applied when the user resizes a column.
        max_column_width: Upper clamp applied when the user resizes a column.
        add_column_width: Width of the trailing "add column" pseudo-column.
        pinned_column_name: Name of the column rendered pinned at the start of
            every row and excluded from horizontal virtualization. ``None``
            disables pinning.
        required_columns: Columns created on first load of a table when missing.
        bulk_rows: Rows added by the bulk-add control.
    """

    page_size: int = 50
    row_height: int = 33
    row_overscan: int = 10
    column_overscan: int = 2

    default_column_width: int = 181
    min_column_width: int = 120
    max_column_width: int = 420
    add_column_width: int = 93

    pinned_column_name: str | None = "Name"
    required_columns: tuple[str, ...] = field(default_factory=lambda: REQUIRED_COLUMNS)

    bulk_rows: int = 100_000

    def clamp_width(self, width: float) -> int:
        return int(min(self.max_column_width, max(self.min_column_width, width)))

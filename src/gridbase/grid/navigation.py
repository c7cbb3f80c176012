"""Cell selection and keyboard navigation.

Selection and editing are the same thing here: the selected cell's input is
directly editable. Movement is clamped at the grid edges; Tab and Shift+Tab
continue on the next/previous row and stop at the first/last cell.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Iterable, Optional, Sequence

from gridbase.grid.edits import CellRef, EditBuffers
from gridbase.utils.logging import get_logger

logger = get_logger(__name__)

NAV_KEYS = frozenset({"ArrowUp", "ArrowDown", "ArrowLeft", "ArrowRight", "Tab"})


class CellState(Enum):
    IDLE = "idle"
    SELECTED = "selected"
    EDITING = "editing"


def next_cell(
    row_ids: Sequence[str],
    column_ids: Sequence[str],
    current: CellRef,
    key: str,
    shift: bool = False,
) -> Optional[CellRef]:
    """Target of a navigation key, or None when the key is not a navigation key.

    Returns ``current`` itself when the move is clamped at an edge.
    """
    if key not in NAV_KEYS or not row_ids or not column_ids:
        return None
    try:
        row = list(row_ids).index(current.row_id)
        col = list(column_ids).index(current.column_id)
    except ValueError:
        return None

    last_row = len(row_ids) - 1
    last_col = len(column_ids) - 1

    if key == "ArrowRight":
        col = min(last_col, col + 1)
    elif key == "ArrowLeft":
        col = max(0, col - 1)
    elif key == "ArrowDown":
        row = min(last_row, row + 1)
    elif key == "ArrowUp":
        row = max(0, row - 1)
    elif shift:
        if col > 0:
            col -= 1
        elif row > 0:
            row, col = row - 1, last_col
    elif col < last_col:
        col += 1
    elif row < last_row:
        row, col = row + 1, 0

    return CellRef(row_ids[row], column_ids[col])


class FrameScheduler:
    """Queue of callbacks to run on the next rendered frame.

    The renderer calls :meth:`run_frame` after it has redrawn, so callbacks
    see the DOM produced by the scroll that preceded them.
    """

    def __init__(self) -> None:
        self._queue: list[Callable[[], None]] = []

    def call_next_frame(self, cb: Callable[[], None]) -> None:
        self._queue.append(cb)

    @property
    def pending(self) -> int:
        return len(self._queue)

    def run_frame(self) -> int:
        """Run the callbacks queued so far; ones queued meanwhile wait for the next frame."""
        batch, self._queue = self._queue, []
        for cb in batch:
            try:
                cb()
            except Exception:
                logger.exception("Error in frame callback")
        return len(batch)


class GridNavigator:
    """Selected cell, input focus and arrow/Tab movement over the loaded grid.

    ``row_ids`` are the loaded rows in display order and ``column_ids`` the
    data columns in display order (pinned column first).
    """

    def __init__(
        self,
        row_ids: Sequence[str] = (),
        column_ids: Sequence[str] = (),
        *,
        buffers: Optional[EditBuffers] = None,
        scheduler: Optional[FrameScheduler] = None,
    ) -> None:
        self._row_ids: list[str] = list(row_ids)
        self._column_ids: list[str] = list(column_ids)
        self._buffers = buffers if buffers is not None else EditBuffers()
        self.scheduler = scheduler or FrameScheduler()
        self._selected: Optional[CellRef] = None
        self._focused: Optional[CellRef] = None

    def set_axes(self, row_ids: Sequence[str], column_ids: Sequence[str]) -> None:
        self._row_ids = list(row_ids)
        self._column_ids = list(column_ids)

    @property
    def row_ids(self) -> list[str]:
        return list(self._row_ids)

    @property
    def column_ids(self) -> list[str]:
        return list(self._column_ids)

    @property
    def selected(self) -> Optional[CellRef]:
        return self._selected

    @property
    def focused(self) -> Optional[CellRef]:
        return self._focused

    def select(self, cell: Optional[CellRef]) -> None:
        self._selected = cell

    def blur(self) -> None:
        """Drop input focus; the cell stays selected."""
        self._focused = None

    def clear(self) -> None:
        self._selected = None
        self._focused = None

    def state_of(self, cell: CellRef) -> CellState:
        if cell != self._selected:
            return CellState.IDLE
        if cell in self._buffers:
            return CellState.EDITING
        return CellState.SELECTED

    def move(self, key: str, shift: bool = False) -> Optional[CellRef]:
        """Move the selection for a navigation key.

        Returns the new selected cell, or None when the key is not handled
        (not a navigation key, or nothing is selected).
        """
        if self._selected is None:
            return None
        target = next_cell(self._row_ids, self._column_ids, self._selected, key, shift)
        if target is not None:
            self._selected = target
        return target

    def request_focus(self, cell: CellRef, on_focus: Optional[Callable[[CellRef], None]] = None) -> None:
        """Select ``cell`` now and give it input focus on the next frame."""
        self._selected = cell

        def _apply() -> None:
            # a later selection wins over a focus request still in the queue
            if self._selected != cell:
                return
            self._focused = cell
            if on_focus is not None:
                on_focus(cell)

        self.scheduler.call_next_frame(_apply)


def missing_required_columns(existing: Iterable[str], required: Sequence[str]) -> list[str]:
    """Required column names not present (by exact name), in required order."""
    have = set(existing)
    return [name for name in required if name not in have]


class RequiredColumnsMigration:
    """Remember which tables were already checked for required columns.

    Each table is checked at most once per migration instance, even if adding
    a column fails.
    """

    def __init__(self, required: Sequence[str]) -> None:
        self.required = tuple(required)
        self._done: set[str] = set()

    def pending(self, table_id: str, existing: Iterable[str]) -> list[str]:
        """Names to add for ``table_id``; empty once the table has been handled."""
        if table_id in self._done:
            return []
        self._done.add(table_id)
        return missing_required_columns(existing, self.required)

    def handled(self, table_id: str) -> bool:
        return table_id in self._done

"""Column widths, the trailing "add column" slot and the pinned identity column.

The pinned column is taken out of the horizontal axis entirely: the column
virtualizer only sees the scrollable slots and a viewport that is narrower by
the pinned column's width.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Sequence

from gridbase.grid.config import ADD_COLUMN_ID, GridConfig
from gridbase.grid.virtualizer import VirtualItem, Virtualizer
from gridbase.store.models import ColumnRef
from gridbase.utils.logging import get_logger

logger = get_logger(__name__)

SlotKind = Literal["data", "add"]


@dataclass(frozen=True)
class ColumnSlot:
    """One horizontal slot: a data column or the add-column pseudo-column."""

    id: str
    name: str
    width: int
    kind: SlotKind = "data"


@dataclass
class ResizeState:
    column_id: str
    start_x: float
    start_width: int


@dataclass(frozen=True)
class HorizontalWindow:
    """Render window of the horizontal axis.

    Attributes:
        pinned: The pinned slot, always rendered, or ``None``.
        items: Virtual items over ``scrollable`` (indices into ``scrollable``).
        scrollable: Slots participating in horizontal virtualization.
        padding_left: Spacer before the first rendered scrollable slot.
        padding_right: Spacer after the last rendered scrollable slot.
        total_width: Width of all slots including the pinned one.
    """

    pinned: Optional[ColumnSlot]
    items: list[VirtualItem]
    scrollable: list[ColumnSlot]
    padding_left: float
    padding_right: float
    total_width: float

    @property
    def slots(self) -> list[ColumnSlot]:
        return [self.scrollable[item.index] for item in self.items]


class ColumnLayout:
    """Width map for the active table's columns plus the horizontal virtualizer."""

    def __init__(self, config: GridConfig, widths: Optional[dict[str, int]] = None) -> None:
        self._config = config
        self._columns: list[ColumnRef] = []
        self._widths: dict[str, int] = dict(widths or {})
        self._resizing: Optional[ResizeState] = None
        self._viewport_width: float = 0.0
        self._scroll_left: float = 0.0
        self._virtualizer = Virtualizer(
            0,
            self._scrollable_width_at,
            overscan=config.column_overscan,
        )
        self._scrollable: list[ColumnSlot] = []

    # ------------------------------------------------------------------
    # Columns and widths
    # ------------------------------------------------------------------

    def set_columns(self, columns: Sequence[ColumnRef]) -> None:
        """Adopt a new column list: new ids get the default width, removed ids are pruned."""
        self._columns = list(columns)
        live = {c.id for c in self._columns}
        for column in self._columns:
            self._widths.setdefault(column.id, self._config.default_column_width)
        for column_id in [cid for cid in self._widths if cid not in live]:
            del self._widths[column_id]
        self._remeasure()

    @property
    def columns(self) -> list[ColumnRef]:
        return list(self._columns)

    @property
    def column_ids(self) -> list[str]:
        return [c.id for c in self._columns]

    @property
    def widths(self) -> dict[str, int]:
        return dict(self._widths)

    def width_of(self, column_id: str) -> int:
        if column_id == ADD_COLUMN_ID:
            return self._config.add_column_width
        return self._widths.get(column_id, self._config.default_column_width)

    def resize(self, column_id: str, width: float) -> int:
        """Set a column's width clamped to the configured range; returns the applied width."""
        applied = self._config.clamp_width(width)
        if self._widths.get(column_id) == applied:
            return applied
        self._widths[column_id] = applied
        self._remeasure()
        return applied

    # drag-resize, mirrors mouse down / move / up
    def begin_resize(self, column_id: str, x: float) -> None:
        self._resizing = ResizeState(column_id, x, self.width_of(column_id))

    def drag_to(self, x: float) -> Optional[int]:
        state = self._resizing
        if state is None:
            return None
        return self.resize(state.column_id, state.start_width + (x - state.start_x))

    def end_resize(self) -> None:
        self._resizing = None

    @property
    def is_resizing(self) -> bool:
        return self._resizing is not None

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------

    @property
    def slots(self) -> list[ColumnSlot]:
        """Data columns in order followed by the add-column slot."""
        out = [ColumnSlot(c.id, c.name, self.width_of(c.id)) for c in self._columns]
        out.append(ColumnSlot(ADD_COLUMN_ID, "Add column", self._config.add_column_width, "add"))
        return out

    @property
    def pinned_index(self) -> Optional[int]:
        name = self._config.pinned_column_name
        if name is None:
            return None
        for i, column in enumerate(self._columns):
            if column.name == name:
                return i
        return None

    @property
    def pinned(self) -> Optional[ColumnSlot]:
        idx = self.pinned_index
        if idx is None:
            return None
        column = self._columns[idx]
        return ColumnSlot(column.id, column.name, self.width_of(column.id))

    @property
    def pinned_width(self) -> int:
        pinned = self.pinned
        return pinned.width if pinned is not None else 0

    @property
    def scrollable(self) -> list[ColumnSlot]:
        return list(self._scrollable)

    def scrollable_index_of(self, column_id: str) -> Optional[int]:
        for i, slot in enumerate(self._scrollable):
            if slot.id == column_id:
                return i
        return None

    # ------------------------------------------------------------------
    # Horizontal virtualization
    # ------------------------------------------------------------------

    def _scrollable_width_at(self, index: int) -> float:
        return float(self._scrollable[index].width)

    def _remeasure(self) -> None:
        pinned_id = self.pinned.id if self.pinned is not None else None
        self._scrollable = [s for s in self.slots if s.id != pinned_id]
        self._virtualizer.configure(len(self._scrollable))
        self._sync_viewport()

    def _sync_viewport(self) -> None:
        available = max(0.0, self._viewport_width - self.pinned_width)
        self._virtualizer.set_scroll(self._scroll_left, available)

    def set_viewport(self, width: float, scroll_left: Optional[float] = None) -> None:
        self._viewport_width = max(0.0, float(width))
        if scroll_left is not None:
            self._scroll_left = max(0.0, float(scroll_left))
        self._sync_viewport()

    def set_scroll_left(self, scroll_left: float) -> None:
        self._scroll_left = max(0.0, float(scroll_left))
        self._sync_viewport()

    @property
    def scroll_left(self) -> float:
        return self._virtualizer.scroll_offset

    def scroll_to_column(self, column_id: str) -> Optional[float]:
        """Scroll a scrollable column into view. The pinned column never needs it."""
        idx = self.scrollable_index_of(column_id)
        if idx is None:
            return None
        offset = self._virtualizer.scroll_to_index(idx)
        self._scroll_left = offset
        return offset

    @property
    def virtualizer(self) -> Virtualizer:
        return self._virtualizer

    def window(self) -> HorizontalWindow:
        items = self._virtualizer.get_virtual_items()
        scrollable_total = self._virtualizer.total_size
        padding_left = items[0].start if items else 0.0
        last_end = items[-1].end if items else 0.0
        return HorizontalWindow(
            pinned=self.pinned,
            items=items,
            scrollable=list(self._scrollable),
            padding_left=padding_left,
            padding_right=max(0.0, scrollable_total - last_end),
            total_width=scrollable_total + self.pinned_width,
        )

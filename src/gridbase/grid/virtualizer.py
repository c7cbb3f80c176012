"""One-dimensional list virtualization.

A :class:`Virtualizer` maps a scroll position on one axis to the small set of
item indices that have to be rendered: the items intersecting the viewport
plus ``overscan`` extra items on each side. Rows and columns each get their
own instance; nothing here knows which axis it is on.

Item sizes are either a single fixed size (arithmetic, O(1) for any count) or
a per-index size function, in which case start offsets are precomputed with
numpy and looked up with ``searchsorted``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Hashable, Literal, Optional, Union

import numpy as np

SizeLike = Union[int, float, Callable[[int], float]]
Align = Literal["auto", "start", "center", "end"]


@dataclass(frozen=True)
class VirtualItem:
    """One rendered item: its index, stable key and pixel extent on the axis."""

    index: int
    key: Hashable
    start: float
    size: float

    @property
    def end(self) -> float:
        return self.start + self.size


class Virtualizer:
    """Compute the render window of a long list along one axis.

    Args:
        count: Number of items on the axis.
        estimate_size: Fixed item size, or a function ``index -> size``.
        overscan: Extra items rendered before and after the visible range.
        viewport_size: Size of the scroll container along the axis.
        scroll_offset: Current scroll position along the axis.
        key_of: Optional ``index -> key`` used for ``VirtualItem.key``.
    """

    def __init__(
        self,
        count: int,
        estimate_size: SizeLike,
        *,
        overscan: int = 1,
        viewport_size: float = 0.0,
        scroll_offset: float = 0.0,
        key_of: Optional[Callable[[int], Hashable]] = None,
    ) -> None:
        self._count = max(0, int(count))
        self._estimate_size = estimate_size
        self.overscan = max(0, int(overscan))
        self.viewport_size = max(0.0, float(viewport_size))
        self.key_of = key_of
        self._offsets: Optional[np.ndarray] = None
        self.measure()
        self.scroll_offset = self._clamp_offset(scroll_offset)

    # ------------------------------------------------------------------
    # Sizing
    # ------------------------------------------------------------------

    @property
    def count(self) -> int:
        return self._count

    @property
    def fixed_size(self) -> Optional[float]:
        if callable(self._estimate_size):
            return None
        return float(self._estimate_size)

    def measure(self) -> None:
        """Recompute item offsets. Call after sizes or the item set changed."""
        if self.fixed_size is not None:
            self._offsets = None
            return
        sizes = np.fromiter(
            (float(self._estimate_size(i)) for i in range(self._count)),  # type: ignore[operator]
            dtype=np.float64,
            count=self._count,
        )
        offsets = np.zeros(self._count + 1, dtype=np.float64)
        np.cumsum(sizes, out=offsets[1:])
        self._offsets = offsets

    def set_count(self, count: int) -> None:
        count = max(0, int(count))
        if count == self._count:
            return
        self._count = count
        self.measure()
        self.scroll_offset = self._clamp_offset(self.scroll_offset)

    def configure(self, count: int, estimate_size: Optional[SizeLike] = None) -> None:
        """Replace the item count and, optionally, the size function; re-measures once."""
        self._count = max(0, int(count))
        if estimate_size is not None:
            self._estimate_size = estimate_size
        self.measure()
        self.scroll_offset = self._clamp_offset(self.scroll_offset)

    @property
    def total_size(self) -> float:
        fixed = self.fixed_size
        if fixed is not None:
            return fixed * self._count
        assert self._offsets is not None
        return float(self._offsets[-1])

    def item_start(self, index: int) -> float:
        fixed = self.fixed_size
        if fixed is not None:
            return fixed * index
        assert self._offsets is not None
        return float(self._offsets[index])

    def item_size(self, index: int) -> float:
        fixed = self.fixed_size
        if fixed is not None:
            return fixed
        assert self._offsets is not None
        return float(self._offsets[index + 1] - self._offsets[index])

    # ------------------------------------------------------------------
    # Scrolling
    # ------------------------------------------------------------------

    def _clamp_offset(self, offset: float) -> float:
        max_offset = max(0.0, self.total_size - self.viewport_size)
        return min(max_offset, max(0.0, float(offset)))

    def set_scroll(self, offset: float, viewport_size: Optional[float] = None) -> None:
        if viewport_size is not None:
            self.viewport_size = max(0.0, float(viewport_size))
        self.scroll_offset = self._clamp_offset(offset)

    def scroll_to_index(self, index: int, align: Align = "auto") -> float:
        """Scroll so item ``index`` is inside the viewport; return the new offset.

        ``"auto"`` only scrolls when the item is (partly) outside the viewport
        and then moves by the smallest amount that reveals it.
        """
        if self._count == 0:
            return self.scroll_offset
        index = min(self._count - 1, max(0, int(index)))
        start = self.item_start(index)
        end = start + self.item_size(index)
        view_end = self.scroll_offset + self.viewport_size

        if align == "start":
            target = start
        elif align == "end":
            target = end - self.viewport_size
        elif align == "center":
            target = start - (self.viewport_size - (end - start)) / 2.0
        elif start < self.scroll_offset:
            target = start
        elif end > view_end:
            target = end - self.viewport_size
        else:
            target = self.scroll_offset

        self.scroll_offset = self._clamp_offset(target)
        return self.scroll_offset

    # ------------------------------------------------------------------
    # Window
    # ------------------------------------------------------------------

    def _index_at(self, offset: float) -> int:
        """Index of the item covering ``offset`` (clamped to the item range)."""
        fixed = self.fixed_size
        if fixed is not None:
            idx = int(math.floor(offset / fixed)) if fixed > 0 else 0
        else:
            assert self._offsets is not None
            idx = int(np.searchsorted(self._offsets[1:], offset, side="right"))
        return min(self._count - 1, max(0, idx))

    @property
    def visible_range(self) -> Optional[tuple[int, int]]:
        """Inclusive ``(first, last)`` indices intersecting the viewport, no overscan."""
        if self._count == 0:
            return None
        first = self._index_at(self.scroll_offset)
        if self.viewport_size <= 0:
            return first, first
        # last item whose start lies before the viewport end
        view_end = self.scroll_offset + self.viewport_size
        fixed = self.fixed_size
        if fixed is not None:
            last = int(math.ceil(view_end / fixed)) - 1 if fixed > 0 else first
        else:
            assert self._offsets is not None
            last = int(np.searchsorted(self._offsets[:-1], view_end, side="left")) - 1
        last = min(self._count - 1, max(first, last))
        return first, last

    @property
    def render_range(self) -> Optional[tuple[int, int]]:
        """Inclusive index range including overscan."""
        visible = self.visible_range
        if visible is None:
            return None
        first, last = visible
        return max(0, first - self.overscan), min(self._count - 1, last + self.overscan)

    def get_virtual_items(self) -> list[VirtualItem]:
        window = self.render_range
        if window is None:
            return []
        lo, hi = window
        key_of = self.key_of
        return [
            VirtualItem(
                index=i,
                key=key_of(i) if key_of is not None else i,
                start=self.item_start(i),
                size=self.item_size(i),
            )
            for i in range(lo, hi + 1)
        ]


def needs_next_page(items: list[VirtualItem], loaded_count: int, has_next_page: bool) -> bool:
    """True when the last rendered row reached the end of the loaded rows and more exist.

    This is the only pagination trigger of the grid.
    """
    if not items or not has_next_page:
        return False
    return items[-1].index >= loaded_count - 1

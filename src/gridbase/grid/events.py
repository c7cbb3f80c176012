# src/gridbase/grid/events.py
#
# Explicit change notifications for the grid engine. Derived values (row
# window, column layout, control state) are recomputed by subscribers when one
# of these is emitted; nothing is tracked implicitly.

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Union

from gridbase.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TableSwitched:
    table_id: Optional[str]


@dataclass(frozen=True)
class MetaChanged:
    table_id: str


@dataclass(frozen=True)
class RowsChanged:
    table_id: str
    reason: str = "page"


@dataclass(frozen=True)
class LayoutChanged:
    table_id: str
    reason: str = "resize"


@dataclass(frozen=True)
class SelectionChanged:
    row_id: Optional[str]
    column_id: Optional[str]


@dataclass(frozen=True)
class ErrorRaised:
    table_id: Optional[str]
    message: str


GridEvent = Union[TableSwitched, MetaChanged, RowsChanged, LayoutChanged, SelectionChanged, ErrorRaised]
Subscriber = Callable[[GridEvent], None]


class EventBus:
    """Minimal in-process event bus.

    Subscribers are called synchronously in subscription order. A failing
    subscriber is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._subs: list[Subscriber] = []

    def subscribe(self, cb: Subscriber) -> Callable[[], None]:
        """Register ``cb``; returns a function that unsubscribes it."""
        self._subs.append(cb)

        def _unsubscribe() -> None:
            if cb in self._subs:
                self._subs.remove(cb)

        return _unsubscribe

    def emit(self, ev: GridEvent) -> None:
        for cb in list(self._subs):
            try:
                cb(ev)
            except Exception:
                logger.exception("Error in event subscriber for %s", type(ev).__name__)

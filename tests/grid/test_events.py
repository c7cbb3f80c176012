from __future__ import annotations

import pytest

from gridbase.grid.events import EventBus, RowsChanged, TableSwitched


def test_subscribers_called_in_order_and_can_unsubscribe() -> None:
    bus = EventBus()
    seen: list[str] = []
    bus.subscribe(lambda ev: seen.append(f"a:{type(ev).__name__}"))
    unsubscribe = bus.subscribe(lambda ev: seen.append(f"b:{type(ev).__name__}"))

    bus.emit(TableSwitched("t1"))
    unsubscribe()
    unsubscribe()
    bus.emit(RowsChanged("t1"))

    assert seen == ["a:TableSwitched", "b:TableSwitched", "a:RowsChanged"]


def test_failing_subscriber_does_not_block_others(caplog: pytest.LogCaptureFixture) -> None:
    bus = EventBus()
    seen: list[object] = []

    def broken(_ev: object) -> None:
        raise ValueError("boom")

    bus.subscribe(broken)
    bus.subscribe(seen.append)

    ev = RowsChanged("t1", "invalidate")
    bus.emit(ev)

    assert seen == [ev]
    assert "Error in event subscriber for RowsChanged" in caplog.text

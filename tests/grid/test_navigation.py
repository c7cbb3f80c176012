"""Tests for keyboard navigation, deferred focus and the required-columns check."""

from __future__ import annotations

import pytest

from gridbase.grid.edits import CellRef, EditBuffers
from gridbase.grid.navigation import (
    CellState,
    FrameScheduler,
    GridNavigator,
    RequiredColumnsMigration,
    missing_required_columns,
    next_cell,
)

ROWS = ["r0", "r1", "r2"]
COLS = ["name", "notes", "status"]


@pytest.mark.parametrize(
    ("start", "key", "shift", "expected"),
    [
        (("r1", "notes"), "ArrowRight", False, ("r1", "status")),
        (("r1", "notes"), "ArrowLeft", False, ("r1", "name")),
        (("r1", "notes"), "ArrowDown", False, ("r2", "notes")),
        (("r1", "notes"), "ArrowUp", False, ("r0", "notes")),
        # clamped at the edges
        (("r0", "status"), "ArrowRight", False, ("r0", "status")),
        (("r0", "name"), "ArrowLeft", False, ("r0", "name")),
        (("r2", "notes"), "ArrowDown", False, ("r2", "notes")),
        (("r0", "notes"), "ArrowUp", False, ("r0", "notes")),
        # Tab wraps to the next row, Shift+Tab to the previous one
        (("r0", "notes"), "Tab", False, ("r0", "status")),
        (("r0", "status"), "Tab", False, ("r1", "name")),
        (("r1", "name"), "Tab", True, ("r0", "status")),
        (("r1", "notes"), "Tab", True, ("r1", "name")),
        # no wrap past the first or last cell
        (("r2", "status"), "Tab", False, ("r2", "status")),
        (("r0", "name"), "Tab", True, ("r0", "name")),
    ],
)
def test_next_cell(start, key, shift, expected) -> None:
    assert next_cell(ROWS, COLS, CellRef(*start), key, shift) == CellRef(*expected)


@pytest.mark.parametrize("key", ["Enter", "a", "Escape", "PageDown"])
def test_non_navigation_keys_are_ignored(key: str) -> None:
    assert next_cell(ROWS, COLS, CellRef("r0", "name"), key) is None


def test_unknown_current_cell() -> None:
    assert next_cell(ROWS, COLS, CellRef("gone", "name"), "ArrowDown") is None
    assert next_cell([], COLS, CellRef("r0", "name"), "ArrowDown") is None


def test_move_needs_a_selection() -> None:
    nav = GridNavigator(ROWS, COLS)
    assert nav.move("ArrowDown") is None

    nav.select(CellRef("r0", "name"))
    assert nav.move("ArrowDown") == CellRef("r1", "name")
    assert nav.selected == CellRef("r1", "name")
    assert nav.move("x") is None
    assert nav.selected == CellRef("r1", "name")


def test_state_of_cells() -> None:
    buffers = EditBuffers()
    nav = GridNavigator(ROWS, COLS, buffers=buffers)
    cell = CellRef("r0", "name")

    assert nav.state_of(cell) is CellState.IDLE
    nav.select(cell)
    assert nav.state_of(cell) is CellState.SELECTED
    buffers.set(cell, "typing")
    assert nav.state_of(cell) is CellState.EDITING
    assert nav.state_of(CellRef("r1", "name")) is CellState.IDLE


def test_selecting_another_cell_keeps_buffers() -> None:
    buffers = EditBuffers()
    nav = GridNavigator(ROWS, COLS, buffers=buffers)
    first = CellRef("r0", "name")
    nav.select(first)
    buffers.set(first, "draft")

    nav.select(CellRef("r1", "name"))

    assert buffers.get(first) == "draft"
    assert nav.state_of(first) is CellState.IDLE


def test_focus_lands_on_the_next_frame() -> None:
    scheduler = FrameScheduler()
    nav = GridNavigator(ROWS, COLS, scheduler=scheduler)
    focused: list[CellRef] = []
    target = CellRef("r2", "status")

    nav.request_focus(target, focused.append)

    assert nav.selected == target
    assert nav.focused is None
    assert focused == []
    assert scheduler.pending == 1

    assert scheduler.run_frame() == 1
    assert nav.focused == target
    assert focused == [target]


def test_later_selection_supersedes_queued_focus() -> None:
    scheduler = FrameScheduler()
    nav = GridNavigator(ROWS, COLS, scheduler=scheduler)
    focused: list[CellRef] = []

    nav.request_focus(CellRef("r0", "name"), focused.append)
    nav.request_focus(CellRef("r1", "name"), focused.append)
    scheduler.run_frame()

    assert focused == [CellRef("r1", "name")]


def test_blur_keeps_selection() -> None:
    scheduler = FrameScheduler()
    nav = GridNavigator(ROWS, COLS, scheduler=scheduler)
    nav.request_focus(CellRef("r0", "name"))
    scheduler.run_frame()

    nav.blur()
    assert nav.focused is None
    assert nav.selected == CellRef("r0", "name")
    nav.clear()
    assert nav.selected is None


def test_frame_callbacks_queued_during_a_frame_wait(caplog: pytest.LogCaptureFixture) -> None:
    scheduler = FrameScheduler()
    ran: list[str] = []

    def first() -> None:
        ran.append("first")
        scheduler.call_next_frame(lambda: ran.append("second"))

    def broken() -> None:
        raise RuntimeError("boom")

    scheduler.call_next_frame(first)
    scheduler.call_next_frame(broken)

    assert scheduler.run_frame() == 2
    assert ran == ["first"]
    assert "Error in frame callback" in caplog.text

    scheduler.run_frame()
    assert ran == ["first", "second"]


def test_missing_required_columns_by_exact_name() -> None:
    required = ("Name", "Notes", "Assignee", "Status", "Attachments")
    assert missing_required_columns(["Name", "notes", "Status"], required) == ["Notes", "Assignee", "Attachments"]
    assert missing_required_columns(required, required) == []


def test_required_columns_checked_once_per_table() -> None:
    migration = RequiredColumnsMigration(("Name", "Status"))

    assert migration.pending("t1", ["Name"]) == ["Status"]
    assert migration.handled("t1")
    assert migration.pending("t1", ["Name"]) == []
    assert migration.pending("t2", []) == ["Name", "Status"]
    assert not migration.handled("t3")

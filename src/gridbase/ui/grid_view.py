# src/gridbase/ui/grid_view.py
from __future__ import annotations

from typing import Any, Awaitable, Optional

from nicegui import ui

from gridbase.grid.edits import CellRef
from gridbase.grid.events import GridEvent
from gridbase.grid.navigation import CellState
from gridbase.store.errors import GridbaseError
from gridbase.utils.logging import get_logger
from gridbase.workspace.table_view import RenderCell, RenderRow, RenderWindow, TableWorkspace

logger = get_logger(__name__)

CELL_CLASSES = "border-r border-b border-gray-200 px-2"
SELECTED_CELL_CLASSES = "ring-2 ring-blue-500"

# browser default suppressed so only the deferred focus moves the caret
NAV_EVENTS = {
    "keydown.up.prevent": "ArrowUp",
    "keydown.down.prevent": "ArrowDown",
    "keydown.left.prevent": "ArrowLeft",
    "keydown.right.prevent": "ArrowRight",
    "keydown.tab.prevent": "Tab",
}


class GridView:
    """NiceGUI renderer for a :class:`TableWorkspace`.

    Only the rows and columns of ``workspace.render_window()`` are built; the
    rest of the scroll extent is made of spacer padding. Redraws happen on
    every event the workspace emits.

    Wiring:
        - scroll area position -> ``workspace.scroll``
        - cell input change -> ``workspace.edit_cell`` (buffer only)
        - cell blur -> ``workspace.commit_cell``
        - Enter -> ``workspace.submit_cell`` (commit and drop input focus)
        - arrow keys / Tab -> ``workspace.handle_key``; focus lands one frame later

    Must be constructed within a NiceGUI slot.
    """

    def __init__(
        self,
        workspace: TableWorkspace,
        *,
        viewport_width: float = 1200,
        viewport_height: float = 600,
    ) -> None:
        self._workspace = workspace
        self._viewport_width = viewport_width
        self._viewport_height = viewport_height
        self._inputs: dict[CellRef, Any] = {}
        self._frame_timer: Optional[Any] = None

        workspace.set_viewport(viewport_width, viewport_height)
        self._build()
        self._unsubscribe = workspace.bus.subscribe(self._on_event)
        self.redraw()

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def _build(self) -> None:
        with ui.row().classes("w-full items-center gap-2"):
            self._tabs = ui.row().classes("items-center gap-1")
            self._add_table_btn = ui.button("+ Add table", on_click=self._on_add_table).props("flat")
            self._add_row_btn = ui.button("+ Add row", on_click=self._on_add_row).props("flat")
            self._add_bulk_btn = ui.button(
                f"+ Add {self._workspace.config.bulk_rows:,} rows", on_click=self._on_add_bulk_rows
            ).props("flat")
            self._add_column_btn = ui.button("+ Add column", on_click=self._on_add_column).props("flat")

        self._error_label = ui.label("").classes("text-sm text-red-700")
        self._error_label.visible = False

        self._scroll = ui.scroll_area(on_scroll=self._on_scroll).style(
            f"width: {self._viewport_width}px; height: {self._viewport_height}px"
        )
        self._scroll.on("mousemove", self._on_mouse_move, ["clientX"])
        self._scroll.on("mouseup", lambda _e: self._workspace.end_column_resize())
        with self._scroll:
            self._header = ui.element("div").classes("sticky top-0 z-10 bg-white")
            self._body = ui.element("div").classes("relative")

    def close(self) -> None:
        self._unsubscribe()

    # ------------------------------------------------------------------
    # Redraw
    # ------------------------------------------------------------------

    def _on_event(self, ev: GridEvent) -> None:
        logger.debug("redraw on %s", type(ev).__name__)
        self.redraw()

    def _refresh_controls(self) -> None:
        ws = self._workspace
        self._add_table_btn.enabled = ws.can_add_table
        self._add_row_btn.enabled = ws.can_add_row
        self._add_bulk_btn.enabled = ws.can_add_bulk_rows
        self._add_column_btn.enabled = ws.can_add_column

        self._tabs.clear()
        with self._tabs:
            for table in ws.tables:
                btn = ui.button(table.name, on_click=lambda _e, tid=table.id: self._run(ws.switch_table(tid)))
                btn.props("flat" if table.id != ws.active_table_id else "unelevated")
                if ws.can_delete_table:
                    with ui.context_menu():
                        ui.menu_item("Delete table", on_click=lambda _e, tid=table.id: self._run(ws.delete_table(tid)))

    def redraw(self) -> None:
        self._refresh_controls()
        window = self._workspace.render_window()

        self._inputs = {}
        self._header.clear()
        self._body.clear()

        if window.error is not None:
            self._error_label.text = window.error
            self._error_label.visible = True
            self._scroll.visible = False
            return
        self._error_label.visible = False
        self._scroll.visible = True

        self._draw_header(window)
        self._body.style(f"height: {window.total_height}px; width: {window.total_width}px")
        with self._body:
            for row in window.rows:
                self._draw_row(window, row)

        self._schedule_frame()

    def _draw_header(self, window: RenderWindow) -> None:
        columns = window.columns
        with self._header:
            with ui.row().classes("no-wrap gap-0"):
                if columns.pinned is not None:
                    ui.label(columns.pinned.name).classes(f"{CELL_CLASSES} sticky left-0 bg-white").style(
                        f"width: {columns.pinned.width}px"
                    )
                ui.element("div").style(f"width: {columns.padding_left}px")
                for slot in columns.slots:
                    if slot.kind == "add":
                        ui.button("+", on_click=self._on_add_column).props("flat dense").style(
                            f"width: {slot.width}px"
                        )
                        continue
                    label = ui.label(slot.name).classes(f"{CELL_CLASSES} relative").style(f"width: {slot.width}px")
                    with label:
                        handle = ui.element("div").classes("absolute right-0 top-0 h-full w-1 cursor-col-resize")
                        handle.on("mousedown", lambda e, cid=slot.id: self._on_resize_start(e, cid), ["clientX"])
                    if self._workspace.can_delete_column:
                        with label, ui.context_menu():
                            ui.menu_item(
                                "Delete column",
                                on_click=lambda _e, cid=slot.id: self._run(self._workspace.delete_column(cid)),
                            )
                ui.element("div").style(f"width: {columns.padding_right}px")

    def _draw_row(self, window: RenderWindow, row: RenderRow) -> None:
        position = f"position: absolute; top: {row.start}px; height: {row.size}px"
        if row.is_loader:
            ui.label(row.loader_text or "").classes("text-xs text-gray-500 px-3").style(position)
            return
        with ui.row().classes("no-wrap gap-0").style(position) as row_el:
            if row.pinned is not None:
                self._draw_cell(row.pinned, sticky=True)
            ui.element("div").style(f"width: {window.columns.padding_left}px")
            for cell in row.cells:
                self._draw_cell(cell)
            ui.element("div").style(f"width: {window.columns.padding_right}px")
        if self._workspace.can_delete_row and row.row_id is not None:
            with row_el, ui.context_menu():
                ui.menu_item(
                    "Delete row",
                    on_click=lambda _e, rid=row.row_id: self._run(self._workspace.delete_row(rid)),
                )

    def _draw_cell(self, cell: RenderCell, *, sticky: bool = False) -> None:
        ref = CellRef(cell.row_id, cell.column_id)
        classes = CELL_CLASSES
        if sticky:
            classes += " sticky left-0 bg-white"
        if cell.state is not CellState.IDLE:
            classes += f" {SELECTED_CELL_CLASSES}"

        inp = ui.input(
            value=cell.value,
            on_change=lambda e, r=ref: self._workspace.edit_cell(r.row_id, r.column_id, str(e.value or "")),
        ).props("dense borderless").classes(classes).style(f"width: {cell.width}px")
        inp.on("focus", lambda _e, r=ref: self._workspace.select_cell(r.row_id, r.column_id))
        inp.on("blur", lambda _e, r=ref: self._run(self._workspace.commit_cell(r.row_id, r.column_id)))
        inp.on("keydown.enter", lambda _e, r=ref: self._on_enter(r))
        for event, key in NAV_EVENTS.items():
            inp.on(event, lambda e, r=ref, k=key: self._on_nav_key(e, r, k), ["shiftKey"])
        self._inputs[ref] = inp

    # ------------------------------------------------------------------
    # Frames and focus
    # ------------------------------------------------------------------

    def _schedule_frame(self) -> None:
        if self._workspace.scheduler.pending == 0:
            return
        self._frame_timer = ui.timer(0.0, self._run_frame, once=True)

    def _run_frame(self) -> None:
        self._workspace.scheduler.run_frame()

    def _focus_input(self, cell: CellRef) -> None:
        inp = self._inputs.get(cell)
        if inp is None:
            logger.debug("focus target %s is not rendered", cell.key)
            return
        inp.run_method("focus")
        inp.run_method("select")

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    async def _run(self, action: Awaitable[Any]) -> Any:
        """Await a workspace action; store errors become a notification."""
        try:
            return await action
        except GridbaseError as exc:
            logger.warning("action failed: %s", exc)
            ui.notify(str(exc), type="warning")
            return None

    async def _on_scroll(self, e: Any) -> None:
        await self._workspace.scroll(
            top=getattr(e, "vertical_position", None),
            left=getattr(e, "horizontal_position", None),
        )

    async def _on_enter(self, cell: CellRef) -> None:
        inp = self._inputs.get(cell)
        if inp is not None:
            inp.run_method("blur")
        await self._run(self._workspace.submit_cell(cell.row_id, cell.column_id))

    def _on_nav_key(self, e: Any, cell: CellRef, key: str) -> None:
        args = getattr(e, "args", None) or {}
        self._workspace.select_cell(cell.row_id, cell.column_id)
        self._workspace.handle_key(key, bool(args.get("shiftKey", False)), on_focus=self._focus_input)

    async def _on_add_table(self) -> None:
        await self._run(self._workspace.add_table())

    async def _on_add_column(self) -> None:
        await self._run(self._workspace.add_column())

    async def _on_add_row(self) -> None:
        await self._run(self._workspace.add_row())

    async def _on_add_bulk_rows(self) -> None:
        self._add_row_btn.enabled = False
        self._add_bulk_btn.enabled = False
        await self._run(self._workspace.add_bulk_rows())

    def _on_resize_start(self, e: Any, column_id: str) -> None:
        args = getattr(e, "args", None) or {}
        self._workspace.begin_column_resize(column_id, float(args.get("clientX", 0.0)))

    def _on_mouse_move(self, e: Any) -> None:
        args = getattr(e, "args", None) or {}
        if "clientX" in args:
            self._workspace.drag_column_resize(float(args["clientX"]))

"""Orchestration of one open base: the active table, its grid state and its controls.

Everything that belongs to the active table lives in a :class:`TableSession`.
Switching tables closes the old session (its in-flight page request is
cancelled and any late response is ignored) and builds a fresh one, so no
selection, edit buffer, scroll position or pending request carries over.

Changes are announced on an :class:`~gridbase.grid.events.EventBus`; the
renderer subscribes and redraws from :meth:`TableWorkspace.render_window`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from gridbase.grid.columns import ColumnLayout, HorizontalWindow
from gridbase.grid.config import GridConfig
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
from gridbase.grid.mutations import MutationLayer, Refetch
from gridbase.grid.navigation import CellState, FrameScheduler, GridNavigator, RequiredColumnsMigration
from gridbase.grid.row_cache import TABLE_NOT_FOUND, TABLE_UNREACHABLE, RowCache
from gridbase.grid.virtualizer import Virtualizer, needs_next_page
from gridbase.settings import WorkspaceSettings
from gridbase.store.errors import GridbaseError, NotFoundError, TransientNetworkError
from gridbase.store.limits import DEFAULT_LIMITS, CapacityLimits
from gridbase.store.models import BaseDetail, ColumnRef, RowRecord, TableMeta, TableRef
from gridbase.utils.logging import get_logger
from gridbase.workspace.client import StoreClient

logger = get_logger(__name__)

BASE_LOAD_FAILED = "We couldn't load this base. It may have been deleted or you may not have access."
LOADING_MORE = "Loading more rows..."
NO_MORE_ROWS = "No more rows"


@dataclass(frozen=True)
class RenderCell:
    row_id: str
    column_id: str
    value: str
    width: int
    start: float
    state: CellState = CellState.IDLE


@dataclass(frozen=True)
class RenderRow:
    """One rendered row. ``row_id`` is ``None`` for the trailing loader row."""

    index: int
    start: float
    size: float
    row_id: Optional[str]
    pinned: Optional[RenderCell] = None
    cells: list[RenderCell] = field(default_factory=list)
    loader_text: Optional[str] = None

    @property
    def is_loader(self) -> bool:
        return self.row_id is None


@dataclass(frozen=True)
class RenderWindow:
    """What the renderer draws for the current scroll position.

    Attributes:
        rows: Rendered rows, overscan included, in index order.
        columns: Horizontal window (pinned slot, scrollable slots, paddings).
        total_height: Height of the whole row axis, loader row included.
        total_width: Width of all columns, pinned and add-column slot included.
        error: Terminal error shown instead of the grid, if any.
    """

    rows: list[RenderRow]
    columns: HorizontalWindow
    total_height: float
    total_width: float
    error: Optional[str] = None


class TableSession:
    """Per-table state container; discarded when another table becomes active."""

    def __init__(
        self,
        table_id: str,
        client: StoreClient,
        *,
        config: GridConfig,
        limits: CapacityLimits,
        widths: Optional[dict[str, int]] = None,
        scheduler: Optional[FrameScheduler] = None,
        on_rows_change: Optional[Callable[["TableSession", str], None]] = None,
        refetch_table: Refetch,
        refetch_base: Refetch,
    ) -> None:
        self.table_id = table_id
        self.config = config
        self.meta: Optional[TableMeta] = None
        self.error: Optional[str] = None
        self.closed = False

        self.buffers = EditBuffers()
        self.cache = RowCache(
            client,
            table_id,
            page_size=config.page_size,
            on_change=(lambda reason: on_rows_change(self, reason)) if on_rows_change else None,
        )
        self.layout = ColumnLayout(config, widths)
        self.rows = Virtualizer(
            0,
            config.row_height,
            overscan=config.row_overscan,
            key_of=self._row_key,
        )
        self.navigator = GridNavigator(buffers=self.buffers, scheduler=scheduler)
        self.mutations = MutationLayer(
            client,
            self.cache,
            self.buffers,
            refetch_table=refetch_table,
            refetch_base=refetch_base,
            limits=limits,
        )

    def _row_key(self, index: int) -> str:
        row = self.cache.row_at(index)
        return row.id if row is not None else f"loader-{index}"

    @property
    def columns(self) -> list[ColumnRef]:
        return list(self.meta.columns) if self.meta is not None else []

    @property
    def row_count(self) -> int:
        """Last known server-side row count."""
        return self.meta.row_count if self.meta is not None else 0

    def navigation_order(self) -> list[str]:
        """Data column ids in display order: pinned first, then the scrollable ones."""
        order = [self.layout.pinned.id] if self.layout.pinned is not None else []
        order.extend(s.id for s in self.layout.scrollable if s.kind == "data")
        return order

    def apply_meta(self, meta: TableMeta) -> None:
        self.meta = meta
        self.layout.set_columns(meta.columns)
        self.sync_rows()

    def sync_rows(self) -> None:
        """Resize the row axis to the loaded rows, plus one loader row while more pages exist."""
        count = len(self.cache) + (1 if self.cache.has_next_page else 0)
        self.rows.set_count(count)
        self.navigator.set_axes(self.cache.row_ids, self.navigation_order())

    def close(self) -> None:
        self.closed = True
        self.cache.cancel()
        self.navigator.clear()
        self.buffers.clear()


class TableWorkspace:
    """State and actions of the table screen for one base.

    Args:
        client: Async client bound to the signed-in user.
        base_id: The base being shown.
        config: Grid geometry and behavior.
        limits: Capacity limits used to pre-disable controls.
        bus: Event bus changes are announced on.
        scheduler: Frame scheduler used for deferred input focus.
        settings: Optional persisted settings providing per-table column widths.
    """

    def __init__(
        self,
        client: StoreClient,
        base_id: str,
        *,
        config: Optional[GridConfig] = None,
        limits: Optional[CapacityLimits] = None,
        bus: Optional[EventBus] = None,
        scheduler: Optional[FrameScheduler] = None,
        settings: Optional[WorkspaceSettings] = None,
    ) -> None:
        self._client = client
        self.base_id = base_id
        self.config = config or GridConfig()
        self.limits = limits or DEFAULT_LIMITS
        self.bus = bus or EventBus()
        self.scheduler = scheduler or FrameScheduler()
        self.settings = settings

        self.base: Optional[BaseDetail] = None
        self.base_error: Optional[str] = None
        self._session: Optional[TableSession] = None
        self._migration = RequiredColumnsMigration(self.config.required_columns)
        self._adding_rows = False
        self._viewport_width = 0.0
        self._viewport_height = 0.0

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def session(self) -> Optional[TableSession]:
        return self._session

    @property
    def active_table_id(self) -> Optional[str]:
        return self._session.table_id if self._session is not None else None

    @property
    def tables(self) -> list[TableRef]:
        return list(self.base.tables) if self.base is not None else []

    @property
    def base_name(self) -> str:
        return self.base.name if self.base is not None else "Base"

    @property
    def error(self) -> Optional[str]:
        """Terminal error shown in place of the grid."""
        if self.base_error is not None:
            return self.base_error
        if self._session is None:
            return None
        return self._session.error or self._session.cache.error

    @property
    def is_adding_rows(self) -> bool:
        return self._adding_rows

    def _is_active(self, session: TableSession) -> bool:
        return session is self._session and not session.closed

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Load the base and open its first table."""
        try:
            self.base = await self._client.get_base(self.base_id)
        except (NotFoundError, TransientNetworkError) as exc:
            self.base_error = BASE_LOAD_FAILED
            logger.warning("could not load base %s: %s", self.base_id, exc)
            self.bus.emit(ErrorRaised(None, BASE_LOAD_FAILED))
            return
        self.base_error = None
        await self._ensure_active_table()

    async def refetch_base(self) -> None:
        self.base = await self._client.get_base(self.base_id)
        await self._ensure_active_table()

    async def _ensure_active_table(self) -> None:
        tables = self.tables
        if not tables:
            return
        active = self.active_table_id
        if active is not None and any(t.id == active for t in tables):
            return
        await self.switch_table(tables[0].id)

    def _new_session(self, table_id: str) -> TableSession:
        widths = self.settings.get_column_widths(table_id) if self.settings is not None else None
        session = TableSession(
            table_id,
            self._client,
            config=self.config,
            limits=self.limits,
            widths=widths,
            scheduler=self.scheduler,
            on_rows_change=self._on_rows_change,
            refetch_table=lambda: self._refetch_session(session),
            refetch_base=self.refetch_base,
        )
        session.layout.set_viewport(self._viewport_width)
        session.rows.set_scroll(0.0, self._viewport_height)
        return session

    async def switch_table(self, table_id: str) -> None:
        """Make ``table_id`` the active table with a fresh session."""
        if self._session is not None:
            if self._session.table_id == table_id and not self._session.closed:
                return
            logger.debug("switching table %s -> %s", self._session.table_id, table_id)
            self._session.close()

        session = self._new_session(table_id)
        self._session = session
        self.bus.emit(TableSwitched(table_id))
        await self._load_session(session)

    async def _load_session(self, session: TableSession) -> None:
        if not await self._load_meta(session):
            return
        await self._ensure_required_columns(session)
        if not self._is_active(session):
            return
        await session.cache.fetch_next_page()
        await self._fetch_if_needed(session)

    async def _load_meta(self, session: TableSession) -> bool:
        try:
            meta = await self._client.get_table_meta(session.table_id)
        except (NotFoundError, TransientNetworkError) as exc:
            if not self._is_active(session):
                return False
            session.error = TABLE_NOT_FOUND if isinstance(exc, NotFoundError) else TABLE_UNREACHABLE
            logger.warning("could not load table %s: %s", session.table_id, exc)
            self.bus.emit(ErrorRaised(session.table_id, session.error))
            return False
        if not self._is_active(session):
            logger.debug("dropping stale table meta for %s", session.table_id)
            return False
        session.apply_meta(meta)
        self.bus.emit(MetaChanged(session.table_id))
        return True

    async def _ensure_required_columns(self, session: TableSession) -> None:
        missing = self._migration.pending(session.table_id, [c.name for c in session.columns])
        if not missing:
            return
        added = 0
        for name in missing:
            if len(session.columns) + added >= self.limits.max_columns:
                break
            try:
                await self._client.add_column(session.table_id, name)
                added += 1
            except GridbaseError as exc:
                logger.warning("could not add required column %r to table %s: %s", name, session.table_id, exc)
        if added:
            logger.info("added %d required column(s) to table %s", added, session.table_id)
            await self._load_meta(session)

    async def _refetch_session(self, session: TableSession) -> None:
        if not self._is_active(session):
            return
        if not await self._load_meta(session):
            return
        await session.cache.invalidate()
        await self._fetch_if_needed(session)

    async def refetch_table(self) -> None:
        if self._session is not None:
            await self._refetch_session(self._session)

    def _on_rows_change(self, session: TableSession, reason: str) -> None:
        if not self._is_active(session):
            return
        if reason == "error":
            self.bus.emit(ErrorRaised(session.table_id, session.cache.error or TABLE_NOT_FOUND))
            return
        if reason != "cell":
            session.sync_rows()
        self.bus.emit(RowsChanged(session.table_id, reason))

    async def _fetch_if_needed(self, session: TableSession) -> None:
        while self._is_active(session):
            items = session.rows.get_virtual_items()
            if session.cache.is_fetching or not needs_next_page(items, len(session.cache), session.cache.has_next_page):
                return
            if not await session.cache.fetch_next_page():
                return

    async def fetch_more(self) -> None:
        """Fetch pages while the last rendered row is the loader row."""
        if self._session is not None:
            await self._fetch_if_needed(self._session)

    # ------------------------------------------------------------------
    # Viewport
    # ------------------------------------------------------------------

    def set_viewport(self, width: float, height: float) -> None:
        self._viewport_width = max(0.0, float(width))
        self._viewport_height = max(0.0, float(height))
        session = self._session
        if session is None:
            return
        session.layout.set_viewport(self._viewport_width)
        session.rows.set_scroll(session.rows.scroll_offset, self._viewport_height)
        self.bus.emit(LayoutChanged(session.table_id, "viewport"))

    async def scroll(self, top: Optional[float] = None, left: Optional[float] = None) -> None:
        session = self._session
        if session is None:
            return
        if top is not None:
            session.rows.set_scroll(top)
        if left is not None:
            session.layout.set_scroll_left(left)
        self.bus.emit(LayoutChanged(session.table_id, "scroll"))
        await self._fetch_if_needed(session)

    def _remember_widths(self, session: TableSession) -> None:
        if self.settings is not None:
            self.settings.set_column_widths(session.table_id, session.layout.widths)

    def resize_column(self, column_id: str, width: float) -> Optional[int]:
        session = self._session
        if session is None:
            return None
        applied = session.layout.resize(column_id, width)
        self._remember_widths(session)
        session.navigator.set_axes(session.cache.row_ids, session.navigation_order())
        self.bus.emit(LayoutChanged(session.table_id, "resize"))
        return applied

    # drag resize: mouse down on a header handle, move, up
    def begin_column_resize(self, column_id: str, x: float) -> None:
        if self._session is not None:
            self._session.layout.begin_resize(column_id, x)

    def drag_column_resize(self, x: float) -> Optional[int]:
        session = self._session
        if session is None or not session.layout.is_resizing:
            return None
        applied = session.layout.drag_to(x)
        self.bus.emit(LayoutChanged(session.table_id, "resize"))
        return applied

    def end_column_resize(self) -> None:
        session = self._session
        if session is None or not session.layout.is_resizing:
            return
        session.layout.end_resize()
        self._remember_widths(session)

    # ------------------------------------------------------------------
    # Render window
    # ------------------------------------------------------------------

    def render_window(self) -> RenderWindow:
        session = self._session
        error = self.error
        if session is None or error is not None:
            empty = HorizontalWindow(None, [], [], 0.0, 0.0, 0.0)
            if session is not None:
                empty = session.layout.window()
            return RenderWindow([], empty, 0.0, empty.total_width, error)

        columns = session.layout.window()
        out: list[RenderRow] = []
        for item in session.rows.get_virtual_items():
            row = session.cache.row_at(item.index)
            if row is None:
                text = LOADING_MORE if session.cache.has_next_page else NO_MORE_ROWS
                out.append(RenderRow(item.index, item.start, item.size, None, loader_text=text))
                continue
            pinned = None
            if columns.pinned is not None:
                pinned = self._render_cell(session, row, columns.pinned.id, columns.pinned.width, 0.0)
            cells = [
                self._render_cell(session, row, slot.id, slot.width, citem.start)
                for citem, slot in zip(columns.items, columns.slots)
                if slot.kind == "data"
            ]
            out.append(RenderRow(item.index, item.start, item.size, row.id, pinned, cells))

        return RenderWindow(out, columns, session.rows.total_size, columns.total_width)

    @staticmethod
    def _render_cell(session: TableSession, row: RowRecord, column_id: str, width: int, start: float) -> RenderCell:
        cell = CellRef(row.id, column_id)
        value = session.buffers.display_value(cell, row.value(column_id))
        return RenderCell(row.id, column_id, value, width, start, session.navigator.state_of(cell))

    # ------------------------------------------------------------------
    # Control state
    # ------------------------------------------------------------------

    @property
    def can_add_table(self) -> bool:
        return self.base is not None and len(self.tables) < self.limits.max_tables

    @property
    def can_delete_table(self) -> bool:
        return len(self.tables) > 1

    @property
    def can_add_column(self) -> bool:
        session = self._session
        return session is not None and session.meta is not None and len(session.columns) < self.limits.max_columns

    @property
    def can_delete_column(self) -> bool:
        return self._session is not None and len(self._session.columns) > 1

    @property
    def can_add_row(self) -> bool:
        session = self._session
        if session is None or session.meta is None or self._adding_rows:
            return False
        return session.row_count < self.limits.max_rows

    @property
    def can_add_bulk_rows(self) -> bool:
        session = self._session
        if session is None or session.meta is None or self._adding_rows:
            return False
        return session.row_count + self.config.bulk_rows <= self.limits.max_rows

    @property
    def can_delete_row(self) -> bool:
        return self._session is not None and self._session.row_count > 1

    # ------------------------------------------------------------------
    # Structural actions
    # ------------------------------------------------------------------

    def _require_session(self) -> TableSession:
        if self._session is None:
            raise NotFoundError("table")
        return self._session

    async def add_table(self) -> TableRef:
        session = self._require_session()
        table = await session.mutations.add_table(self.base_id)
        await self.switch_table(table.id)
        return table

    async def delete_table(self, table_id: str) -> None:
        session = self._require_session()
        await session.mutations.delete_table(table_id)

    async def add_column(self, name: Optional[str] = None) -> ColumnRef:
        session = self._require_session()
        return await session.mutations.add_column(session.table_id, name)

    async def delete_column(self, column_id: str) -> None:
        session = self._require_session()
        await session.mutations.delete_column(column_id)

    async def _add_rows(self, count: int) -> int:
        session = self._require_session()
        self._adding_rows = True
        try:
            return await session.mutations.add_rows(session.table_id, count)
        finally:
            self._adding_rows = False

    async def add_row(self) -> int:
        return await self._add_rows(1)

    async def add_bulk_rows(self) -> int:
        return await self._add_rows(self.config.bulk_rows)

    async def delete_row(self, row_id: str) -> None:
        session = self._require_session()
        await session.mutations.delete_row(row_id)

    # ------------------------------------------------------------------
    # Cells
    # ------------------------------------------------------------------

    def select_cell(self, row_id: str, column_id: str) -> None:
        session = self._require_session()
        session.navigator.select(CellRef(row_id, column_id))
        self.bus.emit(SelectionChanged(row_id, column_id))

    def edit_cell(self, row_id: str, column_id: str, value: str) -> None:
        """Record typed text for a cell without sending anything."""
        session = self._require_session()
        session.buffers.set(CellRef(row_id, column_id), value)

    async def commit_cell(self, row_id: str, column_id: str) -> bool:
        """Commit the buffered text of a cell (blur or Enter)."""
        session = self._require_session()
        value = session.buffers.get(CellRef(row_id, column_id))
        if value is None:
            return False
        committed = await session.mutations.commit_cell(row_id, column_id, value)
        await self._fetch_if_needed(session)
        return committed

    async def submit_cell(self, row_id: str, column_id: str) -> bool:
        """Enter: commit the cell and drop input focus, keeping the selection."""
        session = self._require_session()
        session.navigator.select(CellRef(row_id, column_id))
        session.navigator.blur()
        return await self.commit_cell(row_id, column_id)

    def focus_cell(self, cell: CellRef, on_focus: Optional[Callable[[CellRef], None]] = None) -> None:
        """Scroll ``cell`` into view on both axes and focus its input on the next frame."""
        session = self._require_session()
        index = session.cache.index_of(cell.row_id)
        if index >= 0:
            session.rows.scroll_to_index(index)
        session.layout.scroll_to_column(cell.column_id)
        session.navigator.request_focus(cell, on_focus)
        self.bus.emit(SelectionChanged(cell.row_id, cell.column_id))
        self.bus.emit(LayoutChanged(session.table_id, "scroll"))

    def handle_key(self, key: str, shift: bool = False, on_focus: Optional[Callable[[CellRef], None]] = None) -> bool:
        """Move the selection for a navigation key; returns True when the key was handled."""
        session = self._require_session()
        target = session.navigator.move(key, shift)
        if target is None:
            return False
        self.focus_cell(target, on_focus)
        return True

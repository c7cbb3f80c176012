"""Optimistic cell edits and refetch-on-success structural mutations.

A cell edit is a small command: ``apply`` writes the new value into the row
cache and returns a snapshot of what was there, ``revert`` puts the snapshot
back. One snapshot is kept per in-flight cell; a second edit of the same cell
while the first is still in flight inherits the first snapshot, so a failure
always rolls back to the last value the server is known to hold.

Structural changes (tables, columns, rows) are not applied locally. They are
sent, and on success the affected base or table is refetched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Protocol

from gridbase.grid.edits import CellRef, EditBuffers
from gridbase.grid.row_cache import RowCache
from gridbase.store.capacity import split_bulk_request
from gridbase.store.limits import DEFAULT_LIMITS, CapacityLimits
from gridbase.store.models import BulkInsertResult, ColumnRef, TableRef
from gridbase.utils.logging import get_logger

logger = get_logger(__name__)

Refetch = Callable[[], Awaitable[None]]


class MutationClient(Protocol):
    def update_cell(self, row_id: str, column_id: str, value: str) -> Awaitable[None]: ...

    def add_table(self, base_id: str, name: Optional[str] = None) -> Awaitable[TableRef]: ...

    def delete_table(self, table_id: str) -> Awaitable[None]: ...

    def add_column(self, table_id: str, name: Optional[str] = None) -> Awaitable[ColumnRef]: ...

    def delete_column(self, column_id: str) -> Awaitable[None]: ...

    def add_rows(self, table_id: str, count: int) -> Awaitable[BulkInsertResult]: ...

    def delete_row(self, row_id: str) -> Awaitable[None]: ...


@dataclass(frozen=True)
class CellSnapshot:
    """Pre-edit state of one cell: whether a value was stored, and which."""

    present: bool
    value: str = ""


@dataclass(frozen=True)
class CellEdit:
    row_id: str
    column_id: str
    value: str

    @property
    def cell(self) -> CellRef:
        return CellRef(self.row_id, self.column_id)

    def apply(self, cache: RowCache) -> CellSnapshot:
        snapshot = CellSnapshot(
            present=cache.has_cell(self.row_id, self.column_id),
            value=cache.get_cell(self.row_id, self.column_id),
        )
        cache.hold_cell(self.row_id, self.column_id, self.value)
        return snapshot

    def revert(self, cache: RowCache, snapshot: CellSnapshot) -> None:
        cache.release_cell(self.row_id, self.column_id, committed=False)
        if snapshot.present:
            cache.set_cell(self.row_id, self.column_id, snapshot.value)
        else:
            cache.clear_cell(self.row_id, self.column_id)


class MutationLayer:
    """Send mutations for the active table and keep the local view consistent.

    Args:
        client: Async data-access client already bound to the current user.
        cache: Row cache of the active table.
        buffers: Edit buffers of the active table.
        refetch_table: Refetch table metadata and row pages.
        refetch_base: Refetch the base's table list.
        limits: Capacity limits; ``max_bulk_rows`` bounds one add-rows request.
    """

    def __init__(
        self,
        client: MutationClient,
        cache: RowCache,
        buffers: EditBuffers,
        *,
        refetch_table: Refetch,
        refetch_base: Refetch,
        limits: CapacityLimits | None = None,
    ) -> None:
        self._client = client
        self._cache = cache
        self._buffers = buffers
        self._refetch_table = refetch_table
        self._refetch_base = refetch_base
        self._limits = limits or DEFAULT_LIMITS
        self._in_flight: dict[CellRef, tuple[CellEdit, CellSnapshot]] = {}

    # ------------------------------------------------------------------
    # Cell edits
    # ------------------------------------------------------------------

    @property
    def pending_cells(self) -> list[CellRef]:
        return list(self._in_flight)

    async def commit_cell(self, row_id: str, column_id: str, value: str) -> bool:
        """Commit an edited value (blur or Enter).

        An unchanged value clears the buffer and sends nothing. Returns True
        when the server accepted a write.
        """
        cell = CellRef(row_id, column_id)
        if value == self._cache.get_cell(row_id, column_id):
            self._buffers.discard(cell)
            return False
        return await self.update_cell(row_id, column_id, value)

    async def update_cell(self, row_id: str, column_id: str, value: str) -> bool:
        edit = CellEdit(row_id, column_id, value)
        cell = edit.cell

        previous = self._in_flight.get(cell)
        snapshot = edit.apply(self._cache)
        if previous is not None:
            snapshot = previous[1]
        self._in_flight[cell] = (edit, snapshot)

        try:
            await self._client.update_cell(row_id, column_id, value)
        except Exception as exc:
            current = self._in_flight.get(cell)
            if current is not None and current[0] is edit:
                edit.revert(self._cache, snapshot)
                self._buffers.discard(cell)
                logger.warning("cell edit %s rolled back: %s", cell.key, exc)
            else:
                logger.warning("cell edit %s failed, superseded by a later edit: %s", cell.key, exc)
            return False
        else:
            current = self._in_flight.get(cell)
            if current is not None and current[0] is edit:
                self._cache.release_cell(row_id, column_id, committed=True)
            self._buffers.discard_if(cell, value)
            return True
        finally:
            current = self._in_flight.get(cell)
            if current is not None and current[0] is edit:
                del self._in_flight[cell]

    # ------------------------------------------------------------------
    # Structural mutations
    # ------------------------------------------------------------------

    async def add_table(self, base_id: str, name: Optional[str] = None) -> TableRef:
        table = await self._client.add_table(base_id, name)
        logger.info("added table %s", table.id)
        await self._refetch_base()
        return table

    async def delete_table(self, table_id: str) -> None:
        await self._client.delete_table(table_id)
        logger.info("deleted table %s", table_id)
        await self._refetch_base()

    async def add_column(self, table_id: str, name: Optional[str] = None) -> ColumnRef:
        column = await self._client.add_column(table_id, name)
        logger.info("added column %s (%r)", column.id, column.name)
        await self._refetch_table()
        return column

    async def delete_column(self, column_id: str) -> None:
        await self._client.delete_column(column_id)
        logger.info("deleted column %s", column_id)
        await self._refetch_table()

    async def add_rows(self, table_id: str, count: int) -> int:
        """Add ``count`` rows, split into requests the server accepts.

        Requests run one after another. If one fails, the table is still
        refetched so rows from earlier requests become visible, then the error
        propagates.
        """
        added = 0
        sizes = split_bulk_request(count, self._limits.max_bulk_rows)
        try:
            for size in sizes:
                result = await self._client.add_rows(table_id, size)
                added += result.inserted
        finally:
            logger.info("added %d/%d rows to table %s", added, count, table_id)
            await self._refetch_table()
        return added

    async def delete_row(self, row_id: str) -> None:
        await self._client.delete_row(row_id)
        logger.info("deleted row %s", row_id)
        await self._refetch_table()

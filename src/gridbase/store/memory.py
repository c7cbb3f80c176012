"""In-memory implementation of the data-access contract.

Rows of a table are kept in creation order, so paging is a slice. Every
lookup walks up to the owning base and compares owners; a mismatch is reported
exactly like a missing id.
"""

from __future__ import annotations

import uuid
from typing import Optional

from gridbase.store.capacity import BulkInserter, CapacityGuard
from gridbase.store.errors import MinimumCardinalityError, NotFoundError, ValidationError
from gridbase.store.limits import DEFAULT_LIMITS, CapacityLimits
from gridbase.store.models import (
    Base,
    BaseDetail,
    BaseSummary,
    BulkInsertResult,
    Column,
    ColumnRef,
    CreatedBase,
    Row,
    RowPage,
    RowRecord,
    Table,
    TableMeta,
    TableRef,
    utcnow,
)
from gridbase.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_NAME = "Untitled Base"
DEFAULT_COLUMNS = ("Name", "Notes")
INITIAL_ROW_COUNT = 3


class InMemoryStore:
    """Owner-scoped store of bases, tables, columns and rows."""

    def __init__(self, limits: CapacityLimits | None = None) -> None:
        self.limits = limits or DEFAULT_LIMITS
        self.guard = CapacityGuard(self.limits)

        self._bases: dict[str, Base] = {}
        self._tables: dict[str, Table] = {}
        self._columns: dict[str, Column] = {}
        self._rows: dict[str, Row] = {}

        # ordered children, creation order
        self._tables_by_base: dict[str, list[str]] = {}
        self._columns_by_table: dict[str, list[str]] = {}
        self._rows_by_table: dict[str, list[Row]] = {}

    # ------------------------------------------------------------------
    # Validation and ownership
    # ------------------------------------------------------------------

    @staticmethod
    def _check_id(value: str, kind: str) -> str:
        try:
            uuid.UUID(str(value))
        except (TypeError, ValueError, AttributeError):
            raise ValidationError(f"malformed {kind} id: {value!r}") from None
        return str(value)

    def _check_name(self, name: str, kind: str) -> str:
        if not isinstance(name, str):
            raise ValidationError(f"{kind} name must be a string")
        cleaned = name.strip()
        if not cleaned or len(cleaned) > self.limits.max_name_length:
            raise ValidationError(
                f"{kind} name must be 1..{self.limits.max_name_length} characters"
            )
        return cleaned

    def _owned_base(self, base_id: str, owner_id: str) -> Base:
        base = self._bases.get(self._check_id(base_id, "base"))
        if base is None or base.owner_id != owner_id:
            raise NotFoundError("base")
        return base

    def _owned_table(self, table_id: str, owner_id: str) -> Table:
        table = self._tables.get(self._check_id(table_id, "table"))
        if table is None:
            raise NotFoundError("table")
        base = self._bases.get(table.base_id)
        if base is None or base.owner_id != owner_id:
            raise NotFoundError("table")
        return table

    def _owned_column(self, column_id: str, owner_id: str) -> Column:
        column = self._columns.get(self._check_id(column_id, "column"))
        if column is None:
            raise NotFoundError("column")
        try:
            self._owned_table(column.table_id, owner_id)
        except NotFoundError:
            raise NotFoundError("column") from None
        return column

    def _owned_row(self, row_id: str, owner_id: str) -> Row:
        row = self._rows.get(self._check_id(row_id, "row"))
        if row is None:
            raise NotFoundError("row")
        try:
            self._owned_table(row.table_id, owner_id)
        except NotFoundError:
            raise NotFoundError("row") from None
        return row

    # ------------------------------------------------------------------
    # Internal inserts (no checks)
    # ------------------------------------------------------------------

    def _insert_table(self, base_id: str, name: str) -> Table:
        table = Table(base_id=base_id, name=name)
        self._tables[table.id] = table
        self._tables_by_base.setdefault(base_id, []).append(table.id)
        self._columns_by_table[table.id] = []
        self._rows_by_table[table.id] = []
        return table

    def _insert_column(self, table_id: str, name: str) -> Column:
        column = Column(table_id=table_id, name=name)
        self._columns[column.id] = column
        self._columns_by_table[table_id].append(column.id)
        return column

    def _insert_rows(self, table_id: str, count: int) -> None:
        bucket = self._rows_by_table[table_id]
        for _ in range(count):
            row = Row(table_id=table_id)
            self._rows[row.id] = row
            bucket.append(row)

    def _drop_table(self, table_id: str) -> None:
        table = self._tables.pop(table_id)
        self._tables_by_base[table.base_id].remove(table_id)
        for column_id in self._columns_by_table.pop(table_id, []):
            self._columns.pop(column_id, None)
        for row in self._rows_by_table.pop(table_id, []):
            self._rows.pop(row.id, None)

    # ------------------------------------------------------------------
    # Bases
    # ------------------------------------------------------------------

    def list_bases(self, owner_id: str) -> list[BaseSummary]:
        owned = [b for b in self._bases.values() if b.owner_id == owner_id]
        owned.sort(key=lambda b: (b.updated_at, b.seq), reverse=True)
        return [BaseSummary(b.id, b.name, b.updated_at) for b in owned]

    def get_base(self, base_id: str, owner_id: str) -> BaseDetail:
        base = self._owned_base(base_id, owner_id)
        tables = tuple(
            TableRef(t.id, t.name) for t in (self._tables[tid] for tid in self._tables_by_base.get(base.id, []))
        )
        return BaseDetail(base.id, base.name, tables)

    def create_base(self, owner_id: str, name: Optional[str] = None) -> CreatedBase:
        """Create a base with one table, the default columns and three empty rows."""
        base_name = self._check_name(name, "base") if name is not None else DEFAULT_BASE_NAME
        base = Base(name=base_name, owner_id=owner_id)
        self._bases[base.id] = base
        self._tables_by_base[base.id] = []

        table = self._insert_table(base.id, "Table 1")
        for column_name in DEFAULT_COLUMNS:
            self._insert_column(table.id, column_name)
        self._insert_rows(table.id, INITIAL_ROW_COUNT)

        logger.info("created base %s (%r) for owner %s", base.id, base.name, owner_id)
        return CreatedBase(BaseSummary(base.id, base.name, base.updated_at), TableRef(table.id, table.name))

    def rename_base(self, base_id: str, name: str, owner_id: str) -> BaseSummary:
        base = self._owned_base(base_id, owner_id)
        base.name = self._check_name(name, "base")
        base.updated_at = utcnow()
        return BaseSummary(base.id, base.name, base.updated_at)

    def touch_base(self, base_id: str, owner_id: str) -> BaseSummary:
        base = self._owned_base(base_id, owner_id)
        base.updated_at = utcnow()
        return BaseSummary(base.id, base.name, base.updated_at)

    def delete_base(self, base_id: str, owner_id: str) -> None:
        base = self._owned_base(base_id, owner_id)
        for table_id in list(self._tables_by_base.get(base.id, [])):
            self._drop_table(table_id)
        self._tables_by_base.pop(base.id, None)
        del self._bases[base.id]
        logger.info("deleted base %s", base.id)

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def get_table_meta(self, table_id: str, owner_id: str) -> TableMeta:
        table = self._owned_table(table_id, owner_id)
        columns = tuple(ColumnRef(c.id, c.name) for c in self._ordered_columns(table.id))
        return TableMeta(TableRef(table.id, table.name), columns, len(self._rows_by_table[table.id]))

    def get_rows(
        self, table_id: str, owner_id: str, limit: int = 50, cursor: Optional[int] = None
    ) -> RowPage:
        table = self._owned_table(table_id, owner_id)
        if not 1 <= limit <= self.limits.max_page_limit:
            raise ValidationError(f"limit must be within 1..{self.limits.max_page_limit}, got {limit}")
        offset = 0 if cursor is None else cursor
        if offset < 0:
            raise ValidationError(f"cursor must be non-negative, got {cursor}")

        window = self._rows_by_table[table.id][offset : offset + limit]
        rows = [RowRecord(r.id, dict(r.data)) for r in window]
        next_cursor = offset + len(rows) if len(rows) == limit else None
        return RowPage(rows=rows, next_cursor=next_cursor)

    def add_table(self, base_id: str, owner_id: str, name: Optional[str] = None) -> TableRef:
        base = self._owned_base(base_id, owner_id)
        current = len(self._tables_by_base.get(base.id, []))
        self.guard.check_tables(current)

        table_name = self._check_name(name, "table") if name is not None else f"Table {current + 1}"
        table = self._insert_table(base.id, table_name)
        for column_name in DEFAULT_COLUMNS:
            self._insert_column(table.id, column_name)
        logger.info("added table %s to base %s", table.id, base.id)
        return TableRef(table.id, table.name)

    def delete_table(self, table_id: str, owner_id: str) -> None:
        table = self._owned_table(table_id, owner_id)
        if len(self._tables_by_base.get(table.base_id, [])) <= 1:
            raise MinimumCardinalityError("table")
        self._drop_table(table.id)
        logger.info("deleted table %s", table.id)

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    def _ordered_columns(self, table_id: str) -> list[Column]:
        return [self._columns[cid] for cid in self._columns_by_table[table_id]]

    def add_column(self, table_id: str, owner_id: str, name: Optional[str] = None) -> ColumnRef:
        table = self._owned_table(table_id, owner_id)
        current = len(self._columns_by_table[table.id])
        self.guard.check_columns(current)

        column_name = self._check_name(name, "column") if name is not None else f"Column {current + 1}"
        column = self._insert_column(table.id, column_name)
        logger.info("added column %s (%r) to table %s", column.id, column.name, table.id)
        return ColumnRef(column.id, column.name)

    def delete_column(self, column_id: str, owner_id: str) -> None:
        column = self._owned_column(column_id, owner_id)
        if len(self._columns_by_table[column.table_id]) <= 1:
            raise MinimumCardinalityError("column")
        self._columns_by_table[column.table_id].remove(column.id)
        del self._columns[column.id]
        logger.info("deleted column %s", column.id)

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    def add_rows(self, table_id: str, count: int, owner_id: str) -> BulkInsertResult:
        """Append ``count`` empty rows in batches of ``limits.insert_batch_size``."""
        self.guard.check_bulk_count(count)
        table = self._owned_table(table_id, owner_id)
        self.guard.check_rows(len(self._rows_by_table[table.id]), count)

        inserter = BulkInserter(lambda size: self._insert_rows(table.id, size), self.limits.insert_batch_size)
        return inserter.run(count)

    def delete_row(self, row_id: str, owner_id: str) -> None:
        row = self._owned_row(row_id, owner_id)
        bucket = self._rows_by_table[row.table_id]
        if len(bucket) <= 1:
            raise MinimumCardinalityError("row")
        bucket.remove(row)
        del self._rows[row.id]

    def update_cell(self, row_id: str, column_id: str, value: str, owner_id: str) -> None:
        row = self._owned_row(row_id, owner_id)
        column = self._columns.get(self._check_id(column_id, "column"))
        if column is None or column.table_id != row.table_id:
            raise NotFoundError("column")
        if not isinstance(value, str):
            raise ValidationError("cell value must be a string")
        row.data[column.id] = value
        row.updated_at = utcnow()

"""The data-access contract consumed by the grid engine.

Every call takes the requesting ``owner_id``; implementations resolve the
target entity's owning base and raise ``NotFoundError`` when the caller does
not own it.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from gridbase.store.models import (
    BaseDetail,
    BaseSummary,
    BulkInsertResult,
    ColumnRef,
    CreatedBase,
    RowPage,
    TableMeta,
    TableRef,
)


@runtime_checkable
class DataAccess(Protocol):
    # bases
    def list_bases(self, owner_id: str) -> list[BaseSummary]: ...

    def get_base(self, base_id: str, owner_id: str) -> BaseDetail: ...

    def create_base(self, owner_id: str, name: Optional[str] = None) -> CreatedBase: ...

    def rename_base(self, base_id: str, name: str, owner_id: str) -> BaseSummary: ...

    def touch_base(self, base_id: str, owner_id: str) -> BaseSummary: ...

    def delete_base(self, base_id: str, owner_id: str) -> None: ...

    # tables
    def get_table_meta(self, table_id: str, owner_id: str) -> TableMeta: ...

    def get_rows(
        self, table_id: str, owner_id: str, limit: int = 50, cursor: Optional[int] = None
    ) -> RowPage: ...

    def add_table(self, base_id: str, owner_id: str, name: Optional[str] = None) -> TableRef: ...

    def delete_table(self, table_id: str, owner_id: str) -> None: ...

    # columns
    def add_column(self, table_id: str, owner_id: str, name: Optional[str] = None) -> ColumnRef: ...

    def delete_column(self, column_id: str, owner_id: str) -> None: ...

    # rows
    def add_rows(self, table_id: str, count: int, owner_id: str) -> BulkInsertResult: ...

    def delete_row(self, row_id: str, owner_id: str) -> None: ...

    def update_cell(self, row_id: str, column_id: str, value: str, owner_id: str) -> None: ...

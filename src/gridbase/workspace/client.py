"""Async client bound to the signed-in user.

``StoreClient`` wraps any synchronous :class:`~gridbase.store.DataAccess`
implementation, injects the current owner id into every call and yields to
the event loop before each one, the way a network round-trip would. The
owner id is never taken from the caller.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional, TypeVar

from gridbase.store.errors import NotFoundError
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
from gridbase.store.protocol import DataAccess
from gridbase.utils.logging import get_logger
from gridbase.workspace.session import SessionProvider

logger = get_logger(__name__)

T = TypeVar("T")


class StoreClient:
    """Owner-scoped async view of a data-access implementation.

    Args:
        store: The data-access implementation.
        sessions: Provides the signed-in session. Without one every call
            raises :class:`NotFoundError`.
        latency: Seconds to wait before each call. ``0`` still yields once.
    """

    def __init__(self, store: DataAccess, sessions: SessionProvider, *, latency: float = 0.0) -> None:
        self._store = store
        self._sessions = sessions
        self.latency = latency

    def _owner_id(self) -> str:
        session = self._sessions.current()
        if session is None:
            raise NotFoundError("session")
        return session.user_id

    async def _call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        await asyncio.sleep(self.latency)
        return fn(*args, owner_id=self._owner_id(), **kwargs)

    # bases
    async def list_bases(self) -> list[BaseSummary]:
        return await self._call(self._store.list_bases)

    async def get_base(self, base_id: str) -> BaseDetail:
        return await self._call(self._store.get_base, base_id)

    async def create_base(self, name: Optional[str] = None) -> CreatedBase:
        return await self._call(self._store.create_base, name=name)

    async def rename_base(self, base_id: str, name: str) -> BaseSummary:
        return await self._call(self._store.rename_base, base_id, name)

    async def touch_base(self, base_id: str) -> BaseSummary:
        return await self._call(self._store.touch_base, base_id)

    async def delete_base(self, base_id: str) -> None:
        await self._call(self._store.delete_base, base_id)

    # tables
    async def get_table_meta(self, table_id: str) -> TableMeta:
        return await self._call(self._store.get_table_meta, table_id)

    async def get_rows(self, table_id: str, limit: int = 50, cursor: Optional[int] = None) -> RowPage:
        return await self._call(self._store.get_rows, table_id, limit=limit, cursor=cursor)

    async def add_table(self, base_id: str, name: Optional[str] = None) -> TableRef:
        return await self._call(self._store.add_table, base_id, name=name)

    async def delete_table(self, table_id: str) -> None:
        await self._call(self._store.delete_table, table_id)

    # columns
    async def add_column(self, table_id: str, name: Optional[str] = None) -> ColumnRef:
        return await self._call(self._store.add_column, table_id, name=name)

    async def delete_column(self, column_id: str) -> None:
        await self._call(self._store.delete_column, column_id)

    # rows and cells
    async def add_rows(self, table_id: str, count: int) -> BulkInsertResult:
        return await self._call(self._store.add_rows, table_id, count)

    async def delete_row(self, row_id: str) -> None:
        await self._call(self._store.delete_row, row_id)

    async def update_cell(self, row_id: str, column_id: str, value: str) -> None:
        await self._call(self._store.update_cell, row_id, column_id, value)

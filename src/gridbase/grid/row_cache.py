"""Cursor-paginated row cache for one table.

Pages are requested strictly in cursor order with at most one request in
flight. The accumulated row list is deduplicated by row id, keeping the first
occurrence, so re-fetches and freshly inserted rows never show up twice.

Every request is tagged with the cache's generation. ``cancel()`` and
``invalidate()`` bump the generation; a response carrying an older one is
dropped when it arrives.

Optimistic values are held with ``hold_cell`` until the write settles. Held
values are laid over every row that enters the cache, so a refetch that read
the server before the write landed cannot bring the old value back.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional, Protocol

from gridbase.store.errors import NotFoundError, TransientNetworkError
from gridbase.store.models import RowPage, RowRecord
from gridbase.utils.logging import get_logger

logger = get_logger(__name__)

TABLE_NOT_FOUND = "Table not found."
TABLE_UNREACHABLE = "Could not load this table. Check your connection and reload."

ChangeHandler = Callable[[str], None]


class RowSource(Protocol):
    def get_rows(self, table_id: str, limit: int = 50, cursor: Optional[int] = None) -> Awaitable[RowPage]: ...


class RowCache:
    """Accumulated, deduplicated rows of one table."""

    def __init__(
        self,
        source: RowSource,
        table_id: str,
        *,
        page_size: int = 50,
        on_change: Optional[ChangeHandler] = None,
    ) -> None:
        self._source = source
        self.table_id = table_id
        self.page_size = page_size
        self._on_change = on_change

        self._pages: list[RowPage] = []
        self._rows: list[RowRecord] = []
        self._index: dict[str, RowRecord] = {}

        self._held: dict[tuple[str, str], str] = {}
        # committed writes whose hold lasts until the running refetch is swapped in
        self._settled: set[tuple[str, str]] = set()

        self._generation = 0
        self._fetching = False
        self._refetching = False
        self._error: Optional[str] = None

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def rows(self) -> list[RowRecord]:
        return list(self._rows)

    @property
    def row_ids(self) -> list[str]:
        return [r.id for r in self._rows]

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def pages(self) -> list[RowPage]:
        return list(self._pages)

    @property
    def loaded(self) -> bool:
        return bool(self._pages)

    @property
    def has_next_page(self) -> bool:
        return bool(self._pages) and self._pages[-1].next_cursor is not None

    @property
    def is_fetching(self) -> bool:
        return self._fetching

    @property
    def is_refetching(self) -> bool:
        return self._refetching

    @property
    def held_cells(self) -> list[tuple[str, str]]:
        return list(self._held)

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def generation(self) -> int:
        return self._generation

    def get_row(self, row_id: str) -> Optional[RowRecord]:
        return self._index.get(row_id)

    def row_at(self, index: int) -> Optional[RowRecord]:
        if 0 <= index < len(self._rows):
            return self._rows[index]
        return None

    def index_of(self, row_id: str) -> int:
        for i, row in enumerate(self._rows):
            if row.id == row_id:
                return i
        return -1

    # ------------------------------------------------------------------
    # Narrow writes (optimistic layer only)
    # ------------------------------------------------------------------

    def has_cell(self, row_id: str, column_id: str) -> bool:
        row = self._index.get(row_id)
        return row is not None and column_id in row.data

    def get_cell(self, row_id: str, column_id: str) -> str:
        row = self._index.get(row_id)
        return row.value(column_id) if row is not None else ""

    def set_cell(self, row_id: str, column_id: str, value: str) -> bool:
        row = self._index.get(row_id)
        if row is None:
            return False
        row.data[column_id] = value
        self._notify("cell")
        return True

    def clear_cell(self, row_id: str, column_id: str) -> bool:
        row = self._index.get(row_id)
        if row is None:
            return False
        row.data.pop(column_id, None)
        self._notify("cell")
        return True

    def hold_cell(self, row_id: str, column_id: str, value: str) -> bool:
        """Write ``value`` and keep it over any page that arrives until released."""
        key = (row_id, column_id)
        self._held[key] = value
        self._settled.discard(key)
        return self.set_cell(row_id, column_id, value)

    def release_cell(self, row_id: str, column_id: str, *, committed: bool) -> None:
        """Stop holding a cell.

        A committed value stays held until a refetch already in flight has
        been swapped in; a rejected one is dropped at once.
        """
        key = (row_id, column_id)
        if key not in self._held:
            return
        if committed and self._refetching:
            self._settled.add(key)
            return
        del self._held[key]
        self._settled.discard(key)

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def _notify(self, reason: str) -> None:
        if self._on_change is not None:
            self._on_change(reason)

    def _append(self, page: RowPage) -> None:
        self._pages.append(page)
        for row in page.rows:
            if row.id in self._index:
                continue
            self._index[row.id] = row
            self._rows.append(row)
            for (row_id, column_id), value in self._held.items():
                if row_id == row.id:
                    row.data[column_id] = value

    def _fail(self, exc: Exception) -> None:
        self._error = TABLE_NOT_FOUND if isinstance(exc, NotFoundError) else TABLE_UNREACHABLE
        logger.warning("row fetch failed for table %s: %s", self.table_id, exc)
        self._notify("error")

    async def fetch_next_page(self) -> bool:
        """Fetch the page after the last loaded one (the first page when empty).

        Returns True when a page was appended. Does nothing while another page
        request is in flight, after the last page, or once the cache failed.
        """
        if self._fetching or self._error is not None:
            return False
        if self._pages and not self.has_next_page:
            return False

        cursor = self._pages[-1].next_cursor if self._pages else None
        generation = self._generation
        self._fetching = True
        try:
            page = await self._source.get_rows(self.table_id, limit=self.page_size, cursor=cursor)
        except (NotFoundError, TransientNetworkError) as exc:
            if generation != self._generation:
                return False
            self._fetching = False
            self._fail(exc)
            return False
        except BaseException:
            if generation == self._generation:
                self._fetching = False
            raise

        if generation != self._generation:
            logger.debug("dropping stale page (cursor=%s) for table %s", cursor, self.table_id)
            return False

        self._fetching = False
        self._append(page)
        logger.debug(
            "table %s: page cursor=%s -> %d rows (total %d, next=%s)",
            self.table_id,
            cursor,
            len(page.rows),
            len(self._rows),
            page.next_cursor,
        )
        self._notify("page")
        return True

    def cancel(self) -> None:
        """Forget any in-flight page request; its response will be ignored."""
        if self._fetching:
            logger.debug("cancelling in-flight page fetch for table %s", self.table_id)
        self._generation += 1
        self._fetching = False

    async def invalidate(self) -> None:
        """Refetch as many pages as are currently loaded and swap them in at once."""
        pages_to_load = max(1, len(self._pages))
        self.cancel()
        generation = self._generation
        self._fetching = True
        self._refetching = True

        fresh: list[RowPage] = []
        cursor: Optional[int] = None
        try:
            for _ in range(pages_to_load):
                page = await self._source.get_rows(self.table_id, limit=self.page_size, cursor=cursor)
                if generation != self._generation:
                    logger.debug("dropping stale refetch for table %s", self.table_id)
                    return
                fresh.append(page)
                cursor = page.next_cursor
                if cursor is None:
                    break
        except (NotFoundError, TransientNetworkError) as exc:
            if generation == self._generation:
                self._end_refetch()
                self._fail(exc)
            return
        except BaseException:
            if generation == self._generation:
                self._end_refetch()
            raise

        self._pages = []
        self._rows = []
        self._index = {}
        for page in fresh:
            self._append(page)
        self._end_refetch()
        self._notify("invalidate")

    def _end_refetch(self) -> None:
        self._fetching = False
        self._refetching = False
        for key in self._settled:
            self._held.pop(key, None)
        self._settled.clear()

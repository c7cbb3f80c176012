"""Capacity checks and chunked bulk row insertion.

The guard is handed a freshly recomputed count on every call; it never keeps
counts of its own.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

from gridbase.store.errors import BulkInsertAborted, CapacityExceededError, ValidationError
from gridbase.store.limits import DEFAULT_LIMITS, CapacityLimits
from gridbase.store.models import BulkInsertResult
from gridbase.utils.logging import get_logger

logger = get_logger(__name__)

InsertBatch = Callable[[int], None]


class CapacityGuard:
    """Reject structural additions that would push a count past its ceiling."""

    def __init__(self, limits: CapacityLimits | None = None) -> None:
        self.limits = limits or DEFAULT_LIMITS

    def check_tables(self, current: int) -> None:
        if current + 1 > self.limits.max_tables:
            raise CapacityExceededError("Table", self.limits.max_tables, current + 1)

    def check_columns(self, current: int) -> None:
        if current + 1 > self.limits.max_columns:
            raise CapacityExceededError("Column", self.limits.max_columns, current + 1)

    def check_bulk_count(self, count: int) -> None:
        if isinstance(count, bool) or not isinstance(count, int):
            raise ValidationError(f"row count must be an integer, got {count!r}")
        if count < 1:
            raise ValidationError(f"row count must be positive, got {count}")
        if count > self.limits.max_bulk_rows:
            raise ValidationError(
                f"a single request may add at most {self.limits.max_bulk_rows:,} rows, got {count:,}"
            )

    def check_rows(self, current: int, adding: int) -> None:
        if current + adding > self.limits.max_rows:
            raise CapacityExceededError("Row", self.limits.max_rows, current + adding)

    def can_add_rows(self, current: int, adding: int = 1) -> bool:
        """Non-raising variant used to pre-disable add-row controls."""
        return current + adding <= self.limits.max_rows


def iter_batches(count: int, batch_size: int) -> Iterator[int]:
    """Yield batch sizes: ``batch_size`` repeated, then the remainder."""
    if batch_size < 1:
        raise ValidationError(f"batch size must be positive, got {batch_size}")
    remaining = count
    while remaining > 0:
        size = min(batch_size, remaining)
        yield size
        remaining -= size


def split_bulk_request(count: int, max_per_request: int) -> list[int]:
    """Split a user-level bulk request into server-acceptable request sizes.

    >>> split_bulk_request(150_000, 100_000)
    [100000, 50000]
    """
    if count < 1:
        raise ValidationError(f"row count must be positive, got {count}")
    return list(iter_batches(count, max_per_request))


class BulkInserter:
    """Insert ``count`` rows as sequential fixed-size batches.

    A failing batch stops the run. Batches already written stay written and
    ``BulkInsertAborted.committed`` reports how many rows that was.
    """

    def __init__(self, insert_batch: InsertBatch, batch_size: int = DEFAULT_LIMITS.insert_batch_size) -> None:
        self._insert_batch = insert_batch
        self._batch_size = batch_size

    def run(self, count: int) -> BulkInsertResult:
        inserted = 0
        batches = 0
        for batch_index, size in enumerate(iter_batches(count, self._batch_size)):
            try:
                self._insert_batch(size)
            except Exception as exc:
                logger.warning(
                    "bulk insert aborted at batch %d: %d/%d rows committed (%s)",
                    batch_index,
                    inserted,
                    count,
                    exc,
                )
                raise BulkInsertAborted(inserted, count, batch_index, exc) from exc
            inserted += size
            batches += 1
            logger.debug("batch %d: inserted %d rows (%d/%d)", batch_index, size, inserted, count)

        logger.info("bulk insert done: %d rows in %d batches", inserted, batches)
        return BulkInsertResult(requested=count, inserted=inserted, batches=batches)

"""Error taxonomy shared by the store, the transport adapters and the grid engine.

``NotFoundError`` deliberately covers both "missing" and "owned by someone
else" so callers cannot probe for other users' data.
"""

from __future__ import annotations

from typing import Optional


class GridbaseError(Exception):
    """Base class for all gridbase errors."""


class NotFoundError(GridbaseError):
    """Entity is missing or the caller does not own it."""

    def __init__(self, kind: str = "entity") -> None:
        super().__init__(f"{kind} not found")
        self.kind = kind


class CapacityExceededError(GridbaseError):
    """A configured ceiling (tables/columns/rows) would be exceeded."""

    def __init__(self, limit_name: str, limit: int, requested: int) -> None:
        super().__init__(f"{limit_name} limit of {limit:,} reached (requested total {requested:,}).")
        self.limit_name = limit_name
        self.limit = limit
        self.requested = requested


class ValidationError(GridbaseError):
    """Malformed identifier or out-of-range input."""


class MinimumCardinalityError(ValidationError):
    """Deleting the entity would leave its parent without any children of that kind."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"At least one {kind} is required.")
        self.kind = kind


class TransientNetworkError(GridbaseError):
    """Connectivity or timeout failure. Only transports raise this."""


class BulkInsertAborted(GridbaseError):
    """A batch failed during a bulk insert.

    Batches committed before the failure stay committed; ``committed`` is the
    number of rows that were inserted.
    """

    def __init__(self, committed: int, requested: int, failed_batch: int, cause: Optional[BaseException] = None) -> None:
        super().__init__(
            f"bulk insert aborted at batch {failed_batch}: {committed:,}/{requested:,} rows committed"
        )
        self.committed = committed
        self.requested = requested
        self.failed_batch = failed_batch
        self.cause = cause

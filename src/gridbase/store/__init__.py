"""Owner-scoped metadata store: bases, tables, columns, rows, capacity limits."""

from gridbase.store.capacity import BulkInserter, CapacityGuard, iter_batches, split_bulk_request
from gridbase.store.errors import (
    BulkInsertAborted,
    CapacityExceededError,
    GridbaseError,
    MinimumCardinalityError,
    NotFoundError,
    TransientNetworkError,
    ValidationError,
)
from gridbase.store.limits import DEFAULT_LIMITS, CapacityLimits
from gridbase.store.memory import InMemoryStore
from gridbase.store.protocol import DataAccess

__all__ = [
    "BulkInsertAborted",
    "BulkInserter",
    "CapacityExceededError",
    "CapacityGuard",
    "CapacityLimits",
    "DEFAULT_LIMITS",
    "DataAccess",
    "GridbaseError",
    "InMemoryStore",
    "MinimumCardinalityError",
    "NotFoundError",
    "TransientNetworkError",
    "ValidationError",
    "iter_batches",
    "split_bulk_request",
]

"""Records owned by the store and the view records it hands across the data-access contract.

Store records (``Base``, ``Table``, ``Column``, ``Row``) are mutable and never
leave the store. View records (``BaseSummary``, ``TableMeta``, ``RowPage`` ...)
are frozen snapshots handed to clients; row payloads are copied on the way out.
"""

from __future__ import annotations

import itertools
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

# Creation sequence: a total order for "ascending created_at" even when two
# records share a timestamp.
_sequence = itertools.count(1)


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def next_sequence() -> int:
    return next(_sequence)


@dataclass
class Base:
    name: str
    owner_id: str
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    seq: int = field(default_factory=next_sequence)


@dataclass
class Table:
    base_id: str
    name: str
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    seq: int = field(default_factory=next_sequence)


@dataclass
class Column:
    table_id: str
    name: str
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    seq: int = field(default_factory=next_sequence)


@dataclass
class Row:
    table_id: str
    data: dict[str, str] = field(default_factory=dict)
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    seq: int = field(default_factory=next_sequence)

    def value(self, column_id: str) -> str:
        """Stored value for ``column_id``; absent values read as empty string."""
        return self.data.get(column_id, "")


# ----------------------------------------------------------------------
# View records
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class BaseSummary:
    id: str
    name: str
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "updatedAt": self.updated_at.isoformat()}


@dataclass(frozen=True)
class TableRef:
    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class ColumnRef:
    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class BaseDetail:
    id: str
    name: str
    tables: tuple[TableRef, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "tables": [t.to_dict() for t in self.tables]}


@dataclass(frozen=True)
class TableMeta:
    table: TableRef
    columns: tuple[ColumnRef, ...]
    row_count: int

    @property
    def column_ids(self) -> list[str]:
        return [c.id for c in self.columns]

    def to_dict(self) -> dict[str, Any]:
        return {
            "table": self.table.to_dict(),
            "columns": [c.to_dict() for c in self.columns],
            "rowCount": self.row_count,
        }


@dataclass
class RowRecord:
    """One row as seen by a client. ``data`` is the client's own copy."""

    id: str
    data: dict[str, str] = field(default_factory=dict)

    def value(self, column_id: str) -> str:
        return self.data.get(column_id, "")

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "data": dict(self.data)}


@dataclass
class RowPage:
    rows: list[RowRecord]
    next_cursor: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {"rows": [r.to_dict() for r in self.rows], "nextCursor": self.next_cursor}


@dataclass(frozen=True)
class CreatedBase:
    base: BaseSummary
    table: TableRef


@dataclass(frozen=True)
class BulkInsertResult:
    requested: int
    inserted: int
    batches: int

"""Tests for view records handed across the data-access contract."""

from __future__ import annotations

from datetime import datetime, timezone

from gridbase.store.models import (
    BaseSummary,
    ColumnRef,
    RowPage,
    RowRecord,
    TableMeta,
    TableRef,
    new_id,
)


def test_new_id_is_unique_uuid_string() -> None:
    a, b = new_id(), new_id()
    assert a != b
    assert len(a) == 36


def test_row_record_missing_value_reads_empty() -> None:
    row = RowRecord("r1", {"c1": "x"})
    assert row.value("c1") == "x"
    assert row.value("c2") == ""


def test_to_dict_uses_camel_case_keys() -> None:
    stamp = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert BaseSummary("b1", "Roadmap", stamp).to_dict() == {
        "id": "b1",
        "name": "Roadmap",
        "updatedAt": stamp.isoformat(),
    }
    meta = TableMeta(TableRef("t1", "Table 1"), (ColumnRef("c1", "Name"),), 3)
    assert meta.to_dict()["rowCount"] == 3
    assert meta.column_ids == ["c1"]
    page = RowPage([RowRecord("r1")], next_cursor=None)
    assert page.to_dict() == {"rows": [{"id": "r1", "data": {}}], "nextCursor": None}

"""Hard capacity limits enforced by the store before every structural mutation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CapacityLimits:
    """Per-entity ceilings.

    Attributes:
        max_tables: Tables per base.
        max_columns: Columns per table.
        max_rows: Rows per table.
        max_bulk_rows: Rows a single add-rows request may insert.
        insert_batch_size: Rows written per insert call inside one request.
        max_page_limit: Largest page size ``get_rows`` accepts.
        max_name_length: Longest accepted base/table/column name.
    """

    max_tables: int = 1000
    max_columns: int = 500
    max_rows: int = 2_000_000
    max_bulk_rows: int = 100_000
    insert_batch_size: int = 1000
    max_page_limit: int = 500
    max_name_length: int = 120


DEFAULT_LIMITS = CapacityLimits()

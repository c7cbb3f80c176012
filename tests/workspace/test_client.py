from __future__ import annotations

import pytest

from gridbase.store import InMemoryStore, NotFoundError
from gridbase.workspace.client import StoreClient
from gridbase.workspace.session import Session, StaticSessionProvider


@pytest.mark.asyncio
async def test_owner_comes_from_the_session(store: InMemoryStore, owner: str, other_owner: str) -> None:
    sessions = StaticSessionProvider(Session(owner))
    client = StoreClient(store, sessions)

    created = await client.create_base("Roadmap")

    assert [b.name for b in store.list_bases(owner)] == ["Roadmap"]
    assert store.list_bases(other_owner) == []

    sessions.sign_in(Session(other_owner))
    with pytest.raises(NotFoundError):
        await client.get_base(created.base.id)


@pytest.mark.asyncio
async def test_signed_out_calls_are_not_found(store: InMemoryStore) -> None:
    client = StoreClient(store, StaticSessionProvider())

    with pytest.raises(NotFoundError) as excinfo:
        await client.list_bases()
    assert excinfo.value.kind == "session"


@pytest.mark.asyncio
async def test_table_round_trip(store: InMemoryStore, owner: str) -> None:
    client = StoreClient(store, StaticSessionProvider(Session(owner)))
    created = await client.create_base()
    table_id = created.table.id

    column = await client.add_column(table_id, "Status")
    result = await client.add_rows(table_id, 7)
    page = await client.get_rows(table_id, limit=5)
    await client.update_cell(page.rows[0].id, column.id, "done")

    meta = await client.get_table_meta(table_id)
    assert result.inserted == 7
    assert meta.row_count == 10
    assert [c.name for c in meta.columns] == ["Name", "Notes", "Status"]
    assert page.next_cursor == 5
    first = (await client.get_rows(table_id, limit=1)).rows[0]
    assert first.value(column.id) == "done"

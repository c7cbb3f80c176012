"""Tests for the base list: create, open, optimistic rename and delete."""

from __future__ import annotations

import pytest

from gridbase.store import InMemoryStore
from gridbase.workspace.bases import BasesWorkspace
from gridbase.workspace.client import StoreClient
from gridbase.workspace.session import Session, StaticSessionProvider


class FailingRenameClient(StoreClient):
    async def rename_base(self, base_id: str, name: str):
        raise RuntimeError("server unavailable")


@pytest.fixture
def client(store: InMemoryStore, owner: str) -> StoreClient:
    return StoreClient(store, StaticSessionProvider(Session(owner)))


@pytest.mark.asyncio
async def test_create_and_refresh(client: StoreClient) -> None:
    changes: list[int] = []
    bases = BasesWorkspace(client, on_change=lambda: changes.append(1))
    assert not bases.loaded

    created = await bases.create("Roadmap")

    assert bases.loaded
    assert [b.name for b in bases.bases] == ["Roadmap"]
    assert bases.find(created.base.id) is not None
    assert changes
    initials, opened = bases.labels(bases.bases[0])
    assert initials == "Ro"
    assert opened == "Opened just now"


@pytest.mark.asyncio
async def test_rename_commits_trimmed_name(client: StoreClient) -> None:
    bases = BasesWorkspace(client)
    created = await bases.create("Old")

    assert bases.start_rename(created.base.id) == "Old"
    assert bases.renaming_id == created.base.id
    assert await bases.commit_rename(created.base.id, "  New name ") is True

    assert bases.renaming_id is None
    assert bases.find(created.base.id).name == "New name"
    assert (await client.get_base(created.base.id)).name == "New name"


@pytest.mark.asyncio
async def test_blank_rename_is_ignored(client: StoreClient) -> None:
    bases = BasesWorkspace(client)
    created = await bases.create("Keep")
    bases.start_rename(created.base.id)

    assert await bases.commit_rename(created.base.id, "   ") is False

    assert bases.renaming_id is None
    assert bases.find(created.base.id).name == "Keep"


@pytest.mark.asyncio
async def test_rename_shows_immediately_and_reverts_on_failure(store: InMemoryStore, owner: str) -> None:
    client = FailingRenameClient(store, StaticSessionProvider(Session(owner)))
    seen: list[str] = []
    bases = BasesWorkspace(client, on_change=lambda: seen.extend(b.name for b in bases.bases))
    created = await bases.create("Keep")
    seen.clear()

    assert await bases.commit_rename(created.base.id, "Other") is False

    assert seen == ["Other", "Keep"]
    assert bases.find(created.base.id).name == "Keep"


def test_cancel_rename() -> None:
    bases = BasesWorkspace(client=None)  # type: ignore[arg-type]
    bases.renaming_id = "x"
    bases.cancel_rename()
    assert bases.renaming_id is None
    assert bases.start_rename("missing") == ""
    assert bases.renaming_id is None


@pytest.mark.asyncio
async def test_open_moves_base_to_top_and_delete_removes_it(
    client: StoreClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    import gridbase.store.memory as memory_mod

    bases = BasesWorkspace(client)
    first = await bases.create("First")
    await bases.create("Second")

    stamp = memory_mod.utcnow()
    monkeypatch.setattr(memory_mod, "utcnow", lambda: stamp.replace(year=stamp.year + 1))
    await bases.open(first.base.id)
    assert [b.name for b in bases.bases] == ["First", "Second"]

    await bases.delete(first.base.id)
    assert [b.name for b in bases.bases] == ["Second"]


@pytest.mark.asyncio
async def test_failing_change_handler_is_logged(client: StoreClient, caplog: pytest.LogCaptureFixture) -> None:
    def broken() -> None:
        raise ValueError("boom")

    bases = BasesWorkspace(client, on_change=broken)
    await bases.refresh()

    assert bases.loaded
    assert "Error in base list change handler" in caplog.text

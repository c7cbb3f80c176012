"""
Gridbase demo: base list and table screen backed by an in-memory store.

Demonstrates:
- BasesWorkspace: create, open, rename and delete bases
- TableWorkspace + GridView: virtualized grid with a pinned Name column,
  keyboard navigation, optimistic cell edits and bulk row insertion
- Column widths remembered in WorkspaceSettings

Run:
    python examples/demo_workspace.py
"""

from nicegui import ui

from gridbase.settings import WorkspaceSettings
from gridbase.store import InMemoryStore
from gridbase.ui import GridView
from gridbase.utils.logging import configure_logging
from gridbase.workspace import (
    BasesWorkspace,
    Session,
    StaticSessionProvider,
    StoreClient,
    TableWorkspace,
)

configure_logging(level="INFO")

store = InMemoryStore()
sessions = StaticSessionProvider(Session(user_id="demo-user", display_name="Demo User"))
client = StoreClient(store, sessions)
settings = WorkspaceSettings.load()


@ui.page("/")
async def index():
    ui.label("Bases").classes("text-3xl font-bold mb-6")
    cards = ui.column().classes("w-full gap-2")

    def render() -> None:
        cards.clear()
        with cards:
            for base in bases.bases:
                initials, opened = bases.labels(base)
                with ui.card().classes("w-96"):
                    with ui.row().classes("items-center gap-3"):
                        ui.label(initials).classes("text-lg font-bold")
                        ui.link(base.name, f"/bases/{base.id}")
                    ui.label(opened).classes("text-xs text-gray-500")
                    with ui.row().classes("gap-1"):
                        name_input = ui.input(value=base.name).props("dense")
                        ui.button(
                            "Rename",
                            on_click=lambda _e, bid=base.id, inp=name_input: bases.commit_rename(bid, inp.value),
                        ).props("flat dense")
                        ui.button("Delete", on_click=lambda _e, bid=base.id: bases.delete(bid)).props("flat dense")

    bases = BasesWorkspace(client, on_change=render)

    async def create() -> None:
        created = await bases.create()
        ui.navigate.to(f"/bases/{created.base.id}")

    ui.button("Create", on_click=create)
    await bases.refresh()


@ui.page("/bases/{base_id}")
async def table_page(base_id: str):
    workspace = TableWorkspace(client, base_id, config=settings.to_grid_config(), settings=settings)

    with ui.row().classes("items-center gap-4"):
        ui.link("All bases", "/")
        title = ui.label("").classes("text-xl font-bold")
        ui.button("Save column widths", on_click=settings.save).props("flat")

    GridView(workspace)
    await workspace.load()
    if workspace.base is not None:
        await client.touch_base(base_id)
    title.text = workspace.base_name


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(port=8004, reload=False)

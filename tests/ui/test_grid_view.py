from __future__ import annotations

from typing import Any, Callable, List, Optional

import pytest

import gridbase.ui.grid_view as gv_mod
from gridbase.grid.edits import CellRef
from gridbase.grid.navigation import FrameScheduler
from gridbase.store import CapacityLimits, InMemoryStore
from gridbase.ui.grid_view import GridView
from gridbase.workspace.client import StoreClient
from gridbase.workspace.session import Session, StaticSessionProvider
from gridbase.workspace.table_view import BASE_LOAD_FAILED, TableWorkspace

pytestmark = pytest.mark.requires_nicegui


class _FakeElement:
    def __init__(self, kind: str, text: str = "", **kwargs: Any) -> None:
        self.kind = kind
        self.text = text
        self.kwargs = kwargs
        self.visible: bool = True
        self.enabled: bool = True
        self.handlers: dict[str, Callable[..., Any]] = {}
        self.methods: List[str] = []
        self.style_string: str = ""

    def classes(self, *_args: Any, **_kwargs: Any) -> "_FakeElement":
        return self

    def props(self, *_args: Any, **_kwargs: Any) -> "_FakeElement":
        return self

    def style(self, s: str = "") -> "_FakeElement":
        self.style_string = s
        return self

    def on(self, event: str, handler: Callable[..., Any], args: Optional[list] = None) -> "_FakeElement":
        self.handlers[event] = handler
        return self

    def clear(self) -> None:
        return None

    def run_method(self, name: str, *_args: Any) -> None:
        self.methods.append(name)

    def __enter__(self) -> "_FakeElement":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None


class _FakeTimer:
    def __init__(self, interval: float, callback: Callable[[], Any], once: bool) -> None:
        self.interval = interval
        self.callback = callback
        self.once = once


class _FakeUI:
    def __init__(self) -> None:
        self.buttons: List[_FakeElement] = []
        self.labels: List[_FakeElement] = []
        self.inputs: List[_FakeElement] = []
        self.menu_items: List[_FakeElement] = []
        self.timers: List[_FakeTimer] = []
        self.notifications: List[tuple[str, str]] = []
        self.scroll_areas: List[_FakeElement] = []

    def row(self) -> _FakeElement:
        return _FakeElement("row")

    def element(self, tag: str = "div") -> _FakeElement:
        return _FakeElement(tag)

    def label(self, text: str = "") -> _FakeElement:
        el = _FakeElement("label", text)
        self.labels.append(el)
        return el

    def button(self, text: str = "", on_click: Optional[Callable[..., Any]] = None) -> _FakeElement:
        el = _FakeElement("button", text, on_click=on_click)
        self.buttons.append(el)
        return el

    def scroll_area(self, on_scroll: Optional[Callable[..., Any]] = None) -> _FakeElement:
        el = _FakeElement("scroll_area", on_scroll=on_scroll)
        self.scroll_areas.append(el)
        return el

    def input(self, value: str = "", on_change: Optional[Callable[..., Any]] = None) -> _FakeElement:
        el = _FakeElement("input", value, on_change=on_change)
        self.inputs.append(el)
        return el

    def context_menu(self) -> _FakeElement:
        return _FakeElement("context_menu")

    def menu_item(self, text: str = "", on_click: Optional[Callable[..., Any]] = None) -> _FakeElement:
        el = _FakeElement("menu_item", text, on_click=on_click)
        self.menu_items.append(el)
        return el

    def timer(self, interval: float, callback: Callable[[], Any], once: bool = False) -> _FakeTimer:
        t = _FakeTimer(interval, callback, once)
        self.timers.append(t)
        return t

    def notify(self, message: str, type: str = "info") -> None:
        self.notifications.append((message, type))

    def button_named(self, text: str) -> _FakeElement:
        return [b for b in self.buttons if b.text == text][-1]


class _Event:
    def __init__(self, args: Optional[dict] = None, value: Any = None, **attrs: Any) -> None:
        self.args = args or {}
        self.value = value
        for k, v in attrs.items():
            setattr(self, k, v)


@pytest.fixture()
def fake_ui(monkeypatch: pytest.MonkeyPatch) -> _FakeUI:
    fake = _FakeUI()
    monkeypatch.setattr(gv_mod, "ui", fake, raising=True)
    return fake


async def _workspace(store: InMemoryStore, owner: str, **kwargs: Any) -> tuple[TableWorkspace, Any]:
    client = StoreClient(store, StaticSessionProvider(Session(owner)))
    created = store.create_base(owner)
    ws = TableWorkspace(client, created.base.id, **kwargs)
    await ws.load()
    return ws, created


@pytest.mark.asyncio
async def test_builds_toolbar_and_visible_cells(fake_ui: _FakeUI, store: InMemoryStore, owner: str) -> None:
    ws, _created = await _workspace(store, owner)

    GridView(ws, viewport_width=800, viewport_height=600)

    texts = [b.text for b in fake_ui.buttons]
    for expected in ("+ Add table", "+ Add row", "+ Add 100,000 rows", "+ Add column", "Table 1"):
        assert expected in texts
    # 3 rows, pinned Name cell plus four scrollable cells each
    assert len(fake_ui.inputs) == 15
    assert {"Delete column", "Delete row"} <= {m.text for m in fake_ui.menu_items}
    assert "Delete table" not in {m.text for m in fake_ui.menu_items}


@pytest.mark.asyncio
async def test_error_replaces_grid(fake_ui: _FakeUI, store: InMemoryStore, owner: str) -> None:
    client = StoreClient(store, StaticSessionProvider(Session(owner)))
    ws = TableWorkspace(client, "00000000-0000-4000-8000-000000000000")
    await ws.load()

    GridView(ws)

    error_label = next(lbl for lbl in fake_ui.labels if lbl.text == BASE_LOAD_FAILED)
    assert error_label.visible
    assert not fake_ui.scroll_areas[0].visible
    assert fake_ui.inputs == []
    assert not fake_ui.button_named("+ Add row").enabled


@pytest.mark.asyncio
async def test_controls_follow_limits(fake_ui: _FakeUI, store: InMemoryStore, owner: str) -> None:
    ws, _created = await _workspace(store, owner, limits=CapacityLimits(max_rows=50))

    GridView(ws)

    assert fake_ui.button_named("+ Add row").enabled
    assert not fake_ui.button_named("+ Add 100,000 rows").enabled
    assert fake_ui.button_named("+ Add column").enabled


@pytest.mark.asyncio
async def test_typing_buffers_and_blur_commits(fake_ui: _FakeUI, store: InMemoryStore, owner: str) -> None:
    ws, created = await _workspace(store, owner)
    GridView(ws, viewport_width=800)
    name_input = fake_ui.inputs[0]

    name_input.kwargs["on_change"](_Event(value="Widget"))
    await name_input.handlers["blur"](_Event())

    row = store.get_rows(created.table.id, owner).rows[0]
    name_id = ws.session.columns[0].id
    assert row.value(name_id) == "Widget"
    assert len(ws.session.buffers) == 0


@pytest.mark.asyncio
async def test_arrow_key_focuses_target_on_next_frame(fake_ui: _FakeUI, store: InMemoryStore, owner: str) -> None:
    scheduler = FrameScheduler()
    ws, _created = await _workspace(store, owner, scheduler=scheduler)
    GridView(ws, viewport_width=800)
    first = fake_ui.inputs[0]

    first.handlers["keydown.down.prevent"](_Event(args={"shiftKey": False}))

    assert fake_ui.timers
    assert not any(inp.methods for inp in fake_ui.inputs)
    fake_ui.timers[0].callback()

    focused = [inp for inp in fake_ui.inputs if inp.methods]
    assert len(focused) == 1
    assert focused[0].methods == ["focus", "select"]
    rows = ws.session.cache.row_ids
    assert ws.session.navigator.focused is not None
    assert ws.session.navigator.focused.row_id == rows[1]


@pytest.mark.asyncio
async def test_navigation_keys_suppress_browser_default(fake_ui: _FakeUI, store: InMemoryStore, owner: str) -> None:
    ws, _created = await _workspace(store, owner)
    GridView(ws, viewport_width=800)

    events = set(fake_ui.inputs[0].handlers)

    assert {
        "keydown.up.prevent",
        "keydown.down.prevent",
        "keydown.left.prevent",
        "keydown.right.prevent",
        "keydown.tab.prevent",
    } <= events
    assert "keydown" not in events


@pytest.mark.asyncio
async def test_enter_commits_and_drops_focus(fake_ui: _FakeUI, store: InMemoryStore, owner: str) -> None:
    ws, created = await _workspace(store, owner)
    GridView(ws, viewport_width=800)
    name_input = fake_ui.inputs[0]
    cell = CellRef(ws.session.cache.row_ids[0], ws.session.columns[0].id)
    ws.session.navigator.request_focus(cell)
    ws.scheduler.run_frame()
    assert ws.session.navigator.focused == cell

    name_input.kwargs["on_change"](_Event(value="Widget"))
    await name_input.handlers["keydown.enter"](_Event())

    assert "blur" in name_input.methods
    assert ws.session.navigator.focused is None
    assert ws.session.navigator.selected == cell
    row = store.get_rows(created.table.id, owner).rows[0]
    assert row.value(cell.column_id) == "Widget"


@pytest.mark.asyncio
async def test_store_errors_become_notifications(fake_ui: _FakeUI, owner: str) -> None:
    store = InMemoryStore(CapacityLimits(max_columns=5))
    ws, _created = await _workspace(store, owner)
    GridView(ws)

    await fake_ui.button_named("+ Add column").kwargs["on_click"]()

    assert len(fake_ui.notifications) == 1
    message, kind = fake_ui.notifications[0]
    assert "limit" in message
    assert kind == "warning"


@pytest.mark.asyncio
async def test_scroll_event_moves_viewport(fake_ui: _FakeUI, store: InMemoryStore, owner: str) -> None:
    ws, created = await _workspace(store, owner)
    store.add_rows(created.table.id, 200, owner)
    await ws.refetch_table()
    GridView(ws, viewport_width=800, viewport_height=330)

    await fake_ui.scroll_areas[0].kwargs["on_scroll"](_Event(vertical_position=400.0, horizontal_position=0.0))

    assert ws.session.rows.scroll_offset == 400.0

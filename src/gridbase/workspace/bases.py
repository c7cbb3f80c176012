"""The signed-in user's base list: create, open, rename and delete bases."""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Optional

from gridbase.store.models import BaseSummary, CreatedBase
from gridbase.utils.logging import get_logger
from gridbase.workspace.client import StoreClient
from gridbase.workspace.session import format_initials, format_last_opened

logger = get_logger(__name__)


class BasesWorkspace:
    """State behind the base list screen.

    The list is ordered most recently opened first, as returned by the store.
    Renames show up immediately and are reverted if the store rejects them.
    """

    def __init__(self, client: StoreClient, on_change: Optional[Callable[[], None]] = None) -> None:
        self._client = client
        self._on_change = on_change
        self._bases: list[BaseSummary] = []
        self._loaded = False
        self.renaming_id: Optional[str] = None

    def _notify(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change()
        except Exception:
            logger.exception("Error in base list change handler")

    @property
    def bases(self) -> list[BaseSummary]:
        return list(self._bases)

    @property
    def loaded(self) -> bool:
        return self._loaded

    def find(self, base_id: str) -> Optional[BaseSummary]:
        for base in self._bases:
            if base.id == base_id:
                return base
        return None

    def labels(self, base: BaseSummary) -> tuple[str, str]:
        """``(initials, last opened)`` shown on a base card."""
        return format_initials(base.name), format_last_opened(base.updated_at)

    async def refresh(self) -> list[BaseSummary]:
        self._bases = await self._client.list_bases()
        self._loaded = True
        self._notify()
        return self.bases

    async def create(self, name: Optional[str] = None) -> CreatedBase:
        created = await self._client.create_base(name)
        await self.refresh()
        return created

    async def open(self, base_id: str) -> BaseSummary:
        """Mark a base as opened now; it moves to the top of the list."""
        summary = await self._client.touch_base(base_id)
        await self.refresh()
        return summary

    async def delete(self, base_id: str) -> None:
        await self._client.delete_base(base_id)
        logger.info("deleted base %s", base_id)
        await self.refresh()

    # rename: start -> commit (blur or Enter) or cancel
    def start_rename(self, base_id: str) -> str:
        base = self.find(base_id)
        self.renaming_id = base_id if base is not None else None
        return base.name if base is not None else ""

    def cancel_rename(self) -> None:
        self.renaming_id = None

    async def commit_rename(self, base_id: str, value: str) -> bool:
        """Rename ``base_id`` to ``value`` (trimmed).

        A blank value just leaves rename mode. Returns True when the store
        accepted the new name.
        """
        self.renaming_id = None
        name = value.strip()
        if not name:
            self._notify()
            return False

        previous = self.find(base_id)
        if previous is None:
            return False
        self._bases = [replace(b, name=name) if b.id == base_id else b for b in self._bases]
        self._notify()

        try:
            await self._client.rename_base(base_id, name)
        except Exception as exc:
            self._bases = [
                replace(b, name=previous.name) if b.id == base_id and b.name == name else b for b in self._bases
            ]
            logger.warning("rename of base %s rolled back: %s", base_id, exc)
            self._notify()
            return False

        await self.refresh()
        return True

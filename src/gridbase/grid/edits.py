"""Cell identity and per-cell edit buffers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional


@dataclass(frozen=True)
class CellRef:
    row_id: str
    column_id: str

    @property
    def key(self) -> str:
        return f"{self.row_id}-{self.column_id}"


class EditBuffers:
    """Uncommitted input text, one independent buffer per cell.

    Selecting another cell never touches the buffers of other cells.
    """

    def __init__(self) -> None:
        self._buffers: dict[CellRef, str] = {}

    def set(self, cell: CellRef, value: str) -> None:
        self._buffers[cell] = value

    def get(self, cell: CellRef) -> Optional[str]:
        return self._buffers.get(cell)

    def discard(self, cell: CellRef) -> None:
        self._buffers.pop(cell, None)

    def discard_if(self, cell: CellRef, value: str) -> None:
        """Drop the buffer only if it still holds ``value``."""
        if self._buffers.get(cell) == value:
            del self._buffers[cell]

    def display_value(self, cell: CellRef, stored: str) -> str:
        buffered = self._buffers.get(cell)
        return stored if buffered is None else buffered

    def __contains__(self, cell: object) -> bool:
        return cell in self._buffers

    def __len__(self) -> int:
        return len(self._buffers)

    def __iter__(self) -> Iterator[CellRef]:
        return iter(list(self._buffers))

    def clear(self) -> None:
        self._buffers.clear()

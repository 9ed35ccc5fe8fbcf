from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


class TapeLimitExceeded(Exception):
    """Growing the tape would exceed its ``max_cells`` budget."""


@dataclass
class Tape:
    """
    Byte tape that is unbounded in both directions.

    Cells at and right of the origin live in ``right``; cells left of the origin
    live in ``left`` in reverse order, so that growth at either end is an append.
    ``pos`` is the logical position relative to the origin. Only materialized
    cells are ever read or written.
    """

    right: bytearray = field(default_factory=lambda: bytearray(1))
    left: bytearray = field(default_factory=bytearray)
    pos: int = 0
    max_cells: Optional[int] = None

    @classmethod
    def from_bytes(cls, cells: bytes, *, cursor: int = 0, max_cells: Optional[int] = None) -> 'Tape':
        if not cells:
            cells = b'\x00'
        if not 0 <= cursor < len(cells):
            raise ValueError(f"cursor {cursor} outside tape of {len(cells)} cells")
        return cls(right=bytearray(cells), pos=cursor, max_cells=max_cells)

    def reset(self) -> None:
        self.right = bytearray(1)
        self.left = bytearray()
        self.pos = 0

    # ===== Cursor =====

    @property
    def cursor(self) -> int:
        """Index of the current cell within ``snapshot()``."""
        return self.pos + len(self.left)

    def __len__(self) -> int:
        return len(self.left) + len(self.right)

    def _grow(self, buf: bytearray, count: int, limit: Optional[int]) -> None:
        caps = [c for c in (self.max_cells, limit) if c is not None]
        if caps and len(self) + count > min(caps):
            raise TapeLimitExceeded(f"tape would grow to {len(self) + count} cells (limit {min(caps)})")
        buf.extend(bytes(count))

    def move_right(self, n: int = 1, *, limit: Optional[int] = None) -> None:
        self.pos += n
        if self.pos >= len(self.right):
            try:
                self._grow(self.right, self.pos - len(self.right) + 1, limit)
            except TapeLimitExceeded:
                self.pos -= n
                raise

    def move_left(self, n: int = 1, *, limit: Optional[int] = None) -> None:
        self.pos -= n
        if -self.pos > len(self.left):
            try:
                self._grow(self.left, -self.pos - len(self.left), limit)
            except TapeLimitExceeded:
                self.pos += n
                raise

    # ===== Cells =====

    def get(self) -> int:
        if self.pos >= 0:
            return self.right[self.pos]
        return self.left[-self.pos - 1]

    def set(self, value: int) -> None:
        value &= 0xFF
        if self.pos >= 0:
            self.right[self.pos] = value
        else:
            self.left[-self.pos - 1] = value

    def increase(self, n: int = 1) -> None:
        self.set(self.get() + n)

    def decrease(self, n: int = 1) -> None:
        self.set(self.get() - n)

    # ===== Snapshots =====

    def snapshot(self) -> bytes:
        return bytes(reversed(self.left)) + bytes(self.right)

    def to_list(self) -> List[int]:
        return list(self.snapshot())

"""Per-slot load state for the target zoom grid."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class TileLoadState(str, Enum):
    NOT_LOADED = 'not_loaded'
    QUEUED = 'queued'
    LOADED = 'loaded'


class TileStateTable:
    """
    Dense state table for a square tile grid, indexed by ``y * n + x``.

    Allowed transitions: NOT_LOADED -> QUEUED -> LOADED, and QUEUED ->
    NOT_LOADED when a fetch fails. LOADED is terminal.
    """

    def __init__(self, tiles_per_side: int) -> None:
        self.tiles_per_side = tiles_per_side
        self._states = [TileLoadState.NOT_LOADED] * (tiles_per_side * tiles_per_side)
        self._loaded = 0

    def __len__(self) -> int:
        return len(self._states)

    def _index(self, x: int, y: int) -> int:
        n = self.tiles_per_side
        if not (0 <= x < n and 0 <= y < n):
            msg = f'Tile ({x}, {y}) is outside the {n}x{n} grid'
            raise ValueError(msg)
        return y * n + x

    def get(self, x: int, y: int) -> TileLoadState:
        return self._states[self._index(x, y)]

    def _transition(
        self, x: int, y: int, expected: TileLoadState, new: TileLoadState
    ) -> None:
        idx = self._index(x, y)
        current = self._states[idx]
        if current is not expected:
            msg = f'Tile ({x}, {y}): illegal transition {current.value} -> {new.value}'
            raise ValueError(msg)
        self._states[idx] = new

    def mark_queued(self, x: int, y: int) -> None:
        self._transition(x, y, TileLoadState.NOT_LOADED, TileLoadState.QUEUED)

    def mark_loaded(self, x: int, y: int) -> None:
        self._transition(x, y, TileLoadState.QUEUED, TileLoadState.LOADED)
        self._loaded += 1

    def mark_failed(self, x: int, y: int) -> None:
        self._transition(x, y, TileLoadState.QUEUED, TileLoadState.NOT_LOADED)

    @property
    def loaded_count(self) -> int:
        return self._loaded

    def iter_not_loaded(self) -> Iterator[tuple[int, int]]:
        """Yield (x, y) of NOT_LOADED slots, row by row."""
        n = self.tiles_per_side
        for idx, state in enumerate(self._states):
            if state is TileLoadState.NOT_LOADED:
                yield idx % n, idx // n

    def snapshot(self) -> list[TileLoadState]:
        return list(self._states)

"""Read-only surface the renderer polls every frame."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

import numpy as np

from .highlight import CellKey, HighlightTracker
from .pattern_store import PatternStore
from .scheduler import Scheduler


@dataclass
class BoardState:
    """Everything needed to draw one frame of the board."""

    hits: np.ndarray
    current_step: int
    is_running: bool
    highlighted: List[CellKey] = field(default_factory=list)

    @property
    def shape(self) -> Tuple[int, int]:
        return int(self.hits.shape[0]), int(self.hits.shape[1])


class BoardView:
    """Query-only wrapper over the store, scheduler cursor, and highlights."""

    def __init__(self, store: PatternStore, scheduler: Scheduler, highlights: HighlightTracker) -> None:
        self._store = store
        self._scheduler = scheduler
        self._highlights = highlights

    def current_step(self) -> int:
        return self._scheduler.current_step

    def snapshot(self) -> np.ndarray:
        return self._store.snapshot()

    def is_highlighted(self, cell: CellKey, now: float | None = None) -> bool:
        return self._highlights.is_active(cell, now)

    def board_state(self, now: float | None = None) -> BoardState:
        return BoardState(
            hits=self._store.snapshot(),
            current_step=self._scheduler.current_step,
            is_running=self._scheduler.is_running,
            highlighted=self._highlights.active_keys(now),
        )


__all__ = ["BoardState", "BoardView"]

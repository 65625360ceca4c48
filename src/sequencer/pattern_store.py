"""Thread-safe hit grid shared by the input path and the scheduler."""
from __future__ import annotations

import logging
import threading
from typing import Iterable, List, Tuple

import numpy as np

from domain.errors import ConfigurationError

logger = logging.getLogger(__name__)


class PatternStore:
    """Fixed-size ``num_steps x num_tracks`` grid of hits behind a single lock.

    Every read returns a copy taken under the lock, so a reader sees each
    cell either before or after a concurrent toggle, never halfway.
    Coordinates outside the grid are ignored rather than rejected.
    """

    def __init__(self, num_steps: int, num_tracks: int, *, hits: Iterable[Tuple[int, int]] = ()) -> None:
        if num_steps <= 0 or num_tracks <= 0:
            raise ConfigurationError(
                f"Pattern dimensions must be positive, got {num_steps}x{num_tracks}"
            )
        self._num_steps = int(num_steps)
        self._num_tracks = int(num_tracks)
        self._grid = np.zeros((self._num_steps, self._num_tracks), dtype=bool)
        self._lock = threading.Lock()
        for step, track in hits:
            self.set_cell(step, track, True)

    @property
    def num_steps(self) -> int:
        return self._num_steps

    @property
    def num_tracks(self) -> int:
        return self._num_tracks

    @property
    def shape(self) -> Tuple[int, int]:
        return self._num_steps, self._num_tracks

    def contains(self, step: int, track: int) -> bool:
        """Return ``True`` when ``(step, track)`` addresses a cell of this grid."""

        return 0 <= step < self._num_steps and 0 <= track < self._num_tracks

    def toggle_cell(self, step: int, track: int) -> bool | None:
        """Flip a hit and return its new value, or ``None`` when out of range."""

        if not self.contains(step, track):
            logger.debug("Ignoring toggle outside grid at (%s, %s)", step, track)
            return None
        with self._lock:
            value = not bool(self._grid[step, track])
            self._grid[step, track] = value
        return value

    def set_cell(self, step: int, track: int, value: bool) -> bool:
        """Assign a hit unconditionally; returns ``False`` when out of range."""

        if not self.contains(step, track):
            logger.debug("Ignoring set outside grid at (%s, %s)", step, track)
            return False
        with self._lock:
            self._grid[step, track] = bool(value)
        return True

    def is_hit(self, step: int, track: int) -> bool:
        if not self.contains(step, track):
            return False
        with self._lock:
            return bool(self._grid[step, track])

    def row_at(self, step: int) -> List[Tuple[int, bool]]:
        """Return ``(track, hit)`` pairs for one step, ordered by track."""

        if not 0 <= step < self._num_steps:
            return []
        with self._lock:
            row = self._grid[step].copy()
        return [(track, bool(hit)) for track, hit in enumerate(row)]

    def snapshot(self) -> np.ndarray:
        """Return a copy of the whole grid indexed ``[step, track]``."""

        with self._lock:
            return self._grid.copy()

    def hits(self) -> List[Tuple[int, int]]:
        """Return every active ``(step, track)`` pair in step order."""

        steps, tracks = np.nonzero(self.snapshot())
        return [(int(step), int(track)) for step, track in zip(steps, tracks)]

    def clear(self) -> None:
        with self._lock:
            self._grid[:, :] = False


__all__ = ["PatternStore"]

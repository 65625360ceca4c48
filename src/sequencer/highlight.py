"""Short-lived per-cell highlights for touched and fired cells."""
from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Hashable, List

CellKey = Hashable


class HighlightTracker:
    """Stores one expiry deadline per key and evaluates it lazily on query.

    A pulse marks the key active until ``now + duration``; pulsing again
    before that replaces the deadline instead of extending it. No timer
    threads are involved, so expired entries linger until :meth:`prune`
    or the next pulse of the same key.
    """

    def __init__(
        self,
        *,
        default_duration: float = 0.3,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_duration = float(default_duration)
        self._clock = clock
        self._deadlines: Dict[CellKey, float] = {}
        self._lock = threading.Lock()

    @property
    def default_duration(self) -> float:
        return self._default_duration

    def now(self) -> float:
        return self._clock()

    def pulse(self, key: CellKey, now: float | None = None, duration: float | None = None) -> float:
        """Activate ``key`` and return its deadline."""

        start = self._clock() if now is None else now
        span = self._default_duration if duration is None else duration
        deadline = start + span
        with self._lock:
            if span <= 0.0:
                self._deadlines.pop(key, None)
            else:
                self._deadlines[key] = deadline
        return deadline

    def is_active(self, key: CellKey, now: float | None = None) -> bool:
        instant = self._clock() if now is None else now
        with self._lock:
            deadline = self._deadlines.get(key)
        return deadline is not None and instant < deadline

    def active_keys(self, now: float | None = None) -> List[CellKey]:
        instant = self._clock() if now is None else now
        with self._lock:
            return [key for key, deadline in self._deadlines.items() if instant < deadline]

    def prune(self, now: float | None = None) -> int:
        """Drop expired entries and return how many were removed."""

        instant = self._clock() if now is None else now
        with self._lock:
            expired = [key for key, deadline in self._deadlines.items() if instant >= deadline]
            for key in expired:
                del self._deadlines[key]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._deadlines.clear()

    def __len__(self) -> int:  # pragma: no cover - trivial
        with self._lock:
            return len(self._deadlines)


__all__ = ["CellKey", "HighlightTracker"]

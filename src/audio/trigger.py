"""Sample trigger capability consumed by the scheduler and touch editor."""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Protocol, Set


class SampleTrigger(Protocol):
    """Fire-and-forget playback controls addressed by track index.

    Implementations must tolerate concurrent calls for distinct tracks and
    repeated calls for the same track without corrupting their own state.
    """

    def play(self, track: int) -> None:
        """Start the track's sample from the beginning."""

    def stop(self, track: int) -> None:
        """Silence the track."""

    def seek(self, track: int, position_seconds: float) -> None:
        """Move the track's read position."""

    def close(self, track: int) -> None:
        """Release the track's resources."""


@dataclass(frozen=True)
class TriggerCall:
    """One recorded trigger invocation."""

    action: str
    track: int
    timestamp: float
    position_seconds: float | None = None


class RecordingSampleTrigger:
    """In-memory trigger that records calls instead of producing sound.

    Tracks listed in ``failing_tracks`` raise ``RuntimeError`` from
    :meth:`play`; ``failing_close`` does the same for :meth:`close`.
    """

    def __init__(
        self,
        *,
        failing_tracks: Iterable[int] = (),
        failing_close: Iterable[int] = (),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._calls: List[TriggerCall] = []
        self._lock = threading.Lock()
        self.failing_tracks: Set[int] = set(failing_tracks)
        self.failing_close: Set[int] = set(failing_close)
        self._closed: Set[int] = set()

    def play(self, track: int) -> None:
        self._record("play", track)
        if track in self.failing_tracks:
            raise RuntimeError(f"track {track} is unavailable")

    def stop(self, track: int) -> None:
        self._record("stop", track)

    def seek(self, track: int, position_seconds: float) -> None:
        self._record("seek", track, position_seconds)

    def close(self, track: int) -> None:
        self._record("close", track)
        if track in self.failing_close:
            raise RuntimeError(f"track {track} refused to close")
        with self._lock:
            self._closed.add(track)

    def calls(self, action: str | None = None) -> List[TriggerCall]:
        """Return a copy of the recorded calls, optionally filtered by action."""

        with self._lock:
            calls = list(self._calls)
        if action is None:
            return calls
        return [call for call in calls if call.action == action]

    def play_count(self, track: int | None = None) -> int:
        return sum(1 for call in self.calls("play") if track is None or call.track == track)

    def play_counts(self) -> Dict[int, int]:
        counts: Dict[int, int] = {}
        for call in self.calls("play"):
            counts[call.track] = counts.get(call.track, 0) + 1
        return counts

    def closed_tracks(self) -> Set[int]:
        with self._lock:
            return set(self._closed)

    def reset(self) -> None:
        with self._lock:
            self._calls.clear()
            self._closed.clear()

    def _record(self, action: str, track: int, position: float | None = None) -> None:
        call = TriggerCall(action=action, track=track, timestamp=self._clock(), position_seconds=position)
        with self._lock:
            self._calls.append(call)


__all__ = ["RecordingSampleTrigger", "SampleTrigger", "TriggerCall"]

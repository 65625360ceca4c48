"""Fixed-interval step clock that fans out sample triggers on every tick."""
from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, Deque, Dict, List, Set

from audio.trigger import SampleTrigger
from domain.errors import ConfigurationError, SequencerError, ShutdownFailure, TriggerFailure
from domain.models import HighlightMode

from .highlight import CellKey, HighlightTracker
from .pattern_store import PatternStore

logger = logging.getLogger(__name__)


def interval_from_tempo(tempo_bpm: float | None = None, interval_ms: float | None = None) -> float:
    """Return the tick period in seconds, preferring a fixed ``interval_ms``."""

    if interval_ms is not None:
        if interval_ms <= 0:
            raise ConfigurationError(f"Tick interval must be positive, got {interval_ms} ms")
        return interval_ms / 1000.0
    if tempo_bpm is None:
        raise ConfigurationError("Either tempo_bpm or interval_ms is required")
    if tempo_bpm <= 0:
        raise ConfigurationError(f"Tempo must be positive, got {tempo_bpm} BPM")
    return 60.0 / tempo_bpm


class Scheduler:
    """Advance the cursor once per tick and fire every hit of the new step.

    Ticks run on one dedicated thread and never overlap. The triggers of a
    tick are submitted to a thread pool and the tick does not wait for
    them, so a slow sample cannot delay the clock. :meth:`stop` wakes the
    clock thread, joins it, waits at most one interval for the running
    batch, and cancels queued batches before releasing every track.

    A scheduler plays once: :meth:`stop` closes the trigger's tracks, so
    starting again afterwards raises :class:`SequencerError`. Callbacks run
    on the clock and trigger threads and must not call :meth:`stop`.
    """

    def __init__(
        self,
        store: PatternStore,
        trigger: SampleTrigger,
        *,
        tempo_bpm: float | None = 140.0,
        interval_ms: float | None = None,
        highlights: HighlightTracker | None = None,
        highlight_decay: float = 0.3,
        highlight_mode: HighlightMode = HighlightMode.CELL,
        on_tick: Callable[[int], None] | None = None,
        on_trigger_failure: Callable[[TriggerFailure], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
        failure_history: int = 256,
    ) -> None:
        self._store = store
        self._trigger = trigger
        self._interval = interval_from_tempo(tempo_bpm, interval_ms)
        if highlights is None:
            highlights = HighlightTracker(default_duration=highlight_decay, clock=clock)
        self._highlights = highlights
        self._highlight_decay = float(highlight_decay)
        self._highlight_mode = HighlightMode(highlight_mode)
        self._on_tick = on_tick
        self._on_trigger_failure = on_trigger_failure
        self._clock = clock

        self._cursor = 0
        self._tick_count = 0
        self._tick_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._stopping = threading.Event()
        self._thread: threading.Thread | None = None
        self._executor: ThreadPoolExecutor | None = None
        self._pending: Set[Future] = set()
        self._pending_lock = threading.Lock()
        self._failures: Deque[TriggerFailure] = deque(maxlen=failure_history)
        self._released = False

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------
    @property
    def current_step(self) -> int:
        return self._cursor

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive() and not self._stopping.is_set()

    @property
    def highlights(self) -> HighlightTracker:
        return self._highlights

    @property
    def store(self) -> PatternStore:
        return self._store

    def trigger_failures(self) -> List[TriggerFailure]:
        """Return the most recent trigger failures, oldest first."""

        return list(self._failures)

    def highlight_key(self, step: int, track: int) -> CellKey:
        if self._highlight_mode is HighlightMode.TRACK:
            return track
        return (step, track)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self, tempo_bpm: float | None = None, *, interval_ms: float | None = None) -> None:
        """Begin ticking; the first tick lands one interval from now."""

        with self._state_lock:
            if self._thread is not None:
                logger.debug("Scheduler already running; ignoring start")
                return
            if self._released:
                raise SequencerError("Tracks were released by stop(); build a new scheduler to play again")
            if tempo_bpm is not None or interval_ms is not None:
                self._interval = interval_from_tempo(tempo_bpm, interval_ms)
            self._cursor = 0
            self._tick_count = 0
            self._highlights.clear()
            self._stopping.clear()
            self._executor = ThreadPoolExecutor(
                max_workers=max(1, self._store.num_tracks),
                thread_name_prefix="sample-trigger",
            )
            self._thread = threading.Thread(target=self._run, name="sequencer-clock", daemon=True)
            logger.info(
                "Starting scheduler: %sx%s grid, %.1f ms per tick",
                self._store.num_steps,
                self._store.num_tracks,
                self._interval * 1000.0,
            )
            self._thread.start()

    def stop(self) -> None:
        """Halt the clock, cancel queued triggers, and close every track.

        Returns within about one interval: the batch already running gets
        that long to finish and may still complete afterwards, while batches
        that have not started are cancelled.

        Raises :class:`ShutdownFailure` after attempting every close when
        one or more tracks failed to release.
        """

        with self._state_lock:
            thread = self._thread
            self._stopping.set()
            if thread is not None:
                if thread is not threading.current_thread():
                    thread.join()
                self._thread = None
            self.wait_idle(timeout=self._interval)
            if self._executor is not None:
                self._executor.shutdown(wait=False, cancel_futures=True)
                self._executor = None
            self._cursor = 0
            self._highlights.clear()
            if thread is None and self._released:
                return
            logger.info("Scheduler stopped after %s ticks", self._tick_count)
            self._release_tracks()

    async def stop_async(self) -> None:
        """Run :meth:`stop` on a worker thread so event loops stay responsive."""

        await asyncio.to_thread(self.stop)

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until every submitted trigger has finished."""

        with self._pending_lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------
    def tick(self) -> int:
        """Advance one step, dispatch its hits, and return the new cursor."""

        with self._tick_lock:
            self._cursor = (self._cursor + 1) % self._store.num_steps
            self._tick_count += 1
            step = self._cursor
            row = self._store.row_at(step)
        now = self._clock()
        fired = [track for track, hit in row if hit]
        if fired:
            logger.debug("Tick %s: step %s fires tracks %s", self._tick_count, step, fired)
        for track in fired:
            self._dispatch(track, step, now)
        if self._on_tick is not None:
            self._on_tick(step)
        return step

    def _run(self) -> None:
        next_deadline = self._clock() + self._interval
        while not self._stopping.is_set():
            remaining = next_deadline - self._clock()
            if remaining > 0.0 and self._stopping.wait(remaining):
                break
            if self._stopping.is_set():
                break
            self.tick()
            next_deadline += self._interval
            now = self._clock()
            if next_deadline < now:
                logger.debug("Tick overran by %.1f ms", (now - next_deadline) * 1000.0)
                next_deadline = now

    def _dispatch(self, track: int, step: int, now: float) -> None:
        executor = self._executor
        if executor is None:
            self._fire(track, step, now)
            return
        future = executor.submit(self._fire, track, step, now)
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)

    def _forget(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    def _fire(self, track: int, step: int, now: float) -> None:
        self._highlights.pulse(self.highlight_key(step, track), now, self._highlight_decay)
        try:
            self._trigger.play(track)
        except Exception as exc:
            failure = TriggerFailure(track, step, exc)
            self._failures.append(failure)
            logger.warning("%s", failure)
            if self._on_trigger_failure is not None:
                try:
                    self._on_trigger_failure(failure)
                except Exception:
                    logger.exception("Trigger failure callback raised for track %s", track)

    def _release_tracks(self) -> None:
        failures: Dict[int, BaseException] = {}
        for track in range(self._store.num_tracks):
            try:
                self._trigger.close(track)
            except Exception as exc:
                logger.warning("Failed to close track %s: %s", track, exc)
                failures[track] = exc
        self._released = True
        if failures:
            raise ShutdownFailure(failures)


__all__ = ["Scheduler", "interval_from_tempo"]

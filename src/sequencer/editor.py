"""Touch handling that edits or previews the pattern."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from collections import deque
from typing import Callable, Deque, List

from audio.trigger import SampleTrigger
from domain.errors import TriggerFailure
from domain.models import BoardGeometry, HighlightMode, TouchMode

from .highlight import CellKey, HighlightTracker
from .input_mapper import Cell, InputMapper
from .pattern_store import PatternStore

logger = logging.getLogger(__name__)


class TouchPhase(str, Enum):
    START = "start"
    MOVE = "move"
    END = "end"


@dataclass(frozen=True)
class TouchEvent:
    """Pointer event already translated into board screen coordinates."""

    x: float
    y: float
    phase: TouchPhase = TouchPhase.START


@dataclass(frozen=True)
class TouchResult:
    """What a handled touch did to the board."""

    cell: Cell
    mode: TouchMode
    hit: bool | None = None


class PatternTouchEditor:
    """Turn touch events into toggles (edit mode) or sample previews."""

    def __init__(
        self,
        store: PatternStore,
        highlights: HighlightTracker,
        geometry: BoardGeometry,
        *,
        trigger: SampleTrigger | None = None,
        mode: TouchMode = TouchMode.EDIT,
        drag_edit: bool = False,
        highlight_decay: float = 0.3,
        highlight_mode: HighlightMode = HighlightMode.CELL,
        on_trigger_failure: Callable[[TriggerFailure], None] | None = None,
        history_limit: int = 256,
    ) -> None:
        self._store = store
        self._highlights = highlights
        self._mapper = InputMapper(store.num_steps, store.num_tracks, geometry)
        self._trigger = trigger
        self._mode = TouchMode(mode)
        self._drag_edit = drag_edit
        self._highlight_decay = float(highlight_decay)
        self._highlight_mode = HighlightMode(highlight_mode)
        self._on_trigger_failure = on_trigger_failure
        self._last_cell: Cell | None = None
        self._history: Deque[TouchResult] = deque(maxlen=history_limit)

    @property
    def mode(self) -> TouchMode:
        return self._mode

    @mode.setter
    def mode(self, value: TouchMode) -> None:
        self._mode = TouchMode(value)

    @property
    def store(self) -> PatternStore:
        return self._store

    @property
    def highlights(self) -> HighlightTracker:
        return self._highlights

    @property
    def mapper(self) -> InputMapper:
        return self._mapper

    @property
    def geometry(self) -> BoardGeometry:
        return self._mapper.geometry

    @property
    def history(self) -> List[TouchResult]:
        """Return the most recent handled touches in order of arrival."""

        return list(self._history)

    def resize(self, width: float, height: float, *, margin: float = 0.0) -> BoardGeometry:
        return self._mapper.resize(width, height, margin=margin)

    def handle(self, event: TouchEvent) -> TouchResult | None:
        """Apply one touch event; returns ``None`` when nothing changed."""

        phase = TouchPhase(event.phase)
        if phase is TouchPhase.END:
            self._last_cell = None
            return None
        cell = self._mapper.map_point(event.x, event.y)
        if cell is None:
            if phase is TouchPhase.START:
                self._last_cell = None
            return None
        if phase is TouchPhase.MOVE and (not self._drag_edit or cell == self._last_cell):
            return None
        self._last_cell = cell

        step, track = cell
        if self._mode is TouchMode.PREVIEW:
            result = TouchResult(cell=cell, mode=self._mode)
            self._pulse(step, track)
            self._preview(track)
        else:
            hit = self._store.toggle_cell(step, track)
            result = TouchResult(cell=cell, mode=self._mode, hit=hit)
            self._pulse(step, track)
        self._history.append(result)
        return result

    def _highlight_key(self, step: int, track: int) -> CellKey:
        if self._highlight_mode is HighlightMode.TRACK:
            return track
        return (step, track)

    def _pulse(self, step: int, track: int) -> None:
        self._highlights.pulse(self._highlight_key(step, track), duration=self._highlight_decay)

    def _preview(self, track: int) -> None:
        if self._trigger is None:
            return
        try:
            self._trigger.play(track)
        except Exception as exc:
            failure = TriggerFailure(track, None, exc)
            logger.warning("%s", failure)
            if self._on_trigger_failure is not None:
                self._on_trigger_failure(failure)


__all__ = ["PatternTouchEditor", "TouchEvent", "TouchPhase", "TouchResult"]

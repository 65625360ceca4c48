"""Composition root wiring the store, clock, editor, and view together."""
from __future__ import annotations

import logging
import time
from typing import Callable

from audio.trigger import SampleTrigger
from domain.errors import TriggerFailure
from domain.models import BoardGeometry, SequencerConfig

from .editor import PatternTouchEditor, TouchEvent, TouchResult
from .highlight import HighlightTracker
from .pattern_store import PatternStore
from .scheduler import Scheduler
from .view import BoardView

logger = logging.getLogger(__name__)


class DrumMachine:
    """One playable board: a seeded pattern, its clock, and its touch surface."""

    def __init__(
        self,
        config: SequencerConfig,
        trigger: SampleTrigger,
        *,
        clock: Callable[[], float] = time.monotonic,
        on_tick: Callable[[int], None] | None = None,
        on_trigger_failure: Callable[[TriggerFailure], None] | None = None,
    ) -> None:
        self.config = config
        self.trigger = trigger
        self.store = PatternStore(config.num_steps, config.num_tracks, hits=config.seeded_hits())
        self.highlights = HighlightTracker(default_duration=config.highlight_decay_seconds, clock=clock)
        self.scheduler = Scheduler(
            self.store,
            trigger,
            tempo_bpm=config.tempo_bpm,
            interval_ms=config.tick_interval_ms,
            highlights=self.highlights,
            highlight_decay=config.highlight_decay_seconds,
            highlight_mode=config.highlight_mode,
            on_tick=on_tick,
            on_trigger_failure=on_trigger_failure,
            clock=clock,
        )
        self.editor = PatternTouchEditor(
            self.store,
            self.highlights,
            config.geometry,
            trigger=trigger,
            mode=config.touch_mode,
            drag_edit=config.drag_edit,
            highlight_decay=config.highlight_decay_seconds,
            highlight_mode=config.highlight_mode,
            on_trigger_failure=on_trigger_failure,
        )
        self.view = BoardView(self.store, self.scheduler, self.highlights)

    @classmethod
    def from_config(cls, config: SequencerConfig, trigger: SampleTrigger, **kwargs) -> DrumMachine:
        return cls(config, trigger, **kwargs)

    @property
    def is_running(self) -> bool:
        return self.scheduler.is_running

    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.stop()

    def handle_touch(self, event: TouchEvent) -> TouchResult | None:
        return self.editor.handle(event)

    def resize(self, width: float, height: float, *, margin: float = 0.0) -> BoardGeometry:
        geometry = self.editor.resize(width, height, margin=margin)
        logger.debug("Board resized to %sx%s: %s", width, height, geometry)
        return geometry


__all__ = ["DrumMachine"]

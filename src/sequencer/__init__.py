"""Step sequencer core: pattern grid, clock, touch editing, and renderer view."""

from .editor import PatternTouchEditor, TouchEvent, TouchPhase, TouchResult
from .highlight import CellKey, HighlightTracker
from .input_mapper import InputMapper, map_point
from .machine import DrumMachine
from .pattern_store import PatternStore
from .scheduler import Scheduler, interval_from_tempo
from .view import BoardState, BoardView

__all__ = [
    "BoardState",
    "BoardView",
    "CellKey",
    "DrumMachine",
    "HighlightTracker",
    "InputMapper",
    "PatternStore",
    "PatternTouchEditor",
    "Scheduler",
    "TouchEvent",
    "TouchPhase",
    "TouchResult",
    "interval_from_tempo",
    "map_point",
]

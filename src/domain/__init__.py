"""Domain package exposing configuration models, presets, and errors."""
from .errors import (
    BackendUnavailableError,
    ConfigurationError,
    SequencerError,
    ShutdownFailure,
    TriggerFailure,
)
from .models import BoardGeometry, HighlightMode, SequencerConfig, TouchMode, load_config
from .presets import DEMO_PATTERN, PRESETS, resolve_preset

__all__ = [
    "BackendUnavailableError",
    "BoardGeometry",
    "ConfigurationError",
    "DEMO_PATTERN",
    "HighlightMode",
    "PRESETS",
    "SequencerConfig",
    "SequencerError",
    "ShutdownFailure",
    "TouchMode",
    "TriggerFailure",
    "load_config",
    "resolve_preset",
]

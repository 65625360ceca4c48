"""Pydantic-powered configuration models for the drum machine.

The sequencer core never derives its dimensions, tempo, or board layout
on its own: everything arrives through :class:`SequencerConfig`, which
validates the values once at startup so the scheduler and editors can
trust them afterwards. Validation failures surface as
:class:`~domain.errors.ConfigurationError` rather than pydantic's own
exception type.
"""
from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import ConfigurationError
from .presets import resolve_preset


class HighlightMode(str, Enum):
    """How fired hits are keyed in the highlight tracker."""

    CELL = "cell"
    TRACK = "track"


class TouchMode(str, Enum):
    """What a touch on a matched cell does."""

    EDIT = "edit"
    PREVIEW = "preview"


class BoardGeometry(BaseModel):
    """Screen placement of the board used to map pointer coordinates to cells."""

    model_config = ConfigDict(frozen=True)

    origin_x: float = Field(0.0, description="Left edge of the board in screen units")
    origin_y: float = Field(0.0, description="Top edge of the board in screen units")
    cell_width: float = Field(50.0, gt=0.0)
    cell_height: float = Field(50.0, gt=0.0)

    @classmethod
    def from_viewport(
        cls,
        width: float,
        height: float,
        num_steps: int,
        num_tracks: int,
        *,
        margin: float = 0.0,
    ) -> BoardGeometry:
        """Spread the board evenly over a viewport, leaving ``margin`` on every side."""

        if num_steps <= 0 or num_tracks <= 0:
            raise ConfigurationError("Board dimensions must be positive")
        usable_width = float(width) - 2.0 * margin
        usable_height = float(height) - 2.0 * margin
        if usable_width <= 0.0 or usable_height <= 0.0:
            raise ConfigurationError(
                f"Viewport {width}x{height} leaves no room for the board with margin {margin}"
            )
        return cls(
            origin_x=margin,
            origin_y=margin,
            cell_width=usable_width / num_steps,
            cell_height=usable_height / num_tracks,
        )


class SequencerConfig(BaseModel):
    """Startup configuration for the pattern grid, clock, and input surface."""

    num_steps: int = Field(16, gt=0, description="Steps (columns) per loop")
    num_tracks: int = Field(8, gt=0, description="Sample lanes (rows)")
    tempo_bpm: float = Field(140.0, gt=0.0, description="One step per beat")
    tick_interval_ms: Optional[float] = Field(
        None, gt=0.0, description="Fixed tick length; overrides tempo_bpm when set"
    )
    highlight_decay_ms: float = Field(300.0, description="How long a pulsed cell stays lit")
    highlight_mode: HighlightMode = HighlightMode.CELL
    touch_mode: TouchMode = TouchMode.EDIT
    drag_edit: bool = False
    geometry: BoardGeometry = Field(default_factory=BoardGeometry)
    default_pattern: Union[str, List[Tuple[int, int]]] = Field(
        "demo", description="Preset name or explicit [step, track] hits"
    )
    sample_paths: Optional[List[str]] = None
    sample_template: str = "track{index}.wav"

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc

    @model_validator(mode="after")
    def validate_seed_and_samples(self) -> SequencerConfig:  # type: ignore[override]
        for step, track in self.seeded_hits():
            if not (0 <= step < self.num_steps and 0 <= track < self.num_tracks):
                raise ValueError(
                    f"Seeded hit ({step}, {track}) is outside the "
                    f"{self.num_steps}x{self.num_tracks} grid"
                )
        if self.sample_paths is not None and len(self.sample_paths) != self.num_tracks:
            raise ValueError(
                f"Expected {self.num_tracks} sample paths, got {len(self.sample_paths)}"
            )
        return self

    @property
    def tick_interval_seconds(self) -> float:
        """Return the scheduler period in seconds."""

        if self.tick_interval_ms is not None:
            return self.tick_interval_ms / 1000.0
        return 60.0 / self.tempo_bpm

    @property
    def highlight_decay_seconds(self) -> float:
        return self.highlight_decay_ms / 1000.0

    def seeded_hits(self) -> List[Tuple[int, int]]:
        """Resolve ``default_pattern`` into explicit ``(step, track)`` hits."""

        if isinstance(self.default_pattern, str):
            try:
                return resolve_preset(self.default_pattern)
            except KeyError as exc:
                raise ValueError(str(exc.args[0])) from None
        return [(int(step), int(track)) for step, track in self.default_pattern]

    def resolve_sample_paths(self, base_dir: Path | None = None) -> List[Path]:
        """Return one sample path per track, relative paths anchored at ``base_dir``."""

        names = self.sample_paths or [
            self.sample_template.format(index=index) for index in range(self.num_tracks)
        ]
        root = base_dir or Path.cwd()
        paths: List[Path] = []
        for name in names:
            path = Path(name).expanduser()
            paths.append(path if path.is_absolute() else root / path)
        return paths


def load_config(path: Path) -> SequencerConfig:
    """Read a JSON configuration document from ``path``."""

    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Configuration file '{path}' does not exist") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Configuration file '{path}' is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Configuration file '{path}' must contain a JSON object")
    return SequencerConfig(**payload)


__all__ = [
    "BoardGeometry",
    "HighlightMode",
    "SequencerConfig",
    "TouchMode",
    "load_config",
]

"""Pointer-to-cell mapping for the board."""
from __future__ import annotations

import math
from typing import Tuple

from domain.models import BoardGeometry

Cell = Tuple[int, int]


def map_point(
    x: float,
    y: float,
    geometry: BoardGeometry,
    num_steps: int,
    num_tracks: int,
) -> Cell | None:
    """Return the ``(step, track)`` under a pointer, or ``None`` off the board.

    Bounds are checked on the offset from the origin before any integer
    conversion, so negative, huge, or non-finite coordinates simply miss.
    """

    try:
        x, y = float(x), float(y)
    except (OverflowError, TypeError, ValueError):
        return None
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    offset_x = x - geometry.origin_x
    offset_y = y - geometry.origin_y
    if offset_x < 0.0 or offset_y < 0.0:
        return None
    if offset_x >= num_steps * geometry.cell_width or offset_y >= num_tracks * geometry.cell_height:
        return None
    step = min(int(offset_x // geometry.cell_width), num_steps - 1)
    track = min(int(offset_y // geometry.cell_height), num_tracks - 1)
    return step, track


class InputMapper:
    """Holds the current geometry for a board of fixed dimensions."""

    def __init__(self, num_steps: int, num_tracks: int, geometry: BoardGeometry) -> None:
        self.num_steps = num_steps
        self.num_tracks = num_tracks
        self.geometry = geometry

    def map_point(self, x: float, y: float) -> Cell | None:
        return map_point(x, y, self.geometry, self.num_steps, self.num_tracks)

    def resize(self, width: float, height: float, *, margin: float = 0.0) -> BoardGeometry:
        """Recompute geometry after the viewport changed size."""

        self.geometry = BoardGeometry.from_viewport(
            width, height, self.num_steps, self.num_tracks, margin=margin
        )
        return self.geometry

    def cell_origin(self, step: int, track: int) -> Tuple[float, float]:
        """Return the top-left screen coordinate of a cell."""

        return (
            self.geometry.origin_x + step * self.geometry.cell_width,
            self.geometry.origin_y + track * self.geometry.cell_height,
        )


__all__ = ["Cell", "InputMapper", "map_point"]

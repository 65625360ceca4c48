"""Bundled hit patterns used to seed a fresh board."""
from __future__ import annotations

from typing import Dict, List, Tuple

Hit = Tuple[int, int]

HI_HAT = 1
KICK = 2
BASS = 4
BASS_2 = 6


def _lane(track: int, steps: List[int]) -> List[Hit]:
    return [(step, track) for step in steps]


# 16 steps x 8 tracks; the groove that ships with the stock sample kit.
DEMO_PATTERN: List[Hit] = [
    *_lane(HI_HAT, [0, 2, 4, 6, 8, 10, 12, 14]),
    *_lane(KICK, [5, 7, 11, 13, 14, 15]),
    *_lane(BASS, [0, 3, 5, 6, 8, 11, 13]),
    *_lane(BASS_2, [2, 10]),
]

PRESETS: Dict[str, List[Hit]] = {
    "demo": DEMO_PATTERN,
    "empty": [],
}


def resolve_preset(name: str) -> List[Hit]:
    """Return a copy of the named preset, raising ``KeyError`` when unknown."""

    try:
        return list(PRESETS[name])
    except KeyError:
        raise KeyError(f"Unknown pattern preset {name!r}; expected one of {sorted(PRESETS)}") from None


__all__ = ["DEMO_PATTERN", "PRESETS", "Hit", "resolve_preset"]

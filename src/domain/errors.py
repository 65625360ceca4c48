"""Error taxonomy shared by the sequencer core and its sample backends."""
from __future__ import annotations

from typing import Dict, Mapping


class SequencerError(Exception):
    """Base error for sequencer failures."""


class ConfigurationError(SequencerError, ValueError):
    """Raised when dimensions, tempo, or seeded hits are invalid."""


class BackendUnavailableError(SequencerError):
    """Raised when the sample backend cannot be opened at startup."""


class TriggerFailure(SequencerError):
    """A sample trigger failed for one track on one tick or touch."""

    def __init__(self, track: int, step: int | None, cause: BaseException) -> None:
        where = f"step {step}" if step is not None else "preview"
        super().__init__(f"Trigger for track {track} failed at {where}: {cause}")
        self.track = track
        self.step = step
        self.cause = cause


class ShutdownFailure(SequencerError):
    """One or more track resources failed to close during shutdown."""

    def __init__(self, failures: Mapping[int, BaseException]) -> None:
        self.failures: Dict[int, BaseException] = dict(sorted(failures.items()))
        tracks = ", ".join(str(track) for track in self.failures)
        super().__init__(f"Failed to close {len(self.failures)} track(s): {tracks}")


__all__ = [
    "BackendUnavailableError",
    "ConfigurationError",
    "SequencerError",
    "ShutdownFailure",
    "TriggerFailure",
]

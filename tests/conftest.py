import sys
from pathlib import Path

import pytest

from audio.trigger import RecordingSampleTrigger
from domain.models import SequencerConfig

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


class FakeClock:
    """Manually advanced monotonic clock for deterministic timing tests."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def recording_trigger(fake_clock: FakeClock) -> RecordingSampleTrigger:
    return RecordingSampleTrigger(clock=fake_clock)


@pytest.fixture()
def small_config() -> SequencerConfig:
    return SequencerConfig(
        num_steps=4,
        num_tracks=4,
        tick_interval_ms=20.0,
        highlight_decay_ms=300.0,
        geometry={"origin_x": 20.0, "origin_y": 20.0, "cell_width": 50.0, "cell_height": 50.0},
        default_pattern="empty",
    )

from pathlib import Path

import numpy as np
import pytest

from audio.sampler import SamplePlayer, SoundDeviceSampleBank, load_sample
from domain.errors import BackendUnavailableError, SequencerError
from sequencer.pattern_store import PatternStore
from sequencer.scheduler import Scheduler


class FakeStream:
    """Stands in for ``sounddevice.OutputStream`` without touching hardware."""

    def __init__(self, **kwargs) -> None:
        self.kwargs = kwargs
        self.started = False
        self.closed = False

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.started = False

    def close(self) -> None:
        self.closed = True

    def pull(self, frames: int) -> np.ndarray:
        out = np.empty((frames, self.kwargs["channels"]), dtype=np.float32)
        self.kwargs["callback"](out, frames, None, None)
        return out


def _ramp(frames: int, channels: int = 1) -> np.ndarray:
    data = np.arange(1, frames + 1, dtype=np.float32) / frames
    return np.repeat(data[:, np.newaxis], channels, axis=1)


def test_player_is_silent_until_played():
    player = SamplePlayer(_ramp(8), 8)
    np.testing.assert_array_equal(player.render(4), np.zeros((4, 1), dtype=np.float32))


def test_play_renders_from_the_start_and_pads_the_tail():
    data = _ramp(6, channels=2)
    player = SamplePlayer(data, 6)
    player.play()

    first = player.render(4)
    second = player.render(4)

    np.testing.assert_allclose(first, data[:4])
    np.testing.assert_allclose(second[:2], data[4:])
    np.testing.assert_array_equal(second[2:], np.zeros((2, 2), dtype=np.float32))
    assert not player.is_playing


def test_replay_rewinds_and_seek_moves_read_head():
    data = _ramp(10)
    player = SamplePlayer(data, 10)
    player.play()
    player.render(7)
    player.play()
    assert player.position_seconds == 0.0

    player.seek(0.5)
    np.testing.assert_allclose(player.render(2), data[5:7])
    player.seek(99.0)
    assert not player.is_playing
    player.seek(-3.0)
    assert player.position_seconds == 0.0


def test_stop_and_close():
    player = SamplePlayer(_ramp(4).reshape(-1), 4)
    assert player.channels == 1
    player.play()
    player.stop()
    assert not player.is_playing
    player.close()
    assert player.closed
    with pytest.raises(RuntimeError):
        player.play()


def test_player_rejects_bad_buffers():
    with pytest.raises(ValueError):
        SamplePlayer(np.zeros((2, 2, 2)), 44_100)
    with pytest.raises(ValueError):
        SamplePlayer(np.zeros(4), 0)


def test_bank_opens_one_stream_per_track_and_routes_calls():
    streams: list[FakeStream] = []

    def factory(**kwargs):
        stream = FakeStream(**kwargs)
        streams.append(stream)
        return stream

    players = [SamplePlayer(_ramp(4), 4), SamplePlayer(_ramp(4, channels=2), 4)]
    bank = SoundDeviceSampleBank(players, block_size=2, stream_factory=factory)
    bank.open()

    assert len(streams) == 2
    assert all(stream.started for stream in streams)
    assert streams[1].kwargs["channels"] == 2
    assert streams[0].kwargs["blocksize"] == 2

    bank.play(1)
    np.testing.assert_allclose(streams[1].pull(2), _ramp(4, channels=2)[:2])
    np.testing.assert_array_equal(streams[0].pull(2), np.zeros((2, 1), dtype=np.float32))

    bank.seek(1, 0.75)
    np.testing.assert_allclose(streams[1].pull(1), _ramp(4, channels=2)[3:4])
    bank.stop(1)

    bank.close(0)
    bank.close(1)
    assert all(stream.closed for stream in streams)
    assert all(player.closed for player in bank.players)


def test_bank_open_failure_is_backend_unavailable():
    opened: list[FakeStream] = []

    def factory(**kwargs):
        if opened:
            raise OSError("device busy")
        stream = FakeStream(**kwargs)
        opened.append(stream)
        return stream

    bank = SoundDeviceSampleBank(
        [SamplePlayer(_ramp(4), 4), SamplePlayer(_ramp(4), 4)], stream_factory=factory
    )
    with pytest.raises(BackendUnavailableError):
        bank.open()
    assert opened[0].closed


def test_missing_sample_file_fails_at_startup(tmp_path: Path):
    with pytest.raises(BackendUnavailableError):
        SoundDeviceSampleBank.from_files([tmp_path / "track0.wav"], stream_factory=FakeStream)


def test_load_sample_and_bank_from_files(tmp_path: Path):
    sf = pytest.importorskip("soundfile")
    paths = []
    for index in range(2):
        path = tmp_path / f"track{index}.wav"
        sf.write(str(path), np.full((32, 2), 0.25 * (index + 1), dtype=np.float32), 8_000)
        paths.append(path)

    data, rate = load_sample(paths[0])
    assert rate == 8_000
    assert data.shape == (32, 2)
    np.testing.assert_allclose(data, 0.25, atol=1e-3)

    bank = SoundDeviceSampleBank.from_files(paths, stream_factory=FakeStream)
    assert [player.frames for player in bank.players] == [32, 32]


def test_scheduler_drives_bank_and_releases_it():
    streams: list[FakeStream] = []

    def factory(**kwargs):
        stream = FakeStream(**kwargs)
        streams.append(stream)
        return stream

    bank = SoundDeviceSampleBank([SamplePlayer(_ramp(4), 4) for _ in range(3)], stream_factory=factory)
    bank.open()
    scheduler = Scheduler(PatternStore(2, 3, hits=[(1, 2)]), bank, interval_ms=10.0)

    scheduler.tick()
    assert bank.players[2].is_playing
    assert not bank.players[0].is_playing

    scheduler.stop()
    assert all(stream.closed for stream in streams)


def test_scheduler_refuses_to_restart_on_a_released_bank():
    bank = SoundDeviceSampleBank([SamplePlayer(_ramp(4), 4)], stream_factory=FakeStream)
    bank.open()
    scheduler = Scheduler(PatternStore(2, 1, hits=[(0, 0), (1, 0)]), bank, interval_ms=10.0)

    scheduler.start()
    scheduler.stop()

    assert bank.players[0].closed
    with pytest.raises(SequencerError):
        scheduler.start()
    assert not scheduler.is_running

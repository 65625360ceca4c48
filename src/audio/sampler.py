"""Decoded sample players and the sounddevice-backed sample bank."""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Callable, List, Sequence, Tuple

import numpy as np

from domain.errors import BackendUnavailableError

logger = logging.getLogger(__name__)

StreamFactory = Callable[..., Any]


def load_sample(path: Path) -> Tuple[np.ndarray, int]:
    """Decode an audio file into ``(frames, channels)`` float32 data and its rate."""

    import soundfile as sf

    data, sample_rate = sf.read(str(path), dtype="float32", always_2d=True)
    return np.ascontiguousarray(data, dtype=np.float32), int(sample_rate)


class SamplePlayer:
    """One decoded sample with a lock-protected read head.

    ``play`` rewinds and starts, ``render`` pulls the next block for an
    output callback. Calls may arrive from the clock, the touch path, and
    the audio callback at once; the lock keeps the read head consistent.
    """

    def __init__(self, data: np.ndarray, sample_rate: int) -> None:
        buffer = np.asarray(data, dtype=np.float32)
        if buffer.ndim == 1:
            buffer = buffer[:, np.newaxis]
        if buffer.ndim != 2:
            raise ValueError(f"Sample data must be 1-D or 2-D, got shape {buffer.shape}")
        if sample_rate <= 0:
            raise ValueError("sample_rate must be positive")
        self._buffer = buffer
        self._sample_rate = int(sample_rate)
        self._position = 0
        self._playing = False
        self._closed = False
        self._lock = threading.Lock()

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channels(self) -> int:
        return int(self._buffer.shape[1])

    @property
    def frames(self) -> int:
        return int(self._buffer.shape[0])

    @property
    def duration_seconds(self) -> float:
        return self.frames / float(self._sample_rate)

    @property
    def position_seconds(self) -> float:
        with self._lock:
            return self._position / float(self._sample_rate)

    @property
    def is_playing(self) -> bool:
        with self._lock:
            return self._playing

    @property
    def closed(self) -> bool:
        return self._closed

    def play(self) -> None:
        with self._lock:
            self._ensure_open()
            self._position = 0
            self._playing = self.frames > 0

    def stop(self) -> None:
        with self._lock:
            self._playing = False

    def seek(self, position_seconds: float) -> None:
        with self._lock:
            self._ensure_open()
            target = int(round(max(0.0, float(position_seconds)) * self._sample_rate))
            self._position = min(target, self.frames)
            if self._position >= self.frames:
                self._playing = False

    def render(self, frames: int) -> np.ndarray:
        """Return the next ``frames`` of audio, silent once playback finished."""

        block = np.zeros((frames, self.channels), dtype=np.float32)
        with self._lock:
            if not self._playing:
                return block
            chunk = self._buffer[self._position : self._position + frames]
            block[: chunk.shape[0]] = chunk
            self._position += chunk.shape[0]
            if self._position >= self.frames:
                self._playing = False
        return block

    def close(self) -> None:
        with self._lock:
            self._playing = False
            self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Sample player is closed")


def _sounddevice_stream_factory(**kwargs: Any) -> Any:  # pragma: no cover - requires audio device
    try:
        import sounddevice as sd
    except (ImportError, OSError) as exc:
        raise BackendUnavailableError(f"sounddevice is unavailable: {exc}") from exc
    return sd.OutputStream(**kwargs)


class SoundDeviceSampleBank:
    """One output stream per track, each rendering its own sample player.

    Tracks are never mixed together; the host audio system sums the
    streams. Streams are created and started by :meth:`open` so a missing
    file or device fails before the scheduler starts.
    """

    def __init__(
        self,
        players: Sequence[SamplePlayer],
        *,
        block_size: int = 512,
        stream_factory: StreamFactory | None = None,
    ) -> None:
        self._players: List[SamplePlayer] = list(players)
        self._block_size = int(block_size)
        self._stream_factory = stream_factory or _sounddevice_stream_factory
        self._streams: List[Any] = []

    @classmethod
    def from_files(
        cls,
        paths: Sequence[Path],
        *,
        block_size: int = 512,
        stream_factory: StreamFactory | None = None,
    ) -> SoundDeviceSampleBank:
        players: List[SamplePlayer] = []
        for path in paths:
            if not Path(path).exists():
                raise BackendUnavailableError(f"Sample file '{path}' does not exist")
            try:
                data, sample_rate = load_sample(Path(path))
            except (ImportError, OSError, RuntimeError) as exc:
                raise BackendUnavailableError(f"Unable to decode sample '{path}': {exc}") from exc
            logger.debug("Loaded %s (%s frames @ %s Hz)", path, data.shape[0], sample_rate)
            players.append(SamplePlayer(data, sample_rate))
        bank = cls(players, block_size=block_size, stream_factory=stream_factory)
        bank.open()
        return bank

    @property
    def players(self) -> List[SamplePlayer]:
        return list(self._players)

    def open(self) -> None:
        """Create and start one output stream per track."""

        if self._streams:
            return
        streams: List[Any] = []
        try:
            for player in self._players:
                stream = self._stream_factory(
                    samplerate=player.sample_rate,
                    blocksize=self._block_size,
                    channels=player.channels,
                    dtype="float32",
                    callback=self._make_callback(player),
                )
                stream.start()
                streams.append(stream)
        except BackendUnavailableError:
            self._abort(streams)
            raise
        except Exception as exc:
            self._abort(streams)
            raise BackendUnavailableError(f"Unable to open output stream: {exc}") from exc
        self._streams = streams
        logger.info("Opened %s sample streams", len(streams))

    def play(self, track: int) -> None:
        self._players[track].play()

    def stop(self, track: int) -> None:
        self._players[track].stop()

    def seek(self, track: int, position_seconds: float) -> None:
        self._players[track].seek(position_seconds)

    def close(self, track: int) -> None:
        player = self._players[track]
        player.close()
        if track < len(self._streams):
            stream = self._streams[track]
            stream.stop()
            stream.close()

    @staticmethod
    def _make_callback(player: SamplePlayer) -> Callable[..., None]:
        def callback(outdata, frames, time_info, status):  # pragma: no cover - audio thread
            if status:
                logger.debug("Output stream status: %s", status)
            outdata[:] = player.render(frames)

        return callback

    @staticmethod
    def _abort(streams: List[Any]) -> None:
        for stream in streams:
            try:
                stream.stop()
                stream.close()
            except Exception as exc:  # pragma: no cover - best-effort cleanup
                logger.warning("Failed to close stream during abort: %s", exc)


__all__ = ["SamplePlayer", "SoundDeviceSampleBank", "load_sample"]

"""CLI helper that plays a configured board for a fixed duration.

Usage:
    python tools/run_drum_machine.py --samples-dir assets --duration 8
    python tools/run_drum_machine.py --dry-run --interval-ms 100 --duration 2

Without ``--dry-run`` the tool opens one sounddevice stream per track using
the configured sample files. With ``--dry-run`` triggers are only recorded
so the clock can be exercised on machines without audio hardware.
"""
from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import Any, Dict, Sequence

from audio.sampler import SoundDeviceSampleBank
from audio.trigger import RecordingSampleTrigger, SampleTrigger
from domain.errors import BackendUnavailableError, ConfigurationError, ShutdownFailure
from domain.models import SequencerConfig, load_config
from sequencer.machine import DrumMachine

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play a grid drum machine pattern.")
    parser.add_argument("--config", type=Path, default=None, help="JSON configuration document.")
    parser.add_argument("--duration", type=float, default=8.0, help="Seconds to play before stopping.")
    parser.add_argument("--bpm", type=float, default=None, help="Override the configured tempo.")
    parser.add_argument(
        "--interval-ms",
        type=float,
        default=None,
        help="Use a fixed tick length in milliseconds instead of a tempo.",
    )
    parser.add_argument("--preset", default=None, help="Seed the board from a bundled preset.")
    parser.add_argument(
        "--samples-dir",
        type=Path,
        default=Path.cwd(),
        help="Directory used to resolve relative sample paths.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Record triggers instead of opening audio streams.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log every tick.")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> SequencerConfig:
    overrides: Dict[str, Any] = {}
    if args.bpm is not None:
        overrides["tempo_bpm"] = args.bpm
    if args.interval_ms is not None:
        overrides["tick_interval_ms"] = args.interval_ms
    if args.preset is not None:
        overrides["default_pattern"] = args.preset
    if args.config is not None:
        base = load_config(args.config.expanduser().resolve())
        payload = base.model_dump(mode="json")
        payload.update(overrides)
        return SequencerConfig(**payload)
    return SequencerConfig(**overrides)


def build_trigger(config: SequencerConfig, args: argparse.Namespace) -> SampleTrigger:
    if args.dry_run:
        return RecordingSampleTrigger()
    paths = config.resolve_sample_paths(args.samples_dir.expanduser().resolve())
    return SoundDeviceSampleBank.from_files(paths)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )
    try:
        config = build_config(args)
        trigger = build_trigger(config, args)
    except (ConfigurationError, BackendUnavailableError) as exc:
        raise SystemExit(f"Unable to start drum machine: {exc}") from exc

    machine = DrumMachine.from_config(config, trigger)
    logger.info(
        "Playing %s hits on a %sx%s board for %.2f s",
        len(machine.store.hits()),
        config.num_steps,
        config.num_tracks,
        args.duration,
    )
    machine.start()
    try:
        time.sleep(max(0.0, args.duration))
    except KeyboardInterrupt:
        logger.info("Interrupted; stopping")
    try:
        machine.stop()
    except ShutdownFailure as exc:
        logger.error("%s", exc)
        return 1

    logger.info("Stopped after %s ticks", machine.scheduler.tick_count)
    if isinstance(trigger, RecordingSampleTrigger):
        for track, count in sorted(trigger.play_counts().items()):
            logger.info("Track %s triggered %s times", track, count)
    failures = machine.scheduler.trigger_failures()
    if failures:
        logger.warning("%s trigger failures during playback", len(failures))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())

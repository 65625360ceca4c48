import json
import logging
from pathlib import Path

import pytest

from domain.models import HighlightMode
from tools import run_drum_machine


def test_dry_run_plays_and_reports_counts(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    exit_code = run_drum_machine.main(
        ["--dry-run", "--interval-ms", "10", "--duration", "0.3", "--preset", "demo"]
    )

    assert exit_code == 0
    messages = [record.getMessage() for record in caplog.records]
    assert any(message.startswith("Stopped after") for message in messages)
    assert any("Track 1 triggered" in message for message in messages)


def test_config_file_values_survive_overrides(tmp_path: Path) -> None:
    config_path = tmp_path / "board.json"
    config_path.write_text(
        json.dumps({"num_steps": 8, "num_tracks": 2, "highlight_mode": "track", "default_pattern": [[0, 1]]}),
        encoding="utf-8",
    )
    args = run_drum_machine.parse_args(["--config", str(config_path), "--bpm", "90", "--dry-run"])

    config = run_drum_machine.build_config(args)

    assert config.num_steps == 8
    assert config.tempo_bpm == 90.0
    assert config.highlight_mode is HighlightMode.TRACK
    assert config.seeded_hits() == [(0, 1)]


def test_bad_configuration_exits_with_message(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_drum_machine.main(["--dry-run", "--bpm", "0", "--duration", "0"])
    assert "Unable to start drum machine" in str(excinfo.value)


def test_missing_samples_exit_before_playback(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_drum_machine.main(["--samples-dir", str(tmp_path), "--duration", "0"])
    assert "does not exist" in str(excinfo.value)

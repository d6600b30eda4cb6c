"""Tests for the command-line interface.

Author: Pitwall contributors
"""

import json

import pytest

from pitwall import cli


@pytest.fixture
def laps_csv(tmp_path):
    """Lap CSV with two cars; CAR_01 has 30 flat 90s laps."""
    lines = ["car_id,lap,lap_time,driver_id"]
    lines += [f"CAR_01,{lap},90.0,Ana" for lap in range(1, 31)]
    lines += [f"CAR_02,{lap},95.0,Ben" for lap in range(1, 11)]
    path = tmp_path / "VIR_R1.csv"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


class TestCli:
    """Tests for CLI commands."""

    def test_cars(self, laps_csv, capsys):
        assert cli.main(["cars", "--laps", str(laps_csv)]) == 0

        cars = json.loads(capsys.readouterr().out)
        assert cars == [{"id": "CAR_01", "label": "Ana"}, {"id": "CAR_02", "label": "Ben"}]

    def test_recommend(self, laps_csv, capsys):
        code = cli.main(
            [
                "recommend", "--laps", str(laps_csv), "--car", "CAR_01",
                "--lap", "10", "--tire-age", "3", "--compound", "soft",
            ]
        )

        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["best_pit_lap"] == 15
        assert payload["current_state"] == {"lap": 10, "tire_age": 3, "compound": "soft"}
        assert len(payload["candidates"]) == 5

    def test_recommend_defaults_to_first_lap_state(self, laps_csv, capsys):
        assert cli.main(["recommend", "--laps", str(laps_csv), "--window-size", "2"]) == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload["current_state"] == {"lap": 1, "tire_age": 1, "compound": "soft"}
        assert [c["pit_lap"] for c in payload["candidates"]] == [2, 3]

    @pytest.mark.parametrize(
        "extra",
        [["--window-size", "0"], ["--window-size", "abc"], ["--car", "CAR_99"], ["--pit-loss", "-5"]],
    )
    def test_recommend_invalid_input_exit_code(self, laps_csv, extra):
        assert cli.main(["recommend", "--laps", str(laps_csv), *extra]) == 1

    def test_missing_file_exit_code(self, tmp_path):
        assert cli.main(["recommend", "--laps", str(tmp_path / "missing.csv")]) == 1

    def test_directory_path_exit_code(self, tmp_path):
        assert cli.main(["recommend", "--laps", str(tmp_path)]) == 1

    def test_replay_prints_one_payload_per_lap(self, laps_csv, capsys):
        code = cli.main(
            ["replay", "--laps", str(laps_csv), "--lap", "10", "--tire-age", "3", "--steps", "4"]
        )

        assert code == 0
        payloads = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
        assert [p["current_state"]["lap"] for p in payloads] == [10, 11, 12, 13, 14]
        assert [p["current_state"]["tire_age"] for p in payloads] == [3, 4, 5, 6, 7]
        assert payloads[0]["best_pit_lap"] == 15

    def test_replay_stops_at_last_recorded_lap(self, laps_csv, capsys):
        assert cli.main(["replay", "--laps", str(laps_csv), "--lap", "28", "--steps", "5"]) == 0

        payloads = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
        assert [p["current_state"]["lap"] for p in payloads] == [28, 29, 30]
        assert payloads[-1]["best_pit_lap"] is None

    def test_replay_negative_steps_exit_code(self, laps_csv):
        assert cli.main(["replay", "--laps", str(laps_csv), "--steps", "-1"]) == 1

    def test_report(self, laps_csv, tmp_path):
        output = tmp_path / "report.html"

        code = cli.main(
            ["report", "--laps", str(laps_csv), "--lap", "10", "--tire-age", "3", "--output", str(output)]
        )

        assert code == 0
        assert "Recommended Pit Lap: 15" in output.read_text(encoding="utf-8")

    def test_no_command_prints_help(self):
        assert cli.main([]) == 1

"""Tests for lap data loading and coercion.

Author: Pitwall contributors
"""

import pandas as pd
import pytest

from pitwall.config import StrategyConfig
from pitwall.data_loader import coerce_lap_records, laps_for_car, list_cars, load_laps_csv
from pitwall.engine import LapRecord


def write_csv(path, text: str):
    path.write_text(text.strip() + "\n", encoding="utf-8")
    return path


class TestLoadLapsCsv:
    """Tests for reading lap CSVs."""

    def test_reads_rows(self, tmp_path):
        csv = write_csv(
            tmp_path / "laps.csv",
            """
car_id,lap,lap_time,driver_id
CAR_07,1,92.1,Ana
CAR_07,2,91.8,Ana
CAR_11,1,93.0,Ben
""",
        )

        frame = load_laps_csv(csv)

        assert len(frame) == 3
        assert list(frame["car_id"]) == ["CAR_07", "CAR_07", "CAR_11"]

    def test_missing_car_id_gets_default(self, tmp_path):
        csv = write_csv(tmp_path / "laps.csv", "lap,lap_time\n1,90.0\n2,91.0")

        frame = load_laps_csv(csv, StrategyConfig(default_car_id="CAR_42"))

        assert set(frame["car_id"]) == {"CAR_42"}

    def test_row_limit(self, tmp_path):
        rows = "\n".join(f"CAR_01,{lap},90.0" for lap in range(1, 21))
        csv = write_csv(tmp_path / "laps.csv", "car_id,lap,lap_time\n" + rows)

        assert len(load_laps_csv(csv, row_limit=5)) == 5
        assert len(load_laps_csv(csv, StrategyConfig(row_limit=7))) == 7

    def test_missing_file_raises_value_error(self, tmp_path):
        with pytest.raises(ValueError, match="Failed to load lap data"):
            load_laps_csv(tmp_path / "nope.csv")

    def test_directory_raises_value_error(self, tmp_path):
        """Test OS-level read failures surface as ValueError."""
        with pytest.raises(ValueError, match="Failed to load lap data"):
            load_laps_csv(tmp_path)

    def test_blank_car_id_cell_gets_default(self, tmp_path):
        csv = write_csv(tmp_path / "laps.csv", "car_id,lap,lap_time\nCAR_07,1,90.0\n,2,91.0")

        frame = load_laps_csv(csv, StrategyConfig(default_car_id="CAR_42"))

        assert list(frame["car_id"]) == ["CAR_07", "CAR_42"]
        assert "nan" not in list_cars(frame)[1]["id"]


class TestCoerceLapRecords:
    """Tests for the typed record boundary."""

    def test_strings_coerced_to_numbers(self):
        rows = [
            {"car_id": "CAR_01", "lap": "1", "lap_time": "90.5"},
            {"car_id": "CAR_01", "lap": "2", "lap_time": "91.25"},
        ]

        records = coerce_lap_records(rows)

        assert records == [
            LapRecord("CAR_01", 1, 90.5),
            LapRecord("CAR_01", 2, 91.25),
        ]
        assert isinstance(records[0].lap, int)

    def test_unparseable_lap_time_becomes_none(self):
        rows = [{"car_id": "CAR_01", "lap": 3, "lap_time": "DNF"}]

        records = coerce_lap_records(rows)

        assert records == [LapRecord("CAR_01", 3, None)]

    def test_rows_without_valid_lap_rejected(self):
        """Test missing, fractional and non-positive lap numbers are dropped."""
        frame = pd.DataFrame(
            {
                "car_id": ["CAR_01"] * 5,
                "lap": ["1", "", "2.5", "0", "abc"],
                "lap_time": [90.0, 90.0, 90.0, 90.0, 90.0],
            }
        )

        records = coerce_lap_records(frame)

        assert [r.lap for r in records] == [1]

    def test_missing_car_id_and_lap_time_columns(self):
        records = coerce_lap_records([{"lap": 1}, {"lap": 2}], default_car_id="CAR_09")

        assert records == [LapRecord("CAR_09", 1, None), LapRecord("CAR_09", 2, None)]

    def test_missing_lap_column_raises(self):
        with pytest.raises(ValueError):
            coerce_lap_records([{"car_id": "CAR_01", "lap_time": 90.0}])

    def test_empty_input(self):
        assert coerce_lap_records([]) == []
        assert coerce_lap_records(pd.DataFrame()) == []


class TestCars:
    """Tests for car listing and filtering."""

    def test_list_cars_first_seen_with_labels(self):
        frame = pd.DataFrame(
            {
                "car_id": ["CAR_11", "CAR_07", "CAR_11"],
                "lap": [1, 1, 2],
                "driver_id": ["Ben", "Ana", "Ben"],
            }
        )

        assert list_cars(frame) == [
            {"id": "CAR_11", "label": "Ben"},
            {"id": "CAR_07", "label": "Ana"},
        ]

    def test_list_cars_falls_back_to_id(self):
        frame = pd.DataFrame({"car_id": ["CAR_01"], "lap": [1]})

        assert list_cars(frame) == [{"id": "CAR_01", "label": "CAR_01"}]

    def test_laps_for_car(self):
        records = [
            LapRecord("CAR_01", 1, 90.0),
            LapRecord("CAR_02", 1, 91.0),
            LapRecord("CAR_01", 2, 90.5),
        ]

        assert [r.lap for r in laps_for_car(records, "CAR_01")] == [1, 2]
        assert laps_for_car(records, "CAR_99") == []

"""Lap data loading for the Pitwall strategy engine.

Rows are coerced to typed LapRecord values once, here. Everything past this
module only sees numeric laps and lap times.

Author: Pitwall contributors
"""

import logging
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

import numpy as np
import pandas as pd

from pitwall.config import DEFAULT_CONFIG, StrategyConfig
from pitwall.engine import LapRecord

logger = logging.getLogger(__name__)

Rows = Union[pd.DataFrame, Iterable[Mapping]]


def load_laps_csv(
    path: Union[str, Path],
    config: StrategyConfig = DEFAULT_CONFIG,
    row_limit: Optional[int] = None,
) -> pd.DataFrame:
    """Read a lap times CSV from local disk.

    Adds a car_id column holding config.default_car_id when the file has
    none, so single-car exports still load.
    """
    row_limit = row_limit if row_limit is not None else config.row_limit
    try:
        frame = pd.read_csv(path, nrows=row_limit, skip_blank_lines=True)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        error_msg = f"Failed to load lap data from {path}: {str(e)}"
        logger.error(error_msg)
        raise ValueError(error_msg) from e

    if "car_id" not in frame.columns:
        logger.info(f"No car_id column in {path}, assigning {config.default_car_id}")
        frame.insert(0, "car_id", config.default_car_id)

    frame["car_id"] = frame["car_id"].fillna(config.default_car_id).astype(str)
    logger.info(f"Loaded {len(frame)} rows from {path}")
    return frame


def coerce_lap_records(
    rows: Rows,
    default_car_id: str = DEFAULT_CONFIG.default_car_id,
) -> list[LapRecord]:
    """Convert raw rows into LapRecord values.

    Rows without a positive integer lap number are rejected. Lap times that
    do not parse become None and are later ignored by the engine average.
    """
    frame = rows.copy() if isinstance(rows, pd.DataFrame) else pd.DataFrame(list(rows))
    if frame.empty:
        return []
    if "lap" not in frame.columns:
        raise ValueError("Lap data has no 'lap' column")

    if "car_id" not in frame.columns:
        frame["car_id"] = default_car_id
    frame["car_id"] = frame["car_id"].fillna(default_car_id)
    if "lap_time" not in frame.columns:
        frame["lap_time"] = np.nan

    laps = pd.to_numeric(frame["lap"], errors="coerce")
    lap_times = pd.to_numeric(frame["lap_time"], errors="coerce")

    valid = np.isfinite(laps) & (laps >= 1) & (laps == np.floor(laps))
    rejected = int((~valid).sum())
    if rejected:
        logger.warning(f"Rejected {rejected} rows with missing or invalid lap numbers")

    records = []
    for car_id, lap, lap_time in zip(frame["car_id"][valid], laps[valid], lap_times[valid]):
        records.append(
            LapRecord(
                car_id=str(car_id),
                lap=int(lap),
                lap_time=float(lap_time) if np.isfinite(lap_time) else None,
            )
        )
    return records


def list_cars(frame: pd.DataFrame) -> list[dict]:
    """Unique cars in first-seen order with a display label."""
    if frame.empty or "car_id" not in frame.columns:
        return []

    label_col = next((c for c in ("driver_id", "Driver") if c in frame.columns), None)
    firsts = frame.drop_duplicates(subset="car_id", keep="first")

    cars = []
    for _, row in firsts.iterrows():
        car_id = str(row["car_id"])
        label = row[label_col] if label_col is not None else None
        cars.append({"id": car_id, "label": str(label) if pd.notna(label) and label != "" else car_id})
    return cars


def laps_for_car(records: Iterable[LapRecord], car_id: str) -> list[LapRecord]:
    return [r for r in records if r.car_id == car_id]

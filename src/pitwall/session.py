"""Selection context for pit strategy requests.

A StrategySession bundles the selected dataset, car, engine and live race
state. Sessions are immutable values: changing car or dataset means building a
new one, so a reader never sees an engine paired with another car's state.

Author: Pitwall contributors
"""

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from pitwall.config import COMPOUNDS, DEFAULT_CONFIG, StrategyConfig
from pitwall.data_loader import laps_for_car
from pitwall.engine import InvalidInputError, LapRecord, PitStrategyEngine, PitWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RaceState:
    """Where the car is right now."""

    lap: int = 1
    tire_age: int = 1
    compound: str = "soft"

    def __post_init__(self) -> None:
        if self.lap < 1:
            raise InvalidInputError(f"lap must be >= 1, got {self.lap}")
        if self.tire_age < 0:
            raise InvalidInputError(f"tire_age cannot be negative, got {self.tire_age}")
        if self.compound not in COMPOUNDS:
            raise InvalidInputError(
                f"compound must be one of {COMPOUNDS}, got {self.compound!r}"
            )

    def advance(self, new_lap: int) -> "RaceState":
        """Apply a telemetry tick; a new lap ages the tires by one."""
        if new_lap > self.lap:
            return replace(self, lap=new_lap, tire_age=self.tire_age + 1)
        return self

    def to_dict(self) -> dict:
        return {"lap": self.lap, "tire_age": self.tire_age, "compound": self.compound}


@dataclass(frozen=True)
class StrategySession:
    """Per-selection context passed to each request handler."""

    dataset_id: Optional[str]
    car_id: str
    engine: PitStrategyEngine
    state: RaceState

    def with_state(self, state: RaceState) -> "StrategySession":
        return replace(self, state=state)

    def next_recorded_lap(self) -> Optional[int]:
        """Lowest recorded lap after the current one, or None at the end."""
        later = [r.lap for r in self.engine.race_data if r.lap > self.state.lap]
        return min(later) if later else None

    def tick(self) -> "StrategySession":
        """Replay one step of live timing: move to the next recorded lap.

        Tires age by one per step. At the last recorded lap the session is
        returned unchanged.
        """
        next_lap = self.next_recorded_lap()
        if next_lap is None:
            return self
        return self.with_state(self.state.advance(next_lap))

    def find_window(self, window_size: int) -> PitWindow:
        return self.engine.find_window(
            self.state.lap,
            self.state.tire_age,
            self.state.compound,
            window_size,
        )

    def recommend(
        self,
        window_size: Optional[int] = None,
        config: StrategyConfig = DEFAULT_CONFIG,
    ) -> dict:
        """Run the pit window search for the current state.

        Returns the response payload:
        {current_state, best_pit_lap, candidates: [{pit_lap, estimated_total_time}]}
        """
        if window_size is None:
            window_size = config.default_window_size
        window = self.find_window(window_size)
        return recommendation_payload(self.state, window)


def recommendation_payload(state: RaceState, window: PitWindow) -> dict:
    return {
        "current_state": state.to_dict(),
        "best_pit_lap": window.best_pit_lap,
        "candidates": [c.to_dict() for c in window.candidates],
    }


def build_session(
    records: Iterable[LapRecord],
    car_id: str,
    dataset_id: Optional[str] = None,
    config: StrategyConfig = DEFAULT_CONFIG,
) -> StrategySession:
    """Build the engine and initial race state for one car.

    The state starts on the car's first recorded lap with
    config.initial_tire_age and config.initial_compound.

    Raises:
        InvalidInputError: If the car has no laps.
    """
    car_laps = laps_for_car(records, car_id)
    if not car_laps:
        raise InvalidInputError(f"No laps for car {car_id!r}")

    engine = PitStrategyEngine(
        car_laps,
        pit_loss_seconds=config.pit_loss_seconds,
        fallback_avg_lap_time=config.default_avg_lap_time,
    )
    state = RaceState(
        lap=car_laps[0].lap,
        tire_age=config.initial_tire_age,
        compound=config.initial_compound,
    )

    logger.info(
        f"Session ready for {car_id} ({dataset_id or 'ad hoc'}): "
        f"{engine.total_laps} laps, avg {engine.avg_lap_time:.2f}s"
    )
    return StrategySession(dataset_id=dataset_id, car_id=car_id, engine=engine, state=state)


def parse_window_size(raw, config: StrategyConfig = DEFAULT_CONFIG) -> int:
    """Coerce an optional window size from a request or command line.

    Missing values fall back to config.default_window_size. Values that are
    not integers, not positive, or above config.max_window_size are rejected.
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return config.default_window_size
    if isinstance(raw, bool):
        raise InvalidInputError(f"window size must be an integer, got {raw!r}")

    try:
        value = int(raw.strip()) if isinstance(raw, str) else int(raw)
    except (TypeError, ValueError, OverflowError) as e:
        raise InvalidInputError(f"window size must be an integer, got {raw!r}") from e
    if not isinstance(raw, str) and value != raw:
        raise InvalidInputError(f"window size must be an integer, got {raw!r}")

    if value < 1:
        raise InvalidInputError(f"window size must be positive, got {value}")
    if value > config.max_window_size:
        raise InvalidInputError(
            f"window size {value} exceeds the maximum of {config.max_window_size}"
        )
    return value

"""Pit stop strategy engine.

Estimates lap times from tire age and compound, simulates the rest of the race
for every candidate pit lap inside a short lookahead window, and recommends
the candidate with the lowest predicted total time.

Degradation model:
- Baseline: mean observed lap time for the car
- Linear tire wear: +0.15s per lap of tire age, uncapped
- Compound offset: soft -0.4s, medium 0.0s, hard +0.3s

A stop always fits the medium compound. The engine holds no mutable state
after construction, so one instance can serve concurrent callers.

Author: Pitwall contributors
"""

import logging
import math
import numbers
from dataclasses import dataclass, field
from typing import Optional, Sequence

logger = logging.getLogger(__name__)

DEG_RATE_PER_LAP = 0.15  # seconds per lap of tire age
COMPOUND_OFFSETS: dict[str, float] = {
    "soft": -0.4,
    "medium": 0.0,
    "hard": 0.3,
}
PIT_COMPOUND = "medium"
DEFAULT_PIT_LOSS_SECONDS = 22.0
FALLBACK_AVG_LAP_TIME = 90.0
DEFAULT_WINDOW_SIZE = 5


class InvalidInputError(ValueError):
    """Raised when the engine is given inputs it cannot simulate."""


@dataclass(frozen=True)
class LapRecord:
    """One observed lap for one car."""

    car_id: str
    lap: int
    lap_time: Optional[float] = None  # seconds, None when not parseable

    def __post_init__(self) -> None:
        if isinstance(self.lap, bool) or not isinstance(self.lap, numbers.Integral):
            raise InvalidInputError(f"lap must be an integer, got {self.lap!r}")
        if self.lap < 1:
            raise InvalidInputError(f"lap must be >= 1, got {self.lap}")

    @property
    def has_valid_time(self) -> bool:
        return (
            isinstance(self.lap_time, numbers.Real)
            and not isinstance(self.lap_time, bool)
            and math.isfinite(self.lap_time)
        )


@dataclass(frozen=True)
class CandidateResult:
    """Predicted race time if the car pits on `pit_lap`."""

    pit_lap: int
    estimated_total_time: float  # seconds

    def to_dict(self) -> dict:
        return {
            "pit_lap": self.pit_lap,
            "estimated_total_time": self.estimated_total_time,
        }


@dataclass(frozen=True)
class PitWindow:
    """Result of a pit window search."""

    best_pit_lap: Optional[int]
    candidates: list[CandidateResult] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.candidates

    @property
    def best(self) -> Optional[CandidateResult]:
        for candidate in self.candidates:
            if candidate.pit_lap == self.best_pit_lap:
                return candidate
        return None


def compound_offset(compound: str) -> float:
    """Lap time offset for a compound; unknown compounds get 0.0."""
    return COMPOUND_OFFSETS.get(compound, 0.0)


def _validate_window_size(window_size) -> int:
    if isinstance(window_size, bool) or not isinstance(window_size, numbers.Integral):
        raise InvalidInputError(f"window_size must be an integer, got {window_size!r}")
    if window_size < 1:
        raise InvalidInputError(f"window_size must be positive, got {window_size}")
    return int(window_size)


class PitStrategyEngine:
    """Brute-force pit window search over a single car's lap history.

    Args:
        race_data: Lap records for one car. Must not be empty.
        pit_loss_seconds: Time lost for a stop, added once on the pit lap.
        fallback_avg_lap_time: Baseline used when no lap time in race_data parses.

    Raises:
        InvalidInputError: If race_data is empty or a time constant is invalid.
    """

    def __init__(
        self,
        race_data: Sequence[LapRecord],
        pit_loss_seconds: float = DEFAULT_PIT_LOSS_SECONDS,
        fallback_avg_lap_time: float = FALLBACK_AVG_LAP_TIME,
    ) -> None:
        race_data = list(race_data)
        if not race_data:
            raise InvalidInputError("race_data is empty; cannot build a strategy engine")
        if not math.isfinite(pit_loss_seconds) or pit_loss_seconds < 0:
            raise InvalidInputError(
                f"pit_loss_seconds must be a non-negative number, got {pit_loss_seconds}"
            )
        if not math.isfinite(fallback_avg_lap_time) or fallback_avg_lap_time <= 0:
            raise InvalidInputError(
                f"fallback_avg_lap_time must be a positive number, got {fallback_avg_lap_time}"
            )

        self.race_data = tuple(race_data)
        self.pit_loss_seconds = float(pit_loss_seconds)
        self.fallback_avg_lap_time = float(fallback_avg_lap_time)
        self.total_laps = max(r.lap for r in self.race_data)
        self.avg_lap_time = self._average_lap_time()

        logger.debug(
            f"Engine ready: {len(self.race_data)} laps, total_laps={self.total_laps}, "
            f"avg_lap_time={self.avg_lap_time:.3f}s, pit_loss={self.pit_loss_seconds:.1f}s"
        )

    def _average_lap_time(self) -> float:
        times = [float(r.lap_time) for r in self.race_data if r.has_valid_time]
        if not times:
            logger.warning(
                f"No valid lap times in race data, using {self.fallback_avg_lap_time}s average"
            )
            return self.fallback_avg_lap_time
        return sum(times) / len(times)

    def estimate_lap_time(self, lap: int, tire_age: int, compound: str) -> float:
        """Predict a lap time in seconds.

        `lap` does not enter the current formula; it is part of the signature
        so lap-dependent terms (fuel load, track evolution) can be added later.
        """
        degradation = DEG_RATE_PER_LAP * tire_age
        return self.avg_lap_time + degradation + compound_offset(compound)

    def simulate(
        self,
        current_lap: int,
        current_age: int,
        current_compound: str,
        pit_lap: Optional[int],
    ) -> float:
        """Predict total time from current_lap to the flag, pitting on pit_lap.

        The pit lap costs only the pit loss; age resets to 0 on medium tires.
        A pit_lap past the final lap (or None) never triggers, which gives the
        stay-out time.
        """
        total = 0.0
        age = current_age
        compound = current_compound

        for lap in range(current_lap, self.total_laps + 1):
            if lap == pit_lap:
                total += self.pit_loss_seconds
                age = 0
                compound = PIT_COMPOUND
                continue
            total += self.estimate_lap_time(lap, age, compound)
            age += 1

        return total

    def stay_out_time(self, current_lap: int, current_age: int, current_compound: str) -> float:
        """Predict total time to the flag without stopping."""
        return self.simulate(current_lap, current_age, current_compound, None)

    def find_window(
        self,
        current_lap: int,
        current_age: int,
        current_compound: str,
        window_size: int = DEFAULT_WINDOW_SIZE,
    ) -> PitWindow:
        """Evaluate every pit lap in (current_lap, current_lap + window_size].

        The window is capped at the final lap. On equal totals the earliest
        lap wins. At or past the final lap the window is empty and
        best_pit_lap is None.

        Raises:
            InvalidInputError: If window_size is not a positive integer.
        """
        window_size = _validate_window_size(window_size)
        max_lap = min(current_lap + window_size, self.total_laps)

        candidates = [
            CandidateResult(
                pit_lap=lap,
                estimated_total_time=self.simulate(
                    current_lap, current_age, current_compound, lap
                ),
            )
            for lap in range(current_lap + 1, max_lap + 1)
        ]

        if not candidates:
            logger.info(f"No pit candidates at lap {current_lap}/{self.total_laps}")
            return PitWindow(best_pit_lap=None, candidates=[])

        best = candidates[0]
        for candidate in candidates:
            if candidate.estimated_total_time < best.estimated_total_time:
                best = candidate

        logger.debug(
            f"Pit window laps {candidates[0].pit_lap}-{candidates[-1].pit_lap}: "
            f"best lap {best.pit_lap} ({best.estimated_total_time:.2f}s)"
        )
        return PitWindow(best_pit_lap=best.pit_lap, candidates=candidates)

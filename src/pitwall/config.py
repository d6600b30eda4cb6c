"""Configuration module for the Pitwall strategy engine.

Author: Pitwall contributors
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

Compound = Literal["soft", "medium", "hard"]
COMPOUNDS: tuple[str, ...] = ("soft", "medium", "hard")


@dataclass
class StrategyConfig:
    """Configuration for pit strategy recommendations.

    One instance is shared by the loader, the session layer, the CLI and the
    dashboard. The degradation formula itself is fixed in the engine; this
    only carries the tunable inputs around it.
    """

    # Pit stop settings
    pit_loss_seconds: float = 22.0  # seconds lost per stop
    default_avg_lap_time: float = 90.0  # used when no lap time parses

    # Pit window search
    default_window_size: int = 5  # laps ahead
    max_window_size: int = 50  # upper bound accepted from callers

    # Selection defaults
    default_car_id: str = "CAR_01"
    initial_tire_age: int = 1
    initial_compound: Compound = "soft"

    # Loading
    row_limit: Optional[int] = None  # cap CSV rows for large datasets

    # Output settings
    output_dir: Path = field(default_factory=lambda: Path("outputs"))
    plot_width: int = 1200
    plot_height: int = 600
    plot_theme: str = "plotly_dark"

    def __post_init__(self) -> None:
        """Validate configuration."""
        self.output_dir = Path(self.output_dir)

        if self.pit_loss_seconds < 0:
            raise ValueError("pit_loss_seconds cannot be negative")
        if self.default_avg_lap_time <= 0:
            raise ValueError("default_avg_lap_time must be positive")
        if self.default_window_size < 1:
            raise ValueError("default_window_size must be positive")
        if self.max_window_size < self.default_window_size:
            raise ValueError("max_window_size must be >= default_window_size")
        if self.initial_tire_age < 0:
            raise ValueError("initial_tire_age cannot be negative")
        if self.initial_compound not in COMPOUNDS:
            raise ValueError(f"initial_compound must be one of {COMPOUNDS}")
        if self.row_limit is not None and self.row_limit < 1:
            raise ValueError("row_limit must be positive when set")

        logger.debug("Configuration initialized successfully")


DEFAULT_CONFIG = StrategyConfig()

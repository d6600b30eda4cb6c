"""
Pitwall: pit stop window recommendations from race lap data

A small strategy engine for race telemetry dashboards with:
- Lap time estimation from tire age and compound
- Full remaining-race simulation per candidate pit lap
- Pit window search with a deterministic best-lap pick
- JSON payloads, plotly charts and HTML reports

Author: Pitwall contributors
License: MIT
"""

__version__ = "0.1.0"

from pitwall import config, data_loader, engine, session, viz
from pitwall.engine import (
    CandidateResult,
    InvalidInputError,
    LapRecord,
    PitStrategyEngine,
    PitWindow,
)

__all__ = [
    "config",
    "data_loader",
    "engine",
    "session",
    "viz",
    "CandidateResult",
    "InvalidInputError",
    "LapRecord",
    "PitStrategyEngine",
    "PitWindow",
]

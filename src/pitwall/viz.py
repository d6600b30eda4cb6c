"""Visualization module for the Pitwall strategy engine.

Dark theme charts in the pit wall palette:
- Candidate pit laps with the recommended lap highlighted
- Projected lap times to the flag for a chosen stop

Author: Pitwall contributors
"""

import logging
from typing import Optional

import numpy as np
import plotly.graph_objects as go

from pitwall.config import DEFAULT_CONFIG, StrategyConfig
from pitwall.engine import PIT_COMPOUND, PitStrategyEngine, PitWindow

logger = logging.getLogger(__name__)

PIT_RED = "#FF1E1E"
PIT_BLUE = "#1E90FF"
PIT_GREEN = "#00D856"
PIT_YELLOW = "#FFA800"
GRID_COLOR = "rgba(255,255,255,0.1)"


def _dark_layout(
    fig: go.Figure,
    title: str,
    x_title: str,
    y_title: str,
    config: StrategyConfig,
) -> None:
    fig.update_layout(
        title=dict(text=title, font=dict(size=18, color="white")),
        xaxis=dict(title=x_title, gridcolor=GRID_COLOR, showgrid=True),
        yaxis=dict(title=y_title, gridcolor=GRID_COLOR, showgrid=True),
        template=config.plot_theme,
        width=config.plot_width,
        height=config.plot_height,
        plot_bgcolor="rgba(0,0,0,0)",
        paper_bgcolor="rgba(0,0,0,0)",
        font=dict(color="white"),
    )


def plot_pit_window(
    window: PitWindow,
    config: StrategyConfig = DEFAULT_CONFIG,
) -> go.Figure:
    """Bar chart of predicted race time per candidate pit lap."""
    fig = go.Figure()

    if window.is_empty:
        fig.add_annotation(
            text="No pit candidates: final lap reached",
            showarrow=False,
            font=dict(size=16, color=PIT_YELLOW),
            xref="paper",
            yref="paper",
            x=0.5,
            y=0.5,
        )
        _dark_layout(fig, "Pit Window", "Pit Lap", "Predicted Time to Flag (s)", config)
        return fig

    pit_laps = [c.pit_lap for c in window.candidates]
    totals = np.array([c.estimated_total_time for c in window.candidates])
    colors = [PIT_GREEN if lap == window.best_pit_lap else PIT_RED for lap in pit_laps]

    fig.add_trace(
        go.Bar(
            x=pit_laps,
            y=totals,
            marker=dict(color=colors, line=dict(color="white", width=1)),
            customdata=totals - totals.min(),
            hovertemplate="Lap %{x}<br>" +
                         "Time: %{y:.2f}s<br>" +
                         "Delta: +%{customdata:.2f}s<extra></extra>",
        )
    )

    # Zoom to the spread between candidates
    spread = float(totals.max() - totals.min())
    margin = max(spread * 0.5, 1.0)
    _dark_layout(
        fig,
        f"Pit Window: best lap {window.best_pit_lap}",
        "Pit Lap",
        "Predicted Time to Flag (s)",
        config,
    )
    fig.update_yaxes(range=[float(totals.min()) - margin, float(totals.max()) + margin])
    fig.update_xaxes(tickmode="array", tickvals=pit_laps)

    return fig


def plot_lap_time_projection(
    engine: PitStrategyEngine,
    current_lap: int,
    tire_age: int,
    compound: str,
    pit_lap: Optional[int],
    config: StrategyConfig = DEFAULT_CONFIG,
) -> go.Figure:
    """Per-lap predicted times from current_lap to the flag.

    Follows the same lap walk as PitStrategyEngine.simulate. The pit lap has
    no driving time and is marked with a line carrying the pit loss.
    """
    laps = list(range(current_lap, engine.total_laps + 1))
    stay_out_times = [
        engine.estimate_lap_time(lap, tire_age + i, compound) for i, lap in enumerate(laps)
    ]

    driving = []
    age, comp = tire_age, compound
    for lap in laps:
        if lap == pit_lap:
            age, comp = 0, PIT_COMPOUND
            continue
        driving.append((lap, engine.estimate_lap_time(lap, age, comp)))
        age += 1

    fig = go.Figure()

    fig.add_trace(
        go.Scatter(
            x=laps,
            y=stay_out_times,
            mode="lines",
            name=f"Stay out ({compound})",
            line=dict(width=2, color=PIT_BLUE, dash="dash"),
        )
    )
    fig.add_trace(
        go.Scatter(
            x=[lap for lap, _ in driving],
            y=[t for _, t in driving],
            mode="lines+markers",
            name=f"Pit lap {pit_lap}" if pit_lap is not None else "Plan",
            line=dict(width=3, color=PIT_RED),
            marker=dict(size=6, color=PIT_RED),
            hovertemplate="Lap %{x}<br>Lap Time: %{y:.2f}s<extra></extra>",
        )
    )

    if pit_lap is not None and current_lap <= pit_lap <= engine.total_laps:
        fig.add_vline(
            x=pit_lap,
            line_dash="dot",
            line_color=PIT_GREEN,
            line_width=2,
            annotation=dict(
                text=f"Pit: +{engine.pit_loss_seconds:.1f}s",
                font=dict(color=PIT_GREEN, size=12),
            ),
        )

    _dark_layout(fig, "Projected Lap Times", "Lap", "Lap Time (seconds)", config)
    fig.update_layout(hovermode="x unified")

    logger.debug(f"Projected {len(laps)} laps from lap {current_lap}, pit lap {pit_lap}")
    return fig

"""HTML report generation for the Pitwall strategy engine.

Author: Pitwall contributors
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from jinja2 import Template

from pitwall import viz
from pitwall.config import DEFAULT_CONFIG, StrategyConfig
from pitwall.engine import COMPOUND_OFFSETS, DEG_RATE_PER_LAP, PIT_COMPOUND, PitWindow
from pitwall.session import StrategySession

logger = logging.getLogger(__name__)

HTML_TEMPLATE = """
<!DOCTYPE html>
<html>
<head>
    <title>Pit Strategy Report - {{ car_id }}</title>
    <style>
        body { font-family: Arial; max-width: 1400px; margin: 0 auto; padding: 20px;
               background: #0f0f0f; color: #e0e0e0; }
        h1 { color: #ff1e1e; border-bottom: 3px solid #ff1e1e; }
        h2 { color: #1e90ff; margin-top: 30px; }
        .header { background: #1a1a1a; padding: 20px; border-radius: 10px; margin-bottom: 30px; }
        .recommendation { background: #1a3a1a; padding: 20px; border-radius: 10px;
                         border-left: 5px solid #00ff00; margin: 20px 0; }
        .terminal { background: #3a2d1a; padding: 20px; border-radius: 10px;
                    border-left: 5px solid #ffa800; margin: 20px 0; }
        table { border-collapse: collapse; width: 100%; }
        th, td { padding: 8px 12px; border-bottom: 1px solid #333; text-align: right; }
        tr.best td { color: #00d856; font-weight: bold; }
        .plot { margin: 30px 0; text-align: center; }
        .assumptions { background: #2d1a1a; padding: 15px; border-radius: 5px;
                      border-left: 4px solid #ff6b6b; margin: 20px 0; }
    </style>
</head>
<body>
    <div class="header">
        <h1>Pit Strategy Report</h1>
        <p><strong>Dataset:</strong> {{ dataset_id }}</p>
        <p><strong>Car:</strong> {{ car_id }}</p>
        <p><strong>Current lap:</strong> {{ state.lap }} / {{ total_laps }}</p>
        <p><strong>Tires:</strong> {{ state.compound }}, {{ state.tire_age }} laps old</p>
        <p><strong>Average lap time:</strong> {{ "%.3f"|format(avg_lap_time) }}s</p>
        <p><strong>Generated:</strong> {{ generation_time }}</p>
    </div>

    {% if best_pit_lap is not none %}
    <div class="recommendation">
        <h3>Recommended Pit Lap: {{ best_pit_lap }}</h3>
        <p>Predicted time to flag: {{ "%.2f"|format(best_time) }}s
           ({{ "%+.2f"|format(best_time - stay_out) }}s vs staying out)</p>
    </div>
    {% else %}
    <div class="terminal">
        <h3>No pit window</h3>
        <p>The car is on or past the final lap; there are no laps left to stop on.</p>
    </div>
    {% endif %}

    {% if candidates %}
    <h2>Candidates</h2>
    <table>
        <tr><th>Pit lap</th><th>Predicted total (s)</th><th>Delta to best (s)</th></tr>
        {% for c in candidates %}
        <tr{% if c.pit_lap == best_pit_lap %} class="best"{% endif %}>
            <td>{{ c.pit_lap }}</td>
            <td>{{ "%.2f"|format(c.estimated_total_time) }}</td>
            <td>{{ "%+.2f"|format(c.estimated_total_time - best_time) }}</td>
        </tr>
        {% endfor %}
    </table>
    {% endif %}

    <h2>Pit Window</h2>
    <div class="plot">{{ plot_window }}</div>

    <h2>Projected Lap Times</h2>
    <div class="plot">{{ plot_projection }}</div>

    <div class="assumptions">
        <h3>Modeling Assumptions</h3>
        <ul>
            <li>Baseline lap time is the mean of all valid recorded laps for the car</li>
            <li>Linear tire wear: +{{ deg_rate }}s per lap of tire age, no cliff</li>
            <li>Compound offsets: {% for name, offset in offsets.items() %}{{ name }} {{ "%+.1f"|format(offset) }}s{% if not loop.last %}, {% endif %}{% endfor %}</li>
            <li>Every stop fits {{ pit_compound }} tires and costs {{ pit_loss }}s</li>
            <li>No fuel effect, traffic, safety cars or weather</li>
        </ul>
    </div>
</body>
</html>
"""


def generate_report(
    session: StrategySession,
    window: PitWindow,
    config: StrategyConfig = DEFAULT_CONFIG,
    output_path: Optional[Path] = None,
) -> str:
    """Render the pit strategy report as HTML."""
    logger.info(f"Generating HTML report for {session.car_id}...")
    engine = session.engine
    state = session.state

    plot_window = viz.plot_pit_window(window, config).to_html(
        include_plotlyjs="cdn", div_id="window_plot"
    )
    plot_projection = viz.plot_lap_time_projection(
        engine, state.lap, state.tire_age, state.compound, window.best_pit_lap, config
    ).to_html(include_plotlyjs=False, div_id="projection_plot")

    best = window.best
    template = Template(HTML_TEMPLATE)
    html = template.render(
        dataset_id=session.dataset_id or "ad hoc",
        car_id=session.car_id,
        state=state,
        total_laps=engine.total_laps,
        avg_lap_time=engine.avg_lap_time,
        best_pit_lap=window.best_pit_lap,
        best_time=best.estimated_total_time if best else None,
        stay_out=engine.stay_out_time(state.lap, state.tire_age, state.compound),
        candidates=window.candidates,
        plot_window=plot_window,
        plot_projection=plot_projection,
        deg_rate=DEG_RATE_PER_LAP,
        offsets=COMPOUND_OFFSETS,
        pit_compound=PIT_COMPOUND,
        pit_loss=engine.pit_loss_seconds,
        generation_time=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
    )

    if output_path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(html, encoding="utf-8")
        logger.info(f"Report saved to: {output_path}")

    return html

"""Streamlit dashboard for the Pitwall strategy engine.

Author: Pitwall contributors
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import streamlit as st
import logging

from pitwall import config, data_loader, session, viz
from pitwall.engine import InvalidInputError

logging.basicConfig(level=logging.INFO)

st.set_page_config(
    page_title="Pitwall Strategy Dashboard",
    page_icon="🏁",
    layout="wide",
)


@st.cache_data
def load_frame(path: str, row_limit):
    cfg = config.StrategyConfig(row_limit=row_limit)
    return data_loader.load_laps_csv(path, cfg)


def sidebar_inputs():
    """Render sidebar controls."""
    st.sidebar.title("🏁 Pitwall")
    st.sidebar.markdown("---")

    st.sidebar.subheader("Dataset")
    laps_path = st.sidebar.text_input("Lap times CSV", "data/VIR_R1/lap_times.csv")
    row_limit = st.sidebar.number_input("Row limit (0 = all)", 0, 10_000_000, 0, 1000)

    return {
        'laps_path': laps_path,
        'row_limit': int(row_limit) or None,
    }


def state_inputs(sess):
    """Render race state controls for the selected car."""
    st.sidebar.markdown("---")
    st.sidebar.subheader("Race State")

    replay = st.sidebar.checkbox("Replay recorded laps")
    if replay:
        key = f"replay_{sess.dataset_id}_{sess.car_id}"
        if key not in st.session_state or st.sidebar.button("⏮ Reset replay"):
            st.session_state[key] = sess.state
        if st.sidebar.button("Next lap ▶"):
            st.session_state[key] = sess.with_state(st.session_state[key]).tick().state
        state = st.session_state[key]
        st.sidebar.caption(f"Lap {state.lap}, tires {state.tire_age} laps old ({state.compound})")
    else:
        lap = st.sidebar.number_input("Current lap", 1, sess.engine.total_laps, sess.state.lap)
        tire_age = st.sidebar.number_input("Tire age (laps)", 0, 200, sess.state.tire_age)
        compound = st.sidebar.selectbox(
            "Compound", config.COMPOUNDS, index=config.COMPOUNDS.index(sess.state.compound)
        )
        state = session.RaceState(lap=int(lap), tire_age=int(tire_age), compound=compound)

    window_size = st.sidebar.slider("Window size", 1, config.DEFAULT_CONFIG.max_window_size, 5)

    return state, window_size


def main():
    """Main application."""
    params = sidebar_inputs()
    st.title("🏁 Pit Strategy Dashboard")

    try:
        frame = load_frame(params['laps_path'], params['row_limit'])
    except ValueError as e:
        st.info("👈 Point the sidebar at a lap times CSV to begin")
        st.caption(str(e))
        return

    cars = data_loader.list_cars(frame)
    if not cars:
        st.error("No cars found in the dataset")
        return

    labels = {c['id']: c['label'] for c in cars}
    car_id = st.sidebar.selectbox("Car", list(labels), format_func=lambda cid: labels[cid])

    pit_loss = st.sidebar.number_input("Pit loss (s)", 0.0, 120.0, 22.0, 0.5)
    cfg = config.StrategyConfig(pit_loss_seconds=pit_loss)

    try:
        records = data_loader.coerce_lap_records(frame, cfg.default_car_id)
        sess = session.build_session(
            records, car_id, dataset_id=Path(params['laps_path']).stem, config=cfg
        )
        state, window_size = state_inputs(sess)
        sess = sess.with_state(state)
        window = sess.find_window(window_size)
    except InvalidInputError as e:
        st.error(f"❌ Error: {str(e)}")
        return

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Car", labels[car_id])
    with col2:
        st.metric("Lap", f"{state.lap} / {sess.engine.total_laps}")
    with col3:
        st.metric("Average Lap", f"{sess.engine.avg_lap_time:.2f}s")
    with col4:
        st.metric("Best Pit Lap", window.best_pit_lap if window.best_pit_lap is not None else "-")

    if window.best_pit_lap is None:
        st.warning("No pit window: the car is on or past the final lap")
    else:
        st.success(f"**💡 Recommended:** pit on lap {window.best_pit_lap}")

    tab1, tab2, tab3 = st.tabs(["Pit Window", "Lap Projection", "Payload"])

    with tab1:
        st.plotly_chart(viz.plot_pit_window(window, cfg), use_container_width=True)
        st.dataframe([c.to_dict() for c in window.candidates], use_container_width=True)

    with tab2:
        fig = viz.plot_lap_time_projection(
            sess.engine, state.lap, state.tire_age, state.compound, window.best_pit_lap, cfg
        )
        st.plotly_chart(fig, use_container_width=True)

    with tab3:
        st.json(session.recommendation_payload(state, window))


if __name__ == "__main__":
    main()

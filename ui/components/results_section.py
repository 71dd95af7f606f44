"""Simulation control and results display component."""

import asyncio

import pandas as pd
import streamlit as st

from gacha import SimulationConfig
from stats import ResultHistogram
from ui.defaults import PERCENTILES
from ui.state import get_driver, goal_is_available

CURVE_SAMPLES = 1000


def _execute_simulation():
    """Run one time-budgeted batch into the accumulated histogram."""
    driver = get_driver()
    histogram: ResultHistogram = st.session_state.histogram
    progress_text = st.empty()

    def update_progress(trials: int, elapsed_ms: float):
        progress_text.caption(f"Simulated {trials} attempts in {elapsed_ms:.0f} ms...")

    async def run_async():
        return await driver.run_batches_async(
            histogram,
            config=SimulationConfig(),
            progress_callback=update_progress,
        )

    asyncio.run(run_async())
    progress_text.empty()


def _render_results(histogram: ResultHistogram):
    values = histogram.percentiles(PERCENTILES)
    cols = st.columns(len(PERCENTILES) + 1)
    for col, pct, value in zip(cols, PERCENTILES, values):
        with col:
            st.metric(f"{pct * 100:g}%", f"{value} orbs")
    with cols[-1]:
        st.metric("Mean", f"{histogram.mean():.1f} orbs")

    curve = histogram.percentile_curve(CURVE_SAMPLES)
    chart_df = pd.DataFrame(
        {
            "Percentile": [idx / CURVE_SAMPLES * 100 for idx in range(CURVE_SAMPLES)],
            "Orbs": curve,
        }
    )
    st.line_chart(chart_df, x="Percentile", y="Orbs", height=300)
    st.caption(f"{histogram.total_count()} samples")


def render_results_section():
    """Render the Roll/More button and the percentile results."""
    st.header("Results")
    histogram: ResultHistogram = st.session_state.histogram

    if not goal_is_available():
        st.button("Roll", type="primary", disabled=True)
        return

    label = "Roll" if histogram.is_empty() else "More"
    if st.button(label, type="primary"):
        _execute_simulation()

    if histogram.is_empty():
        st.info("Press Roll to start simulating")
    else:
        _render_results(histogram)

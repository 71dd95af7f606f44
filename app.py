import logging

import streamlit as st

from ui import initialize_session_state
from ui.components import (
    render_banner_section,
    render_goal_section,
    render_header,
    render_results_section,
)

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

st.set_page_config(page_title="Summon Statistics Simulator", layout="wide")

initialize_session_state()
render_header()

col_config, col_results = st.columns([2, 3])
with col_config:
    render_banner_section()
    render_goal_section()
with col_results:
    render_results_section()

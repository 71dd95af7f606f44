"""Header component with title and share/import/reset buttons."""

import streamlit as st

from ui.state import serialize_state


def render_header():
    """Render the header with title and action buttons."""
    st.title("Summon Statistics Simulator")
    st.caption("Orbs needed to reach a summoning goal, over many simulated attempts")

    col_actions, _ = st.columns([1, 4])
    with col_actions:
        c1, c2, c3 = st.columns(3)
        with c1:
            with st.popover("Share"):
                st.code(serialize_state(), language=None)
                st.caption("Copy the string above, or share the page URL")
        with c2:
            with st.popover("Import"):
                load_input = st.text_area("Paste a configuration string", height=100)
                if st.button("Load"):
                    if load_input.strip():
                        st.session_state.clear()
                        st.query_params["state"] = load_input.strip()
                        st.rerun()
                    else:
                        st.warning("Paste a configuration string first")
        with c3:
            with st.popover("Reset"):
                st.warning("Reset banner, goal and results?")
                if st.button("Confirm reset", type="primary"):
                    st.session_state.clear()
                    st.query_params.clear()
                    st.rerun()

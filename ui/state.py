"""State management, serialization, and initialization."""

import base64
import json
import logging
import zlib

import streamlit as st
from pydantic import TypeAdapter, ValidationError

from banner import BannerConfig
from gacha import SimulationDriver
from goal import Goal, is_available
from stats import ResultHistogram
from ui.defaults import create_default_banner, create_default_goal

logger = logging.getLogger(__name__)

_goal_adapter: TypeAdapter = TypeAdapter(Goal)


def encode_state(banner: BannerConfig, goal: Goal) -> str:
    """Serialize banner and goal to a compressed base64 string."""
    state = {
        "banner": banner.model_dump(mode="json"),
        "goal": goal.model_dump(mode="json"),
    }
    json_str = json.dumps(state, ensure_ascii=False)
    compressed = zlib.compress(json_str.encode(), level=9)
    return base64.urlsafe_b64encode(compressed).decode()


def decode_state(encoded: str) -> tuple[BannerConfig, Goal]:
    """Deserialize banner and goal from a compressed base64 string.

    Raises:
        ValueError: If the string is not a valid encoded state.
    """
    try:
        compressed = base64.urlsafe_b64decode(encoded.encode())
        json_str = zlib.decompress(compressed).decode()
        state = json.loads(json_str)
    except (zlib.error, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"Invalid state string: {e}") from e
    if not isinstance(state, dict) or not isinstance(state.get("banner", {}), dict):
        raise ValueError("Invalid state string: expected a banner and goal object")
    banner = BannerConfig(**state.get("banner", {}))
    goal = _goal_adapter.validate_python(state.get("goal", {"type": "preset"}))
    return banner, goal


def serialize_state() -> str:
    """Serialize current session state to a compressed base64 string."""
    return encode_state(st.session_state.banner, st.session_state.goal)


def update_url():
    """Update URL parameters with current state."""
    st.query_params["state"] = serialize_state()


def reset_results():
    """Drop accumulated results, e.g. after the banner or goal changed."""
    st.session_state.histogram = ResultHistogram()
    st.session_state.driver = None


def set_banner(banner: BannerConfig):
    st.session_state.banner = banner
    reset_results()
    update_url()


def set_goal(goal: Goal):
    st.session_state.goal = goal
    reset_results()
    update_url()


def goal_is_available() -> bool:
    return is_available(st.session_state.goal, st.session_state.banner)


def get_driver() -> SimulationDriver:
    """Driver for the current banner and goal, built once per configuration.

    Raises:
        UnsatisfiableGoalError: If the goal cannot be met on the banner.
    """
    if st.session_state.driver is None:
        st.session_state.driver = SimulationDriver(
            st.session_state.banner, st.session_state.goal
        )
    return st.session_state.driver


def initialize_session_state():
    """Initialize session state from URL or defaults."""
    if "initialized" not in st.session_state:
        st.session_state.initialized = True
        params = st.query_params
        if "state" in params:
            try:
                banner, goal = decode_state(params["state"])
                st.session_state.banner = banner
                st.session_state.goal = goal
            except (ValueError, ValidationError) as e:
                logger.warning("Ignoring invalid state in URL: %s", e)
                _initialize_defaults()
        else:
            _initialize_defaults()
        reset_results()


def _initialize_defaults():
    """Initialize session state with default values."""
    st.session_state.banner = create_default_banner()
    st.session_state.goal = create_default_goal()

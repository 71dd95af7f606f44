"""UI components package for the summon simulator."""

from ui.constants import COLOR_HEX, COLOR_LABELS
from ui.defaults import create_default_banner, create_default_goal
from ui.state import initialize_session_state, update_url

__all__ = [
    "initialize_session_state",
    "update_url",
    "COLOR_HEX",
    "COLOR_LABELS",
    "create_default_banner",
    "create_default_goal",
]

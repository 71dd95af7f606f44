"""UI component modules."""

from ui.components.banner_section import render_banner_section
from ui.components.goal_section import render_goal_section
from ui.components.header import render_header
from ui.components.results_section import render_results_section

__all__ = [
    "render_header",
    "render_banner_section",
    "render_goal_section",
    "render_results_section",
]

"""Default data creation functions."""

from banner import BannerConfig
from goal import GoalPreset, PresetGoal

# (focus, fivestar) starting rates offered in the banner editor.
RATE_PRESETS: dict[tuple[int, int], str] = {
    (3, 3): "3%/3% (Normal)",
    (5, 3): "5%/3% (Hero Fest)",
    (8, 0): "8%/0% (Legendary)",
}

PERCENTILES = [0.25, 0.5, 0.75, 0.9, 0.99]

PRESET_LABELS = {
    GoalPreset.ANY_FIVESTAR: "Any 5*",
    GoalPreset.ANY_FOCUS: "Any focus",
    GoalPreset.ALL_FOCUS: "All focus units",
    GoalPreset.RED_FOCUS: "Red focus",
    GoalPreset.BLUE_FOCUS: "Blue focus",
    GoalPreset.GREEN_FOCUS: "Green focus",
    GoalPreset.COLORLESS_FOCUS: "Colorless focus",
    GoalPreset.BONUS_FOCUS: "Bonus unit",
}


def create_default_banner() -> BannerConfig:
    """Create the default banner: one focus unit per color at 3%/3%."""
    return BannerConfig(focus_sizes=[1, 1, 1, 1], starting_rates=(3, 3))


def create_default_goal() -> PresetGoal:
    """Create the default goal: one copy of any focus unit."""
    return PresetGoal(preset=GoalPreset.ANY_FOCUS, count=1)

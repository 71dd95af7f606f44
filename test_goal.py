"""
Unit tests for goal.py - goal expansion, availability and the per-trial goal state.
"""
from random import Random

import pytest
from pydantic import TypeAdapter

from banner import BannerConfig, Color, Pool
from goal import (
    CustomGoal,
    Goal,
    GoalKind,
    GoalPart,
    GoalPreset,
    GoalState,
    PresetGoal,
    UnsatisfiableGoalError,
    as_custom,
    is_available,
)

FOUR_COLORS = BannerConfig(focus_sizes=[1, 1, 1, 1], starting_rates=(3, 3))
DOUBLE_RED = BannerConfig(focus_sizes=[2, 1, 0, 1], starting_rates=(3, 3))
BONUS_RED = BannerConfig(focus_sizes=[2, 1, 1, 1], fourstar_focus=Color.RED)


def three_color_goal(kind: GoalKind) -> CustomGoal:
    return CustomGoal(
        kind=kind,
        parts=[
            GoalPart(color=Color.RED),
            GoalPart(color=Color.BLUE),
            GoalPart(color=Color.GREEN),
        ],
    )


class TestGoalModels:
    """Tests for the goal union."""

    def test_discriminated_union(self):
        adapter = TypeAdapter(Goal)
        preset = adapter.validate_python({"type": "preset", "preset": "red_focus", "count": 2})
        custom = adapter.validate_python(
            {"type": "custom", "kind": "any", "parts": [{"color": "blue"}]}
        )
        assert isinstance(preset, PresetGoal)
        assert preset.preset == GoalPreset.RED_FOCUS
        assert isinstance(custom, CustomGoal)
        assert custom.parts[0].num_copies == 1

    def test_copies_must_be_positive(self):
        with pytest.raises(ValueError):
            GoalPart(color=Color.RED, num_copies=0)


class TestAsCustom:
    """Tests for preset expansion."""

    def test_any_focus(self):
        custom = as_custom(PresetGoal(preset=GoalPreset.ANY_FOCUS, count=2), DOUBLE_RED)
        assert custom.kind == GoalKind.ANY
        assert [(p.color, p.num_copies) for p in custom.parts] == [
            (Color.RED, 2),
            (Color.RED, 2),
            (Color.BLUE, 2),
            (Color.COLORLESS, 2),
        ]

    def test_any_fivestar(self):
        custom = as_custom(PresetGoal(preset=GoalPreset.ANY_FIVESTAR), DOUBLE_RED)
        assert custom.kind == GoalKind.ANY
        assert custom.parts == [
            GoalPart(color=color, any_fivestar=True)
            for color in (Color.RED, Color.BLUE, Color.COLORLESS)
        ]

    def test_all_focus(self):
        custom = as_custom(PresetGoal(preset=GoalPreset.ALL_FOCUS), FOUR_COLORS)
        assert custom.kind == GoalKind.ALL
        assert len(custom.parts) == 4

    def test_color_focus(self):
        custom = as_custom(PresetGoal(preset=GoalPreset.RED_FOCUS, count=3), DOUBLE_RED)
        assert custom.kind == GoalKind.ANY
        assert [(p.color, p.num_copies) for p in custom.parts] == [(Color.RED, 3)] * 2

    def test_bonus_focus(self):
        custom = as_custom(PresetGoal(preset=GoalPreset.BONUS_FOCUS), BONUS_RED)
        assert custom.parts == [GoalPart(color=Color.RED, num_copies=1, bonus_only=True)]
        assert as_custom(PresetGoal(preset=GoalPreset.BONUS_FOCUS), FOUR_COLORS).parts == []

    def test_custom_returned_as_copy(self):
        goal = three_color_goal(GoalKind.ALL)
        custom = as_custom(goal, FOUR_COLORS)
        assert custom == goal
        assert custom is not goal

    def test_idempotent(self):
        goal = PresetGoal(preset=GoalPreset.ALL_FOCUS, count=2)
        once = as_custom(goal, DOUBLE_RED)
        assert as_custom(once, DOUBLE_RED) == once
        assert as_custom(goal, DOUBLE_RED) == once


class TestAvailability:
    """Tests for is_available."""

    def test_empty_goal_unavailable(self):
        assert not is_available(CustomGoal(parts=[]), FOUR_COLORS)

    def test_missing_color_unavailable(self):
        goal = PresetGoal(preset=GoalPreset.GREEN_FOCUS)
        assert not is_available(goal, DOUBLE_RED)
        assert is_available(goal, FOUR_COLORS)

    def test_too_many_parts_for_color(self):
        goal = CustomGoal(parts=[GoalPart(color=Color.BLUE), GoalPart(color=Color.BLUE)])
        assert not is_available(goal, DOUBLE_RED)
        goal = CustomGoal(parts=[GoalPart(color=Color.RED), GoalPart(color=Color.RED)])
        assert is_available(goal, DOUBLE_RED)

    def test_bonus_part_needs_bonus_unit(self):
        goal = CustomGoal(parts=[GoalPart(color=Color.RED, bonus_only=True)])
        assert is_available(goal, BONUS_RED)
        assert not is_available(goal, FOUR_COLORS)

    def test_bonus_part_targeted_once(self):
        goal = CustomGoal(
            parts=[
                GoalPart(color=Color.RED, bonus_only=True),
                GoalPart(color=Color.RED, bonus_only=True),
            ]
        )
        assert not is_available(goal, BONUS_RED)

    def test_unreachable_focus_tier(self):
        no_focus_rate = BannerConfig(focus_sizes=[1, 1, 1, 1], starting_rates=(0, 6))
        goal = PresetGoal(preset=GoalPreset.ANY_FOCUS)
        assert not is_available(goal, no_focus_rate)
        charged = no_focus_rate.model_copy(update={"focus_charges": True})
        assert is_available(goal, charged)

    def test_any_fivestar_without_focus_rate(self):
        no_focus_rate = BannerConfig(focus_sizes=[1, 1, 1, 1], starting_rates=(0, 6))
        assert is_available(PresetGoal(preset=GoalPreset.ANY_FIVESTAR), no_focus_rate)

    def test_any_fivestar_without_regular_rate(self):
        focus_only = BannerConfig(focus_sizes=[1, 0, 0, 0], starting_rates=(8, 0))
        assert is_available(
            CustomGoal(parts=[GoalPart(color=Color.RED, any_fivestar=True)]), focus_only
        )
        assert not is_available(
            CustomGoal(parts=[GoalPart(color=Color.BLUE, any_fivestar=True)]), focus_only
        )

    def test_any_fivestar_part_targeted_once(self):
        part = GoalPart(color=Color.RED, any_fivestar=True)
        assert not is_available(CustomGoal(parts=[part, part]), FOUR_COLORS)

    def test_part_cannot_be_bonus_and_any_fivestar(self):
        part = GoalPart(color=Color.RED, bonus_only=True, any_fivestar=True)
        assert not is_available(CustomGoal(parts=[part]), BONUS_RED)


class TestGoalState:
    """Tests for the per-trial automaton."""

    def test_all_needs_every_part(self):
        state = GoalState.from_goal(three_color_goal(GoalKind.ALL), FOUR_COLORS)
        assert not state.is_satisfied()
        assert state.consume_slot(Color.RED, 0)
        assert not state.is_satisfied()
        assert not state.is_color_relevant(Color.RED)
        assert state.consume_slot(Color.BLUE, 0)
        assert not state.is_satisfied()
        assert state.consume_slot(Color.GREEN, 0)
        assert state.is_satisfied()

    def test_any_clears_other_targets(self):
        state = GoalState.from_goal(three_color_goal(GoalKind.ANY), FOUR_COLORS)
        assert state.consume_slot(Color.BLUE, 0)
        assert state.is_satisfied()
        for color in (Color.RED, Color.GREEN):
            assert state.outstanding(color) == []
            assert not state.is_color_relevant(color)

    def test_copies_count_down(self):
        goal = CustomGoal(parts=[GoalPart(color=Color.RED, num_copies=3)])
        state = GoalState.from_goal(goal, FOUR_COLORS)
        assert state.outstanding(Color.RED) == [3]
        state.consume_slot(Color.RED, 0)
        assert state.outstanding(Color.RED) == [2]
        assert state.is_color_relevant(Color.RED)
        state.consume_slot(Color.RED, 0)
        state.consume_slot(Color.RED, 0)
        assert state.is_satisfied()

    def test_consume_missing_slot(self):
        state = GoalState.from_goal(PresetGoal(preset=GoalPreset.RED_FOCUS), DOUBLE_RED)
        assert state.consume_slot(Color.RED, 0)
        assert not state.consume_slot(Color.RED, 0)
        assert not state.consume_slot(Color.BLUE, 0)

    def test_irrelevant_colors(self):
        state = GoalState.from_goal(PresetGoal(preset=GoalPreset.RED_FOCUS), FOUR_COLORS)
        assert state.is_color_relevant(Color.RED)
        assert not state.is_color_relevant(Color.BLUE)
        assert not state.consume(Pool.FOCUS, Color.BLUE, Random(0))

    def test_empty_goal_never_satisfied(self):
        state = GoalState.from_goal(CustomGoal(parts=[]), FOUR_COLORS)
        assert not state.is_satisfied()

    def test_non_focus_tiers_never_match(self):
        state = GoalState.from_goal(PresetGoal(preset=GoalPreset.RED_FOCUS), FOUR_COLORS)
        rng = Random(0)
        for pool in (Pool.FIVESTAR, Pool.FOURSTAR, Pool.THREESTAR, Pool.FOURSTAR_SPECIAL):
            assert not state.consume(pool, Color.RED, rng)
        assert state.outstanding(Color.RED) == [1]

    def test_single_focus_unit_always_matches(self):
        state = GoalState.from_goal(PresetGoal(preset=GoalPreset.RED_FOCUS), FOUR_COLORS)
        assert state.consume(Pool.FOCUS, Color.RED, Random(7))
        assert state.is_satisfied()

    def test_focus_unit_chosen_uniformly(self):
        """With two red focus units and one wanted, about half the red focus draws match."""
        goal = CustomGoal(parts=[GoalPart(color=Color.RED, num_copies=100000)])
        state = GoalState.from_goal(goal, DOUBLE_RED)
        rng = Random(99)
        matches = sum(state.consume(Pool.FOCUS, Color.RED, rng) for _ in range(20000))
        assert matches / 20000 == pytest.approx(0.5, abs=0.02)

    def test_bonus_tier_matches_first_target(self):
        goal = CustomGoal(parts=[GoalPart(color=Color.RED, num_copies=2, bonus_only=True)])
        state = GoalState.from_goal(goal, BONUS_RED)
        assert state.consume(Pool.FOURSTAR_FOCUS, Color.RED, Random(0))
        assert state.outstanding(Color.RED) == [1]
        assert state.consume(Pool.FOURSTAR_FOCUS, Color.RED, Random(0))
        assert state.is_satisfied()

    def test_bonus_tier_ignores_regular_parts(self):
        goal = CustomGoal(parts=[GoalPart(color=Color.RED)])
        state = GoalState.from_goal(goal, BONUS_RED)
        assert not state.consume(Pool.FOURSTAR_FOCUS, Color.RED, Random(0))
        assert state.outstanding(Color.RED) == [1]

    def test_bonus_part_takes_first_slot(self):
        goal = CustomGoal(
            parts=[
                GoalPart(color=Color.RED, num_copies=4),
                GoalPart(color=Color.RED, num_copies=2, bonus_only=True),
            ]
        )
        state = GoalState.from_goal(goal, BONUS_RED)
        assert state.targets[Color.RED] == {0: 2, 1: 4}

    def test_any_fivestar_counts_regular_fivestar(self):
        state = GoalState.from_goal(PresetGoal(preset=GoalPreset.ANY_FIVESTAR), DOUBLE_RED)
        assert not state.is_color_relevant(Color.GREEN)
        assert not state.consume(Pool.FOURSTAR, Color.RED, Random(0))
        assert state.consume(Pool.FIVESTAR, Color.BLUE, Random(0))
        assert state.is_satisfied()

    def test_any_fivestar_counts_any_focus_unit(self):
        """Every red focus draw counts, whichever of the two red units it is."""
        goal = CustomGoal(parts=[GoalPart(color=Color.RED, num_copies=50, any_fivestar=True)])
        state = GoalState.from_goal(goal, DOUBLE_RED)
        rng = Random(5)
        assert all(state.consume(Pool.FOCUS, Color.RED, rng) for _ in range(49))
        assert state.consume(Pool.FIVESTAR, Color.RED, rng)
        assert state.is_satisfied()

    def test_specific_focus_target_takes_priority(self):
        goal = CustomGoal(
            parts=[
                GoalPart(color=Color.RED, num_copies=3, any_fivestar=True),
                GoalPart(color=Color.RED, num_copies=2),
            ]
        )
        state = GoalState.from_goal(goal, FOUR_COLORS)
        assert state.consume(Pool.FOCUS, Color.RED, Random(0))
        assert state.targets[Color.RED] == {-1: 3, 0: 1}
        assert state.consume(Pool.FIVESTAR, Color.RED, Random(0))
        assert state.targets[Color.RED] == {-1: 2, 0: 1}

    def test_unallocatable_goal_raises(self):
        goal = CustomGoal(parts=[GoalPart(color=Color.GREEN)])
        with pytest.raises(UnsatisfiableGoalError):
            GoalState.from_goal(goal, DOUBLE_RED)

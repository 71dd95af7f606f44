"""Goal module for the summoning simulation.

This module contains everything that decides when a trial is finished:
- GoalPart / CustomGoal / PresetGoal: What the user wants to obtain
- as_custom: Expands a preset into its custom equivalent for a banner
- is_available: Whether a goal can be met at all on a banner
- GoalState: Mutable per-trial tracker of the targets still outstanding
"""

from enum import Enum
from random import Random
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from banner import COLORS, BannerConfig, Color, Pool

# Target key for "any 5* of this color", outside the focus unit slots.
ANY_FIVESTAR_SLOT = -1


class UnsatisfiableGoalError(ValueError):
    """Raised when a goal can never be met on the given banner."""


# =============================================================================
# Goal Types
# =============================================================================


class GoalKind(str, Enum):
    """How the parts of a goal combine"""

    ANY = "any"  # Done as soon as one part is met
    ALL = "all"  # Done once every part is met


class GoalPart(BaseModel):
    """A number of copies of one focus unit of a given color."""

    color: Color = Field(default=Color.RED, description="Color of the wanted unit")
    num_copies: int = Field(default=1, ge=1, description="Copies required")
    bonus_only: bool = Field(
        default=False,
        description="Restrict this part to the banner's bonus unit",
    )
    any_fivestar: bool = Field(
        default=False,
        description="Any 5* unit of this color counts, focus or not",
    )


class CustomGoal(BaseModel):
    """Goal made of explicit parts combined with ANY or ALL."""

    type: Literal["custom"] = "custom"
    kind: GoalKind = Field(default=GoalKind.ALL, description="How parts combine")
    parts: list[GoalPart] = Field(
        default_factory=list,
        description="Wanted units. Empty means the goal can never be met.",
    )


class GoalPreset(str, Enum):
    """Common goals, expanded against the banner by `as_custom`"""

    ANY_FIVESTAR = "any_fivestar"
    ANY_FOCUS = "any_focus"
    ALL_FOCUS = "all_focus"
    RED_FOCUS = "red_focus"
    BLUE_FOCUS = "blue_focus"
    GREEN_FOCUS = "green_focus"
    COLORLESS_FOCUS = "colorless_focus"
    BONUS_FOCUS = "bonus_focus"


_PRESET_COLORS = {
    GoalPreset.RED_FOCUS: Color.RED,
    GoalPreset.BLUE_FOCUS: Color.BLUE,
    GoalPreset.GREEN_FOCUS: Color.GREEN,
    GoalPreset.COLORLESS_FOCUS: Color.COLORLESS,
}


class PresetGoal(BaseModel):
    """A named common goal repeated `count` times."""

    type: Literal["preset"] = "preset"
    preset: GoalPreset = Field(default=GoalPreset.ANY_FOCUS)
    count: int = Field(default=1, ge=1, description="Copies required per unit")


# Union of all goal types using discriminated union
Goal = Annotated[Union[PresetGoal, CustomGoal], Field(discriminator="type")]


def as_custom(goal: Goal, banner: BannerConfig) -> CustomGoal:
    """Expand a goal into its custom form for `banner`.

    Pure: a custom goal comes back as a copy, and a preset always expands to
    the same parts for the same banner.
    """
    if isinstance(goal, CustomGoal):
        return goal.model_copy(deep=True)

    count = goal.count
    if goal.preset == GoalPreset.ANY_FIVESTAR:
        parts = [
            GoalPart(color=color, num_copies=count, any_fivestar=True)
            for color in COLORS
            if banner.focus_size(color) > 0
        ]
        return CustomGoal(kind=GoalKind.ANY, parts=parts)

    if goal.preset in (GoalPreset.ANY_FOCUS, GoalPreset.ALL_FOCUS):
        parts = [
            GoalPart(color=color, num_copies=count)
            for color in COLORS
            for _ in range(banner.focus_size(color))
        ]
        kind = GoalKind.ANY if goal.preset == GoalPreset.ANY_FOCUS else GoalKind.ALL
        return CustomGoal(kind=kind, parts=parts)

    if goal.preset == GoalPreset.BONUS_FOCUS:
        parts = []
        if banner.fourstar_focus is not None:
            parts.append(
                GoalPart(color=banner.fourstar_focus, num_copies=count, bonus_only=True)
            )
        return CustomGoal(kind=GoalKind.ALL, parts=parts)

    color = _PRESET_COLORS[goal.preset]
    parts = [
        GoalPart(color=color, num_copies=count)
        for _ in range(banner.focus_size(color))
    ]
    return CustomGoal(kind=GoalKind.ANY, parts=parts)


def _allocate_slots(
    goal: CustomGoal, banner: BannerConfig
) -> dict[Color, dict[int, int]]:
    """Assign every part to a focus unit slot of its color.

    A bonus part takes slot 0 (the bonus unit is the first focus unit of its
    color), an any-5* part takes ANY_FIVESTAR_SLOT, other parts take the
    lowest free slots in order.
    """
    slots: dict[Color, dict[int, int]] = {color: {} for color in COLORS}
    for part in goal.parts:
        if not part.any_fivestar:
            continue
        if part.bonus_only:
            raise UnsatisfiableGoalError("A part cannot be both bonus-only and any 5*")
        if ANY_FIVESTAR_SLOT in slots[part.color]:
            raise UnsatisfiableGoalError(
                f"Any 5* of color {part.color.value} is targeted twice"
            )
        slots[part.color][ANY_FIVESTAR_SLOT] = part.num_copies

    for part in goal.parts:
        if not part.bonus_only or part.any_fivestar:
            continue
        if banner.fourstar_focus != part.color:
            raise UnsatisfiableGoalError(
                f"No bonus unit of color {part.color.value} on this banner"
            )
        if 0 in slots[part.color]:
            raise UnsatisfiableGoalError(
                f"Bonus unit of color {part.color.value} is targeted twice"
            )
        slots[part.color][0] = part.num_copies

    for part in goal.parts:
        if part.bonus_only or part.any_fivestar:
            continue
        color_slots = slots[part.color]
        slot = 0
        while slot in color_slots:
            slot += 1
        if slot >= banner.focus_size(part.color):
            raise UnsatisfiableGoalError(
                f"Goal wants more {part.color.value} focus units than the banner has"
            )
        color_slots[slot] = part.num_copies
    return slots


def _focus_reachable(banner: BannerConfig) -> bool:
    focus, fivestar = banner.starting_rates
    return focus > 0 or (banner.focus_charges and fivestar > 0)


def _part_reachable(part: GoalPart, banner: BannerConfig) -> bool:
    if part.bonus_only:
        return True
    if part.any_fivestar:
        # The regular 5* tier has units of every color.
        return banner.starting_rates[1] > 0 or (
            _focus_reachable(banner) and banner.focus_size(part.color) > 0
        )
    return _focus_reachable(banner)


def is_available(goal: Goal, banner: BannerConfig) -> bool:
    """Check whether `goal` can ever be met on `banner`.

    Hosts call this before starting a simulation so a trial never loops on an
    unreachable goal.
    """
    custom = as_custom(goal, banner)
    if not custom.parts:
        return False
    try:
        _allocate_slots(custom, banner)
    except UnsatisfiableGoalError:
        return False

    reachable = [_part_reachable(part, banner) for part in custom.parts]
    if custom.kind == GoalKind.ALL:
        return all(reachable)
    return any(reachable)


# =============================================================================
# Goal State
# =============================================================================


class GoalState(BaseModel):
    """Targets still outstanding during one trial.

    Each color maps focus unit slots to the copies still needed. A color
    is relevant while it has any outstanding target. Summoning keeps only
    units of relevant colors.
    """

    kind: GoalKind = Field(default=GoalKind.ALL)
    targets: dict[Color, dict[int, int]] = Field(
        default_factory=dict, description="Outstanding copies per color and slot"
    )
    relevant: dict[Color, bool] = Field(
        default_factory=dict, description="Whether a color still has targets"
    )
    bonus_colors: set[Color] = Field(
        default_factory=set,
        description="Colors whose slot 0 is a bonus-only target",
    )
    unit_counts: dict[Color, int] = Field(
        default_factory=dict, description="Focus units per color on the banner"
    )
    has_parts: bool = Field(
        default=False, description="False for an empty goal, which is never met"
    )

    @classmethod
    def from_goal(cls, goal: Goal, banner: BannerConfig) -> "GoalState":
        """Build a fresh state for one trial.

        Raises:
            UnsatisfiableGoalError: If a part cannot be mapped to a focus unit.
        """
        custom = as_custom(goal, banner)
        targets = _allocate_slots(custom, banner)
        return cls(
            kind=custom.kind,
            targets=targets,
            relevant={color: bool(targets[color]) for color in COLORS},
            bonus_colors={part.color for part in custom.parts if part.bonus_only},
            unit_counts={color: banner.focus_size(color) for color in COLORS},
            has_parts=bool(custom.parts),
        )

    def is_satisfied(self) -> bool:
        return self.has_parts and not any(self.relevant.values())

    def is_color_relevant(self, color: Color) -> bool:
        return self.relevant[color]

    def outstanding(self, color: Color) -> list[int]:
        """Copies still needed for each outstanding target of `color`, by slot."""
        slots = self.targets[color]
        return [slots[slot] for slot in sorted(slots)]

    def consume(self, pool: Pool, color: Color, rng: Random) -> bool:
        """Apply one kept unit to the goal.

        A focus unit is one of the color's focus units chosen uniformly, and it
        counts if that unit is still wanted. A bonus-tier unit is always the
        bonus unit (slot 0), so it counts only against a bonus-only target.
        Any 5* unit, focus or regular, counts against an any-5* target once
        no specific focus target took it.

        Returns:
            True if the unit matched an outstanding target.
        """
        if not self.relevant[color]:
            return False
        if pool == Pool.FOCUS:
            slot = rng.randrange(self.unit_counts[color])
            if self.consume_slot(color, slot):
                return True
            return self.consume_slot(color, ANY_FIVESTAR_SLOT)
        if pool == Pool.FIVESTAR:
            return self.consume_slot(color, ANY_FIVESTAR_SLOT)
        if pool == Pool.FOURSTAR_FOCUS and color in self.bonus_colors:
            return self.consume_slot(color, 0)
        return False

    def consume_slot(self, color: Color, slot: int) -> bool:
        """Take one copy off the target in `slot` of `color`, if any."""
        slots = self.targets[color]
        if slot not in slots:
            return False
        slots[slot] -= 1
        if slots[slot] > 0:
            return True

        del slots[slot]
        if slot == 0:
            self.bonus_colors.discard(color)
        if self.kind == GoalKind.ANY:
            # One finished part meets the whole goal.
            for other in COLORS:
                self.targets[other].clear()
                self.relevant[other] = False
            self.bonus_colors.clear()
        else:
            self.relevant[color] = bool(slots)
        return True

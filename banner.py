import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class Color(str, Enum):
    """Unit color. Every tier of the pool is split across these four."""

    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    COLORLESS = "colorless"


class Pool(str, Enum):
    """Tier of the summoning pool, from rarest to most common."""

    FOCUS = "focus"  # Rate-up 5* units
    FIVESTAR = "fivestar"  # Regular 5* units
    FOURSTAR_FOCUS = "fourstar_focus"  # Designated bonus unit, appearing at 4*
    FOURSTAR_SPECIAL = "fourstar_special"  # 4* special rate units
    FOURSTAR = "fourstar"
    THREESTAR = "threestar"


class PityPolicy(str, Enum):
    """How the pity counter reacts to a kept top-tier unit"""

    RESET = "reset"  # Any kept 5* resets the counter to zero
    DECAY = "decay"  # Focus resets, each non-focus 5* only removes 20 summons


class PoolVariant(str, Enum):
    """Which pool-size table the non-focus tiers use"""

    STANDARD = "standard"
    EXPANDED = "expanded"


COLORS: tuple[Color, ...] = (Color.RED, Color.BLUE, Color.GREEN, Color.COLORLESS)
POOLS: tuple[Pool, ...] = (
    Pool.FOCUS,
    Pool.FIVESTAR,
    Pool.FOURSTAR_FOCUS,
    Pool.FOURSTAR_SPECIAL,
    Pool.FOURSTAR,
    Pool.THREESTAR,
)
TOP_TIERS = frozenset({Pool.FOCUS, Pool.FIVESTAR})

_COLOR_INDEX = {
    Color.RED: 0,
    Color.BLUE: 1,
    Color.GREEN: 2,
    Color.COLORLESS: 3,
}
_POOL_INDEX = {
    Pool.FOCUS: 0,
    Pool.FIVESTAR: 1,
    Pool.FOURSTAR_FOCUS: 2,
    Pool.FOURSTAR_SPECIAL: 3,
    Pool.FOURSTAR: 4,
    Pool.THREESTAR: 5,
}


def color_index(color: Color) -> int:
    """Array position of a color (r/b/g/c order)."""
    return _COLOR_INDEX[color]


def pool_index(pool: Pool) -> int:
    """Array position of a pool tier (focus first, 3* last)."""
    return _POOL_INDEX[pool]


def is_top_tier(pool: Pool) -> bool:
    return pool in TOP_TIERS


# Each pity step (5 summons without a 5*) adds half a percentage point.
PITY_STEP_PCT = 0.5
# 120 summons without a 5* guarantees one, i.e. 24 pity steps.
MAX_PITY_LEVEL = 24
# The guarantee adds 12 points at most. Starting rates above 88% leave
# no room for that.
MAX_STARTING_RATE_TOTAL = 88

# Ratio tables splitting the non-5* residual across the lower tiers, in
# (bonus, special, 4*, 3*) order.
DEFAULT_SPLIT = (0, 0, 58, 36)
SPECIAL_SPLIT = (0, 3, 55, 36)
BONUS_SPLIT = (3, 3, 52, 36)

# Units per color (r/b/g/c) for the non-focus tiers.
POOL_SIZES: dict[PoolVariant, dict[Pool, tuple[int, int, int, int]]] = {
    PoolVariant.STANDARD: {
        Pool.FIVESTAR: (41, 28, 21, 17),
        Pool.FOURSTAR_SPECIAL: (10, 8, 7, 9),
        Pool.FOURSTAR: (32, 29, 20, 28),
        Pool.THREESTAR: (28, 25, 18, 25),
    },
    PoolVariant.EXPANDED: {
        Pool.FIVESTAR: (54, 39, 32, 32),
        Pool.FOURSTAR_SPECIAL: (14, 11, 10, 12),
        Pool.FOURSTAR: (37, 37, 28, 37),
        Pool.THREESTAR: (30, 27, 21, 28),
    },
}

_BANNER_PATTERN = re.compile(
    r"^\s*(\d+)\s*/\s*(\d+)\s*/\s*(\d+)\s*/\s*(\d+)\s*"
    r"\(\s*(\d+)\s*,\s*(\d+)\s*\)\s*$"
)


class BannerConfig(BaseModel):
    """Configuration of a summoning banner.

    Describes the focus (rate-up) units on offer and the starting rates of the
    two 5* tiers, plus optional mechanics that change the pool model. The
    pity-adjusted probability of every tier is derived from this alone, see
    `bases` and `probabilities`.
    """

    focus_sizes: list[int] = Field(
        default=[1, 1, 1, 1],
        description="Number of focus units per color, in r/b/g/c order",
    )
    starting_rates: tuple[int, int] = Field(
        default=(3, 3),
        description="Starting focus and regular 5* rates, in percentage points",
    )
    focus_charges: bool = Field(
        default=False,
        description="Three kept non-focus 5* units guarantee that the next 5* is a focus unit",
    )
    fourstar_focus: Optional[Color] = Field(
        default=None,
        description="Color of the bonus unit that also appears at 4* (first focus unit of that color)",
    )
    fourstar_special: bool = Field(
        default=False, description="Whether the 4* special rate tier is active"
    )
    pool_variant: PoolVariant = Field(
        default=PoolVariant.STANDARD,
        description="Pool-size table used for the non-focus tiers",
    )
    pity_policy: PityPolicy = Field(
        default=PityPolicy.RESET,
        description="How kept 5* units affect the pity counter",
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_banner(self) -> "BannerConfig":
        if len(self.focus_sizes) != len(COLORS):
            raise ValueError("Banner needs exactly one focus size per color")
        if any(size < 0 for size in self.focus_sizes):
            raise ValueError("Focus sizes cannot be negative")
        focus, fivestar = self.starting_rates
        if focus < 0 or fivestar < 0:
            raise ValueError("Starting rates cannot be negative")
        if focus + fivestar <= 0:
            raise ValueError("Starting 5* rates must be positive")
        if focus + fivestar > MAX_STARTING_RATE_TOTAL:
            raise ValueError(
                f"Starting 5* rates cannot exceed {MAX_STARTING_RATE_TOTAL}% in total"
            )
        if (focus > 0 or self.focus_charges) and sum(self.focus_sizes) == 0:
            raise ValueError("Focus tier is active but has no focus units")
        if (
            self.fourstar_focus is not None
            and self.focus_sizes[color_index(self.fourstar_focus)] == 0
        ):
            raise ValueError(
                f"Bonus unit color {self.fourstar_focus.value} has no focus units"
            )
        return self

    @classmethod
    def parse(cls, text: str) -> Optional["BannerConfig"]:
        """Parse the short form, e.g. "1/1/1/1 (3, 3)".

        Returns None when the text is malformed or describes an invalid banner.
        """
        match = _BANNER_PATTERN.match(text)
        if not match:
            return None
        r, b, g, c, focus, fivestar = (int(group) for group in match.groups())
        try:
            return cls(focus_sizes=[r, b, g, c], starting_rates=(focus, fivestar))
        except ValueError:
            return None

    def __str__(self) -> str:
        r, b, g, c = self.focus_sizes
        focus, fivestar = self.starting_rates
        return f"{r}/{b}/{g}/{c} ({focus}, {fivestar})"

    def focus_size(self, color: Color) -> int:
        return self.focus_sizes[color_index(color)]

    def _split_table(self) -> tuple[int, int, int, int]:
        if self.fourstar_focus is not None:
            return BONUS_SPLIT
        if self.fourstar_special:
            return SPECIAL_SPLIT
        return DEFAULT_SPLIT

    def bases(self) -> list[float]:
        """Pity-independent percentage points per tier, indexed by `pool_index`."""
        focus, fivestar = (float(rate) for rate in self.starting_rates)
        residual = 100.0 - focus - fivestar
        split = self._split_table()
        split_total = sum(split)
        return [focus, fivestar] + [residual * part / split_total for part in split]

    def probabilities(self, pity_level: int) -> list[float]:
        """Percentage points per tier after `pity_level` pity steps.

        Mass moves from the lower tiers into the two 5* tiers, 0.5 points per
        step, keeping the ratio between the 5* tiers and the ratios among the
        lower tiers. At MAX_PITY_LEVEL the 5* tiers absorb the whole residual.
        """
        if pity_level < 0:
            raise ValueError(f"Pity level cannot be negative: {pity_level}")
        bases = self.bases()
        if pity_level == 0:
            return bases
        focus_idx = pool_index(Pool.FOCUS)
        fivestar_idx = pool_index(Pool.FIVESTAR)
        top_total = bases[focus_idx] + bases[fivestar_idx]
        residual = 100.0 - top_total
        if pity_level >= MAX_PITY_LEVEL:
            pity_pct = residual
        else:
            pity_pct = pity_level * PITY_STEP_PCT

        probabilities = list(bases)
        probabilities[focus_idx] += pity_pct * bases[focus_idx] / top_total
        probabilities[fivestar_idx] += pity_pct * bases[fivestar_idx] / top_total
        reduction = (residual - pity_pct) / residual
        for pool in POOLS:
            if not is_top_tier(pool):
                probabilities[pool_index(pool)] *= reduction
        return probabilities

    def active_pools(self) -> tuple[Pool, ...]:
        """Tiers sampled on this banner, in POOLS order.

        The two 5* tiers are always present; lower tiers only when their base
        rate is positive. This yields 4, 5 or 6 tiers.
        """
        bases = self.bases()
        return tuple(
            pool for pool in POOLS if is_top_tier(pool) or bases[pool_index(pool)] > 0
        )

    def color_sizes(self, pool: Pool) -> list[int]:
        """Number of units of each color (r/b/g/c) in a tier."""
        if pool == Pool.FOCUS:
            return list(self.focus_sizes)
        if pool == Pool.FOURSTAR_FOCUS:
            sizes = [0, 0, 0, 0]
            if self.fourstar_focus is not None:
                sizes[color_index(self.fourstar_focus)] = 1
            return sizes
        return list(POOL_SIZES[self.pool_variant][pool])

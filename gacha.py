"""Summoning simulation engine."""

import asyncio
import logging
import time
from random import Random
from typing import Callable, NamedTuple, Optional

from pydantic import BaseModel, Field

from banner import (
    COLORS,
    MAX_PITY_LEVEL,
    BannerConfig,
    Color,
    PityPolicy,
    Pool,
    is_top_tier,
    pool_index,
)
from goal import Goal, GoalState, UnsatisfiableGoalError, as_custom, is_available
from stats import ResultHistogram
from weighted import WeightedIndex

logger = logging.getLogger(__name__)

SESSION_SIZE = 5
# Orbs spent for the number of units kept in one session.
ORB_COSTS = {1: 5, 2: 9, 3: 13, 4: 17, 5: 20}
FOCUS_CHARGE_LIMIT = 3
# Summons removed from the pity counter per kept non-focus 5* (decay policy).
PITY_DECAY_PER_NONFOCUS = 20


def orb_cost(count: int) -> int:
    """Orbs needed to keep `count` units from one session."""
    if count not in ORB_COSTS:
        raise RuntimeError(f"Invalid orb cost: {count}")
    return ORB_COSTS[count]


class Draw(NamedTuple):
    pool: Pool
    color: Color


class SessionResult(NamedTuple):
    """Outcome of one session: units kept, pity reset and kept 5* breakdown."""

    kept: int
    reset: bool
    focus_kept: int
    nonfocus_kept: int


class WeightTable(BaseModel):
    """Per-pity-level tier samplers and per-tier color samplers for a banner.

    Built once per banner and never mutated, so every trial and every draw
    shares it. `charged_levels` is only filled when the banner has focus
    charges: there the regular 5* mass is folded into the focus tier.
    """

    pools: tuple[Pool, ...] = Field(..., description="Active tiers, sampler order")
    levels: list[WeightedIndex] = Field(..., description="Tier sampler per pity level")
    charged_levels: list[WeightedIndex] = Field(
        default_factory=list,
        description="Tier sampler per pity level while focus charges are full",
    )
    colors: dict[Pool, WeightedIndex] = Field(
        default_factory=dict, description="Color sampler per drawable tier"
    )

    model_config = {"frozen": True}

    @classmethod
    def build(cls, banner: BannerConfig) -> "WeightTable":
        """Precompute the samplers for every pity level.

        Raises:
            ValueError: If a tier that can be drawn has no units.
        """
        pools = banner.active_pools()
        levels = []
        charged_levels = []
        drawable: set[Pool] = set()
        for level in range(MAX_PITY_LEVEL + 1):
            probabilities = banner.probabilities(level)
            weights = [probabilities[pool_index(pool)] for pool in pools]
            levels.append(WeightedIndex.from_weights(weights))
            drawable.update(pool for pool, w in zip(pools, weights) if w > 0)
            if banner.focus_charges:
                charged = list(weights)
                charged[pools.index(Pool.FOCUS)] += charged[pools.index(Pool.FIVESTAR)]
                charged[pools.index(Pool.FIVESTAR)] = 0.0
                charged_levels.append(WeightedIndex.from_weights(charged))
                drawable.add(Pool.FOCUS)

        colors = {}
        for pool in pools:
            sizes = banner.color_sizes(pool)
            if sum(sizes) > 0:
                colors[pool] = WeightedIndex.from_weights(sizes)
            elif pool in drawable:
                raise ValueError(f"Tier {pool.value} can be drawn but has no units")

        logger.debug(
            "Built weight table for banner %s with %d tiers", banner, len(pools)
        )
        return cls(
            pools=pools, levels=levels, charged_levels=charged_levels, colors=colors
        )

    def sample(self, level: int, rng: Random, charged: bool = False) -> Draw:
        """Draw one unit: tier at the pity level, then a color within the tier."""
        tiers = self.charged_levels if charged and self.charged_levels else self.levels
        pool = self.pools[tiers[level].sample(rng.random())]
        color = COLORS[self.colors[pool].sample(rng.random())]
        return Draw(pool, color)


def simulate_session(draws: list[Draw], state: GoalState, rng: Random) -> SessionResult:
    """Pick units from one session and apply them to the goal.

    A unit is kept when its color is still relevant to the goal. If nothing
    is kept, one unit is kept at random so the session still costs orbs. That
    unit never counts toward the goal, since its color is not relevant.
    """
    kept = 0
    focus_kept = 0
    nonfocus_kept = 0
    for draw in draws:
        if not state.is_color_relevant(draw.color):
            continue
        kept += 1
        if draw.pool == Pool.FOCUS:
            focus_kept += 1
        elif draw.pool == Pool.FIVESTAR:
            nonfocus_kept += 1
        state.consume(draw.pool, draw.color, rng)

    if kept == 0:
        forced = draws[rng.randrange(len(draws))]
        kept = 1
        if forced.pool == Pool.FOCUS:
            focus_kept += 1
        elif forced.pool == Pool.FIVESTAR:
            nonfocus_kept += 1

    return SessionResult(
        kept=kept,
        reset=focus_kept + nonfocus_kept > 0,
        focus_kept=focus_kept,
        nonfocus_kept=nonfocus_kept,
    )


def next_pity(banner: BannerConfig, pity: int, result: SessionResult) -> int:
    """Pity counter after a session, following the banner's pity policy."""
    if banner.pity_policy == PityPolicy.DECAY:
        if result.focus_kept:
            return 0
        return max(
            0, pity + result.kept - PITY_DECAY_PER_NONFOCUS * result.nonfocus_kept
        )
    if result.reset:
        return 0
    return pity + result.kept


class SimulationConfig(BaseModel):
    """Configuration of the batch runner."""

    time_budget_ms: float = Field(
        default=500.0,
        gt=0,
        description="Wall-clock budget for one call, checked between batches only",
    )
    initial_batch_size: int = Field(
        default=16, ge=1, description="Trials in the first batch (doubles after each)"
    )
    seed: Optional[int] = Field(
        default=None, description="Seed for the random source. None = from entropy."
    )


def _default_clock() -> float:
    return time.perf_counter() * 1000.0


class SimulationDriver:
    """Runs complete trials of a goal on a banner.

    Owns its random source and the banner's weight table. A trial keeps
    summoning sessions until the goal is met and reports the orbs spent.
    Build a new driver whenever the banner or goal changes.
    """

    def __init__(
        self, banner: BannerConfig, goal: Goal, seed: Optional[int] = None
    ) -> None:
        if not is_available(goal, banner):
            raise UnsatisfiableGoalError(
                f"Goal cannot be met on banner {banner}: {goal!r}"
            )
        self.banner = banner
        self.goal = goal
        self._custom_goal = as_custom(goal, banner)
        self.table = WeightTable.build(banner)
        self.rng = Random(seed)

    def run_one_trial(self) -> int:
        """Summon until the goal is met and return the orbs spent."""
        banner = self.banner
        table = self.table
        rng = self.rng
        state = GoalState.from_goal(self._custom_goal, banner)
        pity = 0
        charges = 0
        cost = 0
        while not state.is_satisfied():
            level = min(pity // SESSION_SIZE, MAX_PITY_LEVEL)
            charged = charges >= FOCUS_CHARGE_LIMIT
            draws = [table.sample(level, rng, charged) for _ in range(SESSION_SIZE)]
            result = simulate_session(draws, state, rng)
            cost += orb_cost(result.kept)
            pity = next_pity(banner, pity, result)
            if banner.focus_charges:
                if result.focus_kept:
                    charges = 0
                else:
                    charges = min(FOCUS_CHARGE_LIMIT, charges + result.nonfocus_kept)
        return cost

    def run_batches(
        self,
        histogram: ResultHistogram,
        config: Optional[SimulationConfig] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> int:
        """Record trials into `histogram` until the time budget runs out.

        Batches start at `initial_batch_size` trials and double each time. The
        deadline is only checked between batches, so a trial always finishes.

        Args:
            histogram: Histogram to add trial costs to. Calling again resumes
                accumulation into the same histogram.
            config: Batch configuration. Defaults to SimulationConfig().
            clock: Monotonic clock in milliseconds.

        Returns:
            Number of trials recorded by this call.
        """
        config = config or SimulationConfig()
        now = clock or _default_clock
        start = now()
        batch_size = config.initial_batch_size
        trials = 0
        while True:
            for _ in range(batch_size):
                histogram.increment(self.run_one_trial())
            trials += batch_size
            if now() - start >= config.time_budget_ms:
                break
            batch_size *= 2
        logger.debug(
            "Recorded %d trials in %.1f ms (%d total)",
            trials,
            now() - start,
            histogram.total_count(),
        )
        return trials

    async def run_batches_async(
        self,
        histogram: ResultHistogram,
        config: Optional[SimulationConfig] = None,
        clock: Optional[Callable[[], float]] = None,
        progress_callback=None,
    ) -> int:
        """Same as `run_batches`, yielding to the event loop between batches.

        Args:
            histogram: Histogram to add trial costs to.
            config: Batch configuration. Defaults to SimulationConfig().
            clock: Monotonic clock in milliseconds.
            progress_callback: Optional callback(trials, elapsed_ms).

        Returns:
            Number of trials recorded by this call.
        """
        config = config or SimulationConfig()
        now = clock or _default_clock
        start = now()
        batch_size = config.initial_batch_size
        trials = 0
        while True:
            for _ in range(batch_size):
                histogram.increment(self.run_one_trial())
            trials += batch_size
            elapsed = now() - start
            if progress_callback:
                progress_callback(trials, elapsed)
            if elapsed >= config.time_budget_ms:
                break
            batch_size *= 2
            await asyncio.sleep(0)
        logger.debug("Recorded %d trials asynchronously", trials)
        return trials

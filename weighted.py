"""Fixed-arity weighted sampling."""

from random import Random
from typing import Sequence

from pydantic import BaseModel, Field

SUPPORTED_ARITIES = (4, 5, 6)


class WeightedIndex(BaseModel):
    """Categorical distribution over 4, 5 or 6 categories.

    Stores cumulative fractions and samples through a fixed comparison tree
    per arity. A uniform choice c selects category i when
    cumulative[i - 1] <= c < cumulative[i], so zero-weight categories are
    never returned.
    """

    cumulative: tuple[float, ...] = Field(
        ..., description="Cumulative fractions, the last positive one pinned to 1.0"
    )

    model_config = {"frozen": True}

    @classmethod
    def from_weights(cls, weights: Sequence[float]) -> "WeightedIndex":
        if len(weights) not in SUPPORTED_ARITIES:
            raise ValueError(
                f"Unsupported number of categories {len(weights)}, expected one of {SUPPORTED_ARITIES}"
            )
        if any(weight < 0 for weight in weights):
            raise ValueError(f"Weights cannot be negative: {list(weights)}")
        total = float(sum(weights))
        if total <= 0:
            raise ValueError("Weights must have a positive total")

        last_positive = max(i for i, weight in enumerate(weights) if weight > 0)
        cumulative = []
        running = 0.0
        for i, weight in enumerate(weights):
            running += weight
            # Rounding must not leave a sliver for trailing zero weights.
            cumulative.append(1.0 if i >= last_positive else running / total)
        return cls(cumulative=tuple(cumulative))

    @property
    def arity(self) -> int:
        return len(self.cumulative)

    def sample(self, choice: float) -> int:
        """Map a uniform number in [0, 1) to a category index."""
        c = self.cumulative
        if len(c) == 4:
            if choice < c[1]:
                return 0 if choice < c[0] else 1
            return 2 if choice < c[2] else 3
        if len(c) == 5:
            if choice < c[1]:
                return 0 if choice < c[0] else 1
            if choice < c[2]:
                return 2
            return 3 if choice < c[3] else 4
        if choice < c[2]:
            if choice < c[0]:
                return 0
            return 1 if choice < c[1] else 2
        if choice < c[3]:
            return 3
        return 4 if choice < c[4] else 5

    def sample_with(self, rng: Random) -> int:
        return self.sample(rng.random())

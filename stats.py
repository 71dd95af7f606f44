"""Histogram of trial outcomes and percentile queries."""

from typing import Sequence

from pydantic import BaseModel, Field


class ResultHistogram(BaseModel):
    """Counts of trial costs, indexed directly by cost.

    Reading a cost that was never recorded gives 0 and recording a new cost
    grows the storage, so neither operation can fail.
    """

    counts: list[int] = Field(
        default_factory=list, description="Number of trials per cost"
    )

    def __getitem__(self, key: int) -> int:
        if 0 <= key < len(self.counts):
            return self.counts[key]
        return 0

    def increment(self, key: int, amount: int = 1) -> None:
        if key < 0:
            raise ValueError(f"Histogram keys cannot be negative: {key}")
        if key >= len(self.counts):
            self.counts.extend([0] * (key + 1 - len(self.counts)))
        self.counts[key] += amount

    def is_empty(self) -> bool:
        return self.total_count() == 0

    def total_count(self) -> int:
        return sum(self.counts)

    def items(self) -> list[tuple[int, int]]:
        """(cost, count) pairs with a nonzero count, in increasing cost order."""
        return [(key, count) for key, count in enumerate(self.counts) if count]

    def min_key(self) -> int:
        for key, count in enumerate(self.counts):
            if count:
                return key
        return 0

    def max_key(self) -> int:
        for key in range(len(self.counts) - 1, -1, -1):
            if self.counts[key]:
                return key
        return 0

    def mean(self) -> float:
        total = self.total_count()
        if total == 0:
            return 0.0
        return sum(key * count for key, count in enumerate(self.counts)) / total

    def percentile(self, pct: float) -> int:
        """Smallest cost where the cumulative fraction of trials exceeds `pct`.

        Returns 0 for an empty histogram, and the largest recorded cost when
        `pct` is at or beyond the empirical maximum.
        """
        total = self.total_count()
        if total == 0:
            return 0
        accum = 0
        for key, count in enumerate(self.counts):
            if not count:
                continue
            accum += count
            if accum / total > pct:
                return key
        return self.max_key()

    def percentiles(self, pcts: Sequence[float]) -> list[int]:
        """Answer several non-decreasing percentile queries in one pass.

        Gives the same values as calling `percentile` once per entry.
        """
        if any(later < earlier for earlier, later in zip(pcts, pcts[1:])):
            raise ValueError(f"Percentiles must be non-decreasing: {list(pcts)}")
        total = self.total_count()
        if total == 0:
            return [0] * len(pcts)

        results: list[int] = []
        cursor = 0
        accum = 0
        for key, count in enumerate(self.counts):
            if cursor == len(pcts):
                break
            if not count:
                continue
            accum += count
            while cursor < len(pcts) and accum / total > pcts[cursor]:
                results.append(key)
                cursor += 1
        results.extend([self.max_key()] * (len(pcts) - cursor))
        return results

    def percentile_curve(self, samples: int = 1000) -> list[int]:
        """Percentile value at each of `samples` evenly spaced fractions in [0, 1)."""
        return self.percentiles([idx / samples for idx in range(samples)])

    def merge(self, other: "ResultHistogram") -> None:
        """Add every count of `other` into this histogram."""
        for key, count in enumerate(other.counts):
            if count:
                self.increment(key, count)

    def clear(self) -> None:
        self.counts.clear()

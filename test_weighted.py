"""
Unit tests for weighted.py - fixed-arity weighted sampling.
"""
from random import Random

import pytest

from weighted import WeightedIndex


class TestConstruction:
    """Tests for WeightedIndex.from_weights validation."""

    @pytest.mark.parametrize("weights", [[1, 2, 3], [1] * 7, []])
    def test_unsupported_arity_rejected(self, weights):
        with pytest.raises(ValueError):
            WeightedIndex.from_weights(weights)

    def test_zero_total_rejected(self):
        """Degenerate weights fail explicitly instead of sampling garbage."""
        with pytest.raises(ValueError):
            WeightedIndex.from_weights([0, 0, 0, 0])

    def test_negative_weight_rejected(self):
        with pytest.raises(ValueError):
            WeightedIndex.from_weights([1, -1, 1, 1])

    def test_cumulative_fractions(self):
        index = WeightedIndex.from_weights([1, 1, 1, 1])
        assert index.cumulative == pytest.approx((0.25, 0.5, 0.75, 1.0))
        assert index.cumulative[-1] == 1.0

    def test_trailing_zero_weights_pinned_to_one(self):
        index = WeightedIndex.from_weights([0.1, 0.2, 0.7, 0.0, 0.0])
        assert index.cumulative[2:] == (1.0, 1.0, 1.0)

    @pytest.mark.parametrize("arity", [4, 5, 6])
    def test_arity(self, arity):
        assert WeightedIndex.from_weights([1] * arity).arity == arity


class TestSample:
    """Tests for the comparison tree."""

    @pytest.mark.parametrize("arity", [4, 5, 6])
    def test_boundaries_select_each_category(self, arity):
        """Each equal-width interval maps to its own category."""
        index = WeightedIndex.from_weights([1] * arity)
        for category in range(arity):
            low = category / arity
            assert index.sample(low + 1e-9) == category
            assert index.sample((category + 1) / arity - 1e-9) == category

    @pytest.mark.parametrize("arity", [4, 5, 6])
    def test_zero_weight_never_selected(self, arity):
        rng = Random(3)
        for zero in range(arity):
            weights = [1.0] * arity
            weights[zero] = 0.0
            index = WeightedIndex.from_weights(weights)
            assert all(index.sample_with(rng) != zero for _ in range(2000))

    def test_edges_of_unit_interval(self):
        index = WeightedIndex.from_weights([0, 1, 1, 0, 0, 0])
        assert index.sample(0.0) == 1
        assert index.sample(0.9999999999) == 2

    @pytest.mark.parametrize(
        "weights",
        [
            [3.0, 3.0, 58.0, 36.0],
            [5.0, 3.0, 3.0, 53.0, 36.0],
            [1.0, 2.0, 3.0, 4.0, 5.0, 6.0],
        ],
    )
    def test_frequencies_converge_to_weights(self, weights):
        """Empirical frequencies approach weight / total with a fixed seed."""
        rng = Random(12345)
        index = WeightedIndex.from_weights(weights)
        n = 60000
        counts = [0] * len(weights)
        for _ in range(n):
            counts[index.sample_with(rng)] += 1
        total = sum(weights)
        for count, weight in zip(counts, weights):
            assert count / n == pytest.approx(weight / total, abs=0.01)

"""
Tests for the 4PL item response model.

Tests cover:
- Response probability against a known value
- Asymptotes and monotonicity
- Fisher information non-negativity and peak location
- Test information and standard error
"""

import math

import pytest

from adaptive_cat.item_response import (
    fisher_information,
    item_response_function,
    standard_error,
    total_information,
)
from adaptive_cat.zeta import Zeta


class TestItemResponseFunction:
    """Probability of a correct response."""

    def test_known_value(self):
        prob = item_response_function(0, {"a": 1, "b": -0.3, "c": 0.35, "d": 1})
        assert prob == pytest.approx(0.7234, abs=0.005)

    def test_semantic_record_matches_symbolic(self):
        symbolic = item_response_function(0.4, {"a": 1.3, "b": 0.2, "c": 0.1, "d": 0.9})
        semantic = item_response_function(
            0.4,
            {"discrimination": 1.3, "difficulty": 0.2, "guessing": 0.1, "slipping": 0.9},
        )
        assert symbolic == pytest.approx(semantic)

    def test_missing_parameters_default_to_2pl(self):
        assert item_response_function(0.0, {}) == pytest.approx(0.5)
        assert item_response_function(1.0, Zeta()) == pytest.approx(1 / (1 + math.exp(-1)))

    def test_bounded_by_asymptotes(self):
        zeta = Zeta(discrimination=1.5, difficulty=0.0, guessing=0.2, slipping=0.95)
        for theta in (-6.0, -2.0, 0.0, 2.0, 6.0):
            prob = item_response_function(theta, zeta)
            assert zeta.guessing < prob < zeta.slipping

    def test_monotonically_increasing_in_theta(self):
        zeta = Zeta(discrimination=0.8, difficulty=1.0, guessing=0.25)
        probs = [item_response_function(t / 10, zeta) for t in range(-60, 61)]
        assert all(later > earlier for earlier, later in zip(probs, probs[1:]))

    def test_extreme_logits_do_not_overflow(self):
        zeta = Zeta(discrimination=50.0, difficulty=0.0)
        assert item_response_function(-100.0, zeta) == pytest.approx(0.0, abs=1e-12)
        assert item_response_function(100.0, zeta) == pytest.approx(1.0)


class TestFisherInformation:
    """Item information."""

    def test_non_negative(self):
        zeta = Zeta(discrimination=1.2, difficulty=0.5, guessing=0.3)
        for t in range(-60, 61):
            assert fisher_information(t / 10, zeta) >= 0.0

    def test_2pl_peak_at_difficulty(self):
        zeta = Zeta(discrimination=1.7, difficulty=0.8)
        # For a 2PL item, I(b) = a^2 / 4
        assert fisher_information(0.8, zeta) == pytest.approx(1.7**2 / 4)
        assert fisher_information(0.8, zeta) > fisher_information(0.0, zeta)
        assert fisher_information(0.8, zeta) > fisher_information(1.6, zeta)

    def test_guessing_reduces_information(self):
        without = fisher_information(0.0, Zeta(difficulty=0.0))
        with_guessing = fisher_information(0.0, Zeta(difficulty=0.0, guessing=0.5))
        assert with_guessing < without

    def test_underflowed_probability_gives_zero_information(self):
        # logit of -800 rounds the success probability to exactly 0.0
        zeta = {"a": 1, "b": 0, "c": 0, "d": 1}
        assert item_response_function(-800.0, zeta) == 0.0
        assert fisher_information(-800.0, zeta) == 0.0

    def test_saturated_probability_gives_zero_information(self):
        zeta = Zeta(discrimination=50.0, difficulty=0.0)
        assert fisher_information(100.0, zeta) == 0.0

    def test_standard_error_with_saturated_items(self):
        assert standard_error(-800.0, [Zeta(), Zeta(discrimination=2.0)]) == math.inf


class TestStandardError:
    """Test information and standard error of measurement."""

    def test_total_information_is_sum(self):
        zetas = [Zeta(difficulty=-1.0), Zeta(difficulty=0.0), {"b": 1.0}]
        expected = sum(fisher_information(0.3, z) for z in zetas)
        assert total_information(0.3, zetas) == pytest.approx(expected)

    def test_standard_error(self):
        zetas = [Zeta(difficulty=0.0), Zeta(difficulty=0.0)]
        # Two 2PL items at their peak: I = 2 * 0.25
        assert standard_error(0.0, zetas) == pytest.approx(1 / math.sqrt(0.5))

    def test_no_items_gives_infinite_error(self):
        assert standard_error(0.0, []) == math.inf

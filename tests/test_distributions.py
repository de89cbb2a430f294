"""
Tests for discretized prior distributions.

Tests cover:
- Grid endpoints, spacing and rounding
- Normal table normalization and symmetry
- Uniform table support embedding
- Input validation
"""

import pytest

from adaptive_cat.distributions import normal, theta_grid, uniform


class TestThetaGrid:
    """Grid construction."""

    def test_inclusive_endpoints(self):
        grid = theta_grid(-4.0, 4.0, 0.1)
        assert len(grid) == 81
        assert grid[0] == pytest.approx(-4.0)
        assert grid[-1] == pytest.approx(4.0)

    def test_points_are_rounded(self):
        grid = theta_grid(-1.0, 1.0, 0.1)
        assert 0.3 in grid.tolist()
        assert len(set(grid.tolist())) == len(grid)

    def test_non_positive_step_raises(self):
        with pytest.raises(ValueError, match="step_size"):
            theta_grid(-1.0, 1.0, 0.0)

    def test_reversed_bounds_raise(self):
        with pytest.raises(ValueError, match="min_theta"):
            theta_grid(1.0, -1.0)


class TestNormal:
    """Truncated normal table."""

    def test_sums_to_one(self):
        table = normal()
        assert sum(p for _, p in table) == pytest.approx(1.0, abs=1e-6)

    def test_spacing(self):
        table = normal(min_theta=-2, max_theta=2, step_size=0.25)
        xs = [x for x, _ in table]
        assert all(b - a == pytest.approx(0.25, abs=1e-6) for a, b in zip(xs, xs[1:]))
        assert xs[-1] == pytest.approx(2.0)

    def test_mode_at_mean(self):
        table = normal(mean=1.0, sd=0.5, min_theta=-6, max_theta=6)
        mode_x, _ = max(table, key=lambda pair: pair[1])
        assert mode_x == pytest.approx(1.0)

    def test_symmetric_about_mean(self):
        table = dict(normal(mean=0.0, sd=1.0, min_theta=-3, max_theta=3))
        assert table[-1.5] == pytest.approx(table[1.5])

    def test_non_positive_sd_raises(self):
        with pytest.raises(ValueError, match="Standard deviation"):
            normal(sd=0)


class TestUniform:
    """Uniform table embedded in a wider grid."""

    def test_sums_to_one(self):
        table = uniform(-2, 2)
        assert sum(p for _, p in table) == pytest.approx(1.0, abs=1e-6)

    def test_embedding_in_full_range(self):
        table = uniform(-4, 4, 0.1, -6, 6)
        assert len(table) == 121
        assert sum(p for _, p in table) == pytest.approx(1.0, abs=1e-6)

        inside = [p for x, p in table if -4 <= x <= 4]
        outside = [p for x, p in table if x < -4 or x > 4]
        assert len(inside) == 81
        assert all(p == pytest.approx(1 / 81) for p in inside)
        assert all(p == 0.0 for p in outside)

    def test_full_range_defaults_to_support(self):
        table = uniform(0, 1, 0.5)
        assert [x for x, _ in table] == [0.0, 0.5, 1.0]

"""
Discretized prior distributions over a theta grid.

Both builders return an ordered list of ``(theta, probability)`` pairs that
spans the requested range inclusively. Grid points are computed as
``min + i * step`` and rounded to ``GRID_DECIMALS`` places so that repeated
stepping neither overshoots the upper bound nor yields near-duplicate points.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np
from scipy.stats import norm

logger = logging.getLogger(__name__)

GRID_DECIMALS = 6

# Slack used when deciding whether a rounded grid point lies inside a bound
_GRID_TOLERANCE = 1e-9

DistributionTable = List[Tuple[float, float]]


def theta_grid(min_theta: float, max_theta: float, step_size: float = 0.1) -> np.ndarray:
    """
    Evenly spaced grid from ``min_theta`` to ``max_theta`` inclusive.

    Raises:
        ValueError: If step_size is not positive or the bounds are reversed.
    """
    if step_size <= 0:
        raise ValueError(f"step_size must be positive, got {step_size}")
    if min_theta > max_theta:
        raise ValueError(
            f"min_theta must not exceed max_theta, got {min_theta} > {max_theta}"
        )
    n_points = int(np.floor((max_theta - min_theta) / step_size + _GRID_TOLERANCE)) + 1
    return np.round(min_theta + step_size * np.arange(n_points), GRID_DECIMALS)


def normal(
    mean: float = 0.0,
    sd: float = 1.0,
    min_theta: float = -4.0,
    max_theta: float = 4.0,
    step_size: float = 0.1,
) -> DistributionTable:
    """
    Gaussian distribution truncated to ``[min_theta, max_theta]``.

    The closed-form density is evaluated at each grid point and rescaled so
    the table sums to one.

    Args:
        mean: Mean of the distribution.
        sd: Standard deviation. Must be positive.
        min_theta: Lower bound of the grid.
        max_theta: Upper bound of the grid.
        step_size: Grid quantization.

    Returns:
        List of (theta, probability) pairs.
    """
    if sd <= 0:
        raise ValueError(f"Standard deviation must be positive, got {sd}")

    grid = theta_grid(min_theta, max_theta, step_size)
    density = norm.pdf(grid, loc=mean, scale=sd)
    total = density.sum()
    if total > 0:
        density = density / total
    else:
        logger.warning(
            f"Normal(mean={mean}, sd={sd}) has no mass on [{min_theta}, {max_theta}]"
        )

    return [(float(x), float(p)) for x, p in zip(grid, density)]


def uniform(
    min_support: float,
    max_support: float,
    step_size: float = 0.1,
    full_min: Optional[float] = None,
    full_max: Optional[float] = None,
) -> DistributionTable:
    """
    Uniform distribution on ``[min_support, max_support]`` embedded in a
    wider grid.

    Every grid point inside the support receives ``1 / n_support_points``;
    points outside it receive zero.

    Args:
        min_support: Lower bound of the support.
        max_support: Upper bound of the support.
        step_size: Grid quantization.
        full_min: Lower bound of the returned grid (defaults to min_support).
        full_max: Upper bound of the returned grid (defaults to max_support).

    Returns:
        List of (theta, probability) pairs.
    """
    lower = min_support if full_min is None else full_min
    upper = max_support if full_max is None else full_max

    grid = theta_grid(lower, upper, step_size)
    in_support = (grid >= min_support - _GRID_TOLERANCE) & (
        grid <= max_support + _GRID_TOLERANCE
    )
    n_support = int(in_support.sum())
    probabilities = np.where(in_support, 1.0 / n_support if n_support else 0.0, 0.0)

    return [(float(x), float(p)) for x, p in zip(grid, probabilities)]

"""
Ability (theta) estimation for Computerized Adaptive Testing.

Two estimators are provided, both operating on the full response history:

MLE:
    theta_hat = argmax_theta sum(log L_i(theta))
    Solved with scipy's bounded scalar minimizer (Brent's method) on the
    negative log-likelihood over [min_theta, max_theta]. All-correct or
    all-incorrect patterns have no interior maximum and end up at a bound.

EAP:
    theta_hat = sum(theta_k * L(theta_k) * prior_k) / sum(L(theta_k) * prior_k)
    over a discretized prior table (Bock & Mislevy, 1982).

Where L(theta) = prod(P_i(theta)^u_i * (1 - P_i(theta))^(1 - u_i)) under the
4PL model in :mod:`adaptive_cat.item_response`.
"""

import logging
import math
from typing import Sequence

import numpy as np
from scipy.optimize import minimize_scalar

from adaptive_cat.distributions import DistributionTable
from adaptive_cat.item_response import item_response_function
from adaptive_cat.zeta import Zeta

logger = logging.getLogger(__name__)

# Probabilities are floored before taking logs so saturated items stay finite
PROBABILITY_FLOOR = 1e-300

# Absolute tolerance on theta for the bounded minimizer
MLE_XATOL = 1e-6


def log_likelihood(theta: float, zetas: Sequence[Zeta], resps: Sequence[int]) -> float:
    """
    Log-likelihood of a response pattern at ``theta``.

    Args:
        theta: Ability level.
        zetas: Item parameters of the administered items.
        resps: Matching responses (1 = correct, 0 = incorrect).

    Returns:
        Sum of per-item log probabilities.
    """
    total = 0.0
    for zeta, resp in zip(zetas, resps):
        prob = item_response_function(theta, zeta)
        if resp == 1:
            total += math.log(max(prob, PROBABILITY_FLOOR))
        else:
            total += math.log(max(1.0 - prob, PROBABILITY_FLOOR))
    return total


def estimate_ability_mle(
    zetas: Sequence[Zeta],
    resps: Sequence[int],
    min_theta: float,
    max_theta: float,
) -> float:
    """
    Maximum likelihood estimate of theta within ``[min_theta, max_theta]``.

    Args:
        zetas: Item parameters of the administered items.
        resps: Matching responses.
        min_theta: Lower search bound.
        max_theta: Upper search bound.

    Returns:
        The theta maximizing the likelihood.
    """
    result = minimize_scalar(
        lambda theta: -log_likelihood(theta, zetas, resps),
        bounds=(min_theta, max_theta),
        method="bounded",
        options={"xatol": MLE_XATOL},
    )

    if not result.success:
        logger.warning(
            f"MLE did not converge after {result.nfev} evaluations: {result.message}"
        )

    return float(result.x)


def estimate_ability_eap(
    zetas: Sequence[Zeta],
    resps: Sequence[int],
    prior: DistributionTable,
) -> float:
    """
    Expected a posteriori estimate of theta.

    Log-likelihoods are shifted by their maximum before exponentiation; the
    shift cancels in the ratio and keeps long response patterns from
    underflowing.

    Args:
        zetas: Item parameters of the administered items.
        resps: Matching responses.
        prior: (theta, probability) table.

    Returns:
        Posterior mean of theta. If the posterior collapses to zero at every
        grid point, the prior mean is returned instead.
    """
    thetas = np.array([theta for theta, _ in prior], dtype=float)
    prior_probs = np.array([prob for _, prob in prior], dtype=float)

    log_liks = np.array([log_likelihood(theta, zetas, resps) for theta in thetas])
    weights = np.exp(log_liks - log_liks.max()) * prior_probs
    normalizer = weights.sum()

    if normalizer <= 0.0:
        prior_mean = float((thetas * prior_probs).sum() / prior_probs.sum())
        logger.warning(
            "Posterior collapsed to zero at all grid points. "
            f"Returning prior mean {prior_mean:.3f}."
        )
        return prior_mean

    return float((thetas * weights).sum() / normalizer)

"""
Four-parameter logistic (4PL) item response model.

    P(theta) = c + (d - c) / (1 + exp(-a * (theta - b)))

Fisher information uses the 3PL form generalised with the upper asymptote
folded into P:

    I(theta) = a^2 * (Q / P) * (P - c)^2 / (1 - c)^2,   Q = 1 - P

Test information is the sum of item information over the administered items
and the standard error of measurement is 1 / sqrt(test information).

References:
    - Lord, F. M. (1980). Applications of item response theory to practical
      testing problems.
    - Barton, M. A., & Lord, F. M. (1981). An upper asymptote for the
      three-parameter logistic item-response model.
"""

import math
from typing import Iterable

from adaptive_cat.zeta import ZetaLike, as_zeta


def item_response_function(theta: float, zeta: ZetaLike) -> float:
    """
    Probability that a test-taker at ``theta`` answers the item correctly.

    Args:
        theta: Ability level.
        zeta: Item parameters, as a Zeta or a raw record in either naming.
            Missing parameters take their defaults.

    Returns:
        Probability strictly between the guessing and slipping asymptotes.
    """
    z = as_zeta(zeta)
    logit = z.discrimination * (theta - z.difficulty)

    # Numerically stable sigmoid
    if logit >= 0:
        sigmoid = 1.0 / (1.0 + math.exp(-logit))
    else:
        exp_logit = math.exp(logit)
        sigmoid = exp_logit / (1.0 + exp_logit)

    return z.guessing + (z.slipping - z.guessing) * sigmoid


def fisher_information(theta: float, zeta: ZetaLike) -> float:
    """
    Fisher information of one item at ability ``theta``.

    Args:
        theta: Ability level.
        zeta: Item parameters. Guessing must be below 1.

    Returns:
        Non-negative information value. Zero where the response
        probability has saturated at 0 or 1.
    """
    z = as_zeta(zeta)
    p = item_response_function(theta, z)
    q = 1.0 - p
    if p <= 0.0 or q <= 0.0:
        return 0.0
    return (z.discrimination**2) * (q / p) * ((p - z.guessing) ** 2 / (1.0 - z.guessing) ** 2)


def total_information(theta: float, zetas: Iterable[ZetaLike]) -> float:
    """Sum of item information over ``zetas`` at ability ``theta``."""
    return sum(fisher_information(theta, zeta) for zeta in zetas)


def standard_error(theta: float, zetas: Iterable[ZetaLike]) -> float:
    """
    Standard error of measurement at ``theta`` for the administered items.

    Returns ``math.inf`` when the items carry no information (for example when
    nothing has been administered yet).
    """
    information = total_information(theta, zetas)
    if information <= 0.0:
        return math.inf
    return 1.0 / math.sqrt(information)

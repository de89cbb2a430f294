"""
Monte Carlo simulation harness for checking Cat configurations.

Simulated examinees with known ability answer a fixed-length adaptive test;
responses are drawn from the 4PL probability of a correct answer. Comparing
final estimates to the true abilities gives the bias and RMSE of a given
estimator/selection combination.

References:
    - Weiss, D. J. (2004). Computerized adaptive testing for effective and
      efficient measurement in counseling and education. Measurement and
      Evaluation in Counseling and Development, 37(2), 70-84.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np

from adaptive_cat.cat import Cat
from adaptive_cat.item_response import item_response_function
from adaptive_cat.types import Stimulus, StimulusLike
from adaptive_cat.zeta import Zeta

logger = logging.getLogger(__name__)

# Synthetic item parameter distributions (Lord, 1980)
DISCRIMINATION_LOGNORMAL_MEAN = 0.0
DISCRIMINATION_LOGNORMAL_SD = 0.3
DISCRIMINATION_MIN = 0.5
DISCRIMINATION_MAX = 2.5
DIFFICULTY_NORMAL_MEAN = 0.0
DIFFICULTY_NORMAL_SD = 1.0
DIFFICULTY_MIN = -3.0
DIFFICULTY_MAX = 3.0


@dataclass
class SimulationStep:
    """State of the Cat after one simulated response."""

    trial: int  # 1-based position in the test
    stimulus: Stimulus
    response: int
    theta: float
    se: float


@dataclass
class SimulationSummary:
    """Aggregate accuracy over a simulated population."""

    n_examinees: int
    mean_bias: float  # mean(estimated - true)
    rmse: float
    mean_se: float
    mean_items: float


def generate_item_bank(n_items: int = 100, seed: int = 42) -> List[Stimulus]:
    """
    Generate a synthetic 2PL item bank.

    Item parameters follow typical operational banks (Lord, 1980):
        - Discrimination (a) ~ LogNormal(0.0, 0.3), clipped to [0.5, 2.5]
        - Difficulty (b) ~ Normal(0.0, 1.0), clipped to [-3.0, 3.0]

    Args:
        n_items: Number of items to generate.
        seed: Random seed for reproducibility.

    Returns:
        Stimuli with an integer ``id`` in their metadata.
    """
    rng = np.random.default_rng(seed)
    discrimination = np.clip(
        rng.lognormal(
            mean=DISCRIMINATION_LOGNORMAL_MEAN,
            sigma=DISCRIMINATION_LOGNORMAL_SD,
            size=n_items,
        ),
        DISCRIMINATION_MIN,
        DISCRIMINATION_MAX,
    )
    difficulty = np.clip(
        rng.normal(loc=DIFFICULTY_NORMAL_MEAN, scale=DIFFICULTY_NORMAL_SD, size=n_items),
        DIFFICULTY_MIN,
        DIFFICULTY_MAX,
    )

    items = [
        Stimulus(
            zeta=Zeta(discrimination=float(a), difficulty=float(b)),
            metadata={"id": item_id},
        )
        for item_id, (a, b) in enumerate(zip(discrimination, difficulty), start=1)
    ]
    logger.info(f"Generated item bank of {len(items)} items")
    return items


def simulate_response(true_theta: float, zeta: Zeta, rng: np.random.Generator) -> int:
    """Draw a 0/1 response from the 4PL success probability at ``true_theta``."""
    return int(rng.random() < item_response_function(true_theta, zeta))


def simulate_examinee(
    true_theta: float,
    corpus: Sequence[StimulusLike],
    test_length: int,
    cat_kwargs: Optional[Mapping[str, Any]] = None,
    seed: Optional[int] = None,
) -> List[SimulationStep]:
    """
    Run one simulated examinee through an adaptive test.

    The test ends after ``test_length`` items or when the corpus is used up.

    Args:
        true_theta: Ability used to generate responses.
        corpus: Item pool.
        test_length: Maximum number of items to administer.
        cat_kwargs: Keyword arguments for :class:`Cat`.
        seed: Seed of the response generator.

    Returns:
        One SimulationStep per administered item.
    """
    if test_length < 0:
        raise ValueError(f"test_length must be non-negative, got {test_length}")

    cat = Cat(**dict(cat_kwargs or {}))
    rng = np.random.default_rng(seed)

    # The first call copies the caller's corpus; later calls reuse that copy
    next_stimulus, remaining = cat.find_next_item(corpus)
    steps: List[SimulationStep] = []
    while next_stimulus is not None and len(steps) < test_length:
        response = simulate_response(true_theta, next_stimulus.zeta, rng)
        cat.update_ability_estimate(next_stimulus.zeta, response)
        steps.append(
            SimulationStep(
                trial=len(steps) + 1,
                stimulus=next_stimulus,
                response=response,
                theta=cat.theta,
                se=cat.se_measurement,
            )
        )
        next_stimulus, remaining = cat.find_next_item(remaining, deep_copy=False)

    return steps


def simulate_population(
    thetas: Sequence[float],
    corpus: Sequence[StimulusLike],
    test_length: int,
    cat_kwargs: Optional[Mapping[str, Any]] = None,
    seed: int = 42,
) -> SimulationSummary:
    """
    Simulate every ability in ``thetas`` and summarise estimation accuracy.

    Each examinee gets its own response seed drawn from ``seed``. Examinees
    whose test administered no items are left out of the averages.

    Raises:
        ValueError: If thetas is empty.
    """
    if len(thetas) == 0:
        raise ValueError("thetas must contain at least one ability")

    rng = np.random.default_rng(seed)
    errors: List[float] = []
    ses: List[float] = []
    lengths: List[int] = []

    for true_theta in thetas:
        examinee_seed = int(rng.integers(0, 2**32))
        kwargs: Dict[str, Any] = dict(cat_kwargs or {})
        kwargs.setdefault("random_seed", examinee_seed)
        steps = simulate_examinee(true_theta, corpus, test_length, kwargs, examinee_seed)
        if not steps:
            continue
        errors.append(steps[-1].theta - true_theta)
        ses.append(steps[-1].se)
        lengths.append(len(steps))

    if not errors:
        logger.warning("No simulated examinee was administered any items")
        return SimulationSummary(len(thetas), math.nan, math.nan, math.nan, 0.0)

    error_array = np.array(errors)
    summary = SimulationSummary(
        n_examinees=len(thetas),
        mean_bias=float(error_array.mean()),
        rmse=float(np.sqrt((error_array**2).mean())),
        mean_se=float(np.mean(ses)),
        mean_items=float(np.mean(lengths)),
    )
    logger.info(
        f"Simulated {summary.n_examinees} examinees: bias={summary.mean_bias:.3f}, "
        f"rmse={summary.rmse:.3f}, mean_items={summary.mean_items:.1f}"
    )
    return summary

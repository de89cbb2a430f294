"""
Cat: ability estimation plus item selection for one test-taker on one construct.

A Cat accumulates (item parameters, response) pairs, re-estimates theta over
the whole history after every update, and picks the next item from a
candidate pool. Configuration is validated eagerly so a misconfigured Cat
never exists.

Typical loop:

    cat = Cat(method="EAP", item_select="MFI", n_start_items=2, random_seed="s1")
    next_item, remaining = cat.find_next_item(pool)
    ... administer next_item ...
    cat.update_ability_estimate(next_item.zeta, answer)
    next_item, remaining = cat.find_next_item(remaining)
"""

import copy
import logging
import numbers
import random
import sys
from typing import List, Mapping, MutableSequence, Optional, Sequence, Union

from adaptive_cat.ability_estimation import estimate_ability_eap, estimate_ability_mle
from adaptive_cat.config import settings
from adaptive_cat.distributions import DistributionTable, normal, uniform
from adaptive_cat.errors import ConfigurationError, UsageError
from adaptive_cat.item_response import standard_error
from adaptive_cat.item_selection import (
    NextItem,
    select_closest,
    select_fixed,
    select_max_information,
    select_middle,
    select_random,
    sort_by_difficulty,
)
from adaptive_cat.types import (
    ITEM_SELECT_ALIASES,
    PRIOR_ALIASES,
    EstimationMethod,
    ItemSelectMethod,
    PriorDistribution,
    StartSelectMethod,
    StimulusLike,
    as_stimulus,
    parse_choice,
)
from adaptive_cat.zeta import Zeta, ZetaLike, as_zeta

logger = logging.getLogger(__name__)

# Reported before any item has been administered
INITIAL_SE_MEASUREMENT = sys.float_info.max

DEFAULT_NORMAL_PRIOR_PAR = (0.0, 1.0)
DEFAULT_UNIFORM_PRIOR_PAR = (-4.0, 4.0)


class Cat:
    """
    Adaptive testing session for a single construct.

    Args:
        method: Ability estimator, "MLE" or "EAP" (case-insensitive).
        item_select: Item selection method, "MFI", "random", "closest" or
            "fixed". "max-information" is accepted as an alias of "MFI".
        n_start_items: Number of initial items chosen by ``start_select``.
        start_select: Start-phase selection, "middle", "random" or "fixed".
        theta: Initial ability estimate, clamped to the theta bounds.
        min_theta: Lower bound of theta (default ``settings.MIN_THETA``).
        max_theta: Upper bound of theta (default ``settings.MAX_THETA``).
        prior_dist: EAP prior, "norm" or "unif".
        prior_par: EAP prior parameters, (mean, sd) for "norm" and
            (min_support, max_support) for "unif".
        random_seed: Seed of this Cat's random source. Falls back to
            ``settings.DEFAULT_RANDOM_SEED`` and then to system entropy.

    Raises:
        ConfigurationError: If any option is unknown or the prior is invalid.
    """

    def __init__(
        self,
        method: Union[str, EstimationMethod] = "MLE",
        item_select: Union[str, ItemSelectMethod] = "MFI",
        n_start_items: int = 0,
        start_select: Union[str, StartSelectMethod] = "middle",
        theta: float = 0.0,
        min_theta: Optional[float] = None,
        max_theta: Optional[float] = None,
        prior_dist: Union[str, PriorDistribution] = "norm",
        prior_par: Optional[Sequence[float]] = None,
        random_seed: Optional[Union[str, int]] = None,
    ):
        self.method = parse_choice(EstimationMethod, method, "method")
        self.item_select = parse_choice(
            ItemSelectMethod, item_select, "item_select", ITEM_SELECT_ALIASES
        )
        self.start_select = parse_choice(StartSelectMethod, start_select, "start_select")
        self.prior_dist = parse_choice(
            PriorDistribution, prior_dist, "prior_dist", PRIOR_ALIASES
        )

        if n_start_items < 0:
            raise ConfigurationError(
                f"n_start_items must be non-negative, got {n_start_items}"
            )
        self.n_start_items = n_start_items

        self.min_theta = settings.MIN_THETA if min_theta is None else float(min_theta)
        self.max_theta = settings.MAX_THETA if max_theta is None else float(max_theta)
        if self.min_theta >= self.max_theta:
            raise ConfigurationError(
                f"min_theta must be less than max_theta, got "
                f"min_theta={self.min_theta}, max_theta={self.max_theta}"
            )

        if prior_par is None:
            prior_par = (
                DEFAULT_UNIFORM_PRIOR_PAR
                if self.prior_dist is PriorDistribution.UNIFORM
                else DEFAULT_NORMAL_PRIOR_PAR
            )
        self.prior_par = [float(value) for value in prior_par]

        self._zetas: List[Zeta] = []
        self._resps: List[int] = []
        self._theta = min(max(float(theta), self.min_theta), self.max_theta)
        self._se_measurement = INITIAL_SE_MEASUREMENT

        seed = random_seed if random_seed is not None else settings.DEFAULT_RANDOM_SEED
        self._rng = random.Random(seed)

        self._prior: DistributionTable = (
            self._build_prior() if self.method is EstimationMethod.EAP else []
        )

    @classmethod
    def from_input(cls, cat_input) -> "Cat":
        """Build a Cat from a :class:`adaptive_cat.schemas.CatInput`."""
        return cls(**cat_input.model_dump())

    # ── Accessors ──

    @property
    def theta(self) -> float:
        return self._theta

    @property
    def se_measurement(self) -> float:
        """Standard error of the current estimate (``math.inf`` when uninformative)."""
        return self._se_measurement

    @property
    def n_items(self) -> int:
        """Number of responses observed so far."""
        return len(self._resps)

    @property
    def resps(self) -> List[int]:
        return list(self._resps)

    @property
    def zetas(self) -> List[Zeta]:
        return list(self._zetas)

    @property
    def prior(self) -> DistributionTable:
        return list(self._prior)

    # ── Configuration ──

    def _build_prior(self) -> DistributionTable:
        if len(self.prior_par) != 2:
            raise ConfigurationError(
                "prior_par should be a sequence of two numbers. "
                f"Received {self.prior_par}."
            )

        if self.prior_dist is PriorDistribution.NORMAL:
            mean, sd = self.prior_par
            if sd <= 0:
                raise ConfigurationError(
                    f"Expected a positive prior_par standard deviation. Received {sd}"
                )
            if mean < self.min_theta or mean > self.max_theta:
                raise ConfigurationError(
                    "Expected the prior_par mean to be between min_theta and "
                    f"max_theta. Received mean: {mean}, min: {self.min_theta}, "
                    f"max: {self.max_theta}"
                )
            return normal(
                mean, sd, self.min_theta, self.max_theta, settings.PRIOR_STEP_SIZE
            )

        min_support, max_support = self.prior_par
        if min_support >= max_support:
            raise ConfigurationError(
                "The uniform prior_par bounds are not valid (min must be less "
                f"than max). Received min: {min_support} and max: {max_support}"
            )
        if min_support < self.min_theta or max_support > self.max_theta:
            raise ConfigurationError(
                "The uniform prior_par bounds are not within theta bounds. "
                f"Received min_theta: {self.min_theta}, min_support: {min_support}, "
                f"max_support: {max_support}, max_theta: {self.max_theta}."
            )
        return uniform(
            min_support,
            max_support,
            settings.PRIOR_STEP_SIZE,
            self.min_theta,
            self.max_theta,
        )

    # ── Estimation ──

    def update_ability_estimate(
        self,
        zeta: Union[ZetaLike, Sequence[ZetaLike]],
        answer: Union[int, Sequence[int]],
        method: Optional[Union[str, EstimationMethod]] = None,
    ) -> None:
        """
        Record responses and re-estimate theta over the full history.

        The whole batch is validated before anything is recorded, so a
        rejected call leaves the Cat unchanged.

        Args:
            zeta: Item parameters, or a sequence of them.
            answer: Response (0 or 1), or a sequence matching ``zeta``.
            method: Estimator for this update (defaults to ``self.method``).

        Raises:
            ConfigurationError: If method is unknown.
            UsageError: If the lengths differ or an answer is not 0 or 1.
            ZetaValidationError: If any item parameters are invalid.
        """
        estimator = (
            self.method
            if method is None
            else parse_choice(EstimationMethod, method, "method")
        )

        zetas = [zeta] if isinstance(zeta, (Zeta, Mapping)) else list(zeta)
        answers = [answer] if isinstance(answer, numbers.Integral) else list(answer)

        if len(zetas) != len(answers):
            raise UsageError("Unmatched length between answers and item params")

        parsed = [as_zeta(z, require_all=True) for z in zetas]
        for value in answers:
            if value not in (0, 1):
                raise UsageError(f"Answers must be 0 or 1, got {value!r}")

        if estimator is EstimationMethod.EAP and not self._prior:
            # A Cat built for MLE gets its prior on first EAP use
            self._prior = self._build_prior()

        self._zetas.extend(parsed)
        self._resps.extend(int(value) for value in answers)

        if not self._resps:
            return

        if estimator is EstimationMethod.EAP:
            theta = estimate_ability_eap(self._zetas, self._resps, self._prior)
        else:
            theta = estimate_ability_mle(
                self._zetas, self._resps, self.min_theta, self.max_theta
            )

        self._theta = min(max(theta, self.min_theta), self.max_theta)
        self._se_measurement = standard_error(self._theta, self._zetas)

        logger.debug(
            f"{estimator.value.upper()} update: theta={self._theta:.3f}, "
            f"se={self._se_measurement:.3f}, n_items={self.n_items}",
            extra={
                "theta": self._theta,
                "se": self._se_measurement,
                "n_items": self.n_items,
            },
        )

    # ── Selection ──

    def find_next_item(
        self,
        stimuli: Union[Sequence[StimulusLike], MutableSequence[StimulusLike]],
        item_select: Optional[Union[str, ItemSelectMethod]] = None,
        deep_copy: bool = True,
    ) -> NextItem:
        """
        Choose the next item from ``stimuli``.

        While fewer than ``n_start_items`` responses have been recorded the
        start-phase strategy replaces the requested one.

        Args:
            stimuli: Candidate items as Stimulus objects or flat records.
            item_select: Selection method for this call
                (defaults to ``self.item_select``).
            deep_copy: When True the candidates are copied and the caller's
                list is left alone. When False ``stimuli`` must be a list; its
                records are replaced by parsed Stimulus objects and the chosen
                item is removed from it in place.

        Returns:
            ``NextItem(next_stimulus, remaining_stimuli)``. ``next_stimulus``
            is None when there are no candidates.

        Raises:
            ConfigurationError: If item_select is unknown.
            UsageError: If deep_copy is False and stimuli is not a list.
        """
        selector = (
            self.item_select
            if item_select is None
            else parse_choice(
                ItemSelectMethod, item_select, "item_select", ITEM_SELECT_ALIASES
            )
        )

        if deep_copy:
            arr = [as_stimulus(copy.deepcopy(stimulus)) for stimulus in stimuli]
        else:
            if not isinstance(stimuli, list):
                raise UsageError(
                    "find_next_item with deep_copy=False requires a list of stimuli"
                )
            stimuli[:] = [as_stimulus(stimulus) for stimulus in stimuli]
            arr = stimuli

        strategy: Union[ItemSelectMethod, StartSelectMethod] = (
            self.start_select if self.n_items < self.n_start_items else selector
        )

        match strategy:
            case StartSelectMethod.MIDDLE:
                sort_by_difficulty(arr)
                result = select_middle(arr, self._rng, self.n_start_items)
            case ItemSelectMethod.CLOSEST:
                sort_by_difficulty(arr)
                result = select_closest(arr, self._theta)
            case ItemSelectMethod.RANDOM | StartSelectMethod.RANDOM:
                sort_by_difficulty(arr)
                result = select_random(arr, self._rng)
            case ItemSelectMethod.FIXED | StartSelectMethod.FIXED:
                result = select_fixed(arr)
            case ItemSelectMethod.MFI:
                result = select_max_information(arr, self._theta)
            case _:
                raise ConfigurationError(f"Unsupported selection strategy {strategy!r}")

        logger.debug(
            f"Selected next item with '{strategy.value}' "
            f"({len(result.remaining_stimuli)} remaining)"
        )
        return result

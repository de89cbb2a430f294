"""
Early-stopping policies for multi-construct adaptive tests.

A policy watches the cats of a Clowder and decides when no further items
should be administered. Every ``update`` call first ingests each cat's item
count and standard error of measurement (SE), recording the SE only when the
item count has grown since the last observation, then evaluates a per-cat
condition for every cat the policy is configured for:

    StopAfterNItems                    n_items >= required_items[cat]
    StopOnSEMeasurementPlateau         the last patience[cat] SE values all lie
                                       within tolerance[cat] of their mean
    StopIfSEMeasurementBelowThreshold  the last patience[cat] SE values are all
                                       <= se_measurement_threshold[cat]
                                       + tolerance[cat]

Per-cat conditions are combined with the policy's logical operation:

    and   every configured cat meets its condition
    or    at least one configured cat meets its condition
    only  the cat named in the update call meets its condition

Once a policy has stopped it stays stopped.

References:
    - Babcock, B., & Weiss, D. J. (2012). Termination criteria in computerized
      adaptive tests: Do variable-length CATs provide efficient and effective
      measurement? Journal of Computerized Adaptive Testing, 1(1), 1-18.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, runtime_checkable

from adaptive_cat.errors import UsageError
from adaptive_cat.schemas import EarlyStoppingInput, validate_input
from adaptive_cat.types import LogicalOperation, parse_choice

logger = logging.getLogger(__name__)

# Used by the SE-threshold policy for cats without explicit settings
DEFAULT_PATIENCE = 1
DEFAULT_TOLERANCE = 0.0
DEFAULT_SE_THRESHOLD = 0.0


@runtime_checkable
class SupportsMeasurement(Protocol):
    """Anything exposing an item count and a standard error, such as a Cat."""

    @property
    def n_items(self) -> int: ...

    @property
    def se_measurement(self) -> float: ...


class EarlyStopping(ABC):
    """
    Base class for early-stopping policies.

    Args:
        patience: Per-cat number of recent SE values a condition must hold for.
        tolerance: Per-cat allowed SE deviation.
        required_items: Per-cat item count that triggers stopping.
        se_measurement_threshold: Per-cat SE level that triggers stopping.
        logical_operation: "and", "or" or "only" (case-insensitive).

    Raises:
        ConfigurationError: If a value is negative or logical_operation is unknown.
    """

    def __init__(
        self,
        patience: Optional[Mapping[str, int]] = None,
        tolerance: Optional[Mapping[str, float]] = None,
        required_items: Optional[Mapping[str, int]] = None,
        se_measurement_threshold: Optional[Mapping[str, float]] = None,
        logical_operation: str = "or",
    ):
        config = validate_input(
            EarlyStoppingInput,
            {
                "patience": patience or {},
                "tolerance": tolerance or {},
                "required_items": required_items or {},
                "se_measurement_threshold": se_measurement_threshold or {},
                "logical_operation": logical_operation,
            },
        )
        self._patience: Dict[str, int] = dict(config.patience)
        self._tolerance: Dict[str, float] = dict(config.tolerance)
        self._required_items: Dict[str, int] = dict(config.required_items)
        self._se_measurement_threshold: Dict[str, float] = dict(
            config.se_measurement_threshold
        )
        self._logical_operation = parse_choice(
            LogicalOperation, config.logical_operation, "logical_operation"
        )

        self._n_items: Dict[str, int] = {}
        self._se_measurements: Dict[str, List[float]] = {}
        self._early_stop = False

    @classmethod
    def from_input(cls, early_stopping_input: EarlyStoppingInput) -> "EarlyStopping":
        return cls(**early_stopping_input.model_dump())

    @property
    def patience(self) -> Dict[str, int]:
        return dict(self._patience)

    @property
    def tolerance(self) -> Dict[str, float]:
        return dict(self._tolerance)

    @property
    def required_items(self) -> Dict[str, int]:
        return dict(self._required_items)

    @property
    def se_measurement_threshold(self) -> Dict[str, float]:
        return dict(self._se_measurement_threshold)

    @property
    def logical_operation(self) -> LogicalOperation:
        return self._logical_operation

    @property
    def early_stop(self) -> bool:
        return self._early_stop

    @property
    def n_items(self) -> Dict[str, int]:
        """Last observed item count per cat."""
        return dict(self._n_items)

    @property
    def se_measurements(self) -> Dict[str, List[float]]:
        """Recorded SE history per cat."""
        return {name: list(history) for name, history in self._se_measurements.items()}

    @property
    @abstractmethod
    def _evaluated_cats(self) -> Iterable[str]:
        """Cats this policy has a condition for."""

    @abstractmethod
    def _cat_should_stop(self, cat_name: str) -> bool:
        """Per-cat stopping condition."""

    def _recent_se_measurements(self, cat_name: str, patience: int) -> Optional[List[float]]:
        """Last ``patience`` SE values, or None while fewer have been recorded."""
        window = max(patience, 1)
        history = self._se_measurements.get(cat_name, [])
        if len(history) < window:
            return None
        return history[-window:]

    def _update_cats(self, cats: Mapping[str, SupportsMeasurement]) -> None:
        for cat_name, cat in cats.items():
            n_items = cat.n_items
            if n_items > self._n_items.get(cat_name, 0):
                self._n_items[cat_name] = n_items
                self._se_measurements.setdefault(cat_name, []).append(cat.se_measurement)

    def update(
        self,
        cats: Mapping[str, SupportsMeasurement],
        cat_to_evaluate: Optional[str] = None,
    ) -> None:
        """
        Ingest the current state of ``cats`` and re-evaluate the policy.

        Args:
            cats: Map of cat name to Cat (or anything with n_items and
                se_measurement).
            cat_to_evaluate: Cat being selected for. Required when the
                logical operation is "only".

        Raises:
            UsageError: If the logical operation is "only" and no cat is named.
        """
        if self._logical_operation is LogicalOperation.ONLY and cat_to_evaluate is None:
            raise UsageError(
                "cat_to_evaluate must be provided when logical_operation is 'only'"
            )

        self._update_cats(cats)
        if self._early_stop:
            return

        evaluated = list(self._evaluated_cats)
        if self._logical_operation is LogicalOperation.ONLY:
            should_stop = cat_to_evaluate in evaluated and self._cat_should_stop(
                cat_to_evaluate
            )
        elif self._logical_operation is LogicalOperation.AND:
            should_stop = bool(evaluated) and all(
                self._cat_should_stop(cat_name) for cat_name in evaluated
            )
        else:
            should_stop = any(self._cat_should_stop(cat_name) for cat_name in evaluated)

        if should_stop:
            self._early_stop = True
            logger.info(
                f"{type(self).__name__} triggered early stopping "
                f"({self._logical_operation.value}), n_items={self._n_items}",
                extra={"stop_reason": type(self).__name__, "n_items": self.n_items},
            )


class StopAfterNItems(EarlyStopping):
    """Stop once a cat has seen its required number of items."""

    @property
    def _evaluated_cats(self) -> Iterable[str]:
        return self._required_items.keys()

    def _cat_should_stop(self, cat_name: str) -> bool:
        return self._n_items.get(cat_name, 0) >= self._required_items[cat_name]


class StopOnSEMeasurementPlateau(EarlyStopping):
    """Stop once a cat's SE has stopped changing."""

    @property
    def _evaluated_cats(self) -> Iterable[str]:
        return self._patience.keys()

    def _cat_should_stop(self, cat_name: str) -> bool:
        recent = self._recent_se_measurements(cat_name, self._patience[cat_name])
        if recent is None:
            return False
        tolerance = self._tolerance.get(cat_name, DEFAULT_TOLERANCE)
        mean = sum(recent) / len(recent)
        return all(abs(se - mean) <= tolerance for se in recent)


class StopIfSEMeasurementBelowThreshold(EarlyStopping):
    """Stop once a cat's SE has stayed at or below a threshold."""

    @property
    def _evaluated_cats(self) -> Iterable[str]:
        return self._se_measurement_threshold.keys()

    def _cat_should_stop(self, cat_name: str) -> bool:
        patience = self._patience.get(cat_name, DEFAULT_PATIENCE)
        recent = self._recent_se_measurements(cat_name, patience)
        if recent is None:
            return False
        threshold = self._se_measurement_threshold.get(cat_name, DEFAULT_SE_THRESHOLD)
        tolerance = self._tolerance.get(cat_name, DEFAULT_TOLERANCE)
        return all(se <= threshold + tolerance for se in recent)

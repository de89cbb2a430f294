"""
Pydantic schemas for Cat, Clowder and early-stopping configuration.

The schemas check field types and simple bounds. Strategy names stay plain
strings here and are parsed into enums by the classes that use them, so the
error for an unknown strategy names the offending field either way.
"""

from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from adaptive_cat.errors import ConfigurationError

M = TypeVar("M", bound=BaseModel)


class CatInput(BaseModel):
    """Configuration of one Cat."""

    model_config = ConfigDict(extra="forbid")

    method: str = Field("MLE", description="Ability estimator (MLE or EAP)")
    item_select: str = Field(
        "MFI", description="Item selection method (MFI, random, closest, fixed)"
    )
    n_start_items: int = Field(
        0, ge=0, description="Number of items chosen by the start strategy"
    )
    start_select: str = Field(
        "middle", description="Start-phase selection (middle, random, fixed)"
    )
    theta: float = Field(0.0, description="Initial ability estimate")
    min_theta: Optional[float] = Field(None, description="Lower bound of theta")
    max_theta: Optional[float] = Field(None, description="Upper bound of theta")
    prior_dist: str = Field("norm", description="EAP prior distribution (norm, unif)")
    prior_par: Optional[List[float]] = Field(
        None, description="EAP prior parameters"
    )
    random_seed: Optional[Union[str, int]] = Field(
        None, description="Seed of the Cat's random source"
    )


class EarlyStoppingInput(BaseModel):
    """Per-cat thresholds of an early-stopping policy."""

    model_config = ConfigDict(extra="forbid")

    patience: Dict[str, int] = Field(
        default_factory=dict,
        description="Number of recent SE values a condition must hold for",
    )
    tolerance: Dict[str, float] = Field(
        default_factory=dict, description="Allowed SE deviation"
    )
    required_items: Dict[str, int] = Field(
        default_factory=dict, description="Item count that triggers stopping"
    )
    se_measurement_threshold: Dict[str, float] = Field(
        default_factory=dict, description="SE level that triggers stopping"
    )
    logical_operation: str = Field(
        "or", description="How per-cat conditions combine (and, or, only)"
    )

    @field_validator("patience", "tolerance", "required_items")
    @classmethod
    def validate_non_negative(cls, v: Dict[str, float]) -> Dict[str, float]:
        """Reject negative per-cat values."""
        negative = {name: value for name, value in v.items() if value < 0}
        if negative:
            raise ValueError(f"values must be non-negative, got {negative}")
        return v


def validate_input(model_cls: Type[M], data: Union[M, Mapping[str, Any], None]) -> M:
    """
    Coerce ``data`` into ``model_cls``.

    Raises:
        ConfigurationError: If pydantic rejects the input.
    """
    if isinstance(data, model_cls):
        return data
    try:
        return model_cls.model_validate(dict(data or {}))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid {model_cls.__name__}: {e}") from e

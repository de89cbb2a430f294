"""Shared domain types for adaptive testing.

Strategy names are closed ``str``-backed enums so that configuration strings
are parsed once, at construction, and dispatched exhaustively afterwards.

Items carry typed IRT parameters plus an opaque ``metadata`` dict holding
whatever the corpus loader attached (identifiers, content, display fields).
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

from adaptive_cat.errors import ConfigurationError
from adaptive_cat.zeta import (
    PARAMETER_KEYS,
    Zeta,
    ZetaFormat,
    as_zeta,
)

E = TypeVar("E", bound=enum.Enum)


class EstimationMethod(str, enum.Enum):
    """Ability estimators."""

    MLE = "mle"
    EAP = "eap"


class ItemSelectMethod(str, enum.Enum):
    """Item selection strategies available after the start phase."""

    MFI = "mfi"
    RANDOM = "random"
    CLOSEST = "closest"
    FIXED = "fixed"


class StartSelectMethod(str, enum.Enum):
    """Item selection strategies for the first ``n_start_items`` items."""

    RANDOM = "random"
    MIDDLE = "middle"
    FIXED = "fixed"


class PriorDistribution(str, enum.Enum):
    """Prior ability distributions for EAP estimation."""

    NORMAL = "norm"
    UNIFORM = "unif"


class LogicalOperation(str, enum.Enum):
    """How per-cat early-stopping conditions are combined."""

    AND = "and"
    OR = "or"
    ONLY = "only"


ITEM_SELECT_ALIASES = {"max-information": "mfi", "max_information": "mfi"}
PRIOR_ALIASES = {"normal": "norm", "uniform": "unif"}


def parse_choice(
    enum_cls: Type[E],
    value: Union[str, E],
    field_name: str,
    aliases: Optional[Mapping[str, str]] = None,
) -> E:
    """
    Parse a case-insensitive strategy name into a member of ``enum_cls``.

    Args:
        enum_cls: Target enum.
        value: Member or name to parse.
        field_name: Configuration field reported in the error message.
        aliases: Optional map of alternative spellings to canonical values.

    Raises:
        ConfigurationError: If the value is not a recognised option.
    """
    if isinstance(value, enum_cls):
        return value
    key = str(value).strip().lower()
    if aliases:
        key = aliases.get(key, key)
    try:
        return enum_cls(key)
    except ValueError:
        valid = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(
            f"Invalid {field_name} '{value}'. Expected one of: {valid}"
        ) from None


def _split_record(record: Mapping[str, Any]) -> tuple[Dict[str, Any], Dict[str, Any]]:
    params = {k: v for k, v in record.items() if k in PARAMETER_KEYS}
    metadata = {k: v for k, v in record.items() if k not in PARAMETER_KEYS}
    return params, metadata


@dataclass
class Stimulus:
    """An item with a single set of IRT parameters."""

    zeta: Zeta = field(default_factory=Zeta)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def difficulty(self) -> float:
        return self.zeta.difficulty

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Stimulus":
        """Build a Stimulus from a flat record with top-level parameter keys."""
        params, metadata = _split_record(record)
        return cls(zeta=Zeta.from_dict(params), metadata=metadata)

    def to_record(
        self, desired_format: Union[str, ZetaFormat] = ZetaFormat.SEMANTIC
    ) -> Dict[str, Any]:
        """Flatten back into a single record with top-level parameter keys."""
        return {**self.metadata, **self.zeta.to_dict(desired_format)}


StimulusLike = Union[Stimulus, Mapping[str, Any]]


def as_stimulus(stimulus: StimulusLike) -> Stimulus:
    if isinstance(stimulus, Stimulus):
        return stimulus
    return Stimulus.from_record(stimulus)


@dataclass
class ZetaCatMap:
    """One set of item parameters shared by the named cats."""

    cats: List[str]
    zeta: Zeta = field(default_factory=Zeta)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ZetaCatMap":
        return cls(cats=list(record.get("cats", [])), zeta=as_zeta(record.get("zeta", {})))


@dataclass
class MultiZetaStimulus:
    """An item whose IRT parameters are scoped per named cat.

    A cat that appears in none of the ``zetas`` entries has no parameters for
    this item, which marks the item as unvalidated for that cat.
    """

    zetas: List[ZetaCatMap] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def has_cat(self, cat_name: str) -> bool:
        return any(cat_name in zeta_map.cats for zeta_map in self.zetas)

    def zeta_for(self, cat_name: str) -> Optional[Zeta]:
        """Return the parameters applicable to ``cat_name``, if any."""
        for zeta_map in self.zetas:
            if cat_name in zeta_map.cats:
                return zeta_map.zeta
        return None

    @property
    def is_unvalidated(self) -> bool:
        """True when no cat at all has parameters for this item."""
        return not any(zeta_map.cats for zeta_map in self.zetas)

    def to_stimulus(self, cat_name: str) -> Stimulus:
        """Project onto the single parameter set of ``cat_name``.

        Raises:
            KeyError: If the item has no parameters for ``cat_name``.
        """
        zeta = self.zeta_for(cat_name)
        if zeta is None:
            raise KeyError(cat_name)
        return Stimulus(zeta=zeta, metadata=self.metadata)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "MultiZetaStimulus":
        """Build from ``{"zetas": [{"cats": [...], "zeta": {...}}, ...], **metadata}``."""
        zetas = [
            zeta_map if isinstance(zeta_map, ZetaCatMap) else ZetaCatMap.from_record(zeta_map)
            for zeta_map in record.get("zetas", [])
        ]
        metadata = {k: v for k, v in record.items() if k != "zetas"}
        return cls(zetas=zetas, metadata=metadata)

    def to_record(
        self, desired_format: Union[str, ZetaFormat] = ZetaFormat.SYMBOLIC
    ) -> Dict[str, Any]:
        return {
            **self.metadata,
            "zetas": [
                {"cats": list(zeta_map.cats), "zeta": zeta_map.zeta.to_dict(desired_format)}
                for zeta_map in self.zetas
            ],
        }


MultiZetaStimulusLike = Union[MultiZetaStimulus, Mapping[str, Any]]


def as_multi_zeta_stimulus(item: MultiZetaStimulusLike) -> MultiZetaStimulus:
    if isinstance(item, MultiZetaStimulus):
        return item
    return MultiZetaStimulus.from_record(item)

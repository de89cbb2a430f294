"""
Item parameters ("zeta") for the four-parameter logistic (4PL) IRT model.

An item is described by four quantities, each of which has a short symbolic
name and a descriptive semantic name:

    a  discrimination   slope of the item characteristic curve
    b  difficulty       location of the curve
    c  guessing         lower asymptote
    d  slipping         upper asymptote (1 - careless-error rate)

Raw item records may use either naming, but never both for the same quantity.
Missing quantities fall back to the 2PL-equivalent defaults a=1, b=0, c=0,
d=1. Non-parameter keys are carried through every conversion untouched.
"""

import enum
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Union

from adaptive_cat.errors import UsageError, ZetaValidationError

# Map from the symbolic item parameter names to their semantic counterparts.
ZETA_KEY_MAP: Dict[str, str] = {
    "a": "discrimination",
    "b": "difficulty",
    "c": "guessing",
    "d": "slipping",
}

_INVERSE_KEY_MAP: Dict[str, str] = {v: k for k, v in ZETA_KEY_MAP.items()}

SYMBOLIC_KEYS = tuple(ZETA_KEY_MAP.keys())
SEMANTIC_KEYS = tuple(ZETA_KEY_MAP.values())
PARAMETER_KEYS = frozenset(SYMBOLIC_KEYS + SEMANTIC_KEYS)

_DEFAULT_SYMBOLIC: Dict[str, float] = {"a": 1.0, "b": 0.0, "c": 0.0, "d": 1.0}


class ZetaFormat(str, enum.Enum):
    """Naming convention for item parameter keys."""

    SYMBOLIC = "symbolic"
    SEMANTIC = "semantic"


def _parse_format(desired_format: Union[str, ZetaFormat]) -> ZetaFormat:
    try:
        return ZetaFormat(desired_format)
    except ValueError:
        raise UsageError(
            f"Invalid desired format. Expected 'symbolic' or 'semantic'. "
            f"Received {desired_format} instead."
        ) from None


def convert_zeta(
    zeta: Mapping[str, Any],
    desired_format: Union[str, ZetaFormat],
) -> Dict[str, Any]:
    """
    Convert item parameter keys between symbolic and semantic naming.

    Only keys that are present are remapped; every other key is copied as-is.

    Args:
        zeta: Raw item parameter record.
        desired_format: ``"symbolic"`` or ``"semantic"``.

    Returns:
        A new dict with parameter keys in the desired naming.

    Raises:
        UsageError: If desired_format is not a recognised format.
    """
    fmt = _parse_format(desired_format)
    key_map = _INVERSE_KEY_MAP if fmt is ZetaFormat.SYMBOLIC else ZETA_KEY_MAP
    return {key_map.get(key, key): value for key, value in zeta.items()}


def default_zeta(
    desired_format: Union[str, ZetaFormat] = ZetaFormat.SYMBOLIC,
) -> Dict[str, float]:
    """Return the default item parameters in the requested naming."""
    return convert_zeta(_DEFAULT_SYMBOLIC, desired_format)


def validate_zeta_params(zeta: Mapping[str, Any], require_all: bool = False) -> None:
    """
    Validate a raw item parameter record.

    Rejects records that give both the symbolic and the semantic name for the
    same quantity and, when ``require_all`` is set, records that leave any of
    the four quantities unresolved. Keys mapped to ``None`` count as absent.

    Raises:
        ZetaValidationError: If any rule is violated.
    """
    for symbol, name in ZETA_KEY_MAP.items():
        article = "an" if symbol == "a" else "a"
        if zeta.get(symbol) is not None and zeta.get(name) is not None:
            raise ZetaValidationError(
                f"This item has both {article} `{symbol}` key and `{name}` key. "
                "Please provide only one."
            )

    if require_all:
        for symbol, name in ZETA_KEY_MAP.items():
            if zeta.get(symbol) is None and zeta.get(name) is None:
                raise ZetaValidationError(
                    f"This item is missing the key `{symbol}` or `{name}`."
                )


def ensure_zeta_numeric_values(zeta: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Coerce parameter values to floats.

    Corpus loaders frequently hand over numbers as strings; left alone these
    would break the response model. Non-parameter keys and ``None`` values
    are left untouched.

    Raises:
        ZetaValidationError: If a parameter value cannot be read as a number.
    """
    result = dict(zeta)
    for key in PARAMETER_KEYS.intersection(result):
        value = result[key]
        if value is None:
            continue
        try:
            if isinstance(value, bool):
                raise TypeError(key)
            result[key] = float(value)
        except (TypeError, ValueError):
            raise ZetaValidationError(
                f"Item parameter `{key}` must be numeric, got {value!r}"
            ) from None
    return result


def fill_zeta_defaults(
    zeta: Mapping[str, Any],
    desired_format: Union[str, ZetaFormat] = ZetaFormat.SYMBOLIC,
) -> Dict[str, Any]:
    """
    Fill in default values for any missing item parameters.

    Args:
        zeta: Raw item parameter record, in either naming.
        desired_format: Naming of the returned record.

    Returns:
        A new dict holding all four parameters (plus any pass-through keys)
        in the desired naming.
    """
    present = {
        key: value
        for key, value in convert_zeta(zeta, desired_format).items()
        if not (key in PARAMETER_KEYS and value is None)
    }
    return {**default_zeta(desired_format), **present}


@dataclass(frozen=True)
class Zeta:
    """Typed 4PL item parameters with 2PL-equivalent defaults."""

    discrimination: float = 1.0
    difficulty: float = 0.0
    guessing: float = 0.0
    slipping: float = 1.0

    @property
    def a(self) -> float:
        return self.discrimination

    @property
    def b(self) -> float:
        return self.difficulty

    @property
    def c(self) -> float:
        return self.guessing

    @property
    def d(self) -> float:
        return self.slipping

    @classmethod
    def from_dict(cls, zeta: Mapping[str, Any], require_all: bool = False) -> "Zeta":
        """Build a Zeta from a raw record in either naming.

        Raises:
            ZetaValidationError: If the record is redundant, incomplete (when
                ``require_all``) or non-numeric.
        """
        validate_zeta_params(zeta, require_all=require_all)
        numeric = ensure_zeta_numeric_values(
            {k: v for k, v in zeta.items() if k in PARAMETER_KEYS}
        )
        semantic = fill_zeta_defaults(numeric, ZetaFormat.SEMANTIC)
        return cls(**{key: float(semantic[key]) for key in SEMANTIC_KEYS})

    def to_dict(
        self, desired_format: Union[str, ZetaFormat] = ZetaFormat.SYMBOLIC
    ) -> Dict[str, float]:
        """Render the parameters as a plain dict in the requested naming."""
        semantic = {key: getattr(self, key) for key in SEMANTIC_KEYS}
        return convert_zeta(semantic, desired_format)


ZetaLike = Union[Zeta, Mapping[str, Any]]


def as_zeta(zeta: ZetaLike, require_all: bool = False) -> Zeta:
    """Return ``zeta`` as a :class:`Zeta`, parsing raw records when needed."""
    if isinstance(zeta, Zeta):
        return zeta
    return Zeta.from_dict(zeta, require_all=require_all)

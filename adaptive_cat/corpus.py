"""
Corpus utilities for multi-construct item pools.

A Clowder corpus is a list of :class:`MultiZetaStimulus` items. Each item may
carry several parameter groups, and each group names the cats it applies to.
This module validates such corpora, partitions them by which cat has
parameters, and builds them from flat tabular records.

The single-item parameter helpers (key conversion, validation, defaults) live
in :mod:`adaptive_cat.zeta` and are re-exported here for convenience.
"""

import logging
from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Sequence

from adaptive_cat.errors import ConfigurationError
from adaptive_cat.types import (
    MultiZetaStimulus,
    MultiZetaStimulusLike,
    ZetaCatMap,
    as_multi_zeta_stimulus,
)
from adaptive_cat.zeta import (
    ZETA_KEY_MAP,
    as_zeta,
    convert_zeta,
    default_zeta,
    ensure_zeta_numeric_values,
    fill_zeta_defaults,
    validate_zeta_params,
)

__all__ = [
    "ZETA_KEY_MAP",
    "AvailabilitySplit",
    "check_no_duplicate_cat_names",
    "convert_zeta",
    "default_zeta",
    "ensure_zeta_numeric_values",
    "fill_zeta_defaults",
    "filter_items_by_cat_parameter_availability",
    "prepare_clowder_corpus",
    "validate_zeta_params",
]

logger = logging.getLogger(__name__)

# Placeholder used by spreadsheet exports for a parameter that was never estimated
MISSING_PARAMETER_MARKER = "NA"


class AvailabilitySplit(NamedTuple):
    """Items with parameters for a cat, and items without."""

    available: List[MultiZetaStimulus]
    missing: List[MultiZetaStimulus]


def check_no_duplicate_cat_names(corpus: Iterable[MultiZetaStimulusLike]) -> None:
    """
    Ensure no item lists the same cat name in more than one parameter group.

    The check is per item: different items may of course share cat names.

    Raises:
        ConfigurationError: Naming every duplicated cat of the first
            offending item.
    """
    for item in corpus:
        stimulus = as_multi_zeta_stimulus(item)
        counts = Counter(
            cat_name for zeta_map in stimulus.zetas for cat_name in zeta_map.cats
        )
        duplicates = [cat_name for cat_name, count in counts.items() if count > 1]
        if duplicates:
            raise ConfigurationError(
                f"The cat names {', '.join(duplicates)} are present in multiple corpora."
            )


def filter_items_by_cat_parameter_availability(
    items: Iterable[MultiZetaStimulusLike], cat_name: str
) -> AvailabilitySplit:
    """
    Split ``items`` by whether they carry parameters for ``cat_name``.

    Input order is preserved within each partition.
    """
    available: List[MultiZetaStimulus] = []
    missing: List[MultiZetaStimulus] = []
    for item in items:
        stimulus = as_multi_zeta_stimulus(item)
        if stimulus.has_cat(cat_name):
            available.append(stimulus)
        else:
            missing.append(stimulus)
    return AvailabilitySplit(available, missing)


def prepare_clowder_corpus(
    items: Sequence[Mapping[str, Any]],
    cat_names: Sequence[str],
    delimiter: str = ".",
) -> List[MultiZetaStimulus]:
    """
    Build a Clowder corpus from flat records.

    Parameter columns are named ``<cat><delimiter><parameter>``, for example
    ``"cat1.a"`` or ``"cat1.difficulty"``. Each cat becomes its own parameter
    group. Groups with no columns, or with any value equal to "NA", are
    dropped so that the item counts as unvalidated for that cat. All other
    columns become item metadata.

    Args:
        items: Flat records, one per item.
        cat_names: Cats whose parameter columns should be extracted.
        delimiter: Separator between cat name and parameter name.

    Returns:
        One MultiZetaStimulus per input record, in input order.
    """
    prefixes = [f"{cat_name}{delimiter}" for cat_name in cat_names]
    corpus: List[MultiZetaStimulus] = []

    for record in items:
        zetas: List[ZetaCatMap] = []
        for cat_name, prefix in zip(cat_names, prefixes):
            raw: Dict[str, Any] = {
                key[len(prefix):]: value
                for key, value in record.items()
                if key.startswith(prefix)
            }
            if not raw or any(value == MISSING_PARAMETER_MARKER for value in raw.values()):
                continue
            zeta = as_zeta(raw)
            zetas.append(ZetaCatMap(cats=[cat_name], zeta=zeta))

        metadata = {
            key: value
            for key, value in record.items()
            if not any(key.startswith(prefix) for prefix in prefixes)
        }
        corpus.append(MultiZetaStimulus(zetas=zetas, metadata=metadata))

    logger.debug(f"Prepared corpus of {len(corpus)} items for cats {list(cat_names)}")
    return corpus

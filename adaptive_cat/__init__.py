"""
Computerized Adaptive Testing (CAT) under Item Response Theory.

This package provides 4PL response modelling, MLE/EAP ability estimation,
adaptive item selection, multi-construct orchestration and early stopping.
"""

from .cat import Cat
from .clowder import UNVALIDATED_CAT_NAME, Clowder
from .corpus import (
    AvailabilitySplit,
    check_no_duplicate_cat_names,
    filter_items_by_cat_parameter_availability,
    prepare_clowder_corpus,
)
from .distributions import normal, uniform
from .errors import CatError, ConfigurationError, UsageError, ZetaValidationError
from .item_response import (
    fisher_information,
    item_response_function,
    standard_error,
    total_information,
)
from .item_selection import CLOSEST_DIFFICULTY_OFFSET, NextItem, find_closest
from .schemas import CatInput, EarlyStoppingInput
from .stopping_rules import (
    EarlyStopping,
    StopAfterNItems,
    StopIfSEMeasurementBelowThreshold,
    StopOnSEMeasurementPlateau,
)
from .types import (
    EstimationMethod,
    ItemSelectMethod,
    LogicalOperation,
    MultiZetaStimulus,
    PriorDistribution,
    StartSelectMethod,
    Stimulus,
    ZetaCatMap,
)
from .zeta import (
    ZETA_KEY_MAP,
    Zeta,
    ZetaFormat,
    convert_zeta,
    default_zeta,
    ensure_zeta_numeric_values,
    fill_zeta_defaults,
    validate_zeta_params,
)

__all__ = [
    # Cat / Clowder
    "Cat",
    "Clowder",
    "UNVALIDATED_CAT_NAME",
    "CatInput",
    "EarlyStoppingInput",
    # Item response
    "fisher_information",
    "item_response_function",
    "standard_error",
    "total_information",
    # Distributions
    "normal",
    "uniform",
    # Item selection
    "CLOSEST_DIFFICULTY_OFFSET",
    "NextItem",
    "find_closest",
    # Corpus
    "AvailabilitySplit",
    "check_no_duplicate_cat_names",
    "filter_items_by_cat_parameter_availability",
    "prepare_clowder_corpus",
    # Early stopping
    "EarlyStopping",
    "StopAfterNItems",
    "StopIfSEMeasurementBelowThreshold",
    "StopOnSEMeasurementPlateau",
    # Types
    "EstimationMethod",
    "ItemSelectMethod",
    "LogicalOperation",
    "MultiZetaStimulus",
    "PriorDistribution",
    "StartSelectMethod",
    "Stimulus",
    "ZetaCatMap",
    # Zeta
    "ZETA_KEY_MAP",
    "Zeta",
    "ZetaFormat",
    "convert_zeta",
    "default_zeta",
    "ensure_zeta_numeric_values",
    "fill_zeta_defaults",
    "validate_zeta_params",
    # Errors
    "CatError",
    "ConfigurationError",
    "UsageError",
    "ZetaValidationError",
]

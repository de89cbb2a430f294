"""
Exception hierarchy for adaptive testing.

All errors subclass ``ValueError`` so callers that only care about bad input
can catch a single type. Running out of items or tripping an early-stopping
policy is not an error and never raises.
"""


class CatError(ValueError):
    """Base class for adaptive testing errors."""

    pass


class ConfigurationError(CatError):
    """Raised when a Cat, Clowder or EarlyStopping configuration is invalid."""

    pass


class UsageError(CatError):
    """Raised when a method is called with arguments that cannot be honoured."""

    pass


class ZetaValidationError(CatError):
    """Raised when item parameters are redundant, missing or non-numeric."""

    pass

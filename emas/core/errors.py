"""
Exception hierarchy for emas.

Every error raised by the encoders and scorers derives from ``EmasError``
so that callers can catch the whole family at once. Errors are raised at
the point of detection; nothing here is retried or silently coerced.
"""

from __future__ import annotations


class EmasError(Exception):
    """Base exception for all emas errors."""
    pass


class ConfigurationError(EmasError, ValueError):
    """
    Raised for malformed static configuration.

    Examples: an alphabet with duplicate symbols, a group map or propensity
    scale whose length does not match its alphabet, a subsampling
    percentage outside (0, 100], or an even window size where an odd one
    is required.
    """
    pass


class DimensionMismatchError(EmasError, ValueError):
    """Raised when an input's length does not match the trained length."""
    pass


class DegenerateTrainingError(EmasError):
    """Raised when training data cannot produce a usable model."""
    pass


class NotTrainedError(EmasError, RuntimeError):
    """Raised when a predictor is used before it has been trained."""
    pass

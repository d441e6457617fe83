"""Exceptions raised by the reusable holdout engine."""

from __future__ import annotations


class ReusableHoldoutError(Exception):
    """Base class for all errors raised by this package."""
    pass


class ConfigurationError(ReusableHoldoutError, ValueError):
    """Raised for invalid run parameters (fold count, threshold, tolerance)."""
    pass


class DataError(ReusableHoldoutError, ValueError):
    """Raised for empty or malformed datasets and partition violations."""
    pass


class ModelFitError(ReusableHoldoutError, RuntimeError):
    """Raised when the external model fails to fit or predict.

    The original exception is chained as ``__cause__``, except for failures
    on holdout rows, which are re-raised without any chained exception.
    """

    def __init__(self, message: str, model_id: str | None = None) -> None:
        self.model_id = model_id
        self.detail = message
        if model_id is not None:
            message = f"[{model_id}] {message}"
        super().__init__(message)

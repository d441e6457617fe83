"""
Pluggable model interface.

The engine never fits anything itself: it hands a training view to a
Model and scores views with the Predictor it returns. Any failure on the
model side is surfaced as ModelFitError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from reusable_holdout.data.dataset import Dataset
from reusable_holdout.exceptions import ModelFitError


class Predictor(ABC):
    """A fitted model artifact."""

    @abstractmethod
    def predict(self, view: Dataset) -> np.ndarray:
        """Return the probability of class 1 for each row of view.

        Args:
            view: Rows to score.

        Returns:
            Array of shape (n_rows,) with values in [0, 1].
        """
        pass


class Model(ABC):
    """A model type that can be fitted on a training view."""

    @abstractmethod
    def fit(self, view: Dataset) -> Predictor:
        """Fit on the rows of view and return a new predictor.

        Implementations must not keep state between calls: two fits on
        different views may run concurrently.
        """
        pass


def fit_model(model: Model, view: Dataset, model_id: str | None = None) -> Predictor:
    """Fit model on view, converting any failure into ModelFitError."""
    try:
        predictor = model.fit(view)
    except Exception as exc:
        raise ModelFitError(
            f"fit failed on {view.n_rows} rows: {exc}", model_id=model_id
        ) from exc
    if predictor is None:
        raise ModelFitError("fit returned no predictor", model_id=model_id)
    return predictor


def predict_proba(
    predictor: Predictor,
    view: Dataset,
    model_id: str | None = None,
) -> np.ndarray:
    """Score view with predictor and validate the probabilities.

    Raises:
        ModelFitError: If predict raises, or returns the wrong shape, NaNs
            or values outside [0, 1].
    """
    try:
        scores = np.asarray(predictor.predict(view), dtype=np.float64)
    except Exception as exc:
        raise ModelFitError(
            f"predict failed on {view.n_rows} rows: {exc}", model_id=model_id
        ) from exc

    if scores.shape != (view.n_rows,):
        raise ModelFitError(
            f"predict returned shape {scores.shape}, expected ({view.n_rows},)",
            model_id=model_id,
        )
    if np.isnan(scores).any() or (scores < 0).any() or (scores > 1).any():
        raise ModelFitError(
            "predict returned values outside [0, 1]", model_id=model_id
        )
    return scores

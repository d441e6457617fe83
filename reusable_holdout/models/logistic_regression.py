"""
Logistic Regression model for the CV and thresholdout engine.

Thin wrapper over scikit-learn's LogisticRegression that implements the
Model / Predictor interface.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from sklearn.linear_model import LogisticRegression

from reusable_holdout.data.dataset import Dataset
from reusable_holdout.models.base import Model, Predictor


@dataclass
class LogisticRegressionConfig:
    """Configuration for Logistic Regression."""

    C: float = 1.0  # Inverse regularization strength
    solver: str = "lbfgs"
    max_iter: int = 1000
    random_seed: int = 42


class LogisticRegressionPredictor(Predictor):
    """Fitted Logistic Regression."""

    def __init__(self, estimator: LogisticRegression) -> None:
        self.estimator = estimator

    def predict(self, view: Dataset) -> np.ndarray:
        """Predict probability of class 1.

        Args:
            view: Rows to score.

        Returns:
            Probability of class 1 for each row.
        """
        return self.estimator.predict_proba(view.X)[:, 1]


class LogisticRegressionModel(Model):
    """Logistic Regression model type."""

    def __init__(self, cfg: LogisticRegressionConfig | None = None):
        """Initialize model with config.

        Args:
            cfg: Configuration. Uses defaults if None.
        """
        self.cfg = cfg or LogisticRegressionConfig()

    def fit(self, view: Dataset) -> LogisticRegressionPredictor:
        """Fit a fresh estimator on the training view.

        Args:
            view: Training rows (labels 0/1).
        """
        estimator = LogisticRegression(
            C=self.cfg.C,
            solver=self.cfg.solver,
            max_iter=self.cfg.max_iter,
            random_state=self.cfg.random_seed,
        )
        estimator.fit(view.X, view.y)
        return LogisticRegressionPredictor(estimator)

"""
XGBoost model wrapper for the CV and thresholdout engine.

Provides XGBoost binary classification behind the Model / Predictor
interface, with early stopping on an internal validation split.
"""

from __future__ import annotations

import numpy as np
import xgboost as xgb
from sklearn.model_selection import train_test_split

from reusable_holdout.config import XGBoostConfig
from reusable_holdout.data.dataset import Dataset
from reusable_holdout.models.base import Model, Predictor


class XGBoostPredictor(Predictor):
    """Fitted XGBoost classifier."""

    def __init__(self, booster: xgb.XGBClassifier) -> None:
        self.booster = booster

    def predict(self, view: Dataset) -> np.ndarray:
        """Return probability of class 1 for each row.

        Args:
            view: Rows to score.

        Returns:
            Array of shape (n_rows,) with P(y=1|X).
        """
        # XGBClassifier.predict_proba returns (n_samples, 2) for binary
        return self.booster.predict_proba(view.X)[:, 1]


class XGBoostModel(Model):
    """XGBoost binary classifier model type.

    Each call to fit() builds a new XGBClassifier, so one XGBoostModel can
    serve every replicate and the final fit. Training data larger than 50
    rows is split into train/validation for early stopping.
    """

    def __init__(self, cfg: XGBoostConfig | None = None) -> None:
        self.cfg = cfg or XGBoostConfig()

    def fit(self, view: Dataset) -> XGBoostPredictor:
        """Train a classifier on the view with early stopping.

        Args:
            view: Training rows, labels 0/1.
        """
        booster = xgb.XGBClassifier(
            n_estimators=self.cfg.n_estimators,
            max_depth=self.cfg.max_depth,
            learning_rate=self.cfg.learning_rate,
            subsample=self.cfg.subsample,
            colsample_bytree=self.cfg.colsample_bytree,
            random_state=self.cfg.random_seed,
            objective="binary:logistic",
            eval_metric="logloss",
            early_stopping_rounds=self.cfg.early_stopping_rounds,
        )

        X, y = view.X, view.y
        class_counts = np.bincount(y, minlength=2)
        # Split data for early stopping validation
        if len(X) > 50 and self.cfg.validation_fraction > 0:
            X_train, X_val, y_train, y_val = train_test_split(
                X, y,
                test_size=self.cfg.validation_fraction,
                random_state=self.cfg.random_seed,
                stratify=y if class_counts.min() >= 2 else None,
            )
            booster.fit(
                X_train, y_train,
                eval_set=[(X_val, y_val)],
                verbose=False,
            )
        else:
            # Not enough data for split, train without early stopping
            booster.set_params(early_stopping_rounds=None)
            booster.fit(X, y)

        return XGBoostPredictor(booster)

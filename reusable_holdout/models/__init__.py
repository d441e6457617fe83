"""Model interface and bundled model implementations."""

from reusable_holdout.config import XGBoostConfig
from reusable_holdout.models.base import Model, Predictor, fit_model, predict_proba
from reusable_holdout.models.logistic_regression import LogisticRegressionConfig, LogisticRegressionModel
from reusable_holdout.models.xgboost_model import XGBoostModel

__all__ = [
    "Model",
    "Predictor",
    "fit_model",
    "predict_proba",
    "XGBoostConfig",
    "XGBoostModel",
    "LogisticRegressionConfig",
    "LogisticRegressionModel",
]

"""Evaluation module: error metrics and thresholdout releases."""

from reusable_holdout.config import ThresholdoutConfig
from reusable_holdout.evaluation.metrics import compute_error, compute_metrics, misclassification
from reusable_holdout.evaluation.thresholdout import (
    QueryObserver,
    Release,
    ReleaseLog,
    ThresholdoutMechanism,
    ThresholdoutParams,
    thresholdout,
)

__all__ = [
    "compute_error",
    "compute_metrics",
    "misclassification",
    "QueryObserver",
    "Release",
    "ReleaseLog",
    "ThresholdoutConfig",
    "ThresholdoutMechanism",
    "ThresholdoutParams",
    "thresholdout",
]

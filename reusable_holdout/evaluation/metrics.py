"""
Error metrics for binary classifiers.

Implements:
- 0/1 misclassification of rounded class-1 probabilities (the CV and
  thresholdout error)
- ROC AUC and Brier score as optional extra replicate metrics
"""

from __future__ import annotations

from typing import Dict, Sequence

import numpy as np
from sklearn.metrics import brier_score_loss, roc_auc_score

from reusable_holdout.exceptions import ConfigurationError


def predicted_class(y_score: np.ndarray) -> np.ndarray:
    """Round class-1 probabilities to a predicted class.

    Halves round up: a probability of exactly 0.5 maps to class 1.
    """
    return (np.asarray(y_score) >= 0.5).astype(np.int64)


def misclassification(y_true: np.ndarray, y_score: np.ndarray) -> np.ndarray:
    """Per-row 0/1 misclassification indicator.

    Args:
        y_true: True binary labels.
        y_score: Predicted probability of class 1.

    Returns:
        Integer array, 1 where the rounded prediction differs from the label.
    """
    return (predicted_class(y_score) != y_true).astype(np.int64)


def compute_error(y_true: np.ndarray, y_score: np.ndarray) -> float:
    """Mean 0/1 misclassification, nan for an empty set of rows."""
    if len(y_true) == 0:
        return float("nan")
    return float(misclassification(y_true, y_score).mean())


def compute_auc(y_true: np.ndarray, y_score: np.ndarray) -> float:
    """Compute ROC AUC score (nan when only one class is present)."""
    if len(np.unique(y_true)) < 2:
        return float("nan")
    return float(roc_auc_score(y_true, y_score))


def compute_brier(y_true: np.ndarray, y_score: np.ndarray) -> float:
    """Compute Brier score (mean squared error of probabilities).

    Lower is better. Perfect calibration = 0.
    """
    if len(y_true) == 0:
        return float("nan")
    return float(brier_score_loss(y_true, y_score, pos_label=1))


def compute_metrics(
    y_true: np.ndarray,
    y_score: np.ndarray,
    metrics: Sequence[str],
) -> Dict[str, float]:
    """Compute multiple evaluation metrics.

    Args:
        y_true: True binary labels.
        y_score: Predicted probability of class 1.
        metrics: List of metric names to compute.
            Supported: "error", "auc", "brier".

    Returns:
        Dictionary mapping metric name to value.
    """
    results = {}

    metric_funcs = {
        "error": lambda: compute_error(y_true, y_score),
        "auc": lambda: compute_auc(y_true, y_score),
        "brier": lambda: compute_brier(y_true, y_score),
    }

    for metric in metrics:
        metric_lower = metric.lower()
        if metric_lower in metric_funcs:
            results[metric_lower] = metric_funcs[metric_lower]()
        else:
            raise ConfigurationError(f"Unknown metric: {metric}. Supported: {list(metric_funcs.keys())}")

    return results

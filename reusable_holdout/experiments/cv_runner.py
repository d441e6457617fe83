"""
Cross-validation driver.

For each replicate:
- Fit the model on the rows labeled train
- Score train and test rows, round to a class, compute 0/1 errors
- Record mean train error and mean test error

Model-level errors are means over replicates. A final predictor is then
fitted on all CV rows; its error (final_err) is what thresholdout queries
protect.

Any model failure aborts the run with ModelFitError: dropping a replicate
would bias the mean.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from reusable_holdout.data.dataset import Dataset
from reusable_holdout.data.splitters import Replicate
from reusable_holdout.evaluation.metrics import compute_error, compute_metrics
from reusable_holdout.exceptions import ConfigurationError, DataError
from reusable_holdout.models.base import Model, Predictor, fit_model, predict_proba

logger = logging.getLogger(__name__)


@dataclass
class ReplicateErrors:
    """Errors of one model on one replicate.

    Attributes:
        replicate_id: Fold used as test (1..K).
        replicate_key: Readable key like "fold=2/5".
        n_train: Number of train rows.
        n_test: Number of test rows.
        train_err: Mean 0/1 error on train rows.
        test_err: Mean 0/1 error on test rows (nan if the fold is empty).
        metrics: Extra metrics on the test rows, keyed by name.
    """

    replicate_id: int
    replicate_key: str
    n_train: int
    n_test: int
    train_err: float
    test_err: float
    metrics: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "replicate_id": self.replicate_id,
            "replicate_key": self.replicate_key,
            "n_train": self.n_train,
            "n_test": self.n_test,
            "train_err": self.train_err,
            "test_err": self.test_err,
            **{f"test_{name}": value for name, value in self.metrics.items()},
        }


@dataclass
class CVResult:
    """Cross-validation result for one model.

    Attributes:
        model_id: Name of the model.
        replicate_errors: Per-replicate records, ordered by replicate_id.
        train_err: Mean of per-replicate train errors.
        test_err: Mean of per-replicate test errors (empty folds skipped).
    """

    model_id: str
    replicate_errors: List[ReplicateErrors]
    train_err: float
    test_err: float

    @property
    def n_replicates(self) -> int:
        return len(self.replicate_errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "model_id": self.model_id,
            "train_err": self.train_err,
            "test_err": self.test_err,
            "replicates": [r.to_dict() for r in self.replicate_errors],
        }


@dataclass(frozen=True)
class FinalEstimate:
    """Predictor fitted on all CV rows and its error on those rows.

    The predictor is kept so the thresholdout mechanism can score the
    same model on the holdout set.
    """

    predictor: Predictor
    final_err: float
    n_rows: int
    model_id: Optional[str] = None


def run_replicate(
    cv_rows: Dataset,
    replicate: Replicate,
    model: Model,
    model_id: str | None = None,
    metrics: Sequence[str] = (),
) -> ReplicateErrors:
    """Fit and score one replicate.

    Args:
        cv_rows: All non-holdout rows.
        replicate: Train/test labeling of cv_rows.
        model: Model to fit on the train rows.
        model_id: Name used in errors and logs.
        metrics: Extra metric names computed on the test rows.

    Returns:
        ReplicateErrors for this replicate.

    Raises:
        DataError: If the replicate has no train rows.
        ModelFitError: If the model fails to fit or predict.
    """
    train_view, test_view = replicate.views(cv_rows)
    if train_view.n_rows == 0:
        raise DataError(f"Replicate {replicate.replicate_key} has no train rows")

    predictor = fit_model(model, train_view, model_id=model_id)

    train_scores = predict_proba(predictor, train_view, model_id=model_id)
    train_err = compute_error(train_view.y, train_scores)

    if test_view.n_rows > 0:
        test_scores = predict_proba(predictor, test_view, model_id=model_id)
        test_err = compute_error(test_view.y, test_scores)
        extra = compute_metrics(test_view.y, test_scores, metrics)
    else:
        test_err = float("nan")
        extra = {name.lower(): float("nan") for name in metrics}

    logger.debug(
        f"{model_id or 'model'} {replicate.replicate_key}: "
        f"train_err={train_err:.4f}, test_err={test_err:.4f}"
    )

    return ReplicateErrors(
        replicate_id=replicate.replicate_id,
        replicate_key=replicate.replicate_key,
        n_train=train_view.n_rows,
        n_test=test_view.n_rows,
        train_err=train_err,
        test_err=test_err,
        metrics=extra,
    )


def run_cross_validation(
    cv_rows: Dataset,
    replicates: Sequence[Replicate],
    model: Model,
    model_id: str = "model",
    n_workers: int = 1,
    metrics: Sequence[str] = (),
    show_progress: bool = False,
) -> CVResult:
    """Run K-fold cross-validation of one model.

    Replicates share no mutable state, so with n_workers > 1 they are
    evaluated in a thread pool. Results are ordered by replicate_id either
    way.

    Args:
        cv_rows: All non-holdout rows.
        replicates: Replicates from build_replicates().
        model: Model to evaluate.
        model_id: Name of the model.
        n_workers: Number of replicates evaluated concurrently.
        metrics: Extra metric names computed on each test fold.
        show_progress: Whether to show a progress bar.

    Returns:
        CVResult with per-replicate and mean errors.

    Raises:
        ConfigurationError: If n_workers < 1.
        DataError: If there are no replicates or a replicate has no train rows.
        ModelFitError: If the model fails on any replicate.
    """
    if n_workers < 1:
        raise ConfigurationError(f"n_workers must be >= 1, got {n_workers}")
    if not replicates:
        raise DataError("No replicates to evaluate")

    def _run(replicate: Replicate) -> ReplicateErrors:
        return run_replicate(cv_rows, replicate, model, model_id, metrics)

    if n_workers == 1:
        if show_progress:
            from tqdm import tqdm
            iterator = tqdm(replicates, desc=f"CV {model_id}")
        else:
            iterator = replicates
        replicate_errors = [_run(rep) for rep in iterator]
    else:
        with ThreadPoolExecutor(max_workers=n_workers) as executor:
            # map() re-raises the first failure when results are collected
            replicate_errors = list(executor.map(_run, replicates))

    replicate_errors.sort(key=lambda r: r.replicate_id)

    train_err = float(np.mean([r.train_err for r in replicate_errors]))
    test_errs = [r.test_err for r in replicate_errors if not np.isnan(r.test_err)]
    test_err = float(np.mean(test_errs)) if test_errs else float("nan")

    logger.info(
        f"CV {model_id}: {len(replicate_errors)} replicates, "
        f"train_err={train_err:.4f}, test_err={test_err:.4f}"
    )

    return CVResult(
        model_id=model_id,
        replicate_errors=replicate_errors,
        train_err=train_err,
        test_err=test_err,
    )


def fit_final(cv_rows: Dataset, model: Model, model_id: str | None = None) -> FinalEstimate:
    """Fit the final predictor on all CV rows and score it on them.

    Raises:
        DataError: If cv_rows is empty.
        ModelFitError: If the model fails to fit or predict.
    """
    if cv_rows.n_rows == 0:
        raise DataError("Cannot fit final model on an empty dataset")

    predictor = fit_model(model, cv_rows, model_id=model_id)
    scores = predict_proba(predictor, cv_rows, model_id=model_id)
    final_err = compute_error(cv_rows.y, scores)

    logger.info(f"Final {model_id or 'model'}: final_err={final_err:.4f} on {cv_rows.n_rows} rows")

    return FinalEstimate(
        predictor=predictor,
        final_err=final_err,
        n_rows=cv_rows.n_rows,
        model_id=model_id,
    )

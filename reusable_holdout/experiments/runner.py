"""
End-to-end experiment: partition, cross-validate, release.

The dataset is split once. Every model is cross-validated on the same
replicates, refitted on all CV rows, and queried once against the shared
holdout through thresholdout. The runner writes one row per model.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Mapping, Optional

import numpy as np

from reusable_holdout.config import ExperimentConfig
from reusable_holdout.data.dataset import Dataset
from reusable_holdout.data.splitters import build_replicates, split_dataset
from reusable_holdout.evaluation.thresholdout import (
    QueryObserver,
    ThresholdoutMechanism,
    ThresholdoutParams,
)
from reusable_holdout.exceptions import ConfigurationError
from reusable_holdout.experiments.cv_runner import (
    CVResult,
    fit_final,
    run_cross_validation,
)
from reusable_holdout.models.base import Model
from reusable_holdout.models.logistic_regression import (
    LogisticRegressionConfig,
    LogisticRegressionModel,
)
from reusable_holdout.models.xgboost_model import XGBoostModel


@dataclass
class ExperimentRow:
    """Single row of experiment output, one per model."""

    model_id: str
    train_err: float
    test_err: float
    final_err: float
    out_err: float
    branch: str
    n_folds: int
    n_cv_rows: int
    n_holdout_rows: int
    partition_seed: int
    thresholdout_seed: int
    threshold: float
    tolerance: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ExperimentResult:
    """All outputs of run_experiment."""

    rows: List[ExperimentRow]
    cv_results: Dict[str, CVResult]
    fold_sizes: Dict[int, int]


def build_models(names: Iterable[str], cfg: ExperimentConfig) -> Dict[str, Model]:
    """Instantiate the bundled models by name.

    Supported: "logistic_regression", "xgboost".
    """
    factories = {
        "logistic_regression": lambda: LogisticRegressionModel(
            LogisticRegressionConfig(random_seed=cfg.partition.random_seed)
        ),
        "xgboost": lambda: XGBoostModel(cfg.xgboost),
    }
    models = {}
    for name in names:
        if name not in factories:
            raise ConfigurationError(
                f"Unknown model: {name}. Supported: {list(factories.keys())}"
            )
        models[name] = factories[name]()
    return models


def run_experiment(
    dataset: Dataset,
    models: Mapping[str, Model],
    cfg: Optional[ExperimentConfig] = None,
    observers: Iterable[QueryObserver] = (),
    show_progress: bool = False,
) -> ExperimentResult:
    """Run partition, cross-validation and one thresholdout query per model.

    Models are processed in mapping order; all thresholdout noise comes from
    one generator seeded with cfg.thresholdout.random_seed, so the whole run
    is reproducible.

    Args:
        dataset: Labeled rows.
        models: Model id -> model.
        cfg: Experiment configuration. Uses defaults if None.
        observers: Thresholdout query observers.
        show_progress: Whether to show progress bars.

    Returns:
        ExperimentResult with one ExperimentRow per model.
    """
    cfg = cfg or ExperimentConfig()
    if not models:
        raise ConfigurationError("At least one model is required")

    params = ThresholdoutParams.from_config(cfg.thresholdout)
    mechanism = ThresholdoutMechanism(params, observers=observers)

    partition = split_dataset(dataset, cfg.partition.n_folds, cfg.partition.random_seed)
    replicates = build_replicates(partition)
    release_rng = np.random.default_rng(cfg.thresholdout.random_seed)

    rows: List[ExperimentRow] = []
    cv_results: Dict[str, CVResult] = {}

    if show_progress:
        from tqdm import tqdm
        iterator = tqdm(models.items(), desc="Models")
    else:
        iterator = models.items()

    for model_id, model in iterator:
        cv_result = run_cross_validation(
            partition.cv_rows,
            replicates,
            model,
            model_id=model_id,
            n_workers=cfg.n_workers,
            metrics=cfg.metrics,
        )
        final = fit_final(partition.cv_rows, model, model_id=model_id)
        release = mechanism.release(final, partition.holdout, release_rng)

        cv_results[model_id] = cv_result
        rows.append(ExperimentRow(
            model_id=model_id,
            train_err=cv_result.train_err,
            test_err=cv_result.test_err,
            final_err=final.final_err,
            out_err=release.out_err,
            branch=release.branch,
            n_folds=partition.n_folds,
            n_cv_rows=partition.cv_rows.n_rows,
            n_holdout_rows=partition.holdout.n_rows,
            partition_seed=cfg.partition.random_seed,
            thresholdout_seed=cfg.thresholdout.random_seed,
            threshold=params.threshold,
            tolerance=params.tolerance,
        ))

    return ExperimentResult(
        rows=rows,
        cv_results=cv_results,
        fold_sizes=partition.fold_sizes(),
    )

"""
Tests for the end-to-end experiment runner.

Tests:
- One row per model, consistent with the CV results
- Reproducibility of the whole run
- Observers receive every release
- Model registry
"""
import pytest

from conftest import SignModel
from reusable_holdout.config import ExperimentConfig, PartitionConfig, ThresholdoutConfig
from reusable_holdout.evaluation.thresholdout import CHEAP, NOISED, ReleaseLog
from reusable_holdout.exceptions import ConfigurationError
from reusable_holdout.experiments.runner import build_models, run_experiment
from reusable_holdout.models.logistic_regression import LogisticRegressionModel
from reusable_holdout.models.xgboost_model import XGBoostModel


@pytest.fixture
def cfg() -> ExperimentConfig:
    return ExperimentConfig(
        models=["logistic_regression"],
        partition=PartitionConfig(n_folds=4, random_seed=1),
        thresholdout=ThresholdoutConfig(threshold=0.02, tolerance=0.005, random_seed=3),
    )


class TestRunExperiment:
    """Tests for run_experiment."""

    def test_one_row_per_model(self, dataset_1200, cfg):
        models = {"sign": SignModel(), "lr": LogisticRegressionModel()}
        result = run_experiment(dataset_1200, models, cfg=cfg)

        assert [row.model_id for row in result.rows] == ["sign", "lr"]
        for row in result.rows:
            cv = result.cv_results[row.model_id]
            assert row.train_err == cv.train_err
            assert row.test_err == cv.test_err
            assert row.branch in (CHEAP, NOISED)
            if row.branch == CHEAP:
                assert row.out_err == row.final_err
            assert row.n_folds == 4
            assert row.n_cv_rows + row.n_holdout_rows == 1200

    def test_fold_sizes(self, dataset_1200, cfg):
        result = run_experiment(dataset_1200, {"sign": SignModel()}, cfg=cfg)
        assert len(result.fold_sizes) == 5
        assert sum(result.fold_sizes.values()) == 1200
        assert result.rows[0].n_holdout_rows == result.fold_sizes[5]

    def test_reproducible(self, dataset_1200, cfg):
        first = run_experiment(dataset_1200, {"sign": SignModel()}, cfg=cfg)
        second = run_experiment(dataset_1200, {"sign": SignModel()}, cfg=cfg)
        assert first.rows[0].to_dict() == second.rows[0].to_dict()

    def test_observers_see_every_release(self, dataset_1200, cfg):
        log = ReleaseLog()
        result = run_experiment(
            dataset_1200, {"a": SignModel(), "b": SignModel()}, cfg=cfg, observers=[log]
        )
        assert [r.model_id for r in log] == ["a", "b"]
        assert [r.out_err for r in log] == [row.out_err for row in result.rows]

    def test_requires_models(self, dataset_1200, cfg):
        with pytest.raises(ConfigurationError):
            run_experiment(dataset_1200, {}, cfg=cfg)


class TestBuildModels:
    """Tests for build_models."""

    def test_bundled_models(self):
        models = build_models(["logistic_regression", "xgboost"], ExperimentConfig())
        assert isinstance(models["logistic_regression"], LogisticRegressionModel)
        assert isinstance(models["xgboost"], XGBoostModel)

    def test_unknown_model(self):
        with pytest.raises(ConfigurationError, match="Unknown model"):
            build_models(["svm"], ExperimentConfig())

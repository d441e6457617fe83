"""
Tests for bundled models and the model-call guards.

Tests:
- LogisticRegression and XGBoost return fresh predictors with valid probabilities
- fit_model / predict_proba wrap failures in ModelFitError
"""
import numpy as np
import pytest

from conftest import BadShapePredictor, FailingFitModel, FailingPredictor, make_dataset
from reusable_holdout.config import XGBoostConfig
from reusable_holdout.exceptions import ModelFitError
from reusable_holdout.evaluation.metrics import compute_error
from reusable_holdout.models.base import Model, Predictor, fit_model, predict_proba
from reusable_holdout.models.logistic_regression import (
    LogisticRegressionConfig,
    LogisticRegressionModel,
)
from reusable_holdout.models.xgboost_model import XGBoostModel


class TestLogisticRegressionModel:
    """Tests for LogisticRegressionModel."""

    def test_fit_predict(self):
        train = make_dataset(300, seed=1)
        predictor = LogisticRegressionModel().fit(train)
        scores = predictor.predict(make_dataset(50, seed=2))
        assert scores.shape == (50,)
        assert np.all((scores >= 0) & (scores <= 1))

    def test_learns_signal(self):
        train = make_dataset(500, seed=1)
        test = make_dataset(500, seed=2)
        predictor = LogisticRegressionModel(LogisticRegressionConfig(C=10.0)).fit(train)
        error = compute_error(test.y, predictor.predict(test))
        assert error < 0.2

    def test_each_fit_returns_new_predictor(self):
        model = LogisticRegressionModel()
        a = model.fit(make_dataset(100, seed=1))
        b = model.fit(make_dataset(100, seed=2))
        assert a is not b
        assert a.estimator is not b.estimator


class TestXGBoostModel:
    """Tests for XGBoostModel."""

    @pytest.mark.parametrize("n_rows", [40, 300])
    def test_fit_predict(self, n_rows):
        cfg = XGBoostConfig(n_estimators=20)
        predictor = XGBoostModel(cfg).fit(make_dataset(n_rows, seed=1))
        scores = predictor.predict(make_dataset(30, seed=2))
        assert scores.shape == (30,)
        assert np.all((scores >= 0) & (scores <= 1))

    def test_deterministic_with_seed(self):
        cfg = XGBoostConfig(n_estimators=20, random_seed=5)
        train = make_dataset(300, seed=1)
        test = make_dataset(30, seed=2)
        a = XGBoostModel(cfg).fit(train).predict(test)
        b = XGBoostModel(cfg).fit(train).predict(test)
        np.testing.assert_allclose(a, b)


class TestModelGuards:
    """Tests for fit_model and predict_proba."""

    def test_fit_failure_wrapped(self):
        with pytest.raises(ModelFitError, match="fit failed") as exc_info:
            fit_model(FailingFitModel(), make_dataset(10), model_id="x")
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_fit_returning_none(self):
        class NoneModel(Model):
            def fit(self, view):
                return None

        with pytest.raises(ModelFitError, match="no predictor"):
            fit_model(NoneModel(), make_dataset(10))

    def test_predict_failure_wrapped(self):
        with pytest.raises(ModelFitError, match="predict failed"):
            predict_proba(FailingPredictor(), make_dataset(10))

    def test_wrong_shape(self):
        with pytest.raises(ModelFitError, match="shape"):
            predict_proba(BadShapePredictor(), make_dataset(10))

    @pytest.mark.parametrize("bad_value", [-0.1, 1.5, np.nan])
    def test_out_of_range(self, bad_value):
        class ConstantPredictor(Predictor):
            def predict(self, view):
                scores = np.full(view.n_rows, 0.5)
                scores[0] = bad_value
                return scores

        with pytest.raises(ModelFitError, match=r"outside \[0, 1\]"):
            predict_proba(ConstantPredictor(), make_dataset(10))

    def test_valid_scores_pass_through(self):
        class HalfPredictor(Predictor):
            def predict(self, view):
                return [0.5] * view.n_rows

        scores = predict_proba(HalfPredictor(), make_dataset(4))
        np.testing.assert_array_equal(scores, [0.5, 0.5, 0.5, 0.5])

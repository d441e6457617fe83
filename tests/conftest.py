"""
Shared fixtures for reusable holdout tests.

Provides:
- Small and medium labeled datasets
- Deterministic stub models whose errors are known in advance
- Models that fail on fit or predict
"""
from typing import Sequence

import numpy as np
import pytest

from reusable_holdout.data.dataset import Dataset
from reusable_holdout.models.base import Model, Predictor


# =============================================================================
# STUB MODELS
# =============================================================================

class SignPredictor(Predictor):
    """Predicts class 1 with probability 0.9 when x0 > 0, else 0.1."""

    def predict(self, view: Dataset) -> np.ndarray:
        return np.where(view.X[:, 0] > 0, 0.9, 0.1)


class SignModel(Model):
    """Model whose fit ignores the data and returns a SignPredictor."""

    def __init__(self) -> None:
        self.n_fits = 0

    def fit(self, view: Dataset) -> Predictor:
        self.n_fits += 1
        return SignPredictor()


class RowIdPredictor(Predictor):
    """Predicts wrong on a fixed set of row ids and right everywhere else."""

    def __init__(self, wrong_row_ids: Sequence[int]) -> None:
        self.wrong_row_ids = set(int(i) for i in wrong_row_ids)

    def predict(self, view: Dataset) -> np.ndarray:
        wrong = np.array([rid in self.wrong_row_ids for rid in view.row_ids], dtype=bool)
        correct_proba = view.y.astype(float)
        return np.where(wrong, 1.0 - correct_proba, correct_proba)


class FailingFitModel(Model):
    def fit(self, view: Dataset) -> Predictor:
        raise ValueError("solver diverged")


class FailingPredictor(Predictor):
    def predict(self, view: Dataset) -> np.ndarray:
        raise RuntimeError("artifact corrupted")


class FailingPredictModel(Model):
    def fit(self, view: Dataset) -> Predictor:
        return FailingPredictor()


class BadShapePredictor(Predictor):
    def predict(self, view: Dataset) -> np.ndarray:
        return np.full(view.n_rows + 1, 0.5)


# =============================================================================
# DATA FIXTURES
# =============================================================================

def make_dataset(n_rows: int, n_features: int = 2, seed: int = 0) -> Dataset:
    """Labeled dataset where y = 1 mostly when x0 > 0 (about 10% label noise)."""
    rng = np.random.default_rng(seed)
    X = rng.normal(size=(n_rows, n_features))
    y = (X[:, 0] > 0).astype(int)
    flip = rng.random(n_rows) < 0.1
    y[flip] = 1 - y[flip]
    return Dataset.from_arrays(X, y)


@pytest.fixture
def small_dataset() -> Dataset:
    """60 rows, 2 features."""
    return make_dataset(60, seed=7)


@pytest.fixture
def dataset_1200() -> Dataset:
    """1200 rows, 3 features."""
    return make_dataset(1200, n_features=3, seed=11)


@pytest.fixture
def empty_dataset() -> Dataset:
    return Dataset.from_arrays(np.empty((0, 2)), np.empty(0, dtype=int))


@pytest.fixture
def sign_model() -> SignModel:
    return SignModel()

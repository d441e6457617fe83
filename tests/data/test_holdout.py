"""
Tests for the opaque HoldoutSet.

Tests:
- Only the row count is exposed
- No pickling and no printable rows
- Scoring errors surface as DataError / ModelFitError
- Failed queries keep no rows or predictions in their traceback
"""
import pickle

import numpy as np
import pytest

from conftest import BadShapePredictor, FailingPredictor, RowIdPredictor, make_dataset
from reusable_holdout.data.dataset import Dataset
from reusable_holdout.data.holdout import HoldoutSet
from reusable_holdout.evaluation.thresholdout import thresholdout
from reusable_holdout.exceptions import DataError, ModelFitError
from reusable_holdout.experiments.cv_runner import FinalEstimate
from reusable_holdout.models.base import Predictor


class TestHoldoutSet:
    """Tests for HoldoutSet."""

    @pytest.fixture
    def holdout(self) -> HoldoutSet:
        return HoldoutSet(make_dataset(40, seed=3))

    def test_exposes_size(self, holdout):
        assert len(holdout) == 40
        assert holdout.n_rows == 40

    def test_repr_hides_rows(self, holdout):
        assert repr(holdout) == "HoldoutSet(n_rows=40)"

    def test_no_public_row_attributes(self, holdout):
        public = [name for name in dir(holdout) if not name.startswith("_")]
        assert sorted(public) == ["n_rows"]

    def test_no_instance_dict(self, holdout):
        assert not hasattr(holdout, "__dict__")

    def test_cannot_be_pickled(self, holdout):
        with pytest.raises(TypeError, match="cannot be pickled"):
            pickle.dumps(holdout)

    def test_error_rate(self):
        rows = make_dataset(50, seed=4)
        holdout = HoldoutSet(rows)
        predictor = RowIdPredictor(wrong_row_ids=rows.row_ids[:5])
        assert holdout._error_rate(predictor) == pytest.approx(0.1)

    def test_empty_holdout(self):
        holdout = HoldoutSet(make_dataset(0))
        with pytest.raises(DataError, match="empty"):
            holdout._error_rate(RowIdPredictor([]))

    def test_predictor_failure(self, holdout):
        with pytest.raises(ModelFitError, match="artifact corrupted") as exc_info:
            holdout._error_rate(FailingPredictor(), model_id="m1")
        assert exc_info.value.model_id == "m1"
        assert exc_info.value.__cause__ is None
        assert exc_info.value.__context__ is None


# =============================================================================
# FAILURE TRACEBACK TESTS
# =============================================================================

class OutOfRangePredictor(Predictor):
    """Right on every row but returns 1.5 for the first one."""

    def predict(self, view):
        scores = np.where(view.y == 1, 0.9, 0.1)
        scores[0] = 1.5
        return scores


def traceback_locals(exc):
    """(frame name, local value) pairs along the whole exception chain."""
    found = []
    while exc is not None:
        tb = exc.__traceback__
        while tb is not None:
            frame = tb.tb_frame
            found.extend((frame.f_code.co_name, value) for value in dict(frame.f_locals).values())
            tb = tb.tb_next
        exc = exc.__cause__ or exc.__context__
    return found


def holds_holdout_values(value):
    if isinstance(value, Dataset):
        return True
    return isinstance(value, np.ndarray) and value.size > 0 and bool(np.any(value == 1.5))


class TestFailureTraceback:
    """A failing holdout query leaves no rows or predictions in its traceback."""

    @pytest.mark.parametrize(
        "predictor",
        [OutOfRangePredictor(), BadShapePredictor(), FailingPredictor()],
        ids=["out_of_range", "bad_shape", "raises"],
    )
    def test_error_rate_traceback(self, predictor):
        holdout = HoldoutSet(make_dataset(30, seed=8))
        with pytest.raises(ModelFitError) as exc_info:
            holdout._error_rate(predictor, model_id="m")

        leaked = [name for name, value in traceback_locals(exc_info.value)
                  if holds_holdout_values(value)]
        assert leaked == []

    def test_thresholdout_traceback(self):
        holdout = HoldoutSet(make_dataset(30, seed=8))
        final = FinalEstimate(predictor=OutOfRangePredictor(), final_err=0.1, n_rows=100)
        with pytest.raises(ModelFitError, match=r"outside \[0, 1\]") as exc_info:
            thresholdout(final, holdout, threshold=0.02, tolerance=0.005, rng=0)

        leaked = [name for name, value in traceback_locals(exc_info.value)
                  if holds_holdout_values(value)]
        assert leaked == []
        assert exc_info.value.__context__ is None

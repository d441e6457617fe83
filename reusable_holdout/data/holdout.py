"""
Protected holdout rows.

HoldoutSet wraps the rows of the holdout fold and exposes nothing but
their count. The rows are read in one place only: _error_rate(), called by
the thresholdout mechanism. Predictions and per-row errors computed there
are locals of that call and never leave it.
"""

from __future__ import annotations

import traceback
from typing import TYPE_CHECKING

from reusable_holdout.data.dataset import Dataset
from reusable_holdout.evaluation.metrics import misclassification
from reusable_holdout.exceptions import DataError, ModelFitError

if TYPE_CHECKING:
    from reusable_holdout.models.base import Predictor


class HoldoutSet:
    """Read-only, opaque holdout partition."""

    __slots__ = ("__rows",)

    def __init__(self, rows: Dataset) -> None:
        self.__rows = rows

    def __len__(self) -> int:
        return self.__rows.n_rows

    @property
    def n_rows(self) -> int:
        """Number of holdout rows."""
        return self.__rows.n_rows

    def __repr__(self) -> str:
        return f"HoldoutSet(n_rows={self.n_rows})"

    def __reduce__(self):
        raise TypeError("HoldoutSet cannot be pickled")

    def _error_rate(self, predictor: Predictor, model_id: str | None = None) -> float:
        """Mean 0/1 misclassification of predictor on the holdout rows.

        Reserved for the thresholdout mechanism. A scoring failure is
        re-raised as a fresh ModelFitError carrying only the message: the
        original exception and the frames it references (holding the rows
        and their predictions) are dropped.

        Raises:
            DataError: If the holdout set is empty.
            ModelFitError: If the predictor fails on the holdout rows.
        """
        from reusable_holdout.models.base import predict_proba

        rows = self.__rows
        if rows.n_rows == 0:
            raise DataError("Holdout set is empty")

        scores = None
        failure = None
        try:
            scores = predict_proba(predictor, rows, model_id=model_id)
            error = float(misclassification(rows.y, scores).mean())
        except ModelFitError as exc:
            failure = exc.detail
            _clear_tracebacks(exc)
        del rows, scores

        # raised outside the except block so no __context__ is attached
        if failure is not None:
            raise ModelFitError(f"scoring on holdout rows failed: {failure}", model_id=model_id)
        return error


def _clear_tracebacks(exc: BaseException | None) -> None:
    """Clear the locals of every finished frame along an exception chain."""
    while exc is not None:
        traceback.clear_frames(exc.__traceback__)
        exc = exc.__cause__ or exc.__context__

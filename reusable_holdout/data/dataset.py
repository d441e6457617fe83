"""
Dataset contract shared by the partitioner, the CV driver and the models.

A Dataset is an immutable, ordered set of labeled rows. Subsets keep the
original row ids so predictions can always be joined back to source rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np
import pandas as pd

from reusable_holdout.exceptions import DataError


@dataclass(frozen=True, eq=False)
class Dataset:
    """Labeled rows for binary classification.

    Attributes:
        X: Feature matrix of shape (n_rows, n_features).
        y: Binary labels of shape (n_rows,), values in {0, 1}.
        feature_names: Names of the feature columns.
        row_ids: Position of each row in the dataset originally supplied.
    """

    X: np.ndarray
    y: np.ndarray
    feature_names: List[str]
    row_ids: np.ndarray

    def __post_init__(self) -> None:
        """Validate data integrity and freeze the arrays."""
        X = np.array(self.X, dtype=np.float64)
        y = np.array(self.y)
        row_ids = np.array(self.row_ids, dtype=np.int64)

        n_features = len(self.feature_names)
        if X.ndim != 2 or X.shape[1] != n_features:
            raise DataError(
                f"X must have {n_features} columns, got shape {X.shape}"
            )
        if y.ndim != 1 or len(y) != len(X):
            raise DataError(f"Shape mismatch: X={len(X)}, y={y.shape}")
        if len(row_ids) != len(X):
            raise DataError(f"Shape mismatch: X={len(X)}, row_ids={len(row_ids)}")

        unique = set(np.unique(y).tolist())
        if not unique.issubset({0, 1}):
            raise DataError(f"y must be binary (0,1), got {unique}")
        y = y.astype(np.int64)

        for arr in (X, y, row_ids):
            arr.flags.writeable = False

        # frozen dataclass: bypass __setattr__ to store normalized arrays
        object.__setattr__(self, "X", X)
        object.__setattr__(self, "y", y)
        object.__setattr__(self, "row_ids", row_ids)
        object.__setattr__(self, "feature_names", list(self.feature_names))

    @classmethod
    def from_arrays(
        cls,
        X: np.ndarray,
        y: np.ndarray,
        feature_names: Sequence[str] | None = None,
    ) -> Dataset:
        """Build a dataset from raw arrays with row ids 0..n-1."""
        X = np.asarray(X, dtype=np.float64)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        if feature_names is None:
            feature_names = [f"x{i}" for i in range(X.shape[1])]
        return cls(
            X=X,
            y=np.asarray(y),
            feature_names=list(feature_names),
            row_ids=np.arange(len(X)),
        )

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        label_col: str = "y",
        feature_cols: Sequence[str] | None = None,
    ) -> Dataset:
        """Build a dataset from a DataFrame.

        Args:
            df: Input dataframe, one row per example.
            label_col: Name of the binary label column.
            feature_cols: Feature column names. If None, uses all columns
                except the label.

        Raises:
            DataError: If the label or any feature column is missing, or a
                feature column is not numeric.
        """
        if label_col not in df.columns:
            raise DataError(f"Label column '{label_col}' not found in dataframe")

        if feature_cols is None:
            feature_cols = [c for c in df.columns if c != label_col]
        missing = [c for c in feature_cols if c not in df.columns]
        if missing:
            raise DataError(f"Feature columns not found in dataframe: {missing}")

        non_numeric = [c for c in feature_cols if not pd.api.types.is_numeric_dtype(df[c])]
        if non_numeric:
            raise DataError(f"Feature columns must be numeric, got: {non_numeric}")

        return cls(
            X=df[list(feature_cols)].to_numpy(dtype=np.float64),
            y=df[label_col].to_numpy(),
            feature_names=list(feature_cols),
            row_ids=np.arange(len(df)),
        )

    def subset(self, indices: np.ndarray) -> Dataset:
        """Return the rows at positional indices, keeping their order and ids."""
        indices = np.asarray(indices, dtype=np.int64)
        return Dataset(
            X=self.X[indices],
            y=self.y[indices],
            feature_names=self.feature_names,
            row_ids=self.row_ids[indices],
        )

    def to_frame(self, label_col: str = "y") -> pd.DataFrame:
        """Return the rows as a DataFrame indexed by row id."""
        df = pd.DataFrame(self.X, columns=self.feature_names, index=self.row_ids)
        df[label_col] = self.y
        return df

    @property
    def n_rows(self) -> int:
        """Number of rows."""
        return len(self.y)

    @property
    def n_features(self) -> int:
        """Number of feature columns."""
        return len(self.feature_names)

    @property
    def positive_rate(self) -> float:
        """Share of rows with label 1 (nan when empty)."""
        if self.n_rows == 0:
            return float("nan")
        return float(self.y.mean())

    def __len__(self) -> int:
        return self.n_rows

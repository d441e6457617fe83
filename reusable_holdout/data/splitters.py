"""
Splitting utilities for creating replicates.

Implements:
- Seeded fold assignment of every row to one of K+1 folds
- Isolation of fold K+1 as the protected holdout set
- Index-based replicates over the remaining K folds

Replicates store fold ids rather than data, so building all K of them
costs one integer array shared between them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from reusable_holdout.data.dataset import Dataset
from reusable_holdout.data.holdout import HoldoutSet
from reusable_holdout.exceptions import ConfigurationError, DataError
from reusable_holdout.seeding import SeedLike, as_generator

logger = logging.getLogger(__name__)

TRAIN = "train"
TEST = "test"


def _check_n_folds(n_folds: int) -> None:
    if isinstance(n_folds, bool) or not isinstance(n_folds, (int, np.integer)):
        raise ConfigurationError(f"n_folds must be an integer, got {n_folds!r}")
    if n_folds < 1:
        raise ConfigurationError(f"n_folds must be >= 1, got {n_folds}")


def assign_folds(n_rows: int, n_folds: int, rng: SeedLike) -> np.ndarray:
    """Assign each row to a fold in 1..n_folds+1.

    One u ~ Uniform(0, 1) is drawn per row, in row order. Row goes to fold i
    when u lies in ((i-1)/(K+1), i/(K+1)]; u = 0 goes to fold 1.

    Args:
        n_rows: Number of rows to assign.
        n_folds: Number of cross-validation folds K (holdout is fold K+1).
        rng: Generator, or seed for a new one.

    Returns:
        Integer array of shape (n_rows,) with fold ids.
    """
    _check_n_folds(n_folds)
    rng = as_generator(rng)

    n_blocks = n_folds + 1
    upper_bounds = np.arange(1, n_blocks + 1) / n_blocks
    u = rng.random(n_rows)
    # side="left": first bound >= u, so u on a bound stays in the lower fold
    return np.searchsorted(upper_bounds, u, side="left").astype(np.int64) + 1


def check_partition(fold_ids: np.ndarray, n_folds: int) -> None:
    """Verify that fold_ids describes a disjoint, exhaustive partition.

    Every row must carry exactly one fold id in 1..n_folds+1.

    Raises:
        DataError: On a malformed fold assignment.
    """
    fold_ids = np.asarray(fold_ids)
    if fold_ids.ndim != 1:
        raise DataError(f"fold ids must be 1-dimensional, got shape {fold_ids.shape}")
    if len(fold_ids) and (fold_ids.min() < 1 or fold_ids.max() > n_folds + 1):
        raise DataError(
            f"fold ids must lie in [1, {n_folds + 1}], "
            f"got [{fold_ids.min()}, {fold_ids.max()}]"
        )


@dataclass(frozen=True, eq=False)
class Partition:
    """Result of split_dataset.

    Attributes:
        n_folds: Number of cross-validation folds K.
        fold_ids: Fold id (1..K+1) of every row of the original dataset.
        cv_rows: Rows with fold id <= K, in original order.
        cv_fold_ids: Fold ids of cv_rows, aligned with them.
        holdout: The protected rows with fold id K+1.
    """

    n_folds: int
    fold_ids: np.ndarray
    cv_rows: Dataset
    cv_fold_ids: np.ndarray
    holdout: HoldoutSet

    def fold_sizes(self) -> dict[int, int]:
        """Number of rows in each fold, holdout fold included."""
        counts = np.bincount(self.fold_ids, minlength=self.n_folds + 2)[1:]
        return {fold: int(n) for fold, n in enumerate(counts, start=1)}

    def __iter__(self):
        """Unpack as (cv_rows, holdout)."""
        yield self.cv_rows
        yield self.holdout


def split_dataset(dataset: Dataset, n_folds: int, rng: SeedLike) -> Partition:
    """Split dataset into K cross-validation folds and a holdout fold.

    Args:
        dataset: Rows to split. May be empty.
        n_folds: Number of cross-validation folds K (>= 1).
        rng: Generator, or seed for a new one. Same seed, dataset and K
            reproduce the same split.

    Returns:
        Partition with cv_rows (folds 1..K) and holdout (fold K+1).

    Raises:
        ConfigurationError: If n_folds < 1.
    """
    fold_ids = assign_folds(dataset.n_rows, n_folds, rng)
    check_partition(fold_ids, n_folds)
    fold_ids.flags.writeable = False

    is_holdout = fold_ids == n_folds + 1
    cv_idx = np.flatnonzero(~is_holdout)
    holdout_idx = np.flatnonzero(is_holdout)

    cv_fold_ids = fold_ids[cv_idx]
    cv_fold_ids.flags.writeable = False

    logger.info(
        f"Split {dataset.n_rows} rows into {n_folds} CV folds "
        f"({len(cv_idx)} rows) and holdout ({len(holdout_idx)} rows)"
    )

    return Partition(
        n_folds=n_folds,
        fold_ids=fold_ids,
        cv_rows=dataset.subset(cv_idx),
        cv_fold_ids=cv_fold_ids,
        holdout=HoldoutSet(dataset.subset(holdout_idx)),
    )


@dataclass(frozen=True, eq=False)
class Replicate:
    """One K-fold CV iteration: fold replicate_id is test, the rest train.

    Stores only the fold ids of the CV rows; indices and labels are
    derived on demand and always follow CV row order.
    """

    replicate_id: int
    n_folds: int
    cv_fold_ids: np.ndarray

    @property
    def replicate_key(self) -> str:
        """Human-readable key like "fold=2/5"."""
        return f"fold={self.replicate_id}/{self.n_folds}"

    @property
    def test_mask(self) -> np.ndarray:
        return self.cv_fold_ids == self.replicate_id

    @property
    def train_indices(self) -> np.ndarray:
        """Positions into cv_rows labeled train, ascending."""
        return np.flatnonzero(~self.test_mask)

    @property
    def test_indices(self) -> np.ndarray:
        """Positions into cv_rows labeled test, ascending."""
        return np.flatnonzero(self.test_mask)

    @property
    def labels(self) -> np.ndarray:
        """Label ("train" or "test") of every CV row, in row order."""
        return np.where(self.test_mask, TEST, TRAIN)

    def views(self, cv_rows: Dataset) -> Tuple[Dataset, Dataset]:
        """Materialize (train, test) datasets from the CV rows."""
        if len(cv_rows) != len(self.cv_fold_ids):
            raise DataError(
                f"Replicate covers {len(self.cv_fold_ids)} rows, "
                f"cv_rows has {len(cv_rows)}"
            )
        return cv_rows.subset(self.train_indices), cv_rows.subset(self.test_indices)


def build_replicates(
    partition: Partition | np.ndarray,
    n_folds: int | None = None,
) -> List[Replicate]:
    """Build the K replicates of K-fold cross-validation.

    No randomness is involved: replicates are derived from the fold
    assignment alone.

    Args:
        partition: A Partition, or the fold ids of the CV rows.
        n_folds: Number of folds K. Required when passing raw fold ids.

    Returns:
        List of K Replicate objects, replicate_id 1..K.
    """
    if isinstance(partition, Partition):
        cv_fold_ids = partition.cv_fold_ids
        n_folds = partition.n_folds if n_folds is None else n_folds
    else:
        if n_folds is None:
            raise ConfigurationError("n_folds is required when passing fold ids")
        cv_fold_ids = np.array(partition, dtype=np.int64)
        cv_fold_ids.flags.writeable = False

    _check_n_folds(n_folds)
    if len(cv_fold_ids) and (cv_fold_ids.min() < 1 or cv_fold_ids.max() > n_folds):
        raise DataError(f"CV fold ids must lie in [1, {n_folds}]")

    return [
        Replicate(replicate_id=r, n_folds=n_folds, cv_fold_ids=cv_fold_ids)
        for r in range(1, n_folds + 1)
    ]

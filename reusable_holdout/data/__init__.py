"""
Data contract, partitioning and replication.

This module provides:
- Dataset: Immutable labeled rows with stable row ids
- HoldoutSet: Opaque holdout fold, read only by thresholdout
- split_dataset: Seeded split into K CV folds plus a holdout fold
- build_replicates: K index-based train/test views over the CV folds
"""

from reusable_holdout.data.dataset import Dataset
from reusable_holdout.data.holdout import HoldoutSet
from reusable_holdout.data.splitters import (
    Partition,
    Replicate,
    assign_folds,
    build_replicates,
    check_partition,
    split_dataset,
)

__all__ = [
    "Dataset",
    "HoldoutSet",
    "Partition",
    "Replicate",
    "assign_folds",
    "build_replicates",
    "check_partition",
    "split_dataset",
]

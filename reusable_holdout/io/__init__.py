"""Data input/output utilities."""

from reusable_holdout.config import SyntheticDataConfig
from reusable_holdout.io.synthetic_generator import generate_dataset

__all__ = [
    "SyntheticDataConfig",
    "generate_dataset",
]

"""
Configuration management using pydantic.

All config classes use pydantic for validation and YAML loading.
Config files are stored in configs/ directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, List

import yaml
from pydantic import BaseModel, Field


# Base path for config files
CONFIGS_DIR = Path(__file__).parent.parent / "configs"


def load_yaml(path: Path | str) -> dict[str, Any]:
    """Load a YAML file and return as dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


class PartitionConfig(BaseModel):
    """Configuration for the fold partition.

    K cross-validation folds plus one holdout fold are drawn, so each fold
    receives 1/(K+1) of the rows in expectation.
    """

    n_folds: int = Field(default=5, ge=1)
    random_seed: int = 42

    @classmethod
    def from_yaml(cls, path: Path | str | None = None) -> PartitionConfig:
        """Load config from YAML file.

        Args:
            path: Path to YAML file. If None, uses configs/partition.yaml.
        """
        if path is None:
            path = CONFIGS_DIR / "partition.yaml"
        return cls(**load_yaml(path))


class ThresholdoutConfig(BaseModel):
    """Configuration for thresholdout releases.

    threshold is tau and tolerance is the standard deviation sigma of
    both Gaussian noise draws.
    """

    threshold: float = Field(default=0.02, gt=0)
    tolerance: float = Field(default=0.005, gt=0)
    random_seed: int = 42

    @classmethod
    def from_yaml(cls, path: Path | str | None = None) -> ThresholdoutConfig:
        """Load config from YAML file.

        Args:
            path: Path to YAML file. If None, uses configs/thresholdout.yaml.
        """
        if path is None:
            path = CONFIGS_DIR / "thresholdout.yaml"
        return cls(**load_yaml(path))


class XGBoostConfig(BaseModel):
    """Configuration for XGBoost model."""

    n_estimators: int = 100
    max_depth: int = 3
    learning_rate: float = 0.1
    subsample: float = 0.8
    colsample_bytree: float = 0.8
    early_stopping_rounds: int = 10
    validation_fraction: float = 0.2  # Fraction of training data for early stopping
    random_seed: int = 42

    @classmethod
    def from_yaml(cls, path: Path | str | None = None) -> XGBoostConfig:
        """Load config from YAML file.

        Args:
            path: Path to YAML file. If None, uses configs/model_xgboost.yaml.
        """
        if path is None:
            path = CONFIGS_DIR / "model_xgboost.yaml"
        return cls(**load_yaml(path))


class GaussianMixtureConfig(BaseModel):
    """Configuration for Gaussian mixture components."""

    mu_negative_base: List[float] = Field(default=[0.0, 0.0])
    mu_positive_base: List[float] = Field(default=[1.0, 0.5])
    component_offset: float = 1.0
    sigma_max: float = 1.0


class SyntheticDataConfig(BaseModel):
    """Configuration for synthetic data generation."""

    random_seed: int = 42
    n_samples: int = Field(default=1200, ge=0)
    n_features: int = Field(default=2, ge=1)
    n_components: int = Field(default=2, ge=1)
    positive_rate: float = Field(default=0.5, ge=0.0, le=1.0)
    gaussian_mixture: GaussianMixtureConfig = Field(
        default_factory=GaussianMixtureConfig
    )

    @classmethod
    def from_yaml(cls, path: Path | str | None = None) -> SyntheticDataConfig:
        """Load config from YAML file.

        Args:
            path: Path to YAML file. If None, uses configs/synthetic_data.yaml.
        """
        if path is None:
            path = CONFIGS_DIR / "synthetic_data.yaml"
        return cls(**load_yaml(path))


class ExperimentConfig(BaseModel):
    """Configuration for a full partition / CV / thresholdout run."""

    models: List[str] = Field(default=["logistic_regression", "xgboost"])
    metrics: List[str] = Field(default_factory=list)  # Extra per-replicate metrics
    n_workers: int = Field(default=1, ge=1)
    partition: PartitionConfig = Field(default_factory=PartitionConfig)
    thresholdout: ThresholdoutConfig = Field(default_factory=ThresholdoutConfig)
    xgboost: XGBoostConfig = Field(default_factory=XGBoostConfig)
    synthetic_data: SyntheticDataConfig = Field(default_factory=SyntheticDataConfig)

    @classmethod
    def from_yaml(cls, path: Path | str | None = None) -> ExperimentConfig:
        """Load config from YAML file.

        Args:
            path: Path to YAML file. If None, uses configs/experiment.yaml.
        """
        if path is None:
            path = CONFIGS_DIR / "experiment.yaml"
        return cls(**load_yaml(path))

"""
Synthetic labeled data for partition / CV / thresholdout runs.

Each row draws a label y ~ Bernoulli(positive_rate) and a mixture component
c ~ U{0..C-1}, then features x = μ_yc + A_yc z with z ~ N(0, I), so that
x ~ N(μ_yc, A_yc A_yc^T). Means are shifted by component_offset per
component; entries of the factors A_yc are drawn from U(0, sigma_max).
"""

from __future__ import annotations

import numpy as np

from reusable_holdout.config import SyntheticDataConfig
from reusable_holdout.data.dataset import Dataset


def _class_means(cfg: SyntheticDataConfig) -> np.ndarray:
    """Means of shape (2, n_components, n_features), class 0 first."""
    gm = cfg.gaussian_mixture
    base = np.zeros((2, cfg.n_features))
    for label, values in enumerate((gm.mu_negative_base, gm.mu_positive_base)):
        # shorter base vectors are zero-padded, longer ones truncated
        values = list(values)[: cfg.n_features]
        base[label, : len(values)] = values
    shifts = np.arange(cfg.n_components) * gm.component_offset
    return base[:, None, :] + shifts[None, :, None]


def generate_dataset(cfg: SyntheticDataConfig, n_samples: int | None = None) -> Dataset:
    """Sample a labeled Gaussian-mixture dataset.

    The same config (seed included) always yields the same rows.

    Args:
        cfg: Generator configuration.
        n_samples: Number of rows. Defaults to cfg.n_samples.

    Returns:
        Dataset with features x0, x1, ... and binary labels.
    """
    n_rows = cfg.n_samples if n_samples is None else n_samples
    n_feat = cfg.n_features
    rng = np.random.default_rng(cfg.random_seed)

    means = _class_means(cfg)
    factors = rng.uniform(
        0.0, cfg.gaussian_mixture.sigma_max,
        size=(2, cfg.n_components, n_feat, n_feat),
    )

    y = rng.binomial(1, cfg.positive_rate, size=n_rows)
    components = rng.integers(0, cfg.n_components, size=n_rows)
    z = rng.standard_normal((n_rows, n_feat))

    X = means[y, components] + np.einsum("nij,nj->ni", factors[y, components], z)
    return Dataset.from_arrays(X, y)

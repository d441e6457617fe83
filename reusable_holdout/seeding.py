"""Explicit random generator handling.

Every stochastic step takes a numpy Generator (or a seed for one) as an
argument; nothing in the package touches global random state.
"""

from __future__ import annotations

from typing import Union

import numpy as np

SeedLike = Union[int, np.random.Generator]


def as_generator(rng: SeedLike) -> np.random.Generator:
    """Return rng itself if it is a Generator, else a Generator seeded with it."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)

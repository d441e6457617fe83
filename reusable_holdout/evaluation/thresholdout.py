"""
Thresholdout: reusable holdout release mechanism.

Each query compares the training-based final error of a model with its
error on the protected holdout set and releases either:

- the final error itself, when the two agree to within the threshold plus
  Gaussian noise ("cheap" branch), or
- the holdout error plus fresh Gaussian noise ("noised" branch).

Released values are therefore either already-public training estimates or
deliberately noised holdout estimates, which keeps the holdout usable across
many adaptive queries.

The unnoised holdout error and the per-row holdout predictions exist only
inside a single release() call. They are never stored, logged or returned.

Query budgets are not tracked. QueryObserver is the extension point for
callers that want to count, cap or audit queries against a holdout set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional

from reusable_holdout.exceptions import ConfigurationError, DataError
from reusable_holdout.seeding import SeedLike, as_generator

if TYPE_CHECKING:
    from reusable_holdout.config import ThresholdoutConfig
    from reusable_holdout.data.holdout import HoldoutSet
    from reusable_holdout.experiments.cv_runner import FinalEstimate

logger = logging.getLogger(__name__)

CHEAP = "cheap"
NOISED = "noised"


@dataclass(frozen=True)
class ThresholdoutParams:
    """Immutable thresholdout parameters.

    Attributes:
        threshold: tau, the allowed gap between final and holdout error.
        tolerance: sigma, standard deviation of both noise draws.
    """

    threshold: float
    tolerance: float

    def __post_init__(self) -> None:
        """Validate that both parameters are strictly positive."""
        if not self.threshold > 0:
            raise ConfigurationError(f"threshold must be > 0, got {self.threshold}")
        if not self.tolerance > 0:
            raise ConfigurationError(f"tolerance must be > 0, got {self.tolerance}")

    @classmethod
    def from_config(cls, cfg: ThresholdoutConfig) -> ThresholdoutParams:
        """Create from a ThresholdoutConfig (e.g., loaded from YAML)."""
        return cls(threshold=cfg.threshold, tolerance=cfg.tolerance)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {"threshold": self.threshold, "tolerance": self.tolerance}


@dataclass(frozen=True)
class Release:
    """Public outcome of one thresholdout query.

    Attributes:
        out_err: Released generalization error estimate.
        final_err: Training-based final error the query was made with.
        branch: CHEAP if final_err was released, NOISED otherwise.
        model_id: Model the query was made for, if known.
    """

    out_err: float
    final_err: float
    branch: str
    model_id: Optional[str] = None

    @property
    def used_holdout(self) -> bool:
        """Whether a noised holdout estimate was revealed."""
        return self.branch == NOISED


class QueryObserver:
    """Hook into thresholdout queries.

    Subclass to count, cap or audit queries. before_query may raise to
    refuse a query; no holdout row is read before it returns.
    """

    def before_query(self, holdout: HoldoutSet, final: FinalEstimate) -> None:
        pass

    def after_release(self, release: Release) -> None:
        pass


class ReleaseLog(QueryObserver):
    """Observer keeping every public Release, in query order."""

    def __init__(self) -> None:
        self._releases: List[Release] = []

    def after_release(self, release: Release) -> None:
        self._releases.append(release)

    @property
    def releases(self) -> List[Release]:
        return list(self._releases)

    @property
    def n_noised(self) -> int:
        """Number of releases that revealed a noised holdout estimate."""
        return sum(r.used_holdout for r in self._releases)

    def __len__(self) -> int:
        return len(self._releases)

    def __iter__(self) -> Iterator[Release]:
        return iter(list(self._releases))


class ThresholdoutMechanism:
    """Releases generalization error estimates against one or more holdouts.

    Holds only the parameters and observers; the generator is supplied per
    call so that identical inputs and seed give identical releases.
    """

    def __init__(
        self,
        params: ThresholdoutParams,
        observers: Iterable[QueryObserver] = (),
    ) -> None:
        self.params = params
        self.observers: List[QueryObserver] = list(observers)

    def add_observer(self, observer: QueryObserver) -> None:
        self.observers.append(observer)

    def release(
        self,
        final: FinalEstimate,
        holdout: HoldoutSet,
        rng: SeedLike,
    ) -> Release:
        """Run one thresholdout query.

        Steps:
        1. Score the final predictor on the holdout rows.
        2. Draw eta1 ~ N(0, sigma).
        3. If |final_err - holdout_err| < tau + eta1, release final_err.
           Otherwise draw eta2 ~ N(0, sigma) and release holdout_err + eta2.

        Args:
            final: Final predictor and its error on the CV rows.
            holdout: Protected holdout rows.
            rng: Generator, or seed for a new one.

        Returns:
            Release with the public outcome.

        Raises:
            DataError: If the holdout set is empty.
            ModelFitError: If the predictor fails on the holdout rows.
        """
        if holdout.n_rows == 0:
            raise DataError("Holdout set is empty")
        rng = as_generator(rng)

        for observer in self.observers:
            observer.before_query(holdout, final)

        tau = self.params.threshold
        sigma = self.params.tolerance
        final_err = float(final.final_err)

        # Only HoldoutSet reads its rows; per-row values stay inside that call
        holdout_err = holdout._error_rate(final.predictor, model_id=final.model_id)
        eta1 = rng.normal(0.0, sigma)
        if abs(final_err - holdout_err) < tau + eta1:
            out_err = final_err
            branch = CHEAP
        else:
            eta2 = rng.normal(0.0, sigma)
            out_err = float(holdout_err + eta2)
            branch = NOISED
        del holdout_err

        release = Release(
            out_err=out_err,
            final_err=final_err,
            branch=branch,
            model_id=final.model_id,
        )
        logger.info(
            f"Thresholdout release for {final.model_id or 'model'}: "
            f"branch={branch}, out_err={out_err:.4f}"
        )

        for observer in self.observers:
            observer.after_release(release)
        return release


def thresholdout(
    final: FinalEstimate,
    holdout: HoldoutSet,
    threshold: float,
    tolerance: float,
    rng: SeedLike,
) -> float:
    """Release a generalization error estimate for final via thresholdout.

    Convenience wrapper around ThresholdoutMechanism.release().

    Raises:
        ConfigurationError: If threshold <= 0 or tolerance <= 0.
        DataError: If the holdout set is empty.
    """
    params = ThresholdoutParams(threshold=threshold, tolerance=tolerance)
    return ThresholdoutMechanism(params).release(final, holdout, rng).out_err

"""Delete-d jackknife variance estimation.

The orchestration here is generic: it drives a statistic over reduced
samples and aggregates the replicate vectors. The statistic is a pure
function of a Sample, so each replicate is an independent call.

Variance of the delete-d jackknife (Shao & Wu 1989):

    v = (n - d) / (d · m) · Σ_k (θ_k - θ̄)(θ_k - θ̄)ᵀ

with m = C(n, d) replicates and θ̄ their mean. For d = 1 this is the
Quenouille-Tukey jackknife variance (n - 1)/n · Σ (θ_k - θ̄)².
"""

import logging
from enum import Enum
from itertools import combinations
from math import comb
from typing import Callable, Iterator, List, Optional

import numpy as np

from betadiv.core.errors import IncompatibleModeForSampleSize, SampleTooSmall
from betadiv.core.sample import Sample

logger = logging.getLogger(__name__)


class JackknifeMode(Enum):
    """Resampling scheme for jackknife variance estimation."""

    LEAVE_ONE_OUT = "leave-one-out"
    """Delete-1: one replicate per site."""

    DELETE_TWO = "delete-two"
    """Delete-2: one replicate per unordered pair of sites."""

    @property
    def deleted(self) -> int:
        """Number of sites removed per replicate (d)."""
        return 1 if self is JackknifeMode.LEAVE_ONE_OUT else 2

    @property
    def min_sites(self) -> int:
        """Smallest sample the scheme accepts: one more site than it deletes."""
        return self.deleted + 1


class JackknifeEstimate:
    """
    Accumulator of jackknife replicate vectors.

    Attributes:
        n: Size of the full sample
        d: Number of sites deleted per replicate
    """

    def __init__(self, n: int, d: int):
        if d < 1 or n <= d:
            raise ValueError(f"Delete-{d} jackknife needs more than {d} observations, got {n}")
        self.n = n
        self.d = d
        self._realizations: List[np.ndarray] = []

    @property
    def expected_replicates(self) -> int:
        """C(n, d): number of replicates in a complete delete-d jackknife."""
        return comb(self.n, self.d)

    @property
    def n_replicates(self) -> int:
        return len(self._realizations)

    def add_realization(self, value) -> None:
        """Record the statistic computed on one reduced sample."""
        vec = np.atleast_1d(np.asarray(value, dtype=float)).ravel()
        if self._realizations and vec.shape != self._realizations[0].shape:
            raise ValueError(
                f"Replicate of shape {vec.shape} does not match {self._realizations[0].shape}"
            )
        self._realizations.append(vec)

    @property
    def realizations(self) -> np.ndarray:
        """Replicates stacked as an (m, k) array."""
        if not self._realizations:
            raise ValueError("No jackknife replicates recorded")
        return np.vstack(self._realizations)

    @property
    def mean(self) -> np.ndarray:
        """Mean of the replicate vectors (θ̄)."""
        return self.realizations.mean(axis=0)

    @property
    def variance(self) -> np.ndarray:
        """Delete-d jackknife variance-covariance matrix of the statistic."""
        reps = self.realizations
        diff = reps - reps.mean(axis=0)
        factor = (self.n - self.d) / (self.d * reps.shape[0])
        return factor * (diff.T @ diff)

    def bias(self, full_sample_value) -> np.ndarray:
        """Jackknife bias estimate (n - d)/d · (θ̄ - θ̂)."""
        full = np.atleast_1d(np.asarray(full_sample_value, dtype=float))
        return (self.n - self.d) / self.d * (self.mean - full)

    def __repr__(self) -> str:
        return (
            f"JackknifeEstimate(n={self.n}, d={self.d}, "
            f"replicates={self.n_replicates}/{self.expected_replicates})"
        )


def jackknife_subsamples(sample: Sample, mode: JackknifeMode) -> Iterator[Sample]:
    """
    Reduced samples of a delete-d jackknife.

    Leave-one-out yields n samples, delete-two yields C(n, 2), both in an
    order fixed by the sample's site order. The sample size is checked
    when called; reduced samples are built lazily, one per iteration.

    Raises:
        IncompatibleModeForSampleSize: If delete-two is requested with n < 3
        SampleTooSmall: If the sample does not have more sites than the
            scheme deletes
    """
    n = len(sample)
    if mode is JackknifeMode.DELETE_TWO and n < 3:
        raise IncompatibleModeForSampleSize(
            f"Delete-two jackknife needs at least three sites, got {n}"
        )
    if n < mode.min_sites:
        raise SampleTooSmall(
            f"{mode.value} jackknife needs at least {mode.min_sites} site(s), got {n}"
        )

    return (sample.without(*dropped) for dropped in combinations(sample.site_ids, mode.deleted))


def jackknife_variance(
    sample: Sample,
    statistic: Callable[[Sample], np.ndarray],
    mode: JackknifeMode = JackknifeMode.LEAVE_ONE_OUT,
    full_sample_value: Optional[np.ndarray] = None,
) -> JackknifeEstimate:
    """
    Recompute a statistic on every jackknife subsample.

    Args:
        sample: Full sample
        statistic: Pure function mapping a Sample to a vector
        mode: Resampling scheme
        full_sample_value: Statistic on the full sample, only used for the
            bias entry of the debug log

    Returns:
        JackknifeEstimate holding all replicates
    """
    subsamples = jackknife_subsamples(sample, mode)
    estimate = JackknifeEstimate(len(sample), mode.deleted)

    logger.debug(f"Running {mode.value} jackknife: {estimate.expected_replicates} replicates")
    for subsample in subsamples:
        estimate.add_realization(statistic(subsample))

    if full_sample_value is not None:
        logger.debug(f"Jackknife bias: {estimate.bias(full_sample_value)}")
    return estimate

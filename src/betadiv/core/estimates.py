"""Estimator outputs.

Pure output objects: no estimation logic lives here.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import numpy as np
from scipy import stats


class BetaIndex(Enum):
    """Components of the beta-diversity estimate, in vector order."""

    SIMPSON = 0
    """Turnover component (multiple-site Simpson dissimilarity)."""

    SORENSEN = 1
    """Overall dissimilarity (multiple-site Sorensen dissimilarity)."""

    NESTEDNESS = 2
    """Dissimilarity due to nestedness: Sorensen minus Simpson."""


@dataclass
class Estimate:
    """
    Output of a statistical estimator.

    Attributes:
        mean: Point estimate, as a 1-D vector
        variance: Variance-covariance matrix matching ``mean``, or None when
            no variance was estimated
    """

    mean: np.ndarray
    variance: Optional[np.ndarray] = None

    def __post_init__(self):
        self.mean = np.atleast_1d(np.asarray(self.mean, dtype=float))
        if self.variance is not None:
            self.variance = np.atleast_2d(np.asarray(self.variance, dtype=float))
            k = self.mean.shape[0]
            if self.variance.shape != (k, k):
                raise ValueError(
                    f"Variance shape {self.variance.shape} does not match mean of length {k}"
                )

    @classmethod
    def scalar(cls, mean: float, variance: Optional[float] = None) -> "Estimate":
        """Create a one-dimensional estimate."""
        return cls(
            mean=np.array([mean]),
            variance=None if variance is None else np.array([[variance]]),
        )

    @property
    def dimension(self) -> int:
        return self.mean.shape[0]

    @property
    def value(self) -> float:
        """Point estimate of a one-dimensional estimate."""
        if self.dimension != 1:
            raise ValueError(f"Estimate has {self.dimension} components; index it instead")
        return float(self.mean[0])

    @property
    def std_error(self) -> Optional[np.ndarray]:
        """Square roots of the variance diagonal, or None without variance."""
        if self.variance is None:
            return None
        return np.sqrt(np.diag(self.variance))

    def component(self, index: int) -> "Estimate":
        """Marginal estimate of one component."""
        variance = None
        if self.variance is not None:
            variance = self.variance[index:index + 1, index:index + 1]
        return Estimate(mean=self.mean[index:index + 1], variance=variance)

    def confidence_interval(self, level: float = 0.95) -> Tuple[np.ndarray, np.ndarray]:
        """
        Normal-approximation confidence bounds.

        Args:
            level: Coverage probability in (0, 1)

        Returns:
            (lower, upper) arrays matching ``mean``

        Raises:
            ValueError: If no variance is available or level is out of range
        """
        if not 0.0 < level < 1.0:
            raise ValueError(f"Confidence level must be in (0, 1), got {level}")
        if self.variance is None:
            raise ValueError("Confidence interval requires a variance estimate")
        z = stats.norm.ppf(0.5 + level / 2.0)
        half_width = z * self.std_error
        return self.mean - half_width, self.mean + half_width

    def __repr__(self) -> str:
        se = self.std_error
        se_str = "None" if se is None else np.array2string(se, precision=6)
        return f"Estimate(mean={np.array2string(self.mean, precision=6)}, se={se_str})"


@dataclass(frozen=True)
class DiversityIndices:
    """
    Point values of the diversity indices, treating the sites as the population.

    Attributes:
        alpha: Mean species richness per site
        gamma: Number of distinct species across sites
        simpson: Multiple-site Simpson dissimilarity
        sorensen: Multiple-site Sorensen dissimilarity
        nestedness: Sorensen minus Simpson
    """

    alpha: float
    gamma: float
    simpson: float
    sorensen: float
    nestedness: float

    def beta(self, index: BetaIndex) -> float:
        return (self.simpson, self.sorensen, self.nestedness)[index.value]


@dataclass
class DiversityResult:
    """
    Estimates of alpha, gamma and beta diversity for one sample.

    Attributes:
        alpha: Mean richness per site with its variance
        gamma: Chao2 estimate of total richness with its variance
        beta: 3-D estimate ordered as BetaIndex (Simpson, Sorensen, Nestedness);
            variance is set only when jackknife resampling was requested
        n: Number of sites in the sample
        population_size: Number of sites in the population (N)
        metadata: Estimation metadata (jackknife mode, replicate count)
    """

    alpha: Estimate
    gamma: Estimate
    beta: Estimate
    n: int
    population_size: int
    metadata: Dict[str, Any] = field(default_factory=dict)

    def beta_index(self, index: BetaIndex) -> Estimate:
        """Marginal estimate of one beta-diversity component."""
        return self.beta.component(index.value)

    @property
    def simpson(self) -> float:
        return float(self.beta.mean[BetaIndex.SIMPSON.value])

    @property
    def sorensen(self) -> float:
        return float(self.beta.mean[BetaIndex.SORENSEN.value])

    @property
    def nestedness(self) -> float:
        return float(self.beta.mean[BetaIndex.NESTEDNESS.value])

    def to_record(self) -> Dict[str, Any]:
        """
        Flatten to one row: means and standard errors.

        Standard errors are None where no variance was estimated.
        """
        record: Dict[str, Any] = {"n": self.n}
        for index in BetaIndex:
            est = self.beta_index(index)
            name = index.name.lower()
            record[name] = est.value
            record[f"{name}_se"] = None if est.std_error is None else float(est.std_error[0])
        for name, est in (("alpha", self.alpha), ("gamma", self.gamma)):
            record[name] = est.value
            record[f"{name}_se"] = None if est.std_error is None else float(est.std_error[0])
        return record

    def __repr__(self) -> str:
        return (
            f"DiversityResult(n={self.n}, N={self.population_size}, "
            f"simpson={self.simpson:.6f}, sorensen={self.sorensen:.6f}, "
            f"nestedness={self.nestedness:.6f}, alpha={self.alpha.value:.4f}, "
            f"gamma={self.gamma.value:.4f})"
        )

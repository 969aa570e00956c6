"""Multiple-site dissimilarity indices and their estimators.

Multiple-site Simpson and Sorensen dissimilarity (Baselga 2010), their
population-size-independent adaptation, and estimators of the adapted
indices for a sample drawn from a finite population of N sites
(Fortin, Kondratyeva & Van Couwenberghe 2020).

Pipeline:
    Sample → DissimilarityFeatures + Chao2 → point estimate
           → (optional) jackknife replicates → beta variance
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from betadiv.core.errors import (
    IncompatibleModeForSampleSize,
    InvalidPopulationSize,
    SampleTooSmall,
)
from betadiv.core.estimates import DiversityIndices, DiversityResult, Estimate
from betadiv.core.features import DissimilarityFeatures, extract_features
from betadiv.core.jackknife import JackknifeEstimate, JackknifeMode, jackknife_variance
from betadiv.core.richness import chao2_estimate
from betadiv.core.sample import Sample

logger = logging.getLogger(__name__)


@dataclass
class EstimationSettings:
    """Settings for one estimation call."""

    population_size: int
    """Number of sites in the population (N >= 1)."""

    estimate_variance: bool = False
    """Whether to estimate the beta-diversity variance by jackknife."""

    mode: JackknifeMode = JackknifeMode.LEAVE_ONE_OUT
    """Jackknife scheme, used only when estimate_variance is set."""

    def __post_init__(self):
        if isinstance(self.mode, str):
            self.mode = JackknifeMode(self.mode)
        if self.population_size < 1:
            raise InvalidPopulationSize(
                f"Population size must be a positive number of sites, got {self.population_size}"
            )


def _ratio(numerator: float, denominator: float, name: str) -> float:
    if denominator == 0:
        logger.warning(f"{name} is undefined for this sample (zero denominator)")
        return float("nan")
    return numerator / denominator


def _beta_indices(sum_min: float, sum_max: float, sum_shared: float):
    """Simpson, Sorensen and nestedness from (possibly rescaled) pairwise sums."""
    simpson = _ratio(sum_min, sum_shared + sum_min, "Simpson index")
    sorensen = _ratio(sum_min + sum_max, 2 * sum_shared + sum_min + sum_max, "Sorensen index")
    return simpson, sorensen, sorensen - simpson


def observed_indices(sample: Sample) -> DiversityIndices:
    """
    Multiple-site dissimilarity indices of Baselga (2010).

    With S_T the total richness and S_i the site richness:

        β_SIM = Σmin / (ΣS_i - S_T + Σmin)
        β_SOR = (Σmin + Σmax) / (2(ΣS_i - S_T) + Σmin + Σmax)
        β_NES = β_SOR - β_SIM

    These depend on the number of sites, so they describe the sites as a
    population rather than estimate anything.
    """
    f = extract_features(sample)
    simpson, sorensen, nestedness = _beta_indices(
        f.sum_min_exclusive,
        f.sum_max_exclusive,
        f.sum_richness - f.total_species,
    )
    return DiversityIndices(
        alpha=f.sum_richness / f.site_count,
        gamma=float(f.total_species),
        simpson=simpson,
        sorensen=sorensen,
        nestedness=nestedness,
    )


def adapted_indices(sample: Sample) -> DiversityIndices:
    """
    Population-size-independent version of the multiple-site indices.

    The pairwise sums grow with n(n-1)/2 while ΣS_i - S_T grows with n, so
    both sums are rescaled by 2/n before applying Baselga's formulas.
    """
    f = extract_features(sample)
    n = f.site_count
    simpson, sorensen, nestedness = _beta_indices(
        2.0 * f.sum_min_exclusive / n,
        2.0 * f.sum_max_exclusive / n,
        f.sum_richness - f.total_species,
    )
    return DiversityIndices(
        alpha=f.sum_richness / n,
        gamma=float(f.total_species),
        simpson=simpson,
        sorensen=sorensen,
        nestedness=nestedness,
    )


def _alpha_estimate(f: DissimilarityFeatures) -> Estimate:
    n = f.site_count
    mean_richness = f.sum_richness / n
    diff = f.richness - mean_richness
    variance = float(diff @ diff) * (1.0 / ((n - 1) * n))
    return Estimate.scalar(mean_richness, variance)


def _beta_point_estimate(
    f: DissimilarityFeatures, population_size: int, total_richness: float
) -> np.ndarray:
    n = f.site_count
    N = population_size
    mean_min = 2.0 * f.sum_min_exclusive / (n * (n - 1))
    mean_max = 2.0 * f.sum_max_exclusive / (n * (n - 1))
    mean_richness = f.sum_richness / n

    unshared = N * mean_richness - total_richness
    simpson = _ratio((N - 1) * mean_min, unshared + (N - 1) * mean_min, "Simpson estimator")
    sorensen = _ratio(
        (N - 1) * (mean_min + mean_max),
        2 * unshared + (N - 1) * (mean_min + mean_max),
        "Sorensen estimator",
    )
    return np.array([simpson, sorensen, sorensen - simpson])


def beta_point_estimate(sample: Sample, population_size: int) -> np.ndarray:
    """Point estimate of (Simpson, Sorensen, nestedness) without resampling."""
    return estimate_dissimilarity(sample, population_size).beta.mean


def jackknife_beta_variance(
    sample: Sample,
    population_size: int,
    mode: JackknifeMode = JackknifeMode.LEAVE_ONE_OUT,
    full_sample_value: Optional[np.ndarray] = None,
) -> JackknifeEstimate:
    """
    Jackknife the beta-diversity point estimator.

    Each replicate reruns the full point estimator (features, Chao2 and
    indices) on the reduced sample with the same population size.

    Raises:
        IncompatibleModeForSampleSize: If delete-two is requested with n < 3
        SampleTooSmall: If a reduced sample has fewer than two sites
    """
    return jackknife_variance(
        sample,
        lambda subsample: beta_point_estimate(subsample, population_size),
        mode,
        full_sample_value=full_sample_value,
    )


def estimate_dissimilarity(
    sample: Sample,
    population_size: int,
    estimate_variance: bool = False,
    mode: JackknifeMode = JackknifeMode.LEAVE_ONE_OUT,
) -> DiversityResult:
    """
    Estimate the adapted dissimilarity indices of a population of N sites.

    With mean pairwise sums m_min = 2Σmin/(n(n-1)), m_max = 2Σmax/(n(n-1)),
    mean richness S̄ and the Chao2 estimate Ŝ:

        β_SIM = (N-1)m_min / (N·S̄ - Ŝ + (N-1)m_min)
        β_SOR = (N-1)(m_min + m_max) / (2(N·S̄ - Ŝ) + (N-1)(m_min + m_max))
        β_NES = β_SOR - β_SIM

    Alpha is S̄ with variance Σ(S_i - S̄)² / ((n-1)n); gamma is Chao2 with
    sampling without replacement from N sites.

    Args:
        sample: Sample of at least two sites
        population_size: Number of sites in the population (N >= 1)
        estimate_variance: Attach a jackknife variance to the beta estimate
        mode: Jackknife scheme

    Returns:
        DiversityResult

    Raises:
        InvalidPopulationSize: If N < 1 or N is smaller than the sample
        SampleTooSmall: If the sample has fewer than two sites
        IncompatibleModeForSampleSize: If delete-two variance is requested
            with fewer than three sites
    """
    settings = EstimationSettings(population_size, estimate_variance, mode)
    n = len(sample)
    if settings.estimate_variance and settings.mode is JackknifeMode.DELETE_TWO and n < 3:
        raise IncompatibleModeForSampleSize(
            f"Delete-two jackknife needs at least three sites, got {n}"
        )
    if n < 2:
        raise SampleTooSmall(f"Dissimilarity estimation needs at least two sites, got {n}")

    gamma = chao2_estimate(sample, settings.population_size)
    features = extract_features(sample)
    alpha = _alpha_estimate(features)
    beta_mean = _beta_point_estimate(features, settings.population_size, gamma.value)

    metadata = {"variance": "none"}
    beta_variance = None
    if settings.estimate_variance:
        jackknife = jackknife_beta_variance(
            sample, settings.population_size, settings.mode, full_sample_value=beta_mean
        )
        beta_variance = jackknife.variance
        metadata = {
            "variance": "jackknife",
            "mode": settings.mode.value,
            "replicates": jackknife.n_replicates,
        }

    logger.debug(f"Estimated dissimilarity for n={n}, N={settings.population_size}: {beta_mean}")
    return DiversityResult(
        alpha=alpha,
        gamma=gamma,
        beta=Estimate(mean=beta_mean, variance=beta_variance),
        n=n,
        population_size=settings.population_size,
        metadata=metadata,
    )

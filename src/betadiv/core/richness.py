"""Chao2 estimator of species richness from incidence data.

References:
- Chao, A., & Colwell, R. K. (2017). Thirty years of progeny from Chao's
  inequality: Estimating and comparing richness with incidence data and
  incomplete sampling. SORT 41(1), 3-54.
- Chao, A., & Lin, C.-W. (2012). Nonparametric lower bounds for species
  richness and shared species richness under sampling without replacement.
  Biometrics 68, 912-921.
"""

import logging

from betadiv.core.errors import InvalidPopulationSize, SampleTooSmall
from betadiv.core.estimates import Estimate
from betadiv.core.features import species_frequency_profile
from betadiv.core.sample import Sample

logger = logging.getLogger(__name__)


def chao2_estimate(sample: Sample, population_size: int = 0) -> Estimate:
    """
    Estimate total species richness with the Chao2 estimator.

    With f1 uniques, f2 duplicates, s observed species and n sites,
    k = (n-1)/n and w = n/(n-1):

    - f2 == 0:  Ŝ = s + k·f1(f1-1)/2 (bias-corrected form)
    - f2 > 0, with replacement (N = 0):  Ŝ = s + f1² / (2w·f2)
    - f2 > 0, without replacement:  Ŝ = s + f1² / (2w·f2 + ρ/(1-ρ)·f1), ρ = n/N

    Args:
        sample: Sample with at least two sites
        population_size: Number of sites in the population (N). 0 means
            sampling with replacement (or an infinite population).

    Returns:
        Scalar Estimate of richness with its variance

    Raises:
        InvalidPopulationSize: If N < 0, or 0 < N < n
        SampleTooSmall: If the sample has fewer than two sites
    """
    if population_size < 0:
        raise InvalidPopulationSize(
            f"Population size must be 0 (with replacement) or positive, got {population_size}"
        )
    n = len(sample)
    if n < 2:
        raise SampleTooSmall(f"Chao2 needs at least two sites, got {n}")
    if 0 < population_size < n:
        raise InvalidPopulationSize(
            f"Population size {population_size} is smaller than the sample size {n}"
        )

    profile = species_frequency_profile(sample)
    f1, f2, s = profile.f1, profile.f2, profile.s
    k = (n - 1) / n

    if f2 == 0:
        chao2 = s + k * f1 * (f1 - 1) / 2
        variance = k * f1 * (f1 - 1) / 2 + k * k * f1 * (2 * f1 - 1) * (2 * f1 - 1) / 4
        if chao2 > 0:
            variance += k * k * f1 * f1 * f1 * f1 / (4 * chao2)
    else:
        w = n / (n - 1)
        if population_size == 0:
            chao2 = s + f1 * f1 / (w * 2 * f2)
            r = f1 / f2
            variance = f2 * (0.5 * k * r * r + k * k * r * r * r + 0.25 * k * k * r * r * r * r)
        elif population_size == n or f1 == 0:
            # census or no uniques: nothing left unseen
            chao2 = float(s)
            variance = 0.0
        else:
            rho = n / population_size
            chao2 = s + f1 * f1 / (w * 2 * f2 + rho / (1 - rho) * f1)
            f0 = chao2 - s
            inner = 2 * w * f2 * f0 * f0 + f1 * f1 * f0
            ratio = f0 / f1
            variance = (
                f0
                + inner * inner / (f1 * f1 * f1 * f1 * f1)
                + 4 * w * w * f2 * (ratio * ratio * ratio * ratio)
            )

    logger.debug(
        f"Chao2: n={n}, N={population_size}, s={s}, f1={f1}, f2={f2}, "
        f"estimate={chao2:.4f}, variance={variance:.4f}"
    )
    return Estimate.scalar(chao2, variance)

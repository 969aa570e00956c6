"""Aggregate features of a sample used by every dissimilarity formula."""

from collections import Counter
from dataclasses import dataclass
from typing import Hashable, List, Tuple

import numpy as np

from betadiv.core.errors import SampleTooSmall
from betadiv.core.sample import Sample, build_species_catalog


@dataclass(frozen=True)
class DissimilarityFeatures:
    """
    Counts needed by the multiple-site Simpson and Sorensen indices.

    For every unordered pair of sites (i, j), b_ij is the number of species
    found in site i but not in site j. The pairwise sums below accumulate
    min(b_ij, b_ji) and max(b_ij, b_ji).

    Attributes:
        total_species: Number of distinct species across all sites (S_T)
        site_count: Number of sites (n)
        sum_richness: Σ_i S_i
        sum_min_exclusive: Σ_{i<j} min(b_ij, b_ji)
        sum_max_exclusive: Σ_{i<j} max(b_ij, b_ji)
        richness: Per-site richness S_i, in sample order
    """

    total_species: int
    site_count: int
    sum_richness: int
    sum_min_exclusive: int
    sum_max_exclusive: int
    richness: np.ndarray

    def __repr__(self) -> str:
        return (
            f"DissimilarityFeatures(n={self.site_count}, S_T={self.total_species}, "
            f"sum_S={self.sum_richness}, sum_min={self.sum_min_exclusive}, "
            f"sum_max={self.sum_max_exclusive})"
        )


@dataclass(frozen=True)
class SpeciesFrequencyProfile:
    """
    Incidence frequencies of the species in a sample.

    Attributes:
        frequencies: {species: number of sites where it occurs}
        site_count: Number of sites the frequencies were counted over
    """

    frequencies: Counter
    site_count: int

    def count_with_frequency(self, f: int) -> int:
        """Number of species observed in exactly ``f`` sites."""
        return sum(1 for c in self.frequencies.values() if c == f)

    @property
    def f1(self) -> int:
        """Uniques: species found in exactly one site."""
        return self.count_with_frequency(1)

    @property
    def f2(self) -> int:
        """Duplicates: species found in exactly two sites."""
        return self.count_with_frequency(2)

    @property
    def s(self) -> int:
        """Observed number of distinct species."""
        return len(self.frequencies)


def incidence_matrix(sample: Sample) -> Tuple[np.ndarray, List[Hashable]]:
    """
    Build the sites × species presence/absence matrix.

    Rows follow sample order. Columns follow the sorted string form of the
    species codes so the layout does not depend on set iteration order.

    Returns:
        matrix: Integer 0/1 array of shape (n_sites, n_species)
        species: Species code of each column
    """
    catalog = build_species_catalog(sample)
    species = sorted(catalog.species, key=lambda s: (type(s).__name__, str(s)))
    column = {sp: j for j, sp in enumerate(species)}

    matrix = np.zeros((len(sample), len(species)), dtype=np.int64)
    for i, site in enumerate(sample):
        for sp in site.species:
            matrix[i, column[sp]] = 1
    return matrix, species


def extract_features(sample: Sample) -> DissimilarityFeatures:
    """
    Compute the aggregate dissimilarity features of a sample.

    Shared species for all pairs come from one product of the incidence
    matrix with its transpose; every quantity stays an exact integer.

    Args:
        sample: Sample with at least two sites

    Returns:
        DissimilarityFeatures

    Raises:
        SampleTooSmall: If the sample has fewer than two sites
    """
    n = len(sample)
    if n < 2:
        raise SampleTooSmall(f"Pairwise features need at least two sites, got {n}")

    matrix, species = incidence_matrix(sample)
    richness = matrix.sum(axis=1)
    shared = matrix @ matrix.T

    i, j = np.triu_indices(n, k=1)
    b_ij = richness[i] - shared[i, j]
    b_ji = richness[j] - shared[i, j]

    return DissimilarityFeatures(
        total_species=len(species),
        site_count=n,
        sum_richness=int(richness.sum()),
        sum_min_exclusive=int(np.minimum(b_ij, b_ji).sum()),
        sum_max_exclusive=int(np.maximum(b_ij, b_ji).sum()),
        richness=richness,
    )


def species_frequency_profile(sample: Sample) -> SpeciesFrequencyProfile:
    """Count in how many sites each species occurs."""
    frequencies: Counter = Counter()
    for site in sample:
        frequencies.update(site.species)
    return SpeciesFrequencyProfile(frequencies=frequencies, site_count=len(sample))

"""Core estimators: sample model, features, Chao2, dissimilarity and jackknife."""

from betadiv.core.errors import (
    DiversityEstimationError,
    InvalidPopulationSize,
    SampleTooSmall,
    IncompatibleModeForSampleSize,
    MalformedSample,
)
from betadiv.core.sample import Site, Sample, SpeciesCatalog, build_species_catalog
from betadiv.core.features import (
    DissimilarityFeatures,
    SpeciesFrequencyProfile,
    extract_features,
    incidence_matrix,
    species_frequency_profile,
)
from betadiv.core.estimates import BetaIndex, Estimate, DiversityIndices, DiversityResult
from betadiv.core.richness import chao2_estimate
from betadiv.core.jackknife import (
    JackknifeMode,
    JackknifeEstimate,
    jackknife_subsamples,
    jackknife_variance,
)
from betadiv.core.dissimilarity import (
    EstimationSettings,
    observed_indices,
    adapted_indices,
    beta_point_estimate,
    jackknife_beta_variance,
    estimate_dissimilarity,
)

__all__ = [
    "DiversityEstimationError",
    "InvalidPopulationSize",
    "SampleTooSmall",
    "IncompatibleModeForSampleSize",
    "MalformedSample",
    "Site",
    "Sample",
    "SpeciesCatalog",
    "build_species_catalog",
    "DissimilarityFeatures",
    "SpeciesFrequencyProfile",
    "extract_features",
    "incidence_matrix",
    "species_frequency_profile",
    "BetaIndex",
    "Estimate",
    "DiversityIndices",
    "DiversityResult",
    "chao2_estimate",
    "JackknifeMode",
    "JackknifeEstimate",
    "jackknife_subsamples",
    "jackknife_variance",
    "EstimationSettings",
    "observed_indices",
    "adapted_indices",
    "beta_point_estimate",
    "jackknife_beta_variance",
    "estimate_dissimilarity",
]

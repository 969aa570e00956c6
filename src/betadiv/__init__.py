"""
betadiv: estimators of beta-diversity indices

Multiple-site Simpson, Sorensen and nestedness dissimilarity adapted to be
independent of population size, with Chao2 gamma diversity and jackknife
variance estimation.
"""

__version__ = "1.2.0"

from betadiv.core.errors import (
    DiversityEstimationError,
    InvalidPopulationSize,
    SampleTooSmall,
    IncompatibleModeForSampleSize,
    MalformedSample,
)
from betadiv.core.sample import Site, Sample
from betadiv.core.estimates import BetaIndex, Estimate, DiversityIndices, DiversityResult
from betadiv.core.richness import chao2_estimate
from betadiv.core.jackknife import JackknifeMode
from betadiv.core.dissimilarity import (
    observed_indices,
    adapted_indices,
    estimate_dissimilarity,
)
from betadiv.data.loaders import sample_from_dataframe, load_sample
from betadiv.analysis import get_dissimilarity_estimates, estimate_by_stratum

WELCOME_MESSAGE = (
    "Welcome to betadiv! This package implements estimators of beta diversity indices."
)

__all__ = [
    "DiversityEstimationError",
    "InvalidPopulationSize",
    "SampleTooSmall",
    "IncompatibleModeForSampleSize",
    "MalformedSample",
    "Site",
    "Sample",
    "BetaIndex",
    "Estimate",
    "DiversityIndices",
    "DiversityResult",
    "chao2_estimate",
    "JackknifeMode",
    "observed_indices",
    "adapted_indices",
    "estimate_dissimilarity",
    "sample_from_dataframe",
    "load_sample",
    "get_dissimilarity_estimates",
    "estimate_by_stratum",
    "WELCOME_MESSAGE",
    "__version__",
]

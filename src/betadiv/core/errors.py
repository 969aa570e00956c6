"""Error taxonomy for diversity estimation.

All errors are raised before any result is produced. The computation is
deterministic, so retrying with the same inputs always fails the same way.
"""


class DiversityEstimationError(ValueError):
    """Base class for invalid inputs to the estimators."""


class InvalidPopulationSize(DiversityEstimationError):
    """Population size is negative, or not positive where a finite population is required."""


class SampleTooSmall(DiversityEstimationError):
    """Fewer sites than the estimator needs (at least two for pairwise features and Chao2)."""


class IncompatibleModeForSampleSize(DiversityEstimationError):
    """Delete-2 jackknife requested on a sample with fewer than three sites."""


class MalformedSample(DiversityEstimationError):
    """A site's species collection cannot be treated as a well-defined set."""

"""
Tabular estimation reports.

Wraps the core estimator for observation tables: build the sample, run the
estimator with jackknife variance, and return one row of means and standard
errors per estimation.
"""

import logging
from typing import Mapping, Union

import pandas as pd

from betadiv.core.dissimilarity import estimate_dissimilarity
from betadiv.core.jackknife import JackknifeMode
from betadiv.data.loaders import sample_from_dataframe, split_by_stratum

logger = logging.getLogger(__name__)

LARGE_SAMPLE_SIZE = 500

REPORT_COLUMNS = [
    "n",
    "simpson",
    "simpson_se",
    "sorensen",
    "sorensen_se",
    "nestedness",
    "nestedness_se",
    "alpha",
    "alpha_se",
    "gamma",
    "gamma_se",
]


def get_dissimilarity_estimates(
    dataset: pd.DataFrame,
    plot_id_field: str,
    species_id_field: str,
    population_size: Union[int, float],
    estimate_variance: bool = True,
    mode: JackknifeMode = JackknifeMode.LEAVE_ONE_OUT,
) -> pd.DataFrame:
    """
    Estimate the adapted dissimilarity indices from an observation table.

    The population size is the number of plots that fit in the population,
    typically the population area divided by the plot area. Fractional
    values are truncated to a whole number of plots.

    Args:
        dataset: Observation table, one row per species in a plot
        plot_id_field: Column holding the plot identifier
        species_id_field: Column holding the species code
        population_size: Number of plots in the population
        estimate_variance: Jackknife the beta-diversity estimates
        mode: Jackknife scheme

    Returns:
        One-row DataFrame with columns REPORT_COLUMNS

    Examples:
        >>> df = pd.DataFrame({
        ...     "plot": ["A", "A", "B", "B", "C", "C", "C"],
        ...     "species": ["sp1", "sp2", "sp2", "sp3", "sp1", "sp3", "sp4"],
        ... })
        >>> report = get_dissimilarity_estimates(df, "plot", "species", 100)
    """
    sample = sample_from_dataframe(dataset, plot_id_field, species_id_field)
    n = len(sample)
    message = f"Estimating dissimilarity from a sample of {n} plots..."
    if n > LARGE_SAMPLE_SIZE:
        message += " This may take a while!"
    logger.info(message)

    result = estimate_dissimilarity(
        sample,
        int(population_size),
        estimate_variance=estimate_variance,
        mode=mode,
    )
    return pd.DataFrame([result.to_record()], columns=REPORT_COLUMNS)


def estimate_by_stratum(
    dataset: pd.DataFrame,
    stratum_field: str,
    plot_id_field: str,
    species_id_field: str,
    population_sizes: Union[Mapping[str, Union[int, float]], int, float],
    estimate_variance: bool = True,
    mode: JackknifeMode = JackknifeMode.LEAVE_ONE_OUT,
) -> pd.DataFrame:
    """
    Estimate dissimilarity separately within each stratum of a dataset.

    Args:
        dataset: Observation table with a stratum column
        stratum_field: Column holding the stratum name
        plot_id_field: Column holding the plot identifier
        species_id_field: Column holding the species code
        population_sizes: Population size per stratum name, or one size
            shared by all strata
        estimate_variance: Jackknife the beta-diversity estimates
        mode: Jackknife scheme

    Returns:
        DataFrame with one row per stratum and a 'stratum' column

    Raises:
        KeyError: If a stratum has no population size
    """
    rows = []
    for stratum, observations in split_by_stratum(dataset, stratum_field).items():
        if isinstance(population_sizes, Mapping):
            if stratum not in population_sizes:
                raise KeyError(f"No population size given for stratum '{stratum}'")
            size = population_sizes[stratum]
        else:
            size = population_sizes
        logger.info(f"Stratum '{stratum}' (population size {int(size)})")
        report = get_dissimilarity_estimates(
            observations,
            plot_id_field,
            species_id_field,
            size,
            estimate_variance=estimate_variance,
            mode=mode,
        )
        report["stratum"] = stratum
        rows.append(report)

    if not rows:
        return pd.DataFrame(columns=REPORT_COLUMNS + ["stratum"])
    return pd.concat(rows, ignore_index=True)

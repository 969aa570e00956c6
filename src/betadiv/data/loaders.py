"""
Load species observations into a Sample.

Observations come in long format: one row per species recorded in a plot,
for example

    CODE_POINT,Espece
    P01,Acer campestre
    P01,Hedera helix
    P02,Hedera helix
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from betadiv.core.errors import MalformedSample
from betadiv.core.sample import Sample, Site

logger = logging.getLogger(__name__)


def read_observations(path: Union[str, Path], sep: Optional[str] = None) -> pd.DataFrame:
    """
    Read an observation table from a delimited text file.

    Args:
        path: CSV (comma) or TSV/TXT (tab) file
        sep: Explicit delimiter, overrides the extension

    Returns:
        DataFrame with one row per observation
    """
    path = Path(path)
    if sep is None:
        if path.suffix == ".csv":
            sep = ","
        elif path.suffix in [".tsv", ".txt"]:
            sep = "\t"
        else:
            raise ValueError(f"Unsupported file format: {path.suffix}")
    return pd.read_csv(path, sep=sep)


def _species_code(value) -> str:
    # pandas turns integer codes into floats when the column has gaps
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def sample_from_dataframe(
    dataset: pd.DataFrame,
    plot_id_field: str,
    species_id_field: str,
) -> Sample:
    """
    Build a Sample from an observation table.

    Plots keep their order of first appearance. A plot recorded as a single
    row with no species is an empty site; a plot with several rows where some
    species are missing is rejected.

    Args:
        dataset: Observation table
        plot_id_field: Column holding the plot (site) identifier
        species_id_field: Column holding the species code

    Returns:
        Sample with one Site per plot, species codes as strings

    Raises:
        MalformedSample: If a field is absent, a plot id is missing, or a
            plot mixes missing and recorded species
    """
    for name in (plot_id_field, species_id_field):
        if name not in dataset.columns:
            raise MalformedSample(
                f"Field '{name}' not found. Available fields: {', '.join(map(str, dataset.columns))}"
            )
    if dataset[plot_id_field].isna().any():
        raise MalformedSample(f"Some observations have no value in '{plot_id_field}'")

    sites: List[Site] = []
    for plot_id, rows in dataset.groupby(plot_id_field, sort=False):
        before = rows[species_id_field]
        after = before.dropna()
        if len(after) < len(before) and len(before) > 1:
            raise MalformedSample(
                f"There seems to be some missing species in the list of plot {plot_id}"
            )
        if len(after) == 0:
            logger.info(f"This plot is empty: {plot_id}")
        sites.append(Site(site_id=str(plot_id), species=[_species_code(v) for v in after]))

    return Sample(sites=tuple(sites))


def load_sample(
    path: Union[str, Path],
    plot_id_field: str,
    species_id_field: str,
) -> Sample:
    """Read an observation file and build its Sample."""
    return sample_from_dataframe(read_observations(path), plot_id_field, species_id_field)


def split_by_stratum(dataset: pd.DataFrame, stratum_field: str) -> Dict[str, pd.DataFrame]:
    """Split an observation table into one table per stratum, in order of appearance."""
    if stratum_field not in dataset.columns:
        raise MalformedSample(f"Field '{stratum_field}' not found")
    if dataset[stratum_field].isna().any():
        raise MalformedSample(f"Some observations have no value in '{stratum_field}'")
    return {str(name): rows for name, rows in dataset.groupby(stratum_field, sort=False)}

"""Tabular data ingestion."""

from betadiv.data.loaders import (
    read_observations,
    sample_from_dataframe,
    load_sample,
    split_by_stratum,
)

__all__ = [
    "read_observations",
    "sample_from_dataframe",
    "load_sample",
    "split_by_stratum",
]

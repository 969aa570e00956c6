"""Tests for loading observation tables into samples."""

import numpy as np
import pandas as pd
import pytest

from betadiv.core.errors import MalformedSample
from betadiv.data.loaders import (
    load_sample,
    read_observations,
    sample_from_dataframe,
    split_by_stratum,
)


@pytest.fixture
def observations():
    return pd.DataFrame({
        "plot": ["P2", "P2", "P1", "P1", "P3", "P3", "P3"],
        "species": ["sp1", "sp2", "sp2", "sp3", "sp1", "sp3", "sp4"],
    })


def test_plots_keep_order_of_appearance(observations):
    sample = sample_from_dataframe(observations, "plot", "species")

    assert sample.site_ids == ("P2", "P1", "P3")
    assert sample["P3"].species == frozenset({"sp1", "sp3", "sp4"})


def test_repeated_species_collapse():
    df = pd.DataFrame({"plot": ["A", "A", "B"], "species": ["x", "x", "y"]})
    sample = sample_from_dataframe(df, "plot", "species")
    assert sample["A"].richness == 1


def test_single_missing_row_is_empty_plot(caplog):
    df = pd.DataFrame({"plot": ["A", "A", "B"], "species": ["x", "y", np.nan]})

    with caplog.at_level("INFO"):
        sample = sample_from_dataframe(df, "plot", "species")

    assert sample["B"].richness == 0
    assert "This plot is empty: B" in caplog.text


def test_partially_missing_species_rejected():
    df = pd.DataFrame({"plot": ["A", "A", "B"], "species": ["x", np.nan, "y"]})
    with pytest.raises(MalformedSample, match="missing species"):
        sample_from_dataframe(df, "plot", "species")


def test_missing_plot_id_rejected():
    df = pd.DataFrame({"plot": ["A", np.nan], "species": ["x", "y"]})
    with pytest.raises(MalformedSample):
        sample_from_dataframe(df, "plot", "species")


@pytest.mark.parametrize("plot_field, species_field", [
    ("CODE_POINT", "species"),
    ("plot", "Espece"),
])
def test_missing_field_rejected(observations, plot_field, species_field):
    with pytest.raises(MalformedSample, match="not found"):
        sample_from_dataframe(observations, plot_field, species_field)


def test_numeric_codes_become_strings():
    # The gap turns the species column into floats
    df = pd.DataFrame({"plot": [1, 1, 2, 3], "species": [12, 7, np.nan, 12]})
    sample = sample_from_dataframe(df, "plot", "species")

    assert sample.site_ids == ("1", "2", "3")
    assert sample["1"].species == frozenset({"12", "7"})
    assert sample["3"].species == frozenset({"12"})


def test_read_csv_and_tsv(tmp_path, observations):
    csv_path = tmp_path / "obs.csv"
    tsv_path = tmp_path / "obs.tsv"
    observations.to_csv(csv_path, index=False)
    observations.to_csv(tsv_path, sep="\t", index=False)

    pd.testing.assert_frame_equal(read_observations(csv_path), observations)
    pd.testing.assert_frame_equal(read_observations(tsv_path), observations)


def test_explicit_separator(tmp_path, observations):
    path = tmp_path / "obs.dat"
    observations.to_csv(path, sep=";", index=False)
    assert len(read_observations(path, sep=";")) == len(observations)


def test_unsupported_extension(tmp_path):
    path = tmp_path / "obs.xlsx"
    path.write_text("plot,species\n")
    with pytest.raises(ValueError, match="Unsupported"):
        read_observations(path)


def test_load_sample(tmp_path, observations):
    path = tmp_path / "obs.csv"
    observations.to_csv(path, index=False)

    sample = load_sample(path, "plot", "species")

    assert len(sample) == 3
    assert sample == sample_from_dataframe(observations, "plot", "species")


def test_split_by_stratum():
    df = pd.DataFrame({
        "stratum": ["north", "south", "north", "south"],
        "plot": ["A", "B", "C", "D"],
        "species": ["x", "y", "z", "x"],
    })

    strata = split_by_stratum(df, "stratum")

    assert list(strata) == ["north", "south"]
    assert list(strata["north"]["plot"]) == ["A", "C"]

    with pytest.raises(MalformedSample):
        split_by_stratum(df, "region")


def test_split_by_stratum_rejects_missing_stratum():
    df = pd.DataFrame({
        "stratum": ["north", np.nan, "north", "south"],
        "plot": ["A", "B", "C", "D"],
        "species": ["x", "y", "z", "x"],
    })
    with pytest.raises(MalformedSample, match="stratum"):
        split_by_stratum(df, "stratum")

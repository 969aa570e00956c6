"""Tests for the tabular estimation reports."""

import numpy as np
import pandas as pd
import pytest

from betadiv.analysis import (
    REPORT_COLUMNS,
    estimate_by_stratum,
    get_dissimilarity_estimates,
)
from betadiv.core.dissimilarity import estimate_dissimilarity
from betadiv.core.errors import IncompatibleModeForSampleSize
from betadiv.core.jackknife import JackknifeMode
from betadiv.data.loaders import sample_from_dataframe


@pytest.fixture
def observations():
    return pd.DataFrame({
        "plot": ["A", "A", "A", "B", "B", "B", "C", "C", "C", "D", "D", "D", "E", "E", "E", "E"],
        "species": [
            "sp1", "sp2", "sp3",
            "sp2", "sp3", "sp4",
            "sp1", "sp4", "sp5",
            "sp2", "sp5", "sp6",
            "sp1", "sp2", "sp6", "sp7",
        ],
    })


@pytest.fixture
def stratified(observations):
    df = observations.copy()
    df["stratum"] = ["north"] * 9 + ["south"] * 7
    extra = pd.DataFrame({
        "plot": ["F", "F", "G", "G"],
        "species": ["sp1", "sp7", "sp6", "sp7"],
        "stratum": ["south"] * 4,
    })
    return pd.concat([df, extra], ignore_index=True)


def test_report_layout(observations):
    report = get_dissimilarity_estimates(observations, "plot", "species", 100)

    assert list(report.columns) == REPORT_COLUMNS
    assert len(report) == 1
    assert report.loc[0, "n"] == 5


def test_report_matches_estimator(observations):
    report = get_dissimilarity_estimates(observations, "plot", "species", 100)
    sample = sample_from_dataframe(observations, "plot", "species")
    expected = estimate_dissimilarity(sample, 100, estimate_variance=True).to_record()

    for column in REPORT_COLUMNS:
        assert report.loc[0, column] == pytest.approx(expected[column])


def test_report_without_variance(observations):
    report = get_dissimilarity_estimates(
        observations, "plot", "species", 100, estimate_variance=False
    )
    assert report["simpson_se"].isna().all()
    assert not np.isnan(report.loc[0, "alpha_se"])


def test_fractional_population_size_truncated(observations):
    truncated = get_dissimilarity_estimates(observations, "plot", "species", 100.7)
    whole = get_dissimilarity_estimates(observations, "plot", "species", 100)
    pd.testing.assert_frame_equal(truncated, whole)


def test_delete_two_report(observations):
    report = get_dissimilarity_estimates(
        observations, "plot", "species", 100, mode=JackknifeMode.DELETE_TWO
    )
    assert report.loc[0, "sorensen_se"] > 0


def test_delete_two_on_two_plots_fails():
    df = pd.DataFrame({"plot": ["A", "A", "B"], "species": ["x", "y", "y"]})
    with pytest.raises(IncompatibleModeForSampleSize):
        get_dissimilarity_estimates(df, "plot", "species", 10, mode=JackknifeMode.DELETE_TWO)


def test_large_sample_warning(caplog):
    plots = np.repeat(np.arange(501), 2)
    species = [f"sp{(p + k) % 7}" for p in range(501) for k in range(2)]
    df = pd.DataFrame({"plot": plots, "species": species})

    with caplog.at_level("INFO", logger="betadiv.analysis"):
        report = get_dissimilarity_estimates(df, "plot", "species", 1000, estimate_variance=False)

    assert "sample of 501 plots" in caplog.text
    assert "This may take a while!" in caplog.text
    assert report.loc[0, "n"] == 501


def test_small_sample_no_warning(observations, caplog):
    with caplog.at_level("INFO", logger="betadiv.analysis"):
        get_dissimilarity_estimates(observations, "plot", "species", 100)
    assert "sample of 5 plots" in caplog.text
    assert "may take a while" not in caplog.text


def test_estimate_by_stratum(stratified):
    report = estimate_by_stratum(
        stratified, "stratum", "plot", "species", {"north": 50, "south": 80}
    )

    assert list(report["stratum"]) == ["north", "south"]
    assert list(report["n"]) == [3, 4]
    assert list(report.columns) == REPORT_COLUMNS + ["stratum"]

    north = stratified[stratified["stratum"] == "north"]
    expected = get_dissimilarity_estimates(north, "plot", "species", 50)
    assert report.loc[0, "simpson"] == pytest.approx(expected.loc[0, "simpson"])


def test_estimate_by_stratum_shared_size(stratified):
    report = estimate_by_stratum(
        stratified, "stratum", "plot", "species", 60, estimate_variance=False
    )
    by_name = estimate_by_stratum(
        stratified, "stratum", "plot", "species", {"north": 60, "south": 60},
        estimate_variance=False,
    )
    pd.testing.assert_frame_equal(report, by_name)


def test_estimate_by_stratum_missing_size(stratified):
    with pytest.raises(KeyError, match="south"):
        estimate_by_stratum(stratified, "stratum", "plot", "species", {"north": 50})

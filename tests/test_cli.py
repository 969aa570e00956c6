"""Tests for the command-line interface."""

import json

import pandas as pd
import pytest
from typer.testing import CliRunner

from betadiv import __version__
from betadiv.cli import app

runner = CliRunner()


@pytest.fixture
def observations_file(tmp_path):
    path = tmp_path / "observations.csv"
    pd.DataFrame({
        "CODE_POINT": ["P1", "P1", "P2", "P2", "P3", "P3", "P3"],
        "Espece": ["sp1", "sp2", "sp2", "sp3", "sp1", "sp3", "sp4"],
        "region": ["a", "a", "a", "a", "b", "b", "b"],
    }).to_csv(path, index=False)
    return path


@pytest.fixture
def two_plots_file(tmp_path):
    path = tmp_path / "two.csv"
    path.write_text("plot,species\nA,x\nA,y\nB,y\n")
    return path


def _fields():
    return ["--plot-field", "CODE_POINT", "--species-field", "Espece"]


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "Welcome to betadiv!" in result.output
    assert __version__ in result.output


def test_estimate_writes_json(observations_file, tmp_path):
    output = tmp_path / "report.json"
    result = runner.invoke(
        app, ["estimate", str(observations_file), *_fields(), "-N", "100", "-o", str(output)]
    )

    assert result.exit_code == 0, result.output
    records = json.loads(output.read_text())
    assert len(records) == 1
    assert records[0]["n"] == 3
    assert records[0]["simpson_se"] is not None


def test_estimate_writes_csv_without_variance(observations_file, tmp_path):
    output = tmp_path / "report.csv"
    result = runner.invoke(
        app,
        ["estimate", str(observations_file), *_fields(), "-N", "100", "--no-variance",
         "-o", str(output)],
    )

    assert result.exit_code == 0, result.output
    report = pd.read_csv(output)
    assert report["simpson_se"].isna().all()


def test_estimate_by_stratum(tmp_path):
    path = tmp_path / "strata.tsv"
    path.write_text(
        "region\tplot\tspecies\n"
        "a\tA\tx\na\tA\ty\na\tB\ty\na\tB\tz\n"
        "b\tC\tx\nb\tC\tw\nb\tD\tw\nb\tE\tv\n"
    )
    output = tmp_path / "strata.csv"
    result = runner.invoke(
        app,
        ["estimate", str(path), "--plot-field", "plot", "--species-field", "species",
         "--no-variance", "--stratum-field", "region",
         "--stratum-size", "a=20", "--stratum-size", "b=30", "-o", str(output)],
    )

    assert result.exit_code == 0, result.output
    report = pd.read_csv(output)
    assert list(report["stratum"]) == ["a", "b"]
    assert list(report["n"]) == [2, 3]


def test_unknown_mode(observations_file):
    result = runner.invoke(
        app, ["estimate", str(observations_file), *_fields(), "-N", "100", "--mode", "bootstrap"]
    )
    assert result.exit_code == 2


def test_population_size_required(observations_file):
    result = runner.invoke(app, ["estimate", str(observations_file), *_fields()])
    assert result.exit_code == 2


def test_bad_stratum_size(observations_file):
    result = runner.invoke(
        app,
        ["estimate", str(observations_file), *_fields(),
         "--stratum-field", "region", "--stratum-size", "a:20"],
    )
    assert result.exit_code == 2


def test_delete_two_on_two_plots(two_plots_file):
    result = runner.invoke(
        app,
        ["estimate", str(two_plots_file), "--plot-field", "plot", "--species-field", "species",
         "-N", "10", "--mode", "delete-two"],
    )
    assert result.exit_code == 1
    assert "Error" in result.output


def test_missing_field(observations_file):
    result = runner.invoke(
        app,
        ["estimate", str(observations_file), "--plot-field", "plot", "--species-field", "Espece",
         "-N", "100"],
    )
    assert result.exit_code == 1
    assert "Error" in result.output


def test_indices(observations_file):
    result = runner.invoke(app, ["indices", str(observations_file), *_fields()])
    assert result.exit_code == 0, result.output
    assert "Observed indices" in result.output
    assert "0.500000" in result.output


def test_adapted_indices(observations_file):
    result = runner.invoke(app, ["indices", str(observations_file), *_fields(), "--adapted"])
    assert result.exit_code == 0, result.output
    assert "Adapted indices" in result.output
    assert "0.400000" in result.output

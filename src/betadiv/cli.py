"""Command-line interface."""

import logging
import math
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd
import typer
from rich.console import Console
from rich.table import Table

from betadiv.core.errors import DiversityEstimationError

app = typer.Typer(help="betadiv: estimators of beta diversity indices")
console = Console()

logger = logging.getLogger(__name__)


def _parse_stratum_sizes(entries: List[str]) -> Dict[str, float]:
    sizes = {}
    for entry in entries:
        name, sep, value = entry.partition("=")
        if not sep or not name:
            raise typer.BadParameter(
                f"Expected NAME=SIZE, got '{entry}'", param_hint="--stratum-size"
            )
        try:
            sizes[name] = float(value)
        except ValueError:
            raise typer.BadParameter(
                f"Population size of stratum '{name}' is not a number: '{value}'",
                param_hint="--stratum-size",
            ) from None
    return sizes


def _format(value) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "-"
    if isinstance(value, float):
        return f"{value:.6f}"
    return str(value)


def _report_table(report: pd.DataFrame, title: str) -> Table:
    table = Table(title=title)
    for column in report.columns:
        table.add_column(str(column), style="cyan" if column == "stratum" else None)
    for record in report.to_dict(orient="records"):
        table.add_row(*(_format(record[c]) for c in report.columns))
    return table


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
):
    """Estimate beta-diversity from species observations in sample plots."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@app.command()
def version():
    """Show the welcome message and betadiv version."""
    from betadiv import WELCOME_MESSAGE, __version__

    console.print(WELCOME_MESSAGE)
    console.print(f"betadiv version {__version__}")


@app.command()
def estimate(
    observations: Path = typer.Argument(..., help="CSV/TSV file, one row per species in a plot"),
    plot_field: str = typer.Option(..., "--plot-field", help="Column with the plot identifier"),
    species_field: str = typer.Option(..., "--species-field", help="Column with the species code"),
    population_size: Optional[float] = typer.Option(
        None, "--population-size", "-N", help="Number of plots in the population"
    ),
    mode: str = typer.Option(
        "leave-one-out", "--mode", help="Jackknife scheme: leave-one-out or delete-two"
    ),
    no_variance: bool = typer.Option(False, "--no-variance", help="Skip jackknife variance"),
    stratum_field: Optional[str] = typer.Option(
        None, "--stratum-field", help="Column with the stratum name; estimates per stratum"
    ),
    stratum_size: Optional[List[str]] = typer.Option(
        None, "--stratum-size", help="Population size of one stratum as NAME=SIZE (repeatable)"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the report to a .csv or .json file"
    ),
):
    """Estimate adapted Simpson, Sorensen and nestedness dissimilarity."""
    from betadiv.analysis import estimate_by_stratum, get_dissimilarity_estimates
    from betadiv.core.jackknife import JackknifeMode
    from betadiv.data.loaders import read_observations

    try:
        jackknife_mode = JackknifeMode(mode)
    except ValueError:
        choices = ", ".join(m.value for m in JackknifeMode)
        raise typer.BadParameter(
            f"Unknown mode '{mode}'. Choose one of: {choices}", param_hint="--mode"
        ) from None

    sizes = _parse_stratum_sizes(stratum_size or [])
    if population_size is None and not (stratum_field and sizes):
        raise typer.BadParameter(
            "Give --population-size, or --stratum-field with --stratum-size",
            param_hint="--population-size",
        )

    try:
        dataset = read_observations(observations)
        if stratum_field:
            report = estimate_by_stratum(
                dataset,
                stratum_field,
                plot_field,
                species_field,
                sizes if sizes else population_size,
                estimate_variance=not no_variance,
                mode=jackknife_mode,
            )
        else:
            report = get_dissimilarity_estimates(
                dataset,
                plot_field,
                species_field,
                population_size,
                estimate_variance=not no_variance,
                mode=jackknife_mode,
            )
    except (DiversityEstimationError, KeyError, ValueError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    console.print(_report_table(report, "Dissimilarity estimates"))

    if output is not None:
        if output.suffix == ".json":
            output.write_text(report.to_json(orient="records", indent=2))
        else:
            report.to_csv(output, index=False)
        logger.info(f"Results written to {output}")


@app.command()
def indices(
    observations: Path = typer.Argument(..., help="CSV/TSV file, one row per species in a plot"),
    plot_field: str = typer.Option(..., "--plot-field", help="Column with the plot identifier"),
    species_field: str = typer.Option(..., "--species-field", help="Column with the species code"),
    adapted: bool = typer.Option(
        False, "--adapted", help="Population-size-independent version of the indices"
    ),
):
    """Compute the multiple-site indices of the plots taken as a population."""
    from betadiv.core.dissimilarity import adapted_indices, observed_indices
    from betadiv.data.loaders import load_sample

    try:
        sample = load_sample(observations, plot_field, species_field)
        values = adapted_indices(sample) if adapted else observed_indices(sample)
    except (DiversityEstimationError, KeyError, ValueError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    table = Table(title="Adapted indices" if adapted else "Observed indices")
    table.add_column("Index", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("n", str(len(sample)))
    for name in ("simpson", "sorensen", "nestedness", "alpha", "gamma"):
        table.add_row(name, _format(getattr(values, name)))
    console.print(table)


if __name__ == "__main__":
    app()

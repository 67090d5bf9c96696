"""Main CLI entrypoint using Typer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Callable, Dict, Any

import typer

from histostats import __version__
from histostats.config import AnalysisConfig, load_config

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="histostats",
    help="Statistical analysis of epidermal cell counts by age and region.",
    add_completion=False,
)

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

CONFIG_OPTION = typer.Option(None, "--config", "-c", help="YAML analysis config")
DATA_OPTION = typer.Option(None, "--data", help="Observation table (.xlsx, .csv, .parquet)")
OUTDIR_OPTION = typer.Option(None, "--outdir", help="Output directory (default: results)")
MEASURE_OPTION = typer.Option(None, "--measure-col", help="Measurement column name")
ALPHA_OPTION = typer.Option(None, "--alpha", help="Significance threshold")
SEED_OPTION = typer.Option(None, "--seed", help="Seed for the KS zero jitter")


def _build_config(
    config: Optional[Path],
    data: Optional[Path],
    outdir: Optional[Path],
    measure_col: Optional[str],
    alpha: Optional[float],
    seed: Optional[int],
) -> AnalysisConfig:
    """Merge a YAML config with command-line overrides."""
    overrides: Dict[str, Any] = {
        "input_path": data,
        "output_dir": outdir,
        "measure_col": measure_col,
        "significance_threshold": alpha,
        "random_state": seed,
    }
    if config is not None:
        return load_config(config, **overrides)

    if data is None:
        raise ValueError("Either --config or --data must be provided")

    overrides["output_dir"] = outdir or Path("results")
    return AnalysisConfig(**{k: v for k, v in overrides.items() if v is not None})


def _run(runner: Callable[[AnalysisConfig], Dict[str, Any]], label: str, **options) -> Dict[str, Any]:
    try:
        cfg = _build_config(**options)
    except (ValueError, FileNotFoundError) as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    try:
        typer.echo(f"Running {label} on {cfg.input_path}...")
        results = runner(cfg)
    except Exception as e:
        typer.secho(f"\n✗ {label} failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.secho(f"\n✓ {label} complete!", fg=typer.colors.GREEN)
    typer.echo(f"  Output directory: {cfg.output_dir}")
    return results


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"histostats {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """histostats: cell count statistics for axolotl epidermis histology."""
    pass


@app.command("radar")
def radar_cmd(
    config: Optional[Path] = CONFIG_OPTION,
    data: Optional[Path] = DATA_OPTION,
    outdir: Optional[Path] = OUTDIR_OPTION,
    measure_col: Optional[str] = MEASURE_OPTION,
    alpha: Optional[float] = ALPHA_OPTION,
    seed: Optional[int] = SEED_OPTION,
):
    """
    Normality tests, mean/median policy and radar charts per age and region.

    Examples:
        histostats radar --data data_scrip_INGLES.xlsx --measure-col No_celulas
    """
    from histostats.stats import run_radar_analysis

    results = _run(
        run_radar_analysis, "Radar analysis",
        config=config, data=data, outdir=outdir, measure_col=measure_col, alpha=alpha, seed=seed,
    )
    typer.echo(f"  Central tendency: {results['policy'].value}")
    typer.echo(f"  Radar charts: {len(results['charts'])}")


@app.command("regions")
def regions_cmd(
    config: Optional[Path] = CONFIG_OPTION,
    data: Optional[Path] = DATA_OPTION,
    outdir: Optional[Path] = OUTDIR_OPTION,
    measure_col: Optional[str] = MEASURE_OPTION,
    alpha: Optional[float] = ALPHA_OPTION,
    seed: Optional[int] = SEED_OPTION,
):
    """
    Kruskal-Wallis across ages per region, Dunn post-hoc for significant regions.

    Examples:
        histostats regions --data data_scrip_INGLES.xlsx --alpha 0.05
    """
    from histostats.stats import run_region_tests

    results = _run(
        run_region_tests, "Region tests",
        config=config, data=data, outdir=outdir, measure_col=measure_col, alpha=alpha, seed=seed,
    )
    typer.echo(f"  Regions tested: {len(results['kruskal'])}")
    typer.echo(f"  Significant regions: {', '.join(results['significant_regions']) or 'none'}")


@app.command("density")
def density_cmd(
    config: Optional[Path] = CONFIG_OPTION,
    data: Optional[Path] = DATA_OPTION,
    outdir: Optional[Path] = OUTDIR_OPTION,
    measure_col: Optional[str] = MEASURE_OPTION,
    alpha: Optional[float] = ALPHA_OPTION,
    seed: Optional[int] = SEED_OPTION,
):
    """
    Boxplot, summary table, Mann-Whitney/KS tests and ECDF plots by age.

    Examples:
        histostats density --data "Data Cells and Areas.xlsx" --measure-col "Leydig Cells/mm2"
    """
    from histostats.stats import run_density_analysis

    results = _run(
        run_density_analysis, "Density analysis",
        config=config, data=data, outdir=outdir, measure_col=measure_col, alpha=alpha, seed=seed,
    )
    typer.echo(f"  Age groups: {', '.join(results['age_order'])}")


@app.command("all")
def all_cmd(
    config: Optional[Path] = CONFIG_OPTION,
    data: Optional[Path] = DATA_OPTION,
    outdir: Optional[Path] = OUTDIR_OPTION,
    measure_col: Optional[str] = MEASURE_OPTION,
    alpha: Optional[float] = ALPHA_OPTION,
    seed: Optional[int] = SEED_OPTION,
):
    """Run the radar, region and density analyses on one table."""
    from histostats.stats import run_all

    _run(
        run_all, "Full analysis",
        config=config, data=data, outdir=outdir, measure_col=measure_col, alpha=alpha, seed=seed,
    )


if __name__ == "__main__":
    app()

"""Command-line interface for Strain Rating.

Provides commands for:
- rate: Star rating of a chart file, optionally with mods
- calibrate: Fit the hold/tail constants to a reference chart set
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .calculator import calculate_all, calculate_with_mods
from .constants import StrainConstants
from .mods import parse_mods

app = typer.Typer(
    name="strain-rating",
    help="Strain-based difficulty rating for multi-column rhythm charts",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Strain Rating command line."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def rate(
    chart_path: Path = typer.Argument(..., help="Chart .json file"),
    mods: str = typer.Option(
        "", "--mods", "-m", help="Comma separated mods, e.g. DT,HR (not with --all)"
    ),
    all_mods: bool = typer.Option(
        False, "--all", help="Rate every mod combination (not for converted charts)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of text"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Constants YAML"),
) -> None:
    """Rate a chart file."""
    # Lazy import to keep the core free of the file-format layer
    from calibration_engine.dataset import load_chart

    if all_mods and mods:
        console.print("[red]Error: --mods and --all cannot be combined[/red]")
        raise typer.Exit(1)

    try:
        chart = load_chart(chart_path)
        constants = StrainConstants(config)
        if all_mods:
            results = calculate_all(
                chart["notes"],
                chart["column_count"],
                overall_difficulty=chart["overall_difficulty"],
                is_convert=chart["is_convert"],
                constants=constants,
            )
        else:
            results = [
                calculate_with_mods(
                    chart["notes"],
                    chart["column_count"],
                    mods=parse_mods(mods),
                    overall_difficulty=chart["overall_difficulty"],
                    constants=constants,
                )
            ]
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(1)

    if as_json:
        payload = [result.as_dict() for result in results]
        typer.echo(json.dumps(payload if all_mods else payload[0], indent=2))
        return

    if not all_mods:
        result = results[0]
        console.print(f"[bold]{chart['stem']}[/bold]: {result.star_rating:.2f} stars")
        console.print(f"  Great hit window: {result.great_hit_window:.2f} ms")
        return

    table = Table(title=chart["stem"])
    table.add_column("Mods")
    table.add_column("Stars", justify="right")
    table.add_column("Great window (ms)", justify="right")
    for result in results:
        label = "".join(mod.value for mod in result.mods) or "NM"
        table.add_row(label, f"{result.star_rating:.2f}", f"{result.great_hit_window:.2f}")
    console.print(table)


@app.command()
def calibrate(
    charts_dir: Path = typer.Argument(..., help="Directory of reference chart .json files"),
    base_config: Optional[Path] = typer.Option(None, "--base-config", help="Baseline YAML"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Calibrated YAML"),
    rounds: int = typer.Option(3, "--rounds", help="Coordinate-descent rounds"),
) -> None:
    """Calibrate hold/tail constants against reference ratings."""
    from calibration_engine.dataset import load_reference_set
    from calibration_engine.trainer import calibrate as run_calibration

    try:
        charts = load_reference_set(charts_dir)
        summary = run_calibration(
            charts,
            base_config_path=base_config,
            output_config_path=output,
            max_rounds=rounds,
        )
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(1)

    console.print(f"Baseline error: {summary['baseline_error']:.4f}")
    console.print(f"Learned error:  {summary['learned_error']:.4f}")
    console.print(f"Saved to: {summary['output_path']}")


if __name__ == "__main__":
    app()

"""Weights command: derive AHP weights from pairwise comparison matrices."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..calibration import calibrate, elicit_weights, save_weights
from ..exceptions import QualityIndexError
from ..logging_config import setup_logging
from ..model import load_model, save_model
from . import app
from ._common import console, resolve_config


@app.command()
def weights(
    ctx: typer.Context,
    matrices: Path = typer.Argument(
        ..., help="Directory of comparison matrix CSV files", exists=True, file_okay=False, dir_okay=True
    ),
    model: Optional[Path] = typer.Option(
        None, "--model", "-m", help="Check matrices against this model descriptor", exists=True, dir_okay=False
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write weights as JSON"),
    apply_to: Optional[Path] = typer.Option(
        None, "--apply", help="Write a copy of the model with the weights merged in (needs --model)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """
    Elicit weights with the Analytic Hierarchy Process.

    Each CSV holds one node: header [bold]node,child1,...,childN[/bold], then
    one row per child with its pairwise ratios.

    [bold cyan]Examples:[/bold cyan]

      quality-index weights ./comparisons -m model.json --apply calibrated.json
    """
    obj = ctx.obj or {}
    logger = setup_logging(verbose=obj.get("verbose", False), quiet=obj.get("quiet", False))

    if apply_to is not None and model is None:
        console.print("[red]Error:[/red] --apply requires --model")
        raise typer.Exit(1)

    try:
        config = resolve_config(ctx)
        quality_model = load_model(model) if model is not None else None
        results = elicit_weights(matrices, quality_model, config)

        if output is not None:
            save_weights(results, output)
            logger.info(f"Weights written to {output}")
        if apply_to is not None:
            calibrated = calibrate(quality_model, weights=results, tolerance=config.weight_tolerance)
            save_model(calibrated, apply_to)
            logger.info(f"Calibrated model written to {apply_to}")
    except QualityIndexError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        print(json.dumps([r.to_dict() for r in results], indent=2))
        return

    for result in results:
        table = Table(title=result.name)
        table.add_column("Child", style="cyan")
        table.add_column("Weight", justify="right")
        for child, weight in result.weights.items():
            table.add_row(child, f"{weight:.4f}")
        console.print(table)
        status = "[green]consistent[/green]" if result.consistent else "[yellow]inconsistent[/yellow]"
        console.print(f"  λmax={result.lambda_max:.4f}  CR={result.consistency_ratio:.4f}  {status}")

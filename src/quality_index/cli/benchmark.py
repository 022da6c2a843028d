"""Benchmark command: derive normalization bounds from a project corpus."""

import json
from pathlib import Path
from typing import List, Optional

import click
import typer
from rich.table import Table

from ..calibration import Benchmarker, calibrate, save_bounds
from ..config import BOUND_STRATEGIES, BOUNDS_TARGETS
from ..exceptions import QualityIndexError
from ..logging_config import setup_logging
from ..model import load_model, save_model
from . import app
from ._common import console, load_size_tool, load_tool, resolve_config


@app.command()
def benchmark(
    ctx: typer.Context,
    corpus: Path = typer.Argument(
        ..., help="Directory holding the benchmark projects", exists=True, file_okay=False, dir_okay=True
    ),
    model: Path = typer.Option(
        ..., "--model", "-m", help="Quality model descriptor (JSON)", exists=True, dir_okay=False
    ),
    tool: List[str] = typer.Option([], "--tool", "-t", help="Tool adapter as module:ClassName (repeatable)"),
    size_tool: Optional[str] = typer.Option(None, "--size-tool", help="Size tool as module:ClassName"),
    marker: Optional[str] = typer.Option(
        None, "--marker", help="File or directory that marks a project root (default: .git)"
    ),
    strategy: Optional[str] = typer.Option(
        None,
        "--strategy",
        "-s",
        help="Bound strategy",
        click_type=click.Choice(BOUND_STRATEGIES),
    ),
    workers: Optional[int] = typer.Option(
        None, "-w", "--workers", help="Parallel workers (default: auto-detect)", min=1, max=32
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write bounds as JSON"),
    apply_to: Optional[Path] = typer.Option(
        None, "--apply", help="Write a copy of the model with the bounds merged in"
    ),
    target: Optional[str] = typer.Option(
        None,
        "--target",
        help="Merge bounds into product factor thresholds or measure normalizers",
        click_type=click.Choice(BOUNDS_TARGETS),
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in machine-readable JSON format"),
):
    """
    Derive per-measure bounds from a corpus of reference projects.

    [bold cyan]Examples:[/bold cyan]

      quality-index benchmark ./corpus -m model.json -t mytools:Linter -o bounds.json

      quality-index benchmark ./corpus -m model.json -t mytools:Linter --apply calibrated.json
    """
    obj = ctx.obj or {}
    logger = setup_logging(verbose=obj.get("verbose", False), quiet=obj.get("quiet", False))

    try:
        config = resolve_config(
            ctx, bound_strategy=strategy, workers=workers, project_marker=marker, bounds_target=target
        )
        quality_model = load_model(model)
        benchmarker = Benchmarker(
            [load_tool(ref) for ref in tool], load_size_tool(size_tool), config=config
        )
        result = benchmarker.derive_bounds(corpus, quality_model)

        if output is not None:
            save_bounds(result, output)
            logger.info(f"Bounds written to {output}")
        if apply_to is not None:
            save_model(calibrate(quality_model, bounds=result.bounds, target=config.bounds_target), apply_to)
            logger.info(f"Calibrated model written to {apply_to}")
    except QualityIndexError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        print(json.dumps(result.to_dict(), indent=2))
        return

    table = Table(title=f"Benchmark bounds ({result.strategy}, {len(result.projects)} projects)")
    table.add_column("Measure", style="cyan")
    table.add_column("Low", justify="right")
    table.add_column("High", justify="right")
    table.add_column("Samples", justify="right", style="dim")
    for name, (low, high) in sorted(result.bounds.items()):
        table.add_row(name, f"{low:.4g}", f"{high:.4g}", str(len(result.observations.get(name, []))))
    console.print(table)

    if result.failures:
        console.print(f"[yellow]{len(result.failures)} tool failure(s):[/yellow]")
        for failure in result.failures:
            console.print(f"  {failure.project}: {failure.tool} ({failure.reason})")

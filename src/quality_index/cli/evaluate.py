"""Evaluate command: score one or more projects against a calibrated model."""

from pathlib import Path
from typing import List, Optional

import typer

from ..evaluation import evaluate_batch
from ..exceptions import QualityIndexError
from ..logging_config import setup_logging
from ..model import load_model
from . import app
from ._common import console, load_size_tool, load_tool, resolve_config


@app.command()
def evaluate(
    ctx: typer.Context,
    projects: List[Path] = typer.Argument(
        ..., help="Project directories to evaluate", exists=True, file_okay=False, dir_okay=True
    ),
    model: Path = typer.Option(
        ..., "--model", "-m", help="Calibrated quality model descriptor (JSON)", exists=True, dir_okay=False
    ),
    results: Path = typer.Option(Path("out"), "--results", "-o", help="Directory for result files"),
    tool: List[str] = typer.Option([], "--tool", "-t", help="Tool adapter as module:ClassName (repeatable)"),
    size_tool: Optional[str] = typer.Option(
        None, "--size-tool", help="Size tool as module:ClassName (default: non-blank lines of .py files)"
    ),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per tool time limit in seconds"),
):
    """
    Evaluate projects and export their quality index.

    Writes one [bold]<project>_evalResults.json[/bold] per project.

    [bold cyan]Examples:[/bold cyan]

      quality-index evaluate ./myproject -m model.json -t mytools:Linter
    """
    obj = ctx.obj or {}
    logger = setup_logging(verbose=obj.get("verbose", False), quiet=obj.get("quiet", False))

    try:
        config = resolve_config(ctx, tool_timeout_seconds=timeout)
        quality_model = load_model(model)
        tools = [load_tool(ref) for ref in tool]
        outcomes = evaluate_batch(
            projects, results, quality_model, tools, load_size_tool(size_tool), config
        )
    except QualityIndexError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    failed = 0
    for outcome in outcomes:
        if outcome.ok:
            console.print(f"[green]✓[/green] {outcome.project_dir.name} -> {outcome.result_path}")
        else:
            failed += 1
            console.print(f"[red]✗[/red] {outcome.project_dir.name}: {outcome.error}")

    if failed:
        raise typer.Exit(1)

"""CLI entry point: registers all subcommands."""

from pathlib import Path
from typing import Optional

import typer

from ._common import console

app = typer.Typer(
    name="quality-index",
    help="Quality Index - calibrate and evaluate hierarchical software quality models",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show errors"),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
):
    """Shared options for every command."""
    from .. import __version__

    if version:
        console.print(f"[bold cyan]Quality Index[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    ctx.ensure_object(dict)
    ctx.obj.update(verbose=verbose, quiet=quiet, config=config)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def main() -> None:
    app()


# Import subcommands to register them
from .evaluate import evaluate as _evaluate  # noqa: F401, E402
from .benchmark import benchmark as _benchmark  # noqa: F401, E402
from .weights import weights as _weights  # noqa: F401, E402
from .show import show as _show  # noqa: F401, E402

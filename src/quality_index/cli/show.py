"""Show command: print a quality model and its calibration constants."""

from pathlib import Path

import typer
from rich.markup import escape
from rich.tree import Tree

from ..exceptions import QualityIndexError
from ..model import load_model
from ..model.nodes import Measure, ProductFactor, WeightedNode
from . import app
from ._common import console


def _label(node, weight=None) -> str:
    text = f"[bold]{escape(node.name)}[/bold]"
    if weight is not None:
        text += f" [dim]w={weight:.3f}[/dim]"
    if isinstance(node, ProductFactor):
        if node.thresholds is None:
            text += " [yellow](no thresholds)[/yellow]"
        else:
            text += f" [dim]thresholds={[round(t, 4) for t in node.thresholds]} {node.polarity.value}[/dim]"
    elif isinstance(node, Measure):
        diagnostics = escape(", ".join(d.name for d in node.diagnostics))
        text += f" [dim]{node.evaluator.kind}/{node.normalizer.kind} <- {diagnostics}[/dim]"
    return text


def _add(branch: Tree, node, weight=None) -> None:
    child_branch = branch.add(_label(node, weight))
    if isinstance(node, WeightedNode):
        weights = node.weights or {}
        for name, child in node.children.items():
            _add(child_branch, child, weights.get(name))
    elif isinstance(node, ProductFactor):
        for measure in node.measures.values():
            _add(child_branch, measure)


@app.command()
def show(
    model: Path = typer.Argument(..., help="Quality model descriptor (JSON)", exists=True, dir_okay=False),
):
    """Print the quality model tree with weights and thresholds."""
    try:
        quality_model = load_model(model)
    except QualityIndexError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    tree = Tree(f"[bold cyan]{escape(quality_model.name)}[/bold cyan]")
    _add(tree, quality_model.tqi)
    console.print(tree)

    missing = quality_model.missing_calibration()
    if missing:
        console.print(f"[yellow]{len(missing)} node(s) need calibration:[/yellow]")
        for reason in missing:
            console.print(f"  {escape(reason)}")

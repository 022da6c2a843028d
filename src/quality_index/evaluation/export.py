"""Result export: evaluated project -> JSON file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..logging_config import get_logger
from ..model.nodes import Measure, ModelNode, ProductFactor, WeightedNode
from .project import Project

logger = get_logger(__name__)


def _node_to_dict(node: ModelNode, project: Project) -> dict[str, Any]:
    ctx = project.context
    entry: dict[str, Any] = {
        "name": node.name,
        "description": node.description,
        "level": node.level,
        "value": node.value(ctx),
    }
    if isinstance(node, WeightedNode):
        entry["weights"] = node.weights
        entry["children"] = [_node_to_dict(c, project) for c in node.children.values()]
    elif isinstance(node, ProductFactor):
        entry["thresholds"] = node.thresholds
        entry["polarity"] = node.polarity.value
        entry["children"] = [_node_to_dict(m, project) for m in node.measures.values()]
    elif isinstance(node, Measure):
        entry["raw_value"] = node.raw_value()
        entry["num_findings"] = node.num_findings()
        entry["diagnostics"] = [
            {"name": d.name, "has_run": d.has_run, "findings": d.count}
            for d in node.diagnostics
        ]
    return entry


def project_to_dict(project: Project) -> dict[str, Any]:
    model = project.quality_model
    return {
        "project_name": project.name,
        "project_lines_of_code": project.lines_of_code,
        "quality_model": model.name,
        "tqi": model.tqi.value(project.context),
        "tree": _node_to_dict(model.tqi, project),
        "tool_failures": [
            {"tool": f.tool, "reason": f.reason} for f in project.failures
        ],
    }


def export_results(project: Project, results_dir: Path) -> Path:
    """Write ``<project>_evalResults.json`` into ``results_dir`` and return its path."""
    results_dir = Path(results_dir)
    results_dir.mkdir(parents=True, exist_ok=True)
    out = results_dir / f"{project.name}_evalResults.json"
    with open(out, "w", encoding="utf-8") as f:
        json.dump(project_to_dict(project), f, indent=2)
    logger.info(f"Exported results for {project.name} to {out}")
    return out

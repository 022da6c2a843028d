"""Project evaluation sessions and result export."""

from .export import export_results, project_to_dict
from .project import NodeValues, Project, ToolFailure
from .runner import BatchOutcome, SingleProjectEvaluator, evaluate_batch

__all__ = [
    "Project",
    "NodeValues",
    "ToolFailure",
    "SingleProjectEvaluator",
    "BatchOutcome",
    "evaluate_batch",
    "export_results",
    "project_to_dict",
]

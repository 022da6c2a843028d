"""Boundaries to external analysis: tool adapters and corpus discovery."""

from .discovery import discover_projects
from .tools import (
    BaseTool,
    CommandTool,
    LinesOfCodeTool,
    SizeTool,
    diagnostics_from_mapping,
    measure_size,
    run_tool,
    run_with_timeout,
)

__all__ = [
    "BaseTool",
    "CommandTool",
    "SizeTool",
    "LinesOfCodeTool",
    "diagnostics_from_mapping",
    "discover_projects",
    "measure_size",
    "run_tool",
    "run_with_timeout",
]

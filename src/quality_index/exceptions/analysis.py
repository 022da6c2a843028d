"""Analysis-related exceptions: tool execution and tree evaluation."""

from pathlib import Path
from typing import Optional

from .base import QualityIndexError


class AnalysisError(QualityIndexError):
    """Base class for analysis-related errors."""

    pass


class ToolExecutionError(AnalysisError):
    """Raised when a tool adapter fails on a project."""

    def __init__(self, tool: str, project: Path, reason: str):
        super().__init__(
            f"Tool '{tool}' failed on {project}",
            details={"tool": tool, "project": str(project), "reason": reason},
        )
        self.tool = tool
        self.project = project
        self.reason = reason


class ToolTimeoutError(ToolExecutionError):
    """Raised when a tool adapter exceeds its time limit."""

    def __init__(self, tool: str, project: Path, timeout: float):
        super().__init__(tool, project, f"exceeded {timeout}s timeout")
        self.timeout = timeout


class EvaluationError(AnalysisError):
    """Raised when a node cannot produce a value from its inputs."""

    def __init__(self, node: str, reason: str, project: Optional[str] = None):
        details = {"node": node, "reason": reason}
        if project is not None:
            details["project"] = project
        super().__init__(f"Cannot evaluate node '{node}'", details=details)
        self.node = node
        self.reason = reason

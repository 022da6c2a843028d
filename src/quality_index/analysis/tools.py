"""Tool adapter boundary.

A tool adapter turns a project root into name-addressable Diagnostics. The
core never looks inside tool output; it only needs ``run(root)`` to return
``{diagnostic name: Diagnostic}``. A separate size tool supplies the
project's size metric.
"""

from __future__ import annotations

import concurrent.futures
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, TypeVar

from ..exceptions import ToolExecutionError, ToolTimeoutError
from ..logging_config import get_logger
from ..model.findings import Diagnostic

logger = get_logger(__name__)

T = TypeVar("T")


class BaseTool(ABC):
    """Abstract static analysis tool adapter.

    Attributes:
        name: Tool name used in logs and failure records
        provides: Diagnostic names this tool is responsible for, when known.
            Lets the benchmarker drop only the affected measures if the tool
            fails on a project.
    """

    name: str = "tool"
    provides: Optional[frozenset[str]] = None

    @abstractmethod
    def analyze(self, project_root: Path) -> Any:
        """Run the tool against ``project_root`` and return its raw output."""

    @abstractmethod
    def parse_analysis(self, output: Any) -> dict[str, Diagnostic]:
        """Turn raw tool output into diagnostics keyed by name."""

    def run(self, project_root: Path) -> dict[str, Diagnostic]:
        return self.parse_analysis(self.analyze(project_root))


class SizeTool(ABC):
    """Supplies the size metric (lines of code) of a project."""

    name: str = "size"

    @abstractmethod
    def lines_of_code(self, project_root: Path) -> int:
        """Return the size metric of ``project_root``."""


class CommandTool(BaseTool):
    """Adapter for tools run as an external command.

    Subclasses provide ``command(project_root)`` and ``parse_analysis``; the
    command's stdout is handed to ``parse_analysis``.
    """

    def __init__(self, timeout: Optional[float] = None, ok_returncodes: Sequence[int] = (0,)):
        self.timeout = timeout
        self.ok_returncodes = tuple(ok_returncodes)

    @abstractmethod
    def command(self, project_root: Path) -> list[str]:
        """Argument vector to execute for ``project_root``."""

    def analyze(self, project_root: Path) -> str:
        argv = self.command(project_root)
        logger.debug(f"{self.name}: running {' '.join(argv)}")
        try:
            result = subprocess.run(
                argv,
                cwd=project_root,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise ToolTimeoutError(self.name, project_root, self.timeout or 0)
        except OSError as e:
            raise ToolExecutionError(self.name, project_root, str(e))
        if result.returncode not in self.ok_returncodes:
            raise ToolExecutionError(
                self.name,
                project_root,
                f"exit code {result.returncode}: {result.stderr.strip()[:200]}",
            )
        return result.stdout


class LinesOfCodeTool(SizeTool):
    """Counts non-blank lines in files with the given suffixes."""

    name = "loc"

    def __init__(self, suffixes: Iterable[str] = (".py",), exclude_dirs: Iterable[str] = (".git",)):
        self.suffixes = tuple(suffixes)
        self.exclude_dirs = frozenset(exclude_dirs)

    def lines_of_code(self, project_root: Path) -> int:
        total = 0
        for path in Path(project_root).rglob("*"):
            if not path.is_file() or path.suffix not in self.suffixes:
                continue
            if self.exclude_dirs.intersection(path.relative_to(project_root).parts):
                continue
            with open(path, encoding="utf-8", errors="replace") as f:
                total += sum(1 for line in f if line.strip())
        return total


def run_with_timeout(func: Callable[[], T], timeout: Optional[float], tool: str, project: Path) -> T:
    """Run ``func`` with a time limit. Raises ToolTimeoutError if exceeded.

    The worker is abandoned on timeout instead of joined, so a hung tool
    cannot hold up the caller.
    """
    if timeout is None:
        return func()
    executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
    future = executor.submit(func)
    try:
        return future.result(timeout=timeout)
    except concurrent.futures.TimeoutError:
        raise ToolTimeoutError(tool, project, timeout)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


def run_tool(tool: BaseTool, project_root: Path, timeout: Optional[float] = None) -> dict[str, Diagnostic]:
    """Run one adapter, wrapping any failure in ToolExecutionError."""
    try:
        return run_with_timeout(lambda: tool.run(project_root), timeout, tool.name, project_root)
    except ToolExecutionError:
        raise
    except Exception as e:
        raise ToolExecutionError(tool.name, project_root, f"{type(e).__name__}: {e}") from e


def measure_size(size_tool: SizeTool, project_root: Path, timeout: Optional[float] = None) -> int:
    try:
        return int(
            run_with_timeout(
                lambda: size_tool.lines_of_code(project_root), timeout, size_tool.name, project_root
            )
        )
    except ToolExecutionError:
        raise
    except Exception as e:
        raise ToolExecutionError(size_tool.name, project_root, f"{type(e).__name__}: {e}") from e


def diagnostics_from_mapping(counts: Mapping[str, Iterable[Any]], tool: Optional[str] = None) -> dict[str, Diagnostic]:
    """Build diagnostics from ``{name: iterable of Finding}``."""
    return {name: Diagnostic(name, tool=tool, findings=findings) for name, findings in counts.items()}

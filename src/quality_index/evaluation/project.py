"""Project: one evaluation session over a cloned quality model."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Sequence

from ..analysis.tools import BaseTool, SizeTool, measure_size, run_tool
from ..exceptions import MissingCalibrationError, ToolExecutionError
from ..logging_config import get_logger
from ..model.findings import Diagnostic
from ..model.quality_model import QualityModel
from ..model.strategies import EvaluationContext

logger = get_logger(__name__)


@dataclass
class ToolFailure:
    """A tool adapter (or size tool) that failed on one project."""

    project: str
    tool: str
    reason: str
    provides: Optional[frozenset[str]] = None


@dataclass
class NodeValues:
    """Values computed during the last evaluation, per tree level."""

    measures: dict[str, float] = field(default_factory=dict)
    product_factors: dict[str, float] = field(default_factory=dict)
    quality_aspects: dict[str, float] = field(default_factory=dict)
    tqi: Optional[float] = None


class Project:
    """A single analysis target bound to its own copy of the quality model.

    Args:
        name: Project name (used for export file names)
        path: Project root handed to the tool adapters
        model: Prototype quality model; the project evaluates a clone of it
    """

    def __init__(self, name: str, path: Optional[Path], model: QualityModel):
        self.name = name
        self.path = Path(path) if path is not None else None
        self.quality_model = model.clone()
        self.lines_of_code = 0
        self.failures: list[ToolFailure] = []
        self.values = NodeValues()
        self._merge_lock = threading.Lock()
        self._diagnostic_index = self.quality_model.diagnostic_index()

    @property
    def context(self) -> EvaluationContext:
        return EvaluationContext(lines_of_code=self.lines_of_code)

    # ── Preconditions ─────────────────────────────────────────────────

    def validate_calibration(self) -> None:
        """Raise MissingCalibrationError listing every uncalibrated node.

        Structural problems (empty inner nodes, bad weight maps) surface
        first as ModelStructureError or WeightMismatchError.
        """
        self.quality_model.validate_structure()
        problems = self.quality_model.missing_calibration()
        if problems:
            raise MissingCalibrationError(problems)

    # ── Diagnostic merge ──────────────────────────────────────────────

    def merge_diagnostics(self, tool_results: Mapping[str, Diagnostic]) -> set[str]:
        """Replace the findings of every model diagnostic matching a result by name.

        Results without a matching model diagnostic are dropped. Returns the
        names that matched.
        """
        matched: set[str] = set()
        with self._merge_lock:
            for name, incoming in tool_results.items():
                targets = self._diagnostic_index.get(name)
                if not targets:
                    logger.debug(f"{self.name}: dropping diagnostic '{name}' (not in model)")
                    continue
                for diagnostic in targets:
                    diagnostic.set_findings(incoming.findings)
                matched.add(name)
        return matched

    # ── Tool execution ────────────────────────────────────────────────

    def run_tools(
        self,
        tools: Sequence[BaseTool],
        size_tool: Optional[SizeTool] = None,
        timeout: Optional[float] = None,
        parallel: bool = False,
        raise_on_failure: bool = True,
    ) -> list[ToolFailure]:
        """Run every adapter on the project root and merge its diagnostics.

        Failures are recorded on ``self.failures``. With ``raise_on_failure``
        the first failure is re-raised after all tools have finished.
        """
        if self.path is None:
            raise ToolExecutionError("project", Path("."), "project has no path to analyze")

        errors: list[ToolExecutionError] = []

        def _run(tool: BaseTool) -> None:
            try:
                results = run_tool(tool, self.path, timeout)
            except ToolExecutionError as e:
                logger.warning(f"{self.name}: {e}")
                self._record_failure(tool.name, e.reason, tool.provides)
                errors.append(e)
                return
            self.merge_diagnostics(results)

        if parallel and len(tools) > 1:
            with ThreadPoolExecutor(max_workers=len(tools)) as executor:
                for future in as_completed([executor.submit(_run, t) for t in tools]):
                    future.result()
        else:
            for tool in tools:
                _run(tool)

        if size_tool is not None:
            try:
                self.lines_of_code = measure_size(size_tool, self.path, timeout)
            except ToolExecutionError as e:
                logger.warning(f"{self.name}: {e}")
                self._record_failure(size_tool.name, e.reason, None)
                errors.append(e)

        if errors and raise_on_failure:
            raise errors[0]
        return list(self.failures)

    def _record_failure(self, tool: str, reason: str, provides: Optional[frozenset[str]]) -> None:
        with self._merge_lock:
            self.failures.append(ToolFailure(self.name, tool, reason, provides))

    # ── Evaluation, bottom-up ─────────────────────────────────────────

    def evaluate_measures(self) -> dict[str, float]:
        ctx = self.context
        self.values.measures = {
            name: m.value(ctx) for name, m in self.quality_model.measures.items()
        }
        return self.values.measures

    def evaluate_product_factors(self) -> dict[str, float]:
        ctx = self.context
        self.values.product_factors = {
            name: f.value(ctx) for name, f in self.quality_model.product_factors.items()
        }
        return self.values.product_factors

    def evaluate_quality_aspects(self) -> dict[str, float]:
        ctx = self.context
        self.values.quality_aspects = {
            name: a.value(ctx) for name, a in self.quality_model.quality_aspects.items()
        }
        return self.values.quality_aspects

    def evaluate_tqi(self) -> float:
        self.values.tqi = self.quality_model.tqi.value(self.context)
        return self.values.tqi

    def evaluate(self) -> float:
        """Validate calibration, then evaluate every level and return the TQI."""
        self.validate_calibration()
        self.evaluate_measures()
        self.evaluate_product_factors()
        self.evaluate_quality_aspects()
        tqi = self.evaluate_tqi()
        logger.info(f"{self.name}: TQI = {tqi:.4f}")
        return tqi

    def __repr__(self) -> str:
        return f"Project({self.name!r}, loc={self.lines_of_code})"

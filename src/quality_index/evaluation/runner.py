"""Single-project and batch evaluation entry points."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

from ..analysis.tools import BaseTool, SizeTool
from ..config import DEFAULT_CONFIG, CalibrationConfig
from ..exceptions import InvalidPathError, QualityIndexError
from ..logging_config import get_logger
from ..model.descriptor import load_model
from ..model.quality_model import QualityModel
from .export import export_results
from .project import Project

logger = get_logger(__name__)


class SingleProjectEvaluator:
    """Evaluate one project against a fully calibrated quality model.

    Steps: validate inputs, clone the model into a Project, check that every
    node has its calibration constants, run the tools, merge diagnostics,
    evaluate Measures -> ProductFactors -> QualityAspects -> TQI, export.
    """

    def __init__(self, config: Optional[CalibrationConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def run(
        self,
        project_dir: Path,
        results_dir: Path,
        model_path: Path,
        tools: Sequence[BaseTool],
        size_tool: Optional[SizeTool] = None,
    ) -> Path:
        """Evaluate ``project_dir`` and return the path of the exported results."""
        project_dir, results_dir, model_path = self.initialize(project_dir, results_dir, model_path)
        model = load_model(model_path)
        project = self.evaluate(project_dir, model, tools, size_tool)
        return export_results(project, results_dir)

    def initialize(self, project_dir: Path, results_dir: Path, model_path: Path) -> tuple[Path, Path, Path]:
        """Check inputs exist and create the results directory."""
        project_dir, results_dir, model_path = Path(project_dir), Path(results_dir), Path(model_path)
        if not project_dir.is_dir():
            raise InvalidPathError(project_dir, "project directory does not exist")
        if not model_path.is_file():
            raise InvalidPathError(model_path, "quality model descriptor does not exist")
        results_dir.mkdir(parents=True, exist_ok=True)
        return project_dir, results_dir, model_path

    def evaluate(
        self,
        project_dir: Path,
        model: QualityModel,
        tools: Sequence[BaseTool],
        size_tool: Optional[SizeTool] = None,
        name: Optional[str] = None,
    ) -> Project:
        project = Project(name or Path(project_dir).name, project_dir, model)
        project.validate_calibration()
        project.run_tools(
            tools,
            size_tool,
            timeout=self.config.tool_timeout_seconds,
            parallel=self.config.parallel_tools,
        )
        project.evaluate()
        return project


@dataclass
class BatchOutcome:
    """Result of one project in a batch: an export path or the error that stopped it."""

    project_dir: Path
    result_path: Optional[Path] = None
    error: Optional[QualityIndexError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def evaluate_batch(
    project_dirs: Iterable[Path],
    results_dir: Path,
    model: QualityModel,
    tools: Sequence[BaseTool],
    size_tool: Optional[SizeTool] = None,
    config: Optional[CalibrationConfig] = None,
) -> list[BatchOutcome]:
    """Evaluate several projects; a failing project does not stop the others."""
    evaluator = SingleProjectEvaluator(config)
    outcomes: list[BatchOutcome] = []
    for project_dir in project_dirs:
        project_dir = Path(project_dir)
        try:
            project = evaluator.evaluate(project_dir, model, tools, size_tool)
            outcomes.append(BatchOutcome(project_dir, export_results(project, results_dir)))
        except QualityIndexError as e:
            logger.error(f"Evaluation of {project_dir} aborted: {e}")
            outcomes.append(BatchOutcome(project_dir, error=e))
    return outcomes

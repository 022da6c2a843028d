"""Benchmarker: derive per-measure bounds from a corpus of reference projects.

Every corpus project is analysed in isolation (its own Project clone, its
own tool run, its own size metric). Projects run on a thread pool; each
worker returns a partial sample and the samples are reduced once all
workers finish, so nothing mutable is shared between workers.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from ..analysis.discovery import discover_projects
from ..analysis.tools import BaseTool, SizeTool
from ..config import DEFAULT_CONFIG, CalibrationConfig
from ..exceptions import CalibrationInputError, EvaluationError
from ..evaluation.project import Project, ToolFailure
from ..logging_config import get_logger
from ..model.nodes import Measure
from ..model.quality_model import QualityModel
from ..model.strategies import EvaluationContext, MinMaxNormalizer, SizeNormalizer
from .bounds import bound_strategy_from_config
from .models import BenchmarkResult

logger = get_logger(__name__)


def observed_value(measure: Measure, context: EvaluationContext) -> float:
    """Value of ``measure`` on the scale its bounds are expressed in.

    A min-max normalizer is skipped (its bounds are what is being derived);
    its per-size step still applies.
    """
    normalizer = measure.normalizer
    if isinstance(normalizer, MinMaxNormalizer):
        raw = measure.raw_value()
        if normalizer.per_size is None:
            return raw
        return SizeNormalizer(normalizer.per_size).normalize(raw, context)
    return measure.value(context)


@dataclass
class _ProjectSample:
    project: str
    values: dict[str, float] = field(default_factory=dict)
    failures: list[ToolFailure] = field(default_factory=list)


class Benchmarker:
    """Analyse a corpus and derive normalization bounds for every measure.

    Args:
        tools: Tool adapters run on each corpus project
        size_tool: Supplies each project's lines of code
        strategy: Bound strategy; defaults to the one named in ``config``
        config: Calibration settings (workers, timeouts, marker)
    """

    def __init__(
        self,
        tools: Sequence[BaseTool],
        size_tool: Optional[SizeTool] = None,
        strategy=None,
        config: Optional[CalibrationConfig] = None,
    ):
        self.tools = list(tools)
        self.size_tool = size_tool
        self.config = config or DEFAULT_CONFIG
        self.strategy = strategy or bound_strategy_from_config(self.config)

    def derive_bounds(
        self, corpus_root: Path, model: QualityModel, marker: Optional[str] = None
    ) -> BenchmarkResult:
        """Discover projects under ``corpus_root`` and benchmark them."""
        roots = discover_projects(corpus_root, marker or self.config.project_marker)
        return self.benchmark_projects(roots, model)

    def benchmark_projects(self, roots: Sequence[Path], model: QualityModel) -> BenchmarkResult:
        if not roots:
            raise CalibrationInputError(Path("."), "no benchmark projects given")

        logger.info(f"Beginning benchmark analysis of {len(roots)} projects")
        workers = self.config.workers or min(len(roots), os.cpu_count() or 1)

        if workers == 1:
            samples = [self._analyze_project(Path(root), model) for root in roots]
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                samples = list(executor.map(lambda r: self._analyze_project(Path(r), model), roots))

        return self._reduce(samples, model)

    def _analyze_project(self, root: Path, model: QualityModel) -> _ProjectSample:
        project = Project(root.name, root, model)
        sample = _ProjectSample(project=project.name)

        project.run_tools(
            self.tools,
            self.size_tool,
            timeout=self.config.tool_timeout_seconds,
            parallel=self.config.parallel_tools,
            raise_on_failure=False,
        )
        sample.failures.extend(project.failures)

        if any(f.provides is None for f in project.failures):
            logger.warning(f"Skipping {project.name}: a tool failed with unknown coverage")
            return sample

        lost: set[str] = set()
        for failure in project.failures:
            lost |= failure.provides or frozenset()
        excluded = project.quality_model.measures_using(lost)

        ctx = project.context
        for name, measure in project.quality_model.measures.items():
            if name in excluded:
                continue
            try:
                sample.values[name] = observed_value(measure, ctx)
            except EvaluationError as e:
                logger.warning(f"{project.name}: measure '{name}' skipped: {e}")
                sample.failures.append(ToolFailure(project.name, f"measure:{name}", e.reason))

        logger.info(f"Finished analyzing project {project.name} ({len(sample.values)} measures)")
        return sample

    def _reduce(self, samples: list[_ProjectSample], model: QualityModel) -> BenchmarkResult:
        observations: dict[str, list[float]] = {name: [] for name in model.measures}
        contributors: list[str] = []
        failures: list[ToolFailure] = []

        for sample in samples:
            failures.extend(sample.failures)
            if sample.values:
                contributors.append(sample.project)
            for name, value in sample.values.items():
                observations[name].append(value)

        bounds: dict[str, tuple[float, float]] = {}
        for name, values in observations.items():
            if not values:
                logger.warning(f"Measure '{name}' received no benchmark values")
                continue
            bounds[name] = self.strategy.derive(values)

        if failures:
            logger.warning(f"{len(failures)} tool failure(s) recorded during benchmarking")

        return BenchmarkResult(
            bounds=bounds,
            observations={k: v for k, v in observations.items() if v},
            projects=contributors,
            failures=failures,
            strategy=self.strategy.name,
        )

"""Calibration data: comparison matrices, weight results, benchmark results."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import numpy as np

from ..exceptions import DescriptorError


@dataclass
class ComparisonMatrix:
    """Pairwise preference ratios among the children of one node.

    ``values[i][j]`` says how much more important ``children[i]`` is than
    ``children[j]``.
    """

    node: str
    children: list[str]
    values: np.ndarray
    source: Optional[Path] = None

    @property
    def size(self) -> int:
        return len(self.children)

    @property
    def label(self) -> str:
        return str(self.source) if self.source is not None else self.node


@dataclass
class WeightResult:
    """Weights derived for one node's children, with the AHP consistency check."""

    name: str
    weights: dict[str, float]
    lambda_max: float = 0.0
    consistency_index: float = 0.0
    consistency_ratio: float = 0.0
    threshold: float = 0.1

    @property
    def consistent(self) -> bool:
        return self.consistency_ratio <= self.threshold

    @property
    def warning(self) -> Optional[str]:
        if self.consistent:
            return None
        return (
            f"Judgments for '{self.name}' are inconsistent: "
            f"CR={self.consistency_ratio:.3f} exceeds {self.threshold}"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "weights": self.weights,
            "lambda_max": self.lambda_max,
            "consistency_index": self.consistency_index,
            "consistency_ratio": self.consistency_ratio,
            "threshold": self.threshold,
            "consistent": self.consistent,
            "warning": self.warning,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WeightResult:
        return cls(
            name=data["name"],
            weights={k: float(v) for k, v in data["weights"].items()},
            lambda_max=data.get("lambda_max", 0.0),
            consistency_index=data.get("consistency_index", 0.0),
            consistency_ratio=data.get("consistency_ratio", 0.0),
            threshold=data.get("threshold", 0.1),
        )


@dataclass
class BenchmarkResult:
    """Per-measure bounds derived from a benchmark corpus.

    Attributes:
        bounds: Measure name -> (low, high)
        observations: Measure name -> normalized values that contributed
        projects: Names of projects that contributed at least one value
        failures: Tool failures recorded while analysing the corpus
        strategy: Name of the bound strategy used
    """

    bounds: dict[str, tuple[float, float]]
    observations: dict[str, list[float]] = field(default_factory=dict)
    projects: list[str] = field(default_factory=list)
    failures: list = field(default_factory=list)
    strategy: str = "naive"

    def to_dict(self) -> dict[str, Any]:
        return {
            "strategy": self.strategy,
            "bounds": {name: list(pair) for name, pair in self.bounds.items()},
            "observations": self.observations,
            "projects": self.projects,
            "failures": [
                {"project": f.project, "tool": f.tool, "reason": f.reason} for f in self.failures
            ],
        }


def save_weights(results: list[WeightResult], path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([r.to_dict() for r in results], f, indent=2)
    return path


def load_weights(path: Path) -> list[WeightResult]:
    try:
        with open(path, encoding="utf-8") as f:
            return [WeightResult.from_dict(entry) for entry in json.load(f)]
    except (OSError, json.JSONDecodeError, KeyError, TypeError) as e:
        raise DescriptorError(Path(path), f"unreadable weights file: {e}")


def save_bounds(result: BenchmarkResult, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(result.to_dict(), f, indent=2)
    return path


def load_bounds(path: Path) -> dict[str, tuple[float, float]]:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return {name: (float(pair[0]), float(pair[1])) for name, pair in data["bounds"].items()}
    except (OSError, json.JSONDecodeError, KeyError, TypeError, IndexError) as e:
        raise DescriptorError(Path(path), f"unreadable bounds file: {e}")

"""Offline calibration: benchmark bounds and AHP weights."""

from .ahp import consistency, derive_weights, matrix_from_weights, principal_eigenvector
from .benchmarker import Benchmarker
from .bounds import (
    IsolationForestBounds,
    NaiveBounds,
    PercentileBounds,
    ZScoreBounds,
    bound_strategy_from_config,
)
from .merge import apply_bounds, apply_weights, calibrate
from .models import (
    BenchmarkResult,
    ComparisonMatrix,
    WeightResult,
    load_bounds,
    load_weights,
    save_bounds,
    save_weights,
)
from .weighter import elicit_weights, parse_name_order, read_comparison_matrix

__all__ = [
    "Benchmarker",
    "BenchmarkResult",
    "ComparisonMatrix",
    "WeightResult",
    "NaiveBounds",
    "PercentileBounds",
    "ZScoreBounds",
    "IsolationForestBounds",
    "bound_strategy_from_config",
    "apply_bounds",
    "apply_weights",
    "calibrate",
    "consistency",
    "derive_weights",
    "matrix_from_weights",
    "principal_eigenvector",
    "elicit_weights",
    "parse_name_order",
    "read_comparison_matrix",
    "load_bounds",
    "load_weights",
    "save_bounds",
    "save_weights",
]

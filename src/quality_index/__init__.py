"""
Quality Index - hierarchical software quality models

Aggregates static analysis findings bottom-up (Measure -> ProductFactor ->
QualityAspect -> TQI) into one quality index. Calibration happens offline:
benchmark bounds come from a corpus of reference projects, weights from
pairwise comparisons through the Analytic Hierarchy Process.
"""

__version__ = "0.1.0"

from .calibration import Benchmarker, apply_bounds, apply_weights, calibrate, elicit_weights
from .evaluation import Project, SingleProjectEvaluator, evaluate_batch
from .model import (
    Diagnostic,
    Finding,
    Measure,
    ProductFactor,
    QualityAspect,
    QualityModel,
    Tqi,
    load_model,
    save_model,
)

__all__ = [
    "QualityModel",  # Main entry point
    "Tqi",
    "QualityAspect",
    "ProductFactor",
    "Measure",
    "Diagnostic",
    "Finding",
    "load_model",
    "save_model",
    "Project",  # Evaluation
    "SingleProjectEvaluator",
    "evaluate_batch",
    "Benchmarker",  # Calibration
    "elicit_weights",
    "apply_bounds",
    "apply_weights",
    "calibrate",
]

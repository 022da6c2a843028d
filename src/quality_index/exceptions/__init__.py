"""Exception hierarchy for Quality Index."""

from .analysis import (
    AnalysisError,
    EvaluationError,
    ToolExecutionError,
    ToolTimeoutError,
)
from .base import QualityIndexError
from .config import (
    CalibrationInputError,
    ConfigurationError,
    DescriptorError,
    InvalidConfigError,
    InvalidPathError,
    MalformedMatrixError,
    MissingCalibrationError,
    ModelStructureError,
    WeightMismatchError,
)

__all__ = [
    "QualityIndexError",
    "AnalysisError",
    "EvaluationError",
    "ToolExecutionError",
    "ToolTimeoutError",
    "ConfigurationError",
    "CalibrationInputError",
    "DescriptorError",
    "InvalidConfigError",
    "InvalidPathError",
    "MalformedMatrixError",
    "MissingCalibrationError",
    "ModelStructureError",
    "WeightMismatchError",
]

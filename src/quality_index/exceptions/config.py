"""Configuration and calibration exceptions: paths, settings, model structure."""

from pathlib import Path
from typing import Any, Iterable, List, Optional

from .base import QualityIndexError


class ConfigurationError(QualityIndexError):
    """Base class for configuration-related errors."""

    pass


class InvalidPathError(ConfigurationError):
    """Raised when a provided path is invalid."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Invalid path: {path}", details={"path": str(path), "reason": reason})
        self.path = path
        self.reason = reason


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class CalibrationInputError(ConfigurationError):
    """Raised when a calibration input (directory, corpus) is missing or empty."""

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Unusable calibration input: {path}",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason


class ModelStructureError(ConfigurationError):
    """Raised when calibration data or a descriptor disagrees with the model structure."""

    def __init__(self, node: str, reason: str, source: Optional[Path] = None):
        details = {"node": node, "reason": reason}
        if source is not None:
            details["source"] = str(source)
        super().__init__(f"Model structure mismatch at node '{node}'", details=details)
        self.node = node
        self.reason = reason
        self.source = source


class MissingCalibrationError(ConfigurationError):
    """Raised when nodes lack the weights or thresholds needed for evaluation."""

    def __init__(self, nodes: Iterable[str]):
        self.nodes: List[str] = list(nodes)
        super().__init__(
            f"Quality model is missing calibration constants for {len(self.nodes)} node(s)",
            details={"nodes": ", ".join(self.nodes)},
        )


class WeightMismatchError(ConfigurationError):
    """Raised when a weight map does not cover exactly the node's children."""

    def __init__(self, node: str, missing: Iterable[str] = (), unexpected: Iterable[str] = ()):
        self.node = node
        self.missing = sorted(missing)
        self.unexpected = sorted(unexpected)
        details = {"node": node}
        if self.missing:
            details["unweighted_children"] = ", ".join(self.missing)
        if self.unexpected:
            details["unknown_weights"] = ", ".join(self.unexpected)
        super().__init__(f"Weights of '{node}' do not match its children", details=details)


class MalformedMatrixError(ConfigurationError):
    """Raised when a pairwise comparison matrix is unusable."""

    def __init__(self, source: str, reason: str):
        super().__init__(
            f"Malformed comparison matrix: {source}",
            details={"source": source, "reason": reason},
        )
        self.source = source
        self.reason = reason


class DescriptorError(ConfigurationError):
    """Raised when a quality model descriptor cannot be read or written."""

    def __init__(self, path: Optional[Path], reason: str):
        details = {"reason": reason}
        if path is not None:
            details["path"] = str(path)
        super().__init__("Invalid quality model descriptor", details=details)
        self.path = path
        self.reason = reason

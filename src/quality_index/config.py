"""Configuration loading and management for Quality Index.

Configuration sources are merged in priority order:
    1. Defaults (defined in CalibrationConfig)
    2. Global config (~/.quality-index.toml)
    3. Project config (./quality-index.toml)
    4. Explicit config file
    5. Environment variables (QINDEX_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(workers=4, bound_strategy="percentile")
    >>> config.workers
    4
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import InvalidConfigError, QualityIndexError

Verbosity = Literal["quiet", "normal", "verbose"]
BoundStrategyName = Literal["naive", "percentile", "zscore", "isolation_forest"]
BoundsTarget = Literal["thresholds", "normalizer"]

BOUND_STRATEGIES = ("naive", "percentile", "zscore", "isolation_forest")
BOUNDS_TARGETS = ("thresholds", "normalizer")


@dataclass(frozen=True)
class CalibrationConfig:
    """Settings shared by benchmarking, weight elicitation and evaluation.

    Attributes:
        Execution:
            workers: Worker threads for the benchmark corpus loop (None = auto)
            tool_timeout_seconds: Per tool invocation time limit
            parallel_tools: Run a project's tool adapters concurrently

        Weighting (AHP):
            weight_tolerance: Allowed deviation of a weight map's sum from 1.0
            consistency_threshold: Consistency ratio above which judgments warn
            ahp_tolerance: Eigenvector convergence tolerance
            ahp_max_iterations: Power iteration cap

        Benchmarking:
            bound_strategy: How per-Measure bounds are derived from corpus values
            percentile_low / percentile_high: Trim points for "percentile"
            zscore_limit: Clip distance (in standard deviations) for "zscore"
            contamination: Outlier share for "isolation_forest"
            bounds_target: Where derived bounds are merged into the model
            project_marker: File or directory name identifying a corpus project

        Output:
            verbosity: Logging verbosity level
    """

    workers: Optional[int] = None
    tool_timeout_seconds: float = 600.0
    parallel_tools: bool = False

    weight_tolerance: float = 1e-3
    consistency_threshold: float = 0.1
    ahp_tolerance: float = 1e-6
    ahp_max_iterations: int = 1000

    bound_strategy: BoundStrategyName = "naive"
    percentile_low: float = 5.0
    percentile_high: float = 95.0
    zscore_limit: float = 3.0
    contamination: float = 0.1
    bounds_target: BoundsTarget = "thresholds"
    project_marker: str = ".git"

    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.workers is not None and self.workers < 1:
            raise InvalidConfigError("workers", self.workers, "must be at least 1")
        if self.tool_timeout_seconds <= 0:
            raise InvalidConfigError(
                "tool_timeout_seconds", self.tool_timeout_seconds, "must be positive"
            )

        if not 0.0 < self.weight_tolerance < 1.0:
            raise InvalidConfigError(
                "weight_tolerance", self.weight_tolerance, "must be between 0.0 and 1.0"
            )
        if self.consistency_threshold <= 0:
            raise InvalidConfigError(
                "consistency_threshold", self.consistency_threshold, "must be positive"
            )
        if self.ahp_tolerance <= 0:
            raise InvalidConfigError("ahp_tolerance", self.ahp_tolerance, "must be positive")
        if self.ahp_max_iterations < 1:
            raise InvalidConfigError(
                "ahp_max_iterations", self.ahp_max_iterations, "must be at least 1"
            )

        if self.bound_strategy not in BOUND_STRATEGIES:
            raise InvalidConfigError(
                "bound_strategy", self.bound_strategy, f"expected one of {BOUND_STRATEGIES}"
            )
        if not 0.0 <= self.percentile_low < self.percentile_high <= 100.0:
            raise InvalidConfigError(
                "percentile_low",
                self.percentile_low,
                "need 0 <= percentile_low < percentile_high <= 100",
            )
        if self.zscore_limit <= 0:
            raise InvalidConfigError("zscore_limit", self.zscore_limit, "must be positive")
        if not 0.0 < self.contamination <= 0.5:
            raise InvalidConfigError(
                "contamination", self.contamination, "must be in (0.0, 0.5]"
            )
        if self.bounds_target not in BOUNDS_TARGETS:
            raise InvalidConfigError(
                "bounds_target", self.bounds_target, f"expected one of {BOUNDS_TARGETS}"
            )
        if not self.project_marker:
            raise InvalidConfigError("project_marker", self.project_marker, "must not be empty")


DEFAULT_CONFIG = CalibrationConfig()


def load_config(config_file: Optional[Path] = None, **overrides) -> CalibrationConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options keep lower-priority values.

    Returns:
        Validated CalibrationConfig instance

    Raises:
        QualityIndexError: If a config file is invalid or missing
        InvalidConfigError: If a value fails validation
    """
    merged: dict = {}

    global_config = Path.home() / ".quality-index.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except QualityIndexError:
            raise
        except Exception as e:
            raise QualityIndexError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "quality-index.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except QualityIndexError:
            raise
        except Exception as e:
            raise QualityIndexError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise QualityIndexError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except QualityIndexError:
            raise
        except Exception as e:
            raise QualityIndexError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return CalibrationConfig(**merged)
    except TypeError as e:
        raise QualityIndexError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from QINDEX_* environment variables.

    Every CalibrationConfig field maps to ``QINDEX_<FIELD_NAME>``, e.g.
    ``QINDEX_WORKERS=8`` or ``QINDEX_BOUND_STRATEGY=percentile``.
    """
    type_hints = get_type_hints(CalibrationConfig)

    result: dict[str, Any] = {}

    for field_name in CalibrationConfig.__dataclass_fields__:
        env_key = f"QINDEX_{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    A ``[quality_index]`` table is used when present, otherwise the
    top-level table.
    """
    try:
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise QualityIndexError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        data = tomllib.load(f)

    section = data.get("quality_index")
    return dict(section) if isinstance(section, dict) else data

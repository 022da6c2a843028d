"""Bound strategies: observed corpus values -> (low, high) per measure.

``NaiveBounds`` takes the literal minimum and maximum. The other strategies
discard outliers first, using the robust statistics the rest of the stack
relies on (numpy percentiles, z-scores, scikit-learn isolation forest).
"""

from __future__ import annotations

import statistics as stdlib_stats
from dataclasses import dataclass
from typing import ClassVar, Sequence

import numpy as np

from ..config import CalibrationConfig


def _require_values(values: Sequence[float]) -> None:
    if len(values) == 0:
        raise ValueError("cannot derive bounds from an empty value list")


@dataclass(frozen=True)
class NaiveBounds:
    """(min, max) of every observed value, no trimming."""

    name: ClassVar[str] = "naive"

    def derive(self, values: Sequence[float]) -> tuple[float, float]:
        _require_values(values)
        return float(min(values)), float(max(values))


@dataclass(frozen=True)
class PercentileBounds:
    """(p_low, p_high) percentiles with linear interpolation."""

    low: float = 5.0
    high: float = 95.0
    name: ClassVar[str] = "percentile"

    def derive(self, values: Sequence[float]) -> tuple[float, float]:
        _require_values(values)
        lo, hi = np.percentile(np.asarray(values, dtype=float), [self.low, self.high])
        return float(lo), float(hi)


@dataclass(frozen=True)
class ZScoreBounds:
    """(min, max) after dropping values more than ``limit`` standard deviations from the mean."""

    limit: float = 3.0
    name: ClassVar[str] = "zscore"

    def derive(self, values: Sequence[float]) -> tuple[float, float]:
        _require_values(values)
        if len(values) < 2:
            return NaiveBounds().derive(values)
        mean = stdlib_stats.mean(values)
        stdev = stdlib_stats.stdev(values)
        if stdev == 0:
            return NaiveBounds().derive(values)
        kept = [v for v in values if abs(v - mean) / stdev <= self.limit]
        return NaiveBounds().derive(kept)


@dataclass(frozen=True)
class IsolationForestBounds:
    """(min, max) of the values an isolation forest keeps as inliers.

    Needs at least ``min_samples`` observations; smaller corpora fall back to
    the naive bounds.
    """

    contamination: float = 0.1
    min_samples: int = 8
    random_state: int = 42
    name: ClassVar[str] = "isolation_forest"

    def derive(self, values: Sequence[float]) -> tuple[float, float]:
        _require_values(values)
        if len(values) < self.min_samples:
            return NaiveBounds().derive(values)

        from sklearn.ensemble import IsolationForest

        data = np.asarray(values, dtype=float).reshape(-1, 1)
        clf = IsolationForest(contamination=self.contamination, random_state=self.random_state)
        labels = clf.fit_predict(data)
        inliers = data[labels == 1].ravel()
        if inliers.size == 0:
            return NaiveBounds().derive(values)
        return float(inliers.min()), float(inliers.max())


def bound_strategy_from_config(config: CalibrationConfig):
    """Instantiate the strategy named by ``config.bound_strategy``."""
    if config.bound_strategy == "percentile":
        return PercentileBounds(config.percentile_low, config.percentile_high)
    if config.bound_strategy == "zscore":
        return ZScoreBounds(config.zscore_limit)
    if config.bound_strategy == "isolation_forest":
        return IsolationForestBounds(config.contamination)
    return NaiveBounds()

"""Pluggable strategies held in node slots.

Every strategy is a small frozen value object tagged with a ``kind`` so a
quality model descriptor can name it and recover it. Nodes own a slot per
concern (evaluator, normalizer, utility, combinator) instead of overriding
behaviour in subclasses.

Polarity is declared per ProductFactor; nothing here infers it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Mapping, Optional, Sequence

import numpy as np

from ..exceptions import DescriptorError, EvaluationError

if TYPE_CHECKING:
    from .findings import Diagnostic


class Polarity(Enum):
    """Direction in which a normalized measure value improves quality."""

    HIGHER_IS_BETTER = "higher_is_better"
    HIGHER_IS_WORSE = "higher_is_worse"


@dataclass(frozen=True)
class EvaluationContext:
    """Project facts available to normalizers."""

    lines_of_code: int = 0
    extra: Mapping[str, float] = field(default_factory=dict)


# ── Evaluators: diagnostics -> raw value ──────────────────────────────


@dataclass(frozen=True)
class FindingCountEvaluator:
    """Total number of findings across the diagnostics (absent counts zero)."""

    kind: ClassVar[str] = "finding_count"

    def evaluate(self, diagnostics: Sequence[Diagnostic]) -> float:
        return float(sum(d.count for d in diagnostics))


@dataclass(frozen=True)
class SeveritySumEvaluator:
    """Sum of finding severities across the diagnostics."""

    kind: ClassVar[str] = "severity_sum"

    def evaluate(self, diagnostics: Sequence[Diagnostic]) -> float:
        return float(sum(f.severity for d in diagnostics for f in d.findings))


@dataclass(frozen=True)
class CallableEvaluator:
    """Wrap an arbitrary function. Usable in code, not serializable."""

    func: Callable[[Sequence["Diagnostic"]], float]
    kind: ClassVar[str] = "callable"

    def evaluate(self, diagnostics: Sequence[Diagnostic]) -> float:
        return float(self.func(diagnostics))


# ── Normalizers: raw value + context -> normalized value ──────────────


@dataclass(frozen=True)
class IdentityNormalizer:
    """Leave the raw value untouched; needs no context."""

    kind: ClassVar[str] = "identity"

    def normalize(self, raw: float, context: EvaluationContext) -> float:
        return raw


@dataclass(frozen=True)
class SizeNormalizer:
    """Raw value per ``scale`` lines of code (e.g. scale=1000 for per-KLOC)."""

    scale: float = 1.0
    kind: ClassVar[str] = "per_size"

    def normalize(self, raw: float, context: EvaluationContext) -> float:
        if raw == 0:
            return 0.0
        if context.lines_of_code <= 0:
            raise EvaluationError(
                "per_size normalizer", f"size metric must be positive, got {context.lines_of_code}"
            )
        return raw * self.scale / context.lines_of_code


@dataclass(frozen=True)
class MinMaxNormalizer:
    """Rescale into [0, 1] using calibrated bounds; values outside are clipped.

    With ``per_size`` set, the raw value is first taken per ``per_size``
    lines of code, so bounds benchmarked on size-normalized values apply.
    """

    lower: Optional[float] = None
    upper: Optional[float] = None
    per_size: Optional[float] = None
    kind: ClassVar[str] = "min_max"

    @property
    def is_calibrated(self) -> bool:
        return self.lower is not None and self.upper is not None

    def normalize(self, raw: float, context: EvaluationContext) -> float:
        if not self.is_calibrated:
            raise EvaluationError("min_max normalizer", "bounds are not calibrated")
        if self.per_size is not None:
            raw = SizeNormalizer(self.per_size).normalize(raw, context)
        span = self.upper - self.lower
        if span <= 0:
            return 0.0
        return float(np.clip((raw - self.lower) / span, 0.0, 1.0))


# ── Utility: normalized value -> [0, 1] ───────────────────────────────


def _interpolate(value: float, start: float, end: float, low_score: float, high_score: float) -> float:
    if end <= start:
        return high_score
    return low_score + (high_score - low_score) * (value - start) / (end - start)


@dataclass(frozen=True)
class ThresholdUtility:
    """Piecewise-linear utility over ``[low, mid, high]``.

    value <= low -> 0, low..mid -> [0, 0.5], mid..high -> [0.5, 1],
    value >= high -> 1; mirrored for HIGHER_IS_WORSE.
    """

    kind: ClassVar[str] = "threshold"

    def score(self, value: float, thresholds: Sequence[float], polarity: Polarity) -> float:
        low, mid, high = thresholds
        if value <= low:
            utility = 0.0
        elif value >= high:
            utility = 1.0
        elif value < mid:
            utility = _interpolate(value, low, mid, 0.0, 0.5)
        else:
            utility = _interpolate(value, mid, high, 0.5, 1.0)

        if polarity is Polarity.HIGHER_IS_WORSE:
            return 1.0 - utility
        return utility


# ── Combinators for multi-measure product factors ─────────────────────

COMBINE_AFTER = "after"
COMBINE_BEFORE = "before"

_REDUCERS: dict[str, Callable[[Sequence[float]], float]] = {
    "mean": lambda values: float(np.mean(values)),
    "min": lambda values: float(min(values)),
    "max": lambda values: float(max(values)),
}


@dataclass(frozen=True)
class Combinator:
    """Reduce several measure values to one.

    ``stage="after"`` thresholds each measure and combines the utilities;
    ``stage="before"`` combines normalized values and thresholds once.
    """

    method: str = "mean"
    stage: str = COMBINE_AFTER
    kind: ClassVar[str] = "combinator"

    def __post_init__(self) -> None:
        if self.method not in _REDUCERS:
            raise ValueError(f"unknown combinator method '{self.method}'")
        if self.stage not in (COMBINE_AFTER, COMBINE_BEFORE):
            raise ValueError(f"combinator stage must be 'after' or 'before', got '{self.stage}'")

    def combine(self, values: Sequence[float]) -> float:
        return _REDUCERS[self.method](values)


# ── Descriptor round-trip ─────────────────────────────────────────────

EVALUATORS = {cls.kind: cls for cls in (FindingCountEvaluator, SeveritySumEvaluator)}
NORMALIZERS = {cls.kind: cls for cls in (IdentityNormalizer, SizeNormalizer, MinMaxNormalizer)}
UTILITIES = {cls.kind: cls for cls in (ThresholdUtility,)}


def strategy_to_dict(strategy: Any) -> dict[str, Any]:
    """Serialize a registered strategy as ``{"kind": ..., **params}``."""
    if isinstance(strategy, CallableEvaluator):
        raise DescriptorError(None, "callable evaluators cannot be serialized")
    if isinstance(strategy, Combinator):
        return asdict(strategy)
    return {"kind": strategy.kind, **asdict(strategy)}


def strategy_from_dict(data: Mapping[str, Any], registry: Mapping[str, type]) -> Any:
    """Recover a strategy from its tagged dict using ``registry``."""
    params = dict(data)
    kind = params.pop("kind", None)
    if kind not in registry:
        raise DescriptorError(None, f"unknown strategy kind '{kind}', expected one of {sorted(registry)}")
    cls = registry[kind]
    known = {f.name for f in fields(cls)}
    unknown = set(params) - known
    if unknown:
        raise DescriptorError(None, f"unexpected parameters for '{kind}': {sorted(unknown)}")
    return cls(**params)

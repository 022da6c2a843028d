"""Quality model tree nodes.

Measure -> ProductFactor -> QualityAspect -> Tqi. Every node recomputes its
value from its children on each ``value()`` call; nothing is memoized, so a
read always reflects the current diagnostic state.
"""

from __future__ import annotations

import math
from typing import Iterable, Mapping, Optional, Sequence

from ..exceptions import (
    EvaluationError,
    MissingCalibrationError,
    ModelStructureError,
    WeightMismatchError,
)
from .findings import Diagnostic
from .strategies import (
    COMBINE_BEFORE,
    Combinator,
    EvaluationContext,
    FindingCountEvaluator,
    IdentityNormalizer,
    Polarity,
    ThresholdUtility,
)


class ModelNode:
    """Named node of the quality model."""

    level = "node"

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description

    def value(self, context: EvaluationContext) -> float:
        raise NotImplementedError

    def missing_calibration(self) -> list[str]:
        """Reasons this node cannot be evaluated yet (empty when calibrated)."""
        return []

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class Measure(ModelNode):
    """Aggregates diagnostics into one normalized scalar."""

    level = "measure"

    def __init__(
        self,
        name: str,
        description: str = "",
        diagnostics: Iterable[Diagnostic] = (),
        evaluator=None,
        normalizer=None,
    ):
        super().__init__(name, description)
        self.diagnostics: list[Diagnostic] = list(diagnostics)
        self.evaluator = evaluator or FindingCountEvaluator()
        self.normalizer = normalizer or IdentityNormalizer()

    @property
    def is_observed(self) -> bool:
        return any(d.has_run for d in self.diagnostics)

    def raw_value(self) -> float:
        return self.evaluator.evaluate(self.diagnostics)

    def value(self, context: EvaluationContext) -> float:
        return self.normalizer.normalize(self.raw_value(), context)

    def num_findings(self) -> int:
        return sum(d.count for d in self.diagnostics)

    def missing_calibration(self) -> list[str]:
        if getattr(self.normalizer, "is_calibrated", True):
            return []
        return [f"measure '{self.name}' has an uncalibrated {self.normalizer.kind} normalizer"]


def _check_thresholds(thresholds: Sequence[float]) -> list[float]:
    values = [float(t) for t in thresholds]
    if len(values) != 3:
        raise ValueError(f"thresholds need exactly 3 entries, got {len(values)}")
    if any(math.isnan(v) for v in values):
        raise ValueError("thresholds must not contain NaN")
    if not values[0] <= values[1] <= values[2]:
        raise ValueError(f"thresholds must be ascending, got {values}")
    return values


class ProductFactor(ModelNode):
    """Maps measure values through thresholds into a [0, 1] utility."""

    level = "product_factor"

    def __init__(
        self,
        name: str,
        description: str = "",
        measures: Iterable[Measure] = (),
        thresholds: Optional[Sequence[float]] = None,
        polarity: Polarity = Polarity.HIGHER_IS_BETTER,
        utility=None,
        combinator: Optional[Combinator] = None,
    ):
        super().__init__(name, description)
        self.measures: dict[str, Measure] = {m.name: m for m in measures}
        self.thresholds: Optional[list[float]] = None
        if thresholds is not None:
            self.set_thresholds(thresholds)
        self.polarity = polarity
        self.utility = utility or ThresholdUtility()
        self.combinator = combinator or Combinator()

    def set_thresholds(self, thresholds: Sequence[float]) -> None:
        self.thresholds = _check_thresholds(thresholds)

    def utility_of(self, normalized: float) -> float:
        if self.thresholds is None:
            raise MissingCalibrationError([self.name])
        return self.utility.score(normalized, self.thresholds, self.polarity)

    def value(self, context: EvaluationContext) -> float:
        if not self.measures:
            raise EvaluationError(self.name, "product factor has no measures")
        normalized = [m.value(context) for m in self.measures.values()]
        if len(normalized) == 1:
            return self.utility_of(normalized[0])
        if self.combinator.stage == COMBINE_BEFORE:
            return self.utility_of(self.combinator.combine(normalized))
        return self.combinator.combine([self.utility_of(v) for v in normalized])

    def missing_calibration(self) -> list[str]:
        if self.thresholds is None:
            return [f"product factor '{self.name}' has no thresholds"]
        return []

    def _identity(self) -> tuple[str, frozenset[str]]:
        return self.name, frozenset(self.measures)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProductFactor):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())


WEIGHT_TOLERANCE = 1e-3


def check_weight_map(
    name: str,
    children: Iterable[str],
    weights: Mapping[str, float],
    tolerance: float = WEIGHT_TOLERANCE,
) -> None:
    """Raise unless ``weights`` covers ``children`` exactly with a non-negative unit sum.

    Raises:
        WeightMismatchError: Weight keys differ from the children
        ModelStructureError: Negative weights, or a sum off 1 by more than ``tolerance``
    """
    children = set(children)
    missing = children - set(weights)
    unexpected = set(weights) - children
    if missing or unexpected:
        raise WeightMismatchError(name, missing, unexpected)
    if any(w < 0 for w in weights.values()):
        raise ModelStructureError(name, "weights must be non-negative")
    total = sum(weights.values())
    if abs(total - 1.0) > tolerance:
        raise ModelStructureError(name, f"weights sum to {total:.6f}, expected 1.0")


class WeightedNode(ModelNode):
    """Weighted sum over named children."""

    def __init__(
        self,
        name: str,
        description: str = "",
        children: Iterable[ModelNode] = (),
        weights: Optional[Mapping[str, float]] = None,
    ):
        super().__init__(name, description)
        self.children: dict[str, ModelNode] = {c.name: c for c in children}
        self.weights: Optional[dict[str, float]] = dict(weights) if weights is not None else None

    def check_weights(self, tolerance: float = WEIGHT_TOLERANCE) -> None:
        """Fail fast unless every child has exactly one weight and they sum to 1."""
        if self.weights is None:
            raise MissingCalibrationError([self.name])
        check_weight_map(self.name, self.children, self.weights, tolerance)

    def value(self, context: EvaluationContext) -> float:
        self.check_weights()
        return sum(self.weights[name] * child.value(context) for name, child in self.children.items())

    def missing_calibration(self) -> list[str]:
        if self.weights is None:
            return [f"{self.level.replace('_', ' ')} '{self.name}' has no weights"]
        return []


class QualityAspect(WeightedNode):
    """Weighted aggregation of product factors."""

    level = "quality_aspect"

    @property
    def product_factors(self) -> dict[str, ProductFactor]:
        return self.children  # type: ignore[return-value]


class Tqi(WeightedNode):
    """Root of the tree; its value is the total quality index."""

    level = "tqi"

    @property
    def quality_aspects(self) -> dict[str, QualityAspect]:
        return self.children  # type: ignore[return-value]

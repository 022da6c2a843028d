"""Merge calibration output (bounds, weights) into a quality model."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

from ..exceptions import ModelStructureError
from ..logging_config import get_logger
from ..model.nodes import WeightedNode, check_weight_map
from ..model.quality_model import QualityModel
from ..model.strategies import IdentityNormalizer, MinMaxNormalizer, SizeNormalizer
from .models import WeightResult

logger = get_logger(__name__)


def apply_weights(
    model: QualityModel, results: Iterable[WeightResult], tolerance: float = 1e-3
) -> None:
    """Install weight maps on the TQI and quality aspects, in place.

    Raises:
        ModelStructureError: Unknown or unweighted node, negative weights,
            or weights not summing to 1 within ``tolerance``
        WeightMismatchError: Weight keys differ from the node's children
    """
    for result in results:
        node = model.node(result.name)
        if node is None:
            raise ModelStructureError(result.name, "node is not part of the quality model")
        if not isinstance(node, WeightedNode):
            raise ModelStructureError(result.name, f"{node.level} nodes do not take weights")

        check_weight_map(result.name, node.children, result.weights, tolerance)

        node.weights = dict(result.weights)
        if result.warning:
            logger.warning(f"Applying weights despite inconsistency: {result.warning}")


def apply_bounds(
    model: QualityModel,
    bounds: Mapping[str, tuple[float, float]],
    target: str = "thresholds",
) -> None:
    """Install benchmark bounds in place.

    ``thresholds``: each product factor gets ``[low, (low + high) / 2, high]``
    from the envelope of its measures' bounds.
    ``normalizer``: each measure gets a min-max normalizer over its bounds.

    Bounds are observed before min-max scaling, so they cannot become
    thresholds of a factor whose bounded measures are min-max normalized.
    """
    unknown = set(bounds) - set(model.measures)
    if unknown:
        raise ModelStructureError(sorted(unknown)[0], "bounds given for a measure not in the model")

    if target == "thresholds":
        for factor in model.product_factors.values():
            scaled = sorted(
                name
                for name, measure in factor.measures.items()
                if name in bounds and isinstance(measure.normalizer, MinMaxNormalizer)
            )
            if scaled:
                raise ModelStructureError(
                    factor.name,
                    f"measures {scaled} use a min_max normalizer; their bounds are on the "
                    "raw scale, use the 'normalizer' target instead",
                )
        for factor in model.product_factors.values():
            pairs = [bounds[m] for m in factor.measures if m in bounds]
            if not pairs:
                logger.warning(f"No bounds for any measure of '{factor.name}'; thresholds unchanged")
                continue
            low = min(p[0] for p in pairs)
            high = max(p[1] for p in pairs)
            factor.set_thresholds([low, (low + high) / 2.0, high])
    elif target == "normalizer":
        for name, (low, high) in bounds.items():
            measure = model.measures[name]
            measure.normalizer = _min_max_for(measure.name, measure.normalizer, low, high)
    else:
        raise ValueError(f"unknown bounds target '{target}'")


def _min_max_for(name: str, current, low: float, high: float) -> MinMaxNormalizer:
    if isinstance(current, IdentityNormalizer):
        return MinMaxNormalizer(low, high)
    if isinstance(current, SizeNormalizer):
        return MinMaxNormalizer(low, high, per_size=current.scale)
    if isinstance(current, MinMaxNormalizer):
        return MinMaxNormalizer(low, high, per_size=current.per_size)
    raise ModelStructureError(name, f"cannot attach bounds to a '{current.kind}' normalizer")


def calibrate(
    model: QualityModel,
    bounds: Optional[Mapping[str, tuple[float, float]]] = None,
    weights: Optional[Iterable[WeightResult]] = None,
    target: str = "thresholds",
    tolerance: float = 1e-3,
) -> QualityModel:
    """Return a calibrated copy of ``model``; the input is left untouched."""
    calibrated = model.clone()
    if bounds is not None:
        apply_bounds(calibrated, bounds, target)
    if weights is not None:
        apply_weights(calibrated, weights, tolerance)
    return calibrated

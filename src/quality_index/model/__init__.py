"""Quality model tree, strategies and descriptors."""

from .descriptor import load_model, model_from_dict, model_to_dict, save_model
from .findings import Diagnostic, Finding
from .nodes import Measure, ModelNode, ProductFactor, QualityAspect, Tqi, WeightedNode
from .quality_model import QualityModel
from .strategies import (
    CallableEvaluator,
    Combinator,
    EvaluationContext,
    FindingCountEvaluator,
    IdentityNormalizer,
    MinMaxNormalizer,
    Polarity,
    SeveritySumEvaluator,
    SizeNormalizer,
    ThresholdUtility,
)

__all__ = [
    "Finding",
    "Diagnostic",
    "ModelNode",
    "Measure",
    "ProductFactor",
    "WeightedNode",
    "QualityAspect",
    "Tqi",
    "QualityModel",
    "EvaluationContext",
    "Polarity",
    "FindingCountEvaluator",
    "SeveritySumEvaluator",
    "CallableEvaluator",
    "IdentityNormalizer",
    "SizeNormalizer",
    "MinMaxNormalizer",
    "ThresholdUtility",
    "Combinator",
    "load_model",
    "save_model",
    "model_to_dict",
    "model_from_dict",
]

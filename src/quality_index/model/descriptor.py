"""JSON quality model descriptors.

Layout::

    {
      "name": "...", "description": "...",
      "tqi": {"name": "TQI", "description": "", "weights": {...} | null},
      "quality_aspects": [{"name", "description", "weights", "product_factors": [...]}],
      "product_factors": [{"name", "description", "measures": [...], "thresholds",
                           "polarity", "utility": {...}, "combinator": {...}}],
      "measures": [{"name", "description", "diagnostics": [{"name", "description", "tool"}],
                    "evaluator": {...}, "normalizer": {...}}]
    }

Every field of the in-memory model survives a save/load round trip.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from ..exceptions import DescriptorError, ModelStructureError
from ..logging_config import get_logger
from .findings import Diagnostic
from .nodes import Measure, ProductFactor, QualityAspect, Tqi
from .quality_model import QualityModel
from .strategies import (
    EVALUATORS,
    NORMALIZERS,
    UTILITIES,
    Combinator,
    Polarity,
    strategy_from_dict,
    strategy_to_dict,
)

logger = get_logger(__name__)


def model_to_dict(model: QualityModel) -> dict[str, Any]:
    return {
        "name": model.name,
        "description": model.description,
        "tqi": {
            "name": model.tqi.name,
            "description": model.tqi.description,
            "weights": model.tqi.weights,
        },
        "quality_aspects": [
            {
                "name": a.name,
                "description": a.description,
                "weights": a.weights,
                "product_factors": list(a.children),
            }
            for a in model.quality_aspects.values()
        ],
        "product_factors": [
            {
                "name": f.name,
                "description": f.description,
                "measures": list(f.measures),
                "thresholds": f.thresholds,
                "polarity": f.polarity.value,
                "utility": strategy_to_dict(f.utility),
                "combinator": strategy_to_dict(f.combinator),
            }
            for f in model.product_factors.values()
        ],
        "measures": [
            {
                "name": m.name,
                "description": m.description,
                "diagnostics": [
                    {"name": d.name, "description": d.description, "tool": d.tool}
                    for d in m.diagnostics
                ],
                "evaluator": strategy_to_dict(m.evaluator),
                "normalizer": strategy_to_dict(m.normalizer),
            }
            for m in model.measures.values()
        ],
    }


def model_from_dict(data: Mapping[str, Any]) -> QualityModel:
    """Build a QualityModel from its descriptor dict.

    Raises:
        DescriptorError: Missing keys or unknown strategy kinds
        ModelStructureError: References to undeclared nodes, empty inner nodes
            or weight maps that are negative or do not sum to 1
        WeightMismatchError: Weight keys differ from the node's children
    """
    try:
        measures = {}
        for entry in data.get("measures", []):
            measure = Measure(
                entry["name"],
                entry.get("description", ""),
                diagnostics=[
                    Diagnostic(d["name"], d.get("description", ""), d.get("tool"))
                    for d in entry.get("diagnostics", [])
                ],
                evaluator=strategy_from_dict(
                    entry.get("evaluator", {"kind": "finding_count"}), EVALUATORS
                ),
                normalizer=strategy_from_dict(
                    entry.get("normalizer", {"kind": "identity"}), NORMALIZERS
                ),
            )
            _add_unique(measures, measure)

        factors = {}
        for entry in data.get("product_factors", []):
            factor = ProductFactor(
                entry["name"],
                entry.get("description", ""),
                measures=[_resolve(measures, n, entry["name"]) for n in entry["measures"]],
                thresholds=entry.get("thresholds"),
                polarity=Polarity(entry.get("polarity", Polarity.HIGHER_IS_BETTER.value)),
                utility=strategy_from_dict(entry.get("utility", {"kind": "threshold"}), UTILITIES),
                combinator=Combinator(**entry.get("combinator", {})),
            )
            _add_unique(factors, factor)

        aspects = {}
        for entry in data.get("quality_aspects", []):
            aspect = QualityAspect(
                entry["name"],
                entry.get("description", ""),
                children=[_resolve(factors, n, entry["name"]) for n in entry["product_factors"]],
                weights=entry.get("weights"),
            )
            _add_unique(aspects, aspect)

        tqi_entry = data["tqi"]
        tqi = Tqi(
            tqi_entry["name"],
            tqi_entry.get("description", ""),
            children=list(aspects.values()),
            weights=tqi_entry.get("weights"),
        )
        model = QualityModel(data["name"], tqi, data.get("description", ""))
    except KeyError as e:
        raise DescriptorError(None, f"missing required key {e}")
    except (TypeError, ValueError) as e:
        raise DescriptorError(None, str(e))

    model.validate_structure()
    unused = set(factors) - set(model.product_factors)
    if unused:
        logger.warning(f"Product factors not used by any quality aspect: {sorted(unused)}")
    return model


def load_model(path: Path) -> QualityModel:
    path = Path(path)
    if not path.is_file():
        raise DescriptorError(path, "file does not exist")
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise DescriptorError(path, f"invalid JSON: {e}")
    try:
        model = model_from_dict(data)
    except DescriptorError as e:
        raise DescriptorError(path, e.reason)
    except ModelStructureError as e:
        raise ModelStructureError(e.node, e.reason, path)
    logger.debug(f"Loaded quality model '{model.name}' from {path}")
    return model


def save_model(model: QualityModel, path: Path) -> Path:
    path = Path(path)
    data = model_to_dict(model)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    logger.info(f"Wrote quality model '{model.name}' to {path}")
    return path


def _add_unique(table: dict, node) -> None:
    if node.name in table:
        raise ModelStructureError(node.name, "declared twice in descriptor")
    table[node.name] = node


def _resolve(table: dict, name: str, parent: str):
    if name not in table:
        raise ModelStructureError(parent, f"references undeclared node '{name}'")
    return table[name]

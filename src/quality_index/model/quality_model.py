"""QualityModel: the named container of the whole evaluation tree.

The model is built once (from a descriptor plus calibration output) and used
as a prototype: every project evaluates its own ``clone()``, which shares no
mutable diagnostic storage with the prototype or other clones.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterator, Optional

from ..exceptions import ModelStructureError
from .findings import Diagnostic
from .nodes import Measure, ModelNode, ProductFactor, QualityAspect, Tqi, check_weight_map


class QualityModel:
    """Tree of Tqi -> QualityAspects -> ProductFactors -> Measures -> Diagnostics.

    Attributes:
        name: Model name
        description: Free-form description
        tqi: Root node
        quality_aspects / product_factors / measures: Flat name indexes
    """

    def __init__(self, name: str, tqi: Tqi, description: str = ""):
        self.name = name
        self.description = description
        self.tqi = tqi
        self.quality_aspects: dict[str, QualityAspect] = {}
        self.product_factors: dict[str, ProductFactor] = {}
        self.measures: dict[str, Measure] = {}
        self._index()

    def _index(self) -> None:
        for aspect in self.tqi.children.values():
            if not isinstance(aspect, QualityAspect):
                raise ModelStructureError(aspect.name, "children of the TQI must be quality aspects")
            _register(self.quality_aspects, aspect)
            for factor in aspect.children.values():
                if not isinstance(factor, ProductFactor):
                    raise ModelStructureError(
                        factor.name, f"children of aspect '{aspect.name}' must be product factors"
                    )
                _register(self.product_factors, factor)
                for measure in factor.measures.values():
                    _register(self.measures, measure)

    # ── Lookup ────────────────────────────────────────────────────────

    def node(self, name: str) -> Optional[ModelNode]:
        """Find a node by name, searching from the root down."""
        if name == self.tqi.name:
            return self.tqi
        for table in (self.quality_aspects, self.product_factors, self.measures):
            if name in table:
                return table[name]
        return None

    def diagnostics(self) -> Iterator[Diagnostic]:
        for measure in self.measures.values():
            yield from measure.diagnostics

    def diagnostic_index(self) -> dict[str, list[Diagnostic]]:
        """Map diagnostic name to every Measure-owned Diagnostic carrying it."""
        index: dict[str, list[Diagnostic]] = defaultdict(list)
        for diagnostic in self.diagnostics():
            index[diagnostic.name].append(diagnostic)
        return dict(index)

    def measures_using(self, diagnostic_names: set[str]) -> set[str]:
        """Names of measures reading any of ``diagnostic_names``."""
        return {
            m.name
            for m in self.measures.values()
            if any(d.name in diagnostic_names for d in m.diagnostics)
        }

    # ── Validation ────────────────────────────────────────────────────

    def validate_structure(self) -> None:
        """Raise ModelStructureError for empty inner nodes, duplicated names or bad weights.

        Weight maps already present must cover the node's children with a
        non-negative sum of 1; absent weights are a calibration gap, not a
        structural error.
        """
        if not self.tqi.children:
            raise ModelStructureError(self.tqi.name, "TQI has no quality aspects")
        for aspect in self.quality_aspects.values():
            if not aspect.children:
                raise ModelStructureError(aspect.name, "quality aspect has no product factors")
        for node in (self.tqi, *self.quality_aspects.values()):
            if node.weights is not None:
                check_weight_map(node.name, node.children, node.weights)
        for factor in self.product_factors.values():
            if not factor.measures:
                raise ModelStructureError(factor.name, "product factor has no measures")
        for measure in self.measures.values():
            names = [d.name for d in measure.diagnostics]
            if len(names) != len(set(names)):
                raise ModelStructureError(measure.name, "measure lists a diagnostic twice")

        levels = {
            self.tqi.name: "tqi",
            **{n: "quality aspect" for n in self.quality_aspects},
        }
        for name in self.product_factors:
            if name in levels:
                raise ModelStructureError(name, f"name already used by a {levels[name]}")

    def missing_calibration(self) -> list[str]:
        """Describe every node that still lacks weights or thresholds."""
        problems: list[str] = []
        for node in (
            self.tqi,
            *self.quality_aspects.values(),
            *self.product_factors.values(),
            *self.measures.values(),
        ):
            problems.extend(node.missing_calibration())
        return problems

    # ── Prototype cloning ─────────────────────────────────────────────

    def clone(self) -> QualityModel:
        """Deep copy of structure and constants with fresh, absent diagnostics.

        Strategy objects are immutable and therefore shared; weight and
        threshold containers are copied. A node reachable from several
        parents stays a single node in the clone.
        """
        measures = {
            name: Measure(
                m.name,
                m.description,
                diagnostics=[d.empty_copy() for d in m.diagnostics],
                evaluator=m.evaluator,
                normalizer=m.normalizer,
            )
            for name, m in self.measures.items()
        }
        factors = {
            name: ProductFactor(
                f.name,
                f.description,
                measures=[measures[m] for m in f.measures],
                thresholds=list(f.thresholds) if f.thresholds is not None else None,
                polarity=f.polarity,
                utility=f.utility,
                combinator=f.combinator,
            )
            for name, f in self.product_factors.items()
        }
        aspects = {
            name: QualityAspect(
                a.name,
                a.description,
                children=[factors[c] for c in a.children],
                weights=a.weights,
            )
            for name, a in self.quality_aspects.items()
        }
        tqi = Tqi(
            self.tqi.name,
            self.tqi.description,
            children=[aspects[c] for c in self.tqi.children],
            weights=self.tqi.weights,
        )
        return QualityModel(self.name, tqi, self.description)

    def __repr__(self) -> str:
        return (
            f"QualityModel({self.name!r}, aspects={len(self.quality_aspects)}, "
            f"factors={len(self.product_factors)}, measures={len(self.measures)})"
        )


def _register(table: dict, node: ModelNode) -> None:
    existing = table.get(node.name)
    if existing is not None and existing is not node:
        raise ModelStructureError(node.name, f"duplicate {node.level.replace('_', ' ')} name")
    table[node.name] = node

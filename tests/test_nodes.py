"""Tests for quality_index.model.nodes."""

import pytest

from quality_index.exceptions import MissingCalibrationError, ModelStructureError, WeightMismatchError
from quality_index.model import (
    Combinator,
    EvaluationContext,
    Measure,
    MinMaxNormalizer,
    Polarity,
    ProductFactor,
    QualityAspect,
    SeveritySumEvaluator,
)

from fake_tools import diagnostic

CTX = EvaluationContext(lines_of_code=1000)


class TestMeasure:
    """Diagnostics -> evaluator -> normalizer."""

    def test_default_is_finding_count(self):
        m = Measure("m", diagnostics=[diagnostic("a", 3, severity=2.0)])
        assert m.value(CTX) == 3.0
        assert m.num_findings() == 3

    def test_custom_evaluator(self):
        m = Measure(
            "m", diagnostics=[diagnostic("a", 3, severity=2.0)], evaluator=SeveritySumEvaluator()
        )
        assert m.value(CTX) == 6.0

    def test_sums_over_diagnostics(self):
        m = Measure("m", diagnostics=[diagnostic("a", 2), diagnostic("b", 4)])
        assert m.raw_value() == 6.0

    def test_is_observed(self):
        from quality_index.model import Diagnostic

        assert not Measure("m", diagnostics=[Diagnostic("a")]).is_observed
        assert Measure("m", diagnostics=[diagnostic("a", 0)]).is_observed

    def test_uncalibrated_normalizer_reported(self):
        m = Measure("m", normalizer=MinMaxNormalizer())
        assert m.missing_calibration()
        assert Measure("m", normalizer=MinMaxNormalizer(0.0, 1.0)).missing_calibration() == []


class TestProductFactor:
    """Measure values -> thresholds -> utility."""

    def test_single_measure(self):
        m = Measure("m", diagnostics=[diagnostic("a", 3)])
        pf = ProductFactor("pf", measures=[m], thresholds=[0, 5, 10])
        assert pf.value(CTX) == pytest.approx(0.3)

    def test_polarity(self):
        m = Measure("m", diagnostics=[diagnostic("a", 3)])
        pf = ProductFactor(
            "pf", measures=[m], thresholds=[0, 5, 10], polarity=Polarity.HIGHER_IS_WORSE
        )
        assert pf.value(CTX) == pytest.approx(0.7)

    def test_no_thresholds_fails(self):
        pf = ProductFactor("pf", measures=[Measure("m")])
        with pytest.raises(MissingCalibrationError) as exc_info:
            pf.value(CTX)
        assert exc_info.value.nodes == ["pf"]

    def test_combine_after_thresholding(self):
        """Mean of utilities: u(2)=0.125, u(9)=0.75 over [0, 8, 10]."""
        measures = [
            Measure("a", diagnostics=[diagnostic("a", 2)]),
            Measure("b", diagnostics=[diagnostic("b", 9)]),
        ]
        pf = ProductFactor("pf", measures=measures, thresholds=[0, 8, 10])
        assert pf.value(CTX) == pytest.approx(0.4375)

    def test_combine_before_thresholding(self):
        """Utility of the mean value: u(5.5) over [0, 8, 10]."""
        measures = [
            Measure("a", diagnostics=[diagnostic("a", 2)]),
            Measure("b", diagnostics=[diagnostic("b", 9)]),
        ]
        pf = ProductFactor(
            "pf", measures=measures, thresholds=[0, 8, 10], combinator=Combinator("mean", "before")
        )
        assert pf.value(CTX) == pytest.approx(0.34375)

    @pytest.mark.parametrize("bad", [[1, 2], [1, 2, 3, 4], [3, 2, 1], [0, float("nan"), 1]])
    def test_invalid_thresholds_rejected(self, bad):
        with pytest.raises(ValueError):
            ProductFactor("pf", measures=[Measure("m")], thresholds=bad)

    def test_equality_by_name_and_measures(self):
        a = ProductFactor("pf", measures=[Measure("m1"), Measure("m2")])
        b = ProductFactor("pf", measures=[Measure("m2"), Measure("m1")], thresholds=[0, 1, 2])
        c = ProductFactor("pf", measures=[Measure("m1")])
        assert a == b
        assert hash(a) == hash(b)
        assert a != c


class TestWeightedNode:
    """Weighted sums and fail-fast weight checks."""

    def _aspect(self, weights):
        children = [
            ProductFactor("x", measures=[Measure("mx", diagnostics=[diagnostic("x", 10)])], thresholds=[0, 5, 10]),
            ProductFactor("y", measures=[Measure("my", diagnostics=[diagnostic("y", 0)])], thresholds=[0, 5, 10]),
        ]
        return QualityAspect("aspect", children=children, weights=weights)

    def test_weighted_sum(self):
        aspect = self._aspect({"x": 0.25, "y": 0.75})
        assert aspect.value(CTX) == pytest.approx(0.25)

    def test_missing_weights(self):
        aspect = self._aspect(None)
        assert aspect.missing_calibration()
        with pytest.raises(MissingCalibrationError):
            aspect.value(CTX)

    def test_unweighted_child_fails_fast(self):
        aspect = self._aspect({"x": 1.0})
        with pytest.raises(WeightMismatchError) as exc_info:
            aspect.value(CTX)
        assert exc_info.value.missing == ["y"]

    def test_unknown_weight_fails_fast(self):
        aspect = self._aspect({"x": 0.5, "y": 0.25, "z": 0.25})
        with pytest.raises(WeightMismatchError) as exc_info:
            aspect.check_weights()
        assert exc_info.value.unexpected == ["z"]

    def test_weights_off_unit_sum_fail_fast(self):
        aspect = self._aspect({"x": 0.9, "y": 0.9})
        with pytest.raises(ModelStructureError):
            aspect.value(CTX)

    def test_negative_weight_fails_fast(self):
        aspect = self._aspect({"x": 1.5, "y": -0.5})
        with pytest.raises(ModelStructureError):
            aspect.check_weights()

    def test_rounding_within_tolerance(self):
        aspect = self._aspect({"x": 0.3333, "y": 0.6666})
        aspect.check_weights()

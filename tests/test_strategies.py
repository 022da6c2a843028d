"""Tests for quality_index.model.strategies."""

import pytest

from quality_index.exceptions import DescriptorError, EvaluationError
from quality_index.model import (
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
from quality_index.model.strategies import (
    EVALUATORS,
    NORMALIZERS,
    strategy_from_dict,
    strategy_to_dict,
)

from fake_tools import diagnostic


class TestEvaluators:
    """Diagnostics -> raw value."""

    def test_finding_count(self):
        """Default evaluator counts findings: 3 findings -> 3."""
        diags = [diagnostic("a", 3, severity=2.0)]
        assert FindingCountEvaluator().evaluate(diags) == 3.0

    def test_severity_sum(self):
        """Severity-weighted evaluator: 3 findings of severity 2 -> 6."""
        diags = [diagnostic("a", 3, severity=2.0)]
        assert SeveritySumEvaluator().evaluate(diags) == 6.0

    def test_absent_diagnostics_count_zero(self):
        from quality_index.model import Diagnostic

        assert FindingCountEvaluator().evaluate([Diagnostic("a"), Diagnostic("b")]) == 0.0

    def test_callable_evaluator(self):
        evaluator = CallableEvaluator(lambda diags: max(d.count for d in diags))
        assert evaluator.evaluate([diagnostic("a", 2), diagnostic("b", 5)]) == 5.0


class TestNormalizers:
    """Raw value + context -> normalized value."""

    def test_identity(self):
        assert IdentityNormalizer().normalize(7.0, EvaluationContext()) == 7.0

    def test_per_size(self):
        """5 findings in 500 lines -> 10 per KLOC."""
        ctx = EvaluationContext(lines_of_code=500)
        assert abs(SizeNormalizer(1000).normalize(5.0, ctx) - 10.0) < 1e-10

    def test_per_size_zero_raw_needs_no_size(self):
        assert SizeNormalizer().normalize(0.0, EvaluationContext(lines_of_code=0)) == 0.0

    def test_per_size_without_size_fails(self):
        with pytest.raises(EvaluationError):
            SizeNormalizer().normalize(5.0, EvaluationContext(lines_of_code=0))

    def test_min_max_scales_and_clips(self):
        norm = MinMaxNormalizer(2.0, 6.0)
        ctx = EvaluationContext()
        assert norm.normalize(4.0, ctx) == pytest.approx(0.5)
        assert norm.normalize(10.0, ctx) == 1.0
        assert norm.normalize(0.0, ctx) == 0.0

    def test_min_max_per_size(self):
        """8 findings in 2000 lines = 4 per KLOC, halfway between 2 and 6."""
        norm = MinMaxNormalizer(2.0, 6.0, per_size=1000)
        assert norm.normalize(8.0, EvaluationContext(lines_of_code=2000)) == pytest.approx(0.5)

    def test_min_max_degenerate_bounds(self):
        assert MinMaxNormalizer(3.0, 3.0).normalize(5.0, EvaluationContext()) == 0.0

    def test_uncalibrated_min_max_fails(self):
        norm = MinMaxNormalizer()
        assert not norm.is_calibrated
        with pytest.raises(EvaluationError):
            norm.normalize(1.0, EvaluationContext())


class TestThresholdUtility:
    """Piecewise-linear utility over [low, mid, high]."""

    @pytest.mark.parametrize(
        "value,expected",
        [(-1.0, 0.0), (0.0, 0.0), (2.5, 0.25), (5.0, 0.5), (7.5, 0.75), (10.0, 1.0), (20.0, 1.0)],
    )
    def test_higher_is_better(self, value, expected):
        score = ThresholdUtility().score(value, [0.0, 5.0, 10.0], Polarity.HIGHER_IS_BETTER)
        assert score == pytest.approx(expected)

    def test_higher_is_worse_mirrors(self):
        score = ThresholdUtility().score(7.5, [0.0, 5.0, 10.0], Polarity.HIGHER_IS_WORSE)
        assert score == pytest.approx(0.25)

    def test_output_in_unit_interval_and_monotone(self):
        """Utility never leaves [0, 1] and never decreases."""
        utility = ThresholdUtility()
        values = [x / 4 for x in range(-20, 60)]
        scores = [utility.score(v, [1.0, 3.0, 9.0], Polarity.HIGHER_IS_BETTER) for v in values]
        assert all(0.0 <= s <= 1.0 for s in scores)
        assert all(a <= b for a, b in zip(scores, scores[1:]))

    def test_degenerate_thresholds_step(self):
        """Equal thresholds give a step instead of dividing by zero."""
        utility = ThresholdUtility()
        assert utility.score(4.0, [5.0, 5.0, 5.0], Polarity.HIGHER_IS_BETTER) == 0.0
        assert utility.score(6.0, [5.0, 5.0, 5.0], Polarity.HIGHER_IS_BETTER) == 1.0


class TestCombinator:
    def test_reducers(self):
        assert Combinator("mean").combine([0.2, 0.6]) == pytest.approx(0.4)
        assert Combinator("min").combine([0.2, 0.6]) == 0.2
        assert Combinator("max").combine([0.2, 0.6]) == 0.6

    def test_unknown_method_rejected(self):
        with pytest.raises(ValueError):
            Combinator("median")

    def test_unknown_stage_rejected(self):
        with pytest.raises(ValueError):
            Combinator("mean", stage="during")


class TestStrategySerialization:
    def test_round_trip(self):
        norm = MinMaxNormalizer(1.0, 4.0, per_size=1000.0)
        data = strategy_to_dict(norm)
        assert data["kind"] == "min_max"
        assert strategy_from_dict(data, NORMALIZERS) == norm

    def test_combinator_has_no_kind(self):
        assert strategy_to_dict(Combinator("min", "before")) == {"method": "min", "stage": "before"}

    def test_callable_not_serializable(self):
        with pytest.raises(DescriptorError):
            strategy_to_dict(CallableEvaluator(len))

    def test_unknown_kind(self):
        with pytest.raises(DescriptorError):
            strategy_from_dict({"kind": "magic"}, EVALUATORS)

    def test_unexpected_parameters(self):
        with pytest.raises(DescriptorError):
            strategy_from_dict({"kind": "per_size", "factor": 3}, NORMALIZERS)

"""Tests for quality_index.calibration.benchmarker."""

import pytest

from quality_index.calibration import Benchmarker, NaiveBounds, PercentileBounds
from quality_index.calibration.benchmarker import observed_value
from quality_index.config import CalibrationConfig
from quality_index.exceptions import CalibrationInputError
from quality_index.model import EvaluationContext, Measure, MinMaxNormalizer, SizeNormalizer

from fake_tools import BrokenSizeTool, FixedSizeTool, JsonCountsTool, diagnostic


@pytest.fixture
def corpus(tmp_path, make_project_dir):
    """Three projects; p2's 'errtool' crashes."""
    root = tmp_path / "corpus"
    make_project_dir("p1", {"err": 2, "warn": 1}, parent=root)
    make_project_dir("p2", {"err": 9, "warn": 10}, broken="errtool", parent=root)
    make_project_dir("p3", {"err": 6, "warn": 4}, parent=root)
    return root


class TestFailureIsolation:
    def test_undeclared_tool_failure_skips_project(self, corpus, uncalibrated_model):
        """A failing tool without declared diagnostics drops the whole project."""
        tools = [JsonCountsTool("errtool")]
        result = Benchmarker(tools, FixedSizeTool()).derive_bounds(corpus, uncalibrated_model)

        assert result.bounds == {"Errors": (2.0, 6.0), "Warnings": (1.0, 4.0)}
        assert result.projects == ["p1", "p3"]
        assert len(result.failures) == 1
        assert result.failures[0].project == "p2"
        assert result.failures[0].tool == "errtool"

    def test_declared_tool_failure_drops_only_its_measures(self, corpus, uncalibrated_model):
        tools = [
            JsonCountsTool("errtool", only={"err"}, provides={"err"}),
            JsonCountsTool("warntool", only={"warn"}, provides={"warn"}),
        ]
        result = Benchmarker(tools, FixedSizeTool()).derive_bounds(corpus, uncalibrated_model)

        assert result.bounds["Errors"] == (2.0, 6.0)
        assert result.bounds["Warnings"] == (1.0, 10.0)
        assert result.projects == ["p1", "p2", "p3"]
        assert result.observations["Errors"] == [2.0, 6.0]

    def test_size_tool_failure_skips_everything(self, corpus, uncalibrated_model):
        result = Benchmarker([JsonCountsTool("other")], BrokenSizeTool()).derive_bounds(
            corpus, uncalibrated_model
        )
        assert result.bounds == {}
        assert result.projects == []
        assert len(result.failures) == 3

    def test_prototype_left_untouched(self, corpus, uncalibrated_model):
        Benchmarker([JsonCountsTool("other")]).derive_bounds(corpus, uncalibrated_model)
        assert all(not d.has_run for d in uncalibrated_model.diagnostics())


class TestWorkers:
    def test_parallel_matches_sequential(self, corpus, uncalibrated_model):
        tools = [JsonCountsTool("other")]
        sequential = Benchmarker(tools, config=CalibrationConfig(workers=1)).derive_bounds(
            corpus, uncalibrated_model
        )
        parallel = Benchmarker(tools, config=CalibrationConfig(workers=3)).derive_bounds(
            corpus, uncalibrated_model
        )
        assert sequential.bounds == parallel.bounds
        assert sequential.observations == parallel.observations
        assert parallel.projects == ["p1", "p2", "p3"]


class TestStrategies:
    def test_strategy_from_config(self, corpus, uncalibrated_model):
        config = CalibrationConfig(bound_strategy="percentile", percentile_low=0, percentile_high=50)
        benchmarker = Benchmarker([JsonCountsTool("other")], config=config)
        assert benchmarker.strategy == PercentileBounds(0, 50)
        result = benchmarker.derive_bounds(corpus, uncalibrated_model)
        assert result.strategy == "percentile"
        assert result.bounds["Errors"] == pytest.approx((2.0, 6.0))

    def test_explicit_strategy(self, corpus, uncalibrated_model):
        benchmarker = Benchmarker([JsonCountsTool("other")], strategy=NaiveBounds())
        result = benchmarker.derive_bounds(corpus, uncalibrated_model)
        assert result.bounds["Errors"] == (2.0, 9.0)


class TestInputs:
    def test_custom_marker(self, tmp_path, uncalibrated_model, make_project_dir):
        root = tmp_path / "corpus"
        project = make_project_dir("p1", {"err": 1}, parent=root)
        (project / "setup.py").write_text("")
        result = Benchmarker([JsonCountsTool()]).derive_bounds(root, uncalibrated_model, marker="setup.py")
        assert result.projects == ["p1"]

    def test_empty_corpus(self, tmp_path, uncalibrated_model):
        with pytest.raises(CalibrationInputError):
            Benchmarker([JsonCountsTool()]).derive_bounds(tmp_path, uncalibrated_model)

    def test_no_roots(self, uncalibrated_model):
        with pytest.raises(CalibrationInputError):
            Benchmarker([JsonCountsTool()]).benchmark_projects([], uncalibrated_model)

    def test_measure_without_values_has_no_bounds(self, tmp_path, uncalibrated_model, make_project_dir):
        root = tmp_path / "corpus"
        make_project_dir("p1", {"err": 3, "warn": 1}, broken="warntool", parent=root)
        tools = [
            JsonCountsTool("errtool", only={"err"}, provides={"err"}),
            JsonCountsTool("warntool", only={"warn"}, provides={"warn"}),
        ]
        result = Benchmarker(tools).derive_bounds(root, uncalibrated_model)
        assert result.bounds == {"Errors": (3.0, 3.0)}


class TestObservedValue:
    def test_min_max_bounds_ignored(self):
        m = Measure("m", diagnostics=[diagnostic("a", 8)], normalizer=MinMaxNormalizer(0.0, 1.0))
        assert observed_value(m, EvaluationContext()) == 8.0

    def test_min_max_per_size_applied(self):
        m = Measure("m", diagnostics=[diagnostic("a", 8)], normalizer=MinMaxNormalizer(per_size=1000))
        assert observed_value(m, EvaluationContext(lines_of_code=2000)) == pytest.approx(4.0)

    def test_other_normalizers_used(self):
        m = Measure("m", diagnostics=[diagnostic("a", 8)], normalizer=SizeNormalizer(100))
        assert observed_value(m, EvaluationContext(lines_of_code=400)) == pytest.approx(2.0)

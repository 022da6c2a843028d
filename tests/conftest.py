"""Shared test fixtures for Quality Index tests."""

import json
from pathlib import Path

import pytest

from quality_index.model import (
    Diagnostic,
    Measure,
    ProductFactor,
    QualityAspect,
    QualityModel,
    Tqi,
)

FIXTURES = Path(__file__).parent / "fixtures"


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def build_model(calibrated: bool = True) -> QualityModel:
    """TQI -> Reliability -> {Error Handling, Lint Hygiene} -> {Errors, Warnings}."""
    errors = Measure("Errors", "Runtime error patterns", [Diagnostic("err", tool="json-counts")])
    warnings = Measure("Warnings", "Lint warnings", [Diagnostic("warn", tool="json-counts")])
    thresholds = [0.0, 5.0, 10.0] if calibrated else None
    handling = ProductFactor("Error Handling", measures=[errors], thresholds=thresholds)
    hygiene = ProductFactor("Lint Hygiene", measures=[warnings], thresholds=thresholds)
    reliability = QualityAspect(
        "Reliability",
        children=[handling, hygiene],
        weights={"Error Handling": 0.5, "Lint Hygiene": 0.5} if calibrated else None,
    )
    tqi = Tqi("TQI", children=[reliability], weights={"Reliability": 1.0} if calibrated else None)
    return QualityModel("sample", tqi, "Two-measure reliability model")


@pytest.fixture
def sample_model():
    """Fully calibrated model: thresholds [0, 5, 10], equal weights."""
    return build_model(calibrated=True)


@pytest.fixture
def uncalibrated_model():
    """Same structure as sample_model without thresholds or weights."""
    return build_model(calibrated=False)


@pytest.fixture
def shared_factor_model():
    """Two aspects that share one product factor."""
    shared = ProductFactor(
        "Shared",
        measures=[Measure("Smells", diagnostics=[Diagnostic("smell")])],
        thresholds=[0.0, 1.0, 2.0],
    )
    own = ProductFactor(
        "Own",
        measures=[Measure("Dups", diagnostics=[Diagnostic("dup")])],
        thresholds=[0.0, 1.0, 2.0],
    )
    first = QualityAspect("First", children=[shared, own], weights={"Shared": 0.5, "Own": 0.5})
    second = QualityAspect("Second", children=[shared], weights={"Shared": 1.0})
    tqi = Tqi("TQI", children=[first, second], weights={"First": 0.5, "Second": 0.5})
    return QualityModel("shared", tqi)


@pytest.fixture
def make_project_dir(tmp_path):
    """Create a project directory holding findings.json (and an optional BROKEN file)."""

    def _make(name: str, counts: dict, broken=None, parent: Path = None) -> Path:
        root = (parent or tmp_path) / name
        root.mkdir(parents=True)
        (root / ".git").mkdir()
        (root / "findings.json").write_text(json.dumps(counts))
        if broken is not None:
            (root / "BROKEN").write_text(broken)
        return root

    return _make


@pytest.fixture
def matrices_dir():
    """Comparison matrices matching sample_model."""
    return FIXTURES / "comparison_matrices"

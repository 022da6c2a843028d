"""Tests for quality_index.calibration.ahp."""

import logging

import numpy as np
import pytest

from quality_index.calibration import (
    ComparisonMatrix,
    consistency,
    derive_weights,
    matrix_from_weights,
    principal_eigenvector,
)
from quality_index.calibration.ahp import check_matrix, random_index
from quality_index.exceptions import MalformedMatrixError


class TestPrincipalEigenvector:
    def test_consistent_matrix_recovers_weights(self):
        """A[i][j] = w[i] / w[j] yields w back and lambda_max = n."""
        matrix = matrix_from_weights("node", {"a": 0.5, "b": 0.3, "c": 0.2})
        w, lambda_max = principal_eigenvector(matrix.values)
        assert np.allclose(w, [0.5, 0.3, 0.2], atol=1e-6)
        assert abs(lambda_max - 3.0) < 1e-6

    def test_weights_sum_to_one(self):
        values = np.array([[1, 3, 5], [1 / 3, 1, 2], [1 / 5, 1 / 2, 1]], dtype=float)
        w, _ = principal_eigenvector(values)
        assert abs(w.sum() - 1.0) < 1e-10
        assert np.all(w > 0)
        assert w[0] > w[1] > w[2]

    def test_single_element(self):
        w, lambda_max = principal_eigenvector(np.array([[1.0]]))
        assert w.tolist() == [1.0]
        assert lambda_max == pytest.approx(1.0)


class TestConsistency:
    def test_small_matrices_always_consistent(self):
        assert consistency(2.5, 2) == (0.0, 0.0)
        assert consistency(1.0, 1) == (0.0, 0.0)

    def test_random_index_table(self):
        assert random_index(3) == 0.58
        assert random_index(10) == 1.49
        assert random_index(40) == random_index(15)

    def test_ci_never_negative(self):
        ci, cr = consistency(2.9999999, 3)
        assert ci == 0.0
        assert cr == 0.0


class TestDeriveWeights:
    def test_consistent_round_trip(self):
        weights = {"a": 0.5, "b": 0.3, "c": 0.2}
        result = derive_weights(matrix_from_weights("node", weights))
        for name, w in weights.items():
            assert abs(result.weights[name] - w) < 1e-6
        assert result.consistency_ratio < 1e-6
        assert result.consistent
        assert result.warning is None

    def test_inconsistent_judgments_warn(self, caplog):
        """Circular preferences: equal weights and CR far above 0.1, but no error."""
        values = np.array([[1, 9, 1 / 9], [1 / 9, 1, 9], [9, 1 / 9, 1]], dtype=float)
        matrix = ComparisonMatrix("Design", ["a", "b", "c"], values)
        with caplog.at_level(logging.WARNING):
            result = derive_weights(matrix)

        for w in result.weights.values():
            assert abs(w - 1 / 3) < 1e-6
        assert result.lambda_max == pytest.approx(1 + 9 + 1 / 9)
        assert result.consistency_ratio == pytest.approx((1 + 9 + 1 / 9 - 3) / 2 / 0.58)
        assert result.consistency_ratio > 0.1
        assert not result.consistent
        assert "Design" in result.warning
        assert any("inconsistent" in r.message for r in caplog.records)

    def test_custom_threshold(self):
        values = np.array([[1, 2, 6], [1 / 2, 1, 2], [1 / 6, 1 / 2, 1]], dtype=float)
        result = derive_weights(ComparisonMatrix("n", ["a", "b", "c"], values), consistency_threshold=1e-9)
        assert not result.consistent

    def test_header_size_mismatch(self):
        matrix = ComparisonMatrix("n", ["a", "b", "c"], np.ones((2, 2)))
        with pytest.raises(MalformedMatrixError):
            derive_weights(matrix)


class TestCheckMatrix:
    def test_not_square(self):
        with pytest.raises(MalformedMatrixError):
            check_matrix(np.ones((2, 3)), "m")

    def test_non_positive(self):
        with pytest.raises(MalformedMatrixError):
            check_matrix(np.array([[1.0, 0.0], [0.0, 1.0]]), "m")

    def test_diagonal_not_one(self):
        with pytest.raises(MalformedMatrixError):
            check_matrix(np.array([[2.0, 1.0], [1.0, 1.0]]), "m")

    def test_not_reciprocal(self):
        with pytest.raises(MalformedMatrixError):
            check_matrix(np.array([[1.0, 3.0], [3.0, 1.0]]), "m")

    def test_rounded_reciprocal_accepted(self):
        """0.33 for 1/3 is within tolerance."""
        check_matrix(np.array([[1.0, 3.0], [0.334, 1.0]]), "m")

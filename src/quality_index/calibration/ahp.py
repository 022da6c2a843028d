"""Analytic Hierarchy Process: principal eigenvector and consistency ratio.

For a positive reciprocal matrix A the priority vector w solves
A·w = λ_max·w with Σw = 1. Judgments are consistent when λ_max ≈ n;
CI = (λ_max - n) / (n - 1), CR = CI / RI[n].

Reference:
    Saaty, "The Analytic Hierarchy Process" (1980).
"""

from __future__ import annotations

import numpy as np

from ..exceptions import MalformedMatrixError
from ..logging_config import get_logger
from .models import ComparisonMatrix, WeightResult

logger = get_logger(__name__)


# Saaty's random consistency index by matrix size
RANDOM_INDEX = {
    1: 0.0,
    2: 0.0,
    3: 0.58,
    4: 0.90,
    5: 1.12,
    6: 1.24,
    7: 1.32,
    8: 1.41,
    9: 1.45,
    10: 1.49,
    11: 1.51,
    12: 1.48,
    13: 1.56,
    14: 1.57,
    15: 1.59,
}


# m[i][j] * m[j][i] may deviate this much from 1 (hand-entered 0.33 for 1/3)
RECIPROCAL_TOLERANCE = 0.02


def random_index(n: int) -> float:
    return RANDOM_INDEX.get(n, RANDOM_INDEX[max(RANDOM_INDEX)])


def check_matrix(values: np.ndarray, source: str) -> None:
    """Raise MalformedMatrixError unless ``values`` is a positive reciprocal square matrix."""
    if values.ndim != 2 or values.shape[0] != values.shape[1]:
        raise MalformedMatrixError(source, f"matrix is not square: shape {values.shape}")
    if values.shape[0] == 0:
        raise MalformedMatrixError(source, "matrix is empty")
    if not np.all(np.isfinite(values)):
        raise MalformedMatrixError(source, "matrix contains non-finite entries")
    if np.any(values <= 0):
        raise MalformedMatrixError(source, "pairwise ratios must be positive")
    if not np.allclose(np.diag(values), 1.0):
        raise MalformedMatrixError(source, "diagonal entries must be 1")
    products = values * values.T
    if not np.allclose(products, 1.0, rtol=0.0, atol=RECIPROCAL_TOLERANCE):
        i, j = np.unravel_index(np.argmax(np.abs(products - 1.0)), products.shape)
        raise MalformedMatrixError(
            source,
            f"matrix is not reciprocal at ({i}, {j}): {values[i, j]} vs {values[j, i]}",
        )


def principal_eigenvector(
    values: np.ndarray,
    tolerance: float = 1e-6,
    max_iterations: int = 1000,
    source: str = "matrix",
) -> tuple[np.ndarray, float]:
    """Priority vector (summing to 1) and λ_max of a comparison matrix.

    Starts from the row averages of the column-normalized matrix and refines
    by power iteration until successive vectors differ by less than
    ``tolerance``.
    """
    w = (values / values.sum(axis=0)).mean(axis=1)
    for _ in range(max_iterations):
        nxt = values @ w
        nxt = nxt / nxt.sum()
        delta = float(np.max(np.abs(nxt - w)))
        w = nxt
        if delta < tolerance:
            break
    else:
        logger.warning(
            f"{source}: eigenvector did not settle within {max_iterations} iterations "
            f"(last change {delta:.2e})"
        )

    if not np.all(np.isfinite(w)) or np.any(w <= 0):
        raise MalformedMatrixError(source, "judgments yield a non-positive priority vector")

    lambda_max = float(np.mean((values @ w) / w))
    return w, lambda_max


def consistency(lambda_max: float, n: int) -> tuple[float, float]:
    """Return (CI, CR). Matrices of size 1 or 2 are always consistent."""
    if n <= 2:
        return 0.0, 0.0
    ci = max(0.0, (lambda_max - n) / (n - 1))
    return ci, ci / random_index(n)


def derive_weights(
    matrix: ComparisonMatrix,
    tolerance: float = 1e-6,
    max_iterations: int = 1000,
    consistency_threshold: float = 0.1,
) -> WeightResult:
    """Run AHP on one comparison matrix."""
    check_matrix(matrix.values, matrix.label)
    if matrix.values.shape[0] != matrix.size:
        raise MalformedMatrixError(
            matrix.label,
            f"header lists {matrix.size} children but matrix has {matrix.values.shape[0]} rows",
        )

    w, lambda_max = principal_eigenvector(matrix.values, tolerance, max_iterations, matrix.label)
    if len(w) != matrix.size:
        raise MalformedMatrixError(matrix.label, "priority vector length differs from header")

    ci, cr = consistency(lambda_max, matrix.size)
    result = WeightResult(
        name=matrix.node,
        weights={child: float(weight) for child, weight in zip(matrix.children, w)},
        lambda_max=lambda_max,
        consistency_index=ci,
        consistency_ratio=cr,
        threshold=consistency_threshold,
    )
    if result.warning:
        logger.warning(result.warning)
    return result


def matrix_from_weights(node: str, weights: dict[str, float]) -> ComparisonMatrix:
    """Perfectly consistent matrix ``A[i][j] = w[i] / w[j]`` for known weights."""
    names = list(weights)
    w = np.array([weights[n] for n in names], dtype=float)
    return ComparisonMatrix(node, names, np.outer(w, 1.0 / w))

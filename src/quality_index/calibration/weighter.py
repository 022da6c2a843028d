"""Weight elicitation from hand-entered comparison matrices.

Each CSV file in the matrix directory describes one weighted node (the TQI
or a quality aspect)::

    Design,Property 01,Property 02,Property 03
    Property 01,1,4,2
    Property 02,1/4,1,1/2
    Property 03,1/2,2,1

The first header cell names the node, the remaining cells name its children
in column order. Body rows repeat the child name, then the ratios. Cells
accept decimals or ``p/q`` fractions; a blank diagonal cell means 1 and a
blank cell below the diagonal is filled with the reciprocal of its mirror.
"""

from __future__ import annotations

import csv
from fractions import Fraction
from pathlib import Path
from typing import Optional

import numpy as np

from ..config import DEFAULT_CONFIG, CalibrationConfig
from ..exceptions import CalibrationInputError, MalformedMatrixError, ModelStructureError
from ..logging_config import get_logger
from ..model.nodes import WeightedNode
from ..model.quality_model import QualityModel
from .ahp import derive_weights
from .models import ComparisonMatrix, WeightResult

logger = get_logger(__name__)

MATRIX_SUFFIX = ".csv"


def _parse_cell(text: str, source: str) -> Optional[float]:
    text = text.strip()
    if not text:
        return None
    try:
        return float(Fraction(text))
    except (ValueError, ZeroDivisionError):
        raise MalformedMatrixError(source, f"cannot parse ratio '{text}'")


def read_comparison_matrix(path: Path) -> ComparisonMatrix:
    """Parse one comparison-matrix CSV file."""
    path = Path(path)
    source = str(path)
    try:
        with open(path, newline="", encoding="utf-8") as f:
            rows = [row for row in csv.reader(f) if any(cell.strip() for cell in row)]
    except UnicodeDecodeError as e:
        raise MalformedMatrixError(source, f"not valid UTF-8 text: {e.reason}")
    except (OSError, csv.Error) as e:
        raise MalformedMatrixError(source, f"cannot read file: {e}")

    if not rows:
        raise MalformedMatrixError(source, "file is empty")
    header = [cell.strip() for cell in rows[0]]
    node, children = header[0], header[1:]
    if not node or not children:
        raise MalformedMatrixError(source, "header must name the node and at least one child")
    if len(set(children)) != len(children):
        raise MalformedMatrixError(source, "header lists a child twice")

    n = len(children)
    body = rows[1:]
    if len(body) != n:
        raise MalformedMatrixError(source, f"header lists {n} children but found {len(body)} rows")

    cells: list[list[Optional[float]]] = []
    for i, row in enumerate(body):
        if len(row) == n + 1:
            label, row = row[0].strip(), row[1:]
            if label and label != children[i]:
                raise MalformedMatrixError(
                    source, f"row {i + 1} is labelled '{label}', expected '{children[i]}'"
                )
        if len(row) != n:
            raise MalformedMatrixError(source, f"row {i + 1} has {len(row)} ratios, expected {n}")
        cells.append([_parse_cell(cell, source) for cell in row])

    values = np.ones((n, n))
    for i in range(n):
        for j in range(n):
            cell = cells[i][j]
            if cell is not None:
                values[i, j] = cell
            elif i == j:
                values[i, j] = 1.0
            elif i > j and cells[j][i] is not None and cells[j][i] != 0:
                values[i, j] = 1.0 / cells[j][i]
            else:
                raise MalformedMatrixError(source, f"missing ratio at row {i + 1}, column {j + 1}")

    return ComparisonMatrix(node, children, values, path)


def _matrix_files(directory: Path) -> list[Path]:
    directory = Path(directory)
    if not directory.is_dir():
        raise CalibrationInputError(directory, "comparison matrix directory does not exist")
    files = sorted(p for p in directory.iterdir() if p.is_file() and p.suffix == MATRIX_SUFFIX)
    if not files:
        raise CalibrationInputError(
            directory, f"no comparison matrix (*{MATRIX_SUFFIX}) files found"
        )
    return files


def parse_name_order(directory: Path) -> dict[str, list[str]]:
    """Map each matrix's node name to its children in column order."""
    order: dict[str, list[str]] = {}
    for path in _matrix_files(directory):
        matrix = read_comparison_matrix(path)
        order[matrix.node] = matrix.children
    return order


def _check_against_model(matrix: ComparisonMatrix, model: QualityModel) -> None:
    node = model.node(matrix.node)
    if node is None:
        raise ModelStructureError(matrix.node, "node is not part of the quality model", matrix.source)
    if not isinstance(node, WeightedNode):
        raise ModelStructureError(
            matrix.node, f"{node.level.replace('_', ' ')} nodes do not take weights", matrix.source
        )
    expected, found = set(node.children), set(matrix.children)
    if expected != found:
        parts = []
        if expected - found:
            parts.append(f"missing {sorted(expected - found)}")
        if found - expected:
            parts.append(f"unknown {sorted(found - expected)}")
        raise ModelStructureError(
            matrix.node, "matrix children differ from model: " + "; ".join(parts), matrix.source
        )


def elicit_weights(
    directory: Path,
    model: Optional[QualityModel] = None,
    config: Optional[CalibrationConfig] = None,
) -> list[WeightResult]:
    """Derive one WeightResult per comparison matrix in ``directory``.

    When ``model`` is given, every matrix must name a weighted node of the
    model and list exactly its children.

    Raises:
        CalibrationInputError: Directory missing or without matrices
        ModelStructureError: Matrix disagrees with the model
        MalformedMatrixError: Matrix unusable
    """
    config = config or DEFAULT_CONFIG
    results: dict[str, WeightResult] = {}
    for path in _matrix_files(directory):
        matrix = read_comparison_matrix(path)
        if matrix.node in results:
            raise ModelStructureError(matrix.node, "more than one comparison matrix for node", path)
        if model is not None:
            _check_against_model(matrix, model)
        results[matrix.node] = derive_weights(
            matrix,
            tolerance=config.ahp_tolerance,
            max_iterations=config.ahp_max_iterations,
            consistency_threshold=config.consistency_threshold,
        )
        logger.info(
            f"Derived weights for '{matrix.node}' from {path.name} "
            f"(CR={results[matrix.node].consistency_ratio:.3f})"
        )
    return sorted(results.values(), key=lambda r: r.name)

"""Corpus discovery: find benchmark project roots below a directory."""

from __future__ import annotations

import os
from pathlib import Path

from ..exceptions import CalibrationInputError
from ..logging_config import get_logger

logger = get_logger(__name__)


def discover_projects(root: Path, marker: str) -> list[Path]:
    """Return every directory under ``root`` that directly contains ``marker``.

    The marker may be a file or a directory (``.git``, ``pom.xml``,
    ``pyproject.toml``). Discovered roots are not searched further, so a
    project's own sub-modules are not counted as separate projects.

    Raises:
        CalibrationInputError: root missing or no project found
    """
    root = Path(root)
    if not root.is_dir():
        raise CalibrationInputError(root, "corpus root is not a directory")

    projects: list[Path] = []
    for dirpath, dirnames, _filenames in os.walk(root):
        current = Path(dirpath)
        if (current / marker).exists():
            projects.append(current)
            dirnames[:] = []
            continue
        dirnames[:] = sorted(d for d in dirnames if d != marker)

    if not projects:
        raise CalibrationInputError(root, f"no project contains marker '{marker}'")

    logger.info(f"Discovered {len(projects)} benchmark projects under {root}")
    return sorted(projects)

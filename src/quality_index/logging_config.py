"""
Logging configuration for Quality Index.

Everything logs under the ``quality_index`` namespace:

- ``calibration.benchmarker``: corpus progress at INFO, per-project tool
  failures and measures left without values at WARNING
- ``calibration.ahp``: inconsistent judgments (CR above the threshold) at
  WARNING, repeated by ``calibration.merge`` when such weights are applied
- ``evaluation.project``: diagnostics no measure reads at DEBUG, tool
  failures at WARNING
- ``model.descriptor``: loaded models at DEBUG, unused product factors
  at WARNING

Messages go through a rich handler on stderr so they never mix with the
tables and JSON the CLI prints on stdout.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "quality_index"


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Route quality_index logs to stderr, and optionally to a file.

    Args:
        verbose: Also show dropped diagnostics and descriptor loading (DEBUG)
        quiet: Hide corpus progress and calibration warnings (ERROR only)
        log_file: Append plain-text records here as well, e.g. to keep a
            record of a long benchmark run

    Returns:
        The ``quality_index`` logger
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    console = Console(stderr=True)

    handlers: list[logging.Handler] = [
        RichHandler(
            console=console,
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            # Node and tool names may contain brackets
            markup=False,
            show_time=True,
            show_path=verbose,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=handlers)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Logger for a quality_index module.

    ``__name__`` of any module inside the package maps to itself; bare
    names such as ``"benchmarker"`` are placed under ``quality_index``.
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER)

    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"

    return logging.getLogger(name)

"""Shared CLI helpers."""

import importlib
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console

from ..config import CalibrationConfig, load_config
from ..exceptions import InvalidConfigError

console = Console()


def resolve_config(ctx: typer.Context, **overrides: Any) -> CalibrationConfig:
    """Build the configuration from the root options plus command flags."""
    obj = ctx.obj or {}
    config_file: Optional[Path] = obj.get("config")
    return load_config(
        config_file=config_file,
        verbose=obj.get("verbose", False),
        quiet=obj.get("quiet", False),
        **overrides,
    )


def load_tool(reference: str) -> Any:
    """Instantiate a tool adapter from a ``module:ClassName`` reference."""
    module_name, sep, attr = reference.partition(":")
    if not sep or not module_name or not attr:
        raise InvalidConfigError("tool", reference, "expected 'module:ClassName'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise InvalidConfigError("tool", reference, f"cannot import module: {e}")
    factory = getattr(module, attr, None)
    if factory is None:
        raise InvalidConfigError("tool", reference, f"module has no attribute '{attr}'")
    try:
        return factory()
    except TypeError as e:
        raise InvalidConfigError("tool", reference, f"cannot instantiate without arguments: {e}")


def load_size_tool(reference: Optional[str]) -> Any:
    from ..analysis.tools import LinesOfCodeTool

    if reference is None:
        return LinesOfCodeTool()
    return load_tool(reference)

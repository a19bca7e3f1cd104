"""
CLI Utilities - Shared helper functions for command line operations.

This module provides common functionality used across the CLI commands:
formatted printing, logging setup and spec loading.
"""

import logging
from pathlib import Path
from typing import Optional

import click

from ..config import ExplorerConfig, load_config
from ..core.exceptions import FatalBuildError, SpecLoadError
from ..core.index import build_index
from ..core.snapshot import BuildOutput
from ..parsing.openapi import load_spec


def echo_success(message: str) -> None:
    """
    Print a success message with a green checkmark.

    Args:
        message (str): The message to display.
    """
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_warning(message: str) -> None:
    """
    Print a warning message with a yellow alert symbol.

    Args:
        message (str): The warning message to display.
    """
    click.echo(click.style(f"⚠️  {message}", fg="yellow"))


def echo_info(message: str) -> None:
    """
    Print an informational message, dimmed.

    Args:
        message (str): The info message to display.
    """
    click.echo(click.style(f"   {message}", dim=True))


def configure_logging(verbose: bool = False, debug: bool = False) -> None:
    """WARNING by default, INFO with --verbose, DEBUG with --debug. Logs go to stderr."""
    level = logging.WARNING
    if verbose:
        level = logging.INFO
    if debug:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="[%X]",
        force=True,
    )


def get_config(ctx: Optional[click.Context]) -> ExplorerConfig:
    """Configuration loaded by the main group, or loaded now when a command runs standalone."""
    if ctx is not None and isinstance(ctx.obj, dict) and "config" in ctx.obj:
        return ctx.obj["config"]
    return load_config()


def build_from_path(spec_path: str, config: Optional[ExplorerConfig] = None) -> BuildOutput:
    """
    Load and index a spec file.

    Raises:
        SpecLoadError: The file cannot be read or decoded.
        FatalBuildError: The spec cannot be indexed.
    """
    spec = load_spec(Path(spec_path))
    result = build_index(spec, config)
    if result.is_err():
        raise result.unwrap_err()
    return result.unwrap()


def load_index(spec_path: str, config: Optional[ExplorerConfig] = None) -> Optional[BuildOutput]:
    """
    Load and index a spec file for human-readable commands.

    Problems are reported with echo_error.

    Returns:
        Optional[BuildOutput]: The build, or None if loading failed.
    """
    try:
        return build_from_path(spec_path, config)
    except SpecLoadError as e:
        echo_error(f"Failed to load spec: {e}")
    except FatalBuildError as e:
        echo_error(f"Cannot index {spec_path}: {e}")
    return None


class null_context:
    """Stand-in for JsonRenderer.capture() in text mode."""

    def __enter__(self):
        pass

    def __exit__(self, *args):
        pass

"""
CLI Utilities - Shared helper functions for command line operations.

Formatted printing, logging setup and session construction shared by the
`layout` and `tree` commands.
"""

import logging
from pathlib import Path
from typing import Optional

import click

from ..catalog.source import JsonCatalogSource
from ..core.configuration import GraphConfiguration
from ..layout.engine import LayoutParameters
from ..session import GraphSession


def echo_success(message: str) -> None:
    """
    Print a success message with a green checkmark.

    Args:
        message (str): The message to display.
    """
    click.echo(click.style(f"✅ {message}", fg="green"), err=True)


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_warning(message: str) -> None:
    click.echo(click.style(f"⚠️  {message}", fg="yellow"), err=True)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(message)s",
        datefmt="[%X]",
    )


def build_session(
    catalog: str,
    config_file: Optional[str] = None,
    max_ticks: Optional[int] = None,
) -> GraphSession:
    """
    Create a session over a JSON catalog.

    Args:
        catalog (str): Path to the unit feed JSON.
        config_file (Optional[str]): graph.toml with visual/physics properties.
        max_ticks (Optional[int]): Override for the per-run tick cap.

    Raises:
        click.ClickException: If the properties file cannot be parsed.
    """
    try:
        configuration = (
            GraphConfiguration.from_file(Path(config_file)) if config_file else GraphConfiguration()
        )
    except ValueError as e:
        raise click.ClickException(str(e))

    parameters = LayoutParameters(max_ticks=max_ticks) if max_ticks else LayoutParameters()
    return GraphSession(
        source=JsonCatalogSource(Path(catalog)),
        configuration=configuration,
        parameters=parameters,
    )

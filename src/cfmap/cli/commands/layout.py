"""
Layout Command - Run a catalog layout headless.

Loads a catalog, optionally drills into one node, ticks the force layout
until it settles and writes the final render frame as JSON.
"""

import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from ...core.types import GroupingMode
from ..utils import build_session, configure_logging, echo_error, echo_success, echo_warning

console = Console(stderr=True)


@click.command()
@click.argument("catalog", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "-g", "--group-by",
    type=click.Choice([mode.value for mode in GroupingMode]),
    default=GroupingMode.FACULTY.value,
    show_default=True,
    help="How units are grouped beneath the catalog root",
)
@click.option("-c", "--config", "config_file", type=click.Path(dir_okay=False), help="graph.toml properties file")
@click.option("-f", "--focus", help="Node id to drill into before laying out")
@click.option("--max-ticks", type=int, help="Override the per-run tick cap")
@click.option("-o", "--output", help="Write the frame JSON here instead of stdout")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def layout(catalog: str, group_by: str, config_file: str | None, focus: str | None,
           max_ticks: int | None, output: str | None, verbose: bool):
    """
    Lay out a catalog and export the settled frame.
    """
    configure_logging(verbose)
    session = build_session(catalog, config_file, max_ticks)

    result = session.load(GroupingMode(group_by))
    if result.is_err():
        echo_error(str(result.error))
        sys.exit(1)

    if focus:
        result = session.on_node_activated(focus)
        if result.is_err():
            echo_error(str(result.error))
            sys.exit(1)
        if session.scope.root is None or session.scope.root.id != focus:
            echo_warning(f"Node not found: {focus}; laying out the full catalog")

    state = session.run_until_settled()
    frame = session.frame()
    payload = json.dumps(frame.model_dump(mode="json"), indent=2)

    if output:
        Path(output).write_text(payload)
        echo_success(f"Wrote frame to {output}")
    else:
        click.echo(payload)

    table = Table(title="Layout summary")
    table.add_column("Scope")
    table.add_column("Tier")
    table.add_column("Nodes", justify="right")
    table.add_column("Edges", justify="right")
    table.add_column("Ticks", justify="right")
    table.add_column("State")
    table.add_row(
        session.scope.root.name if session.scope.root else "-",
        frame.tier.value,
        str(len(frame.nodes)),
        str(len(frame.edges)),
        str(frame.tick),
        state.value,
    )
    console.print(table)

    session.dispose()

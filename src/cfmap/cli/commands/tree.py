"""
Tree Command - Show a grouped catalog hierarchy.
"""

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.tree import Tree

from ...catalog.source import DataUnavailable, JsonCatalogSource
from ...core.hierarchy import MalformedHierarchy
from ...core.types import GroupingMode, HierarchicalNode
from ..utils import echo_error

console = Console()


def _add_children(branch: Tree, node: HierarchicalNode, max_depth: int, depth: int = 1) -> None:
    if depth > max_depth:
        if node.children:
            branch.add(f"[dim]… {len(node.children)} more[/dim]")
        return
    for child in node.children:
        label = f"[bold]{child.name}[/bold] [dim]{child.id}[/dim]" if child.children else f"{child.name} [dim]{child.id}[/dim]"
        _add_children(branch.add(label), child, max_depth, depth + 1)


@click.command()
@click.argument("catalog", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "-g", "--group-by",
    type=click.Choice([mode.value for mode in GroupingMode]),
    default=GroupingMode.FACULTY.value,
    show_default=True,
)
@click.option("-d", "--depth", "max_depth", type=int, default=2, show_default=True, help="Levels to expand")
def tree(catalog: str, group_by: str, max_depth: int):
    """
    Print the catalog hierarchy as a tree.
    """
    source = JsonCatalogSource(Path(catalog))
    try:
        root = source.get_hierarchical_data(GroupingMode(group_by))
    except (DataUnavailable, MalformedHierarchy) as e:
        echo_error(str(e))
        sys.exit(1)

    view = Tree(f"📚 [bold]{root.name}[/bold] ({root.count() - 1} entries)")
    _add_children(view, root, max_depth)
    console.print(view)

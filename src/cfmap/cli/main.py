"""
cfmap CLI - Main entry point.

Each command is implemented in its own module under cli/commands/.
"""

import click

from .commands import layout, tree


@click.group()
@click.version_option(package_name="cfmap")
def main():
    """cfmap: Catalog discovery map layout engine.

    \b
    Quick Start:
      cfmap tree units.json --group-by faculty
      cfmap layout units.json --focus faculty:FIT -o frame.json
    """
    pass


main.add_command(layout.layout)
main.add_command(tree.tree)

if __name__ == "__main__":
    main()

"""Tree command implementation for zigdeps.

Prints the dependency tree the build system would receive, either for one
package or for every registered package.

Typical usage::

    $ zigdeps tree
    $ zigdeps tree uuid --no-paths
"""

from __future__ import annotations

import json
import sys
from typing import Optional

import click

from zigdeps.exceptions import ZigdepsError
from zigdeps.context import pass_context, ZigdepsContext
from zigdeps.utils import get_logger, print_error, print_tree, print_warning

logger = get_logger("commands.tree")


@click.command()
@click.argument("name", required=False)
@click.option("--paths/--no-paths", default=True, help="Show entry file paths.")
@click.option("--json", "as_json", is_flag=True, help="Print trees as JSON.")
@pass_context
def tree(ctx: ZigdepsContext, name: Optional[str], paths: bool, as_json: bool) -> None:
    """Show materialized dependency trees."""
    try:
        registry = ctx.open_registry()
        names = [name] if name else list(registry)
        trees = [registry.materialize(n) for n in names]
    except ZigdepsError as e:
        print_error(str(e))
        sys.exit(1)

    if not trees:
        print_warning("No dependencies configured")
        return

    if as_json:
        click.echo(json.dumps([t.to_dict() for t in trees], indent=2))
        return

    for package_tree in trees:
        print_tree(package_tree, show_paths=paths)

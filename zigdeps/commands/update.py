"""Update command implementation for zigdeps.

Registers the configured dependencies, cloning only managed ones that
have no working copy yet, and then re-synchronizes every managed one
against the version label recorded in its cache directory.
Working copies with uncommitted changes are reported and left alone.

Typical usage::

    $ zigdeps update
"""

from __future__ import annotations

import sys

import click

from zigdeps.models import SyncState
from zigdeps.exceptions import ZigdepsError
from zigdeps.context import pass_context, ZigdepsContext
from zigdeps.utils import get_logger, print_error, print_success, print_table, print_warning

logger = get_logger("commands.update")


@click.command()
@pass_context
def update(ctx: ZigdepsContext) -> None:
    """Re-synchronize every managed dependency."""
    try:
        registry = ctx.open_registry(sync=False)
        results = registry.update()
    except ZigdepsError as e:
        print_error(str(e))
        sys.exit(1)

    if not results:
        print_warning("No managed dependencies to update")
        return

    print_table(
        [{"Name": name, "State": str(state)} for name, state in results.items()],
        title="Update results",
    )

    skipped = [name for name, state in results.items() if state is SyncState.DIRTY_SKIPPED]
    if skipped:
        print_warning(
            f"Skipped {len(skipped)} package(s) with uncommitted changes: "
            + ", ".join(skipped)
        )
    print_success(f"{len(results) - len(skipped)} package(s) up to date")

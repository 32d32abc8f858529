"""Sync command implementation for zigdeps.

Registers every dependency declared in the configuration file, in file
order. Managed dependencies are cloned or fetched and switched to their
requested version; tracked ones are scanned; unmanaged ones are recorded
as given. A table of the resulting registry is printed.

Typical usage::

    $ zigdeps sync
    $ zigdeps -v --cache-dir /tmp/zigdeps sync
"""

from __future__ import annotations

import sys
from typing import Any, Dict, List

import click

from zigdeps.core import DependencyRegistry
from zigdeps.exceptions import ZigdepsError
from zigdeps.models import entry_of
from zigdeps.context import pass_context, ZigdepsContext
from zigdeps.utils import get_logger, print_error, print_success, print_table, print_warning

logger = get_logger("commands.sync")


@click.command()
@pass_context
def sync(ctx: ZigdepsContext) -> None:
    """Fetch, switch and scan every configured dependency."""
    if not ctx.config.dependencies:
        print_warning("No dependencies configured")
        return

    try:
        registry = ctx.open_registry()
    except ZigdepsError as e:
        print_error(str(e))
        sys.exit(1)

    print_table(
        registry_rows(registry),
        title="Dependencies",
        column_styles={"Name": {"style": "package", "no_wrap": True}},
    )
    print_success(f"{len(registry)} package(s) registered")


def registry_rows(registry: DependencyRegistry) -> List[Dict[str, Any]]:
    """Return one table row per registered package."""
    return [
        {
            "Name": record.name,
            "Kind": record.kind,
            "Entry": entry_of(record),
            "Imports": ", ".join(record.dependencies) or "-",
        }
        for record in registry.records()
    ]

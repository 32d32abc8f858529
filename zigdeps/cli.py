"""
Command-line interface for zigdeps.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from zigdeps.config import load_config
from zigdeps.__version__ import __version__
from zigdeps.context import ZigdepsContext
from zigdeps.constants import CACHE_DIR_ENV, CONFIG_ENV
from zigdeps.exceptions import ConfigError, ZigdepsError
from zigdeps.utils.logger import get_logger, setup_logging, verbosity_to_level
from zigdeps.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar=CONFIG_ENV,
)
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help=f"Cache root (overrides {CACHE_DIR_ENV} and the config file).",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="ZIGDEPS_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="zigdeps",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    cache_dir: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """zigdeps: git-backed dependencies for Zig builds.

    \b
    Available commands:
      zigdeps sync      Fetch and register configured dependencies
      zigdeps update    Re-synchronize every managed dependency
      zigdeps tree      Show materialized dependency trees

    Use ``zigdeps COMMAND --help`` for command-specific options.
    """
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    level = verbosity_to_level(verbose)
    setup_logging(level=level, verbose=verbose >= 2)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    zigdeps_ctx = ZigdepsContext()
    zigdeps_ctx.config_path = loaded_config.source_path
    zigdeps_ctx.config = loaded_config
    zigdeps_ctx.cache_dir = cache_dir
    zigdeps_ctx.verbose = verbose
    zigdeps_ctx.color = color
    ctx.obj = zigdeps_ctx

    logger.debug("zigdeps v%s", __version__)
    logger.debug("Config path: %s", zigdeps_ctx.config_path)
    logger.debug("Loaded configuration: %s", loaded_config.to_log_dict())


from zigdeps.commands.sync import sync  # noqa: E402
from zigdeps.commands.tree import tree  # noqa: E402
from zigdeps.commands.update import update  # noqa: E402

cli.add_command(sync)
cli.add_command(update)
cli.add_command(tree)


def main() -> int:
    """Main entry point for the zigdeps CLI.

    Returns:
        Exit code:
            0   Success
            1   Fatal resolution error or unexpected failure
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.exceptions.Abort as exc:
        # Click re-raises Ctrl+C inside a command as Abort.
        if isinstance(exc.__cause__ or exc.__context__, KeyboardInterrupt):
            print_warning("\nOperation cancelled by user")
            return 130
        print_warning("Aborted")
        return 1

    except SystemExit as exc:
        if exc.code is None:
            return 0
        return exc.code if isinstance(exc.code, int) else 1

    except ZigdepsError as exc:
        print_error(str(exc))
        logger.debug(
            "ZigdepsError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())

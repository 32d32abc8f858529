"""
Shared context object for zigdeps CLI commands.

The group callback fills one :class:`ZigdepsContext` per invocation;
subcommands receive it through :data:`pass_context` and use
:meth:`ZigdepsContext.open_registry` to start a resolution run.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from zigdeps.config import ZigdepsConfig
from zigdeps.core import DependencyRegistry, ResolutionContext
from zigdeps.utils.logger import get_logger

logger = get_logger("context")


class ZigdepsContext:
    """Global context object for zigdeps CLI commands.

    Attributes:
        config_path: Path to the loaded configuration file, if any.
        config: Loaded configuration (defaults when no file was found).
        cache_dir: ``--cache-dir`` override, if given.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
    """

    __slots__ = ("config_path", "config", "cache_dir", "verbose", "color")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.config: ZigdepsConfig = ZigdepsConfig()
        self.cache_dir: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True

    def open_registry(self, sync: bool = True) -> DependencyRegistry:
        """Lock the cache and register every configured dependency.

        Dependencies are registered one at a time in file order; the first
        failure aborts the run. With ``sync=False`` managed dependencies that
        already have a working copy are registered without touching git.
        """
        resolution = ResolutionContext(
            self.config.resolve_cache_root(self.cache_dir),
            max_file_size=self.config.max_file_size,
        )
        registry = DependencyRegistry(resolution)

        for spec in self.config.dependencies:
            if spec.kind == "managed":
                registry.add(spec.url or "", spec.version or "", sync=sync)
            elif spec.kind == "tracked":
                registry.add_package_path(spec.name or "", spec.path or Path())
            elif spec.kind == "unmanaged":
                registry.add_package(spec.as_package())
            else:
                raise ValueError(f"Unknown dependency kind: {spec.kind}")

        logger.debug("Registered %d package(s)", len(registry))
        return registry


#: Click decorator for injecting :class:`ZigdepsContext` into commands.
pass_context = click.make_pass_decorator(ZigdepsContext, ensure=True)

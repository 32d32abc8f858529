"""
zigdeps: minimal build-time package manager for Zig projects.

zigdeps clones git dependencies into a shared cache, keeps each working
copy on the requested branch, tag or commit without clobbering local
edits, discovers which packages a dependency imports, and hands the
resulting dependency trees to the build.

Example::

    from zigdeps import DependencyRegistry, ResolutionContext

    deps = DependencyRegistry(ResolutionContext())
    deps.add("https://github.com/user/zig-uuid.git", "main")
    tree = deps.materialize("uuid")
"""

from __future__ import annotations

from zigdeps.__version__ import __version__
from zigdeps.core import DependencyRegistry, ResolutionContext
from zigdeps.models import Package, PackageTree

__author__ = "zigdeps Contributors"
__license__ = "Apache-2.0"
__description__ = "Git-backed dependency resolution for Zig builds."

__all__ = [
    "__version__",
    "DependencyRegistry",
    "Package",
    "PackageTree",
    "ResolutionContext",
]

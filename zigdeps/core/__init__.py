"""
Core functionality exports for zigdeps.

    from zigdeps.core import DependencyRegistry, ResolutionContext
"""

from __future__ import annotations

from zigdeps.core.cache import (
    CacheGuard,
    cache_dir_name,
    default_cache_root,
    split_cache_dir_name,
)
from zigdeps.core.scanner import ImportScanner, classify_import, find_import_directives
from zigdeps.core.vcs import GitRunner, VersionSync
from zigdeps.core.resolution import ResolutionContext
from zigdeps.core.registry import (
    DependencyRegistry,
    derive_package_name,
    find_entry_file,
    materialize,
)

__all__ = [
    "CacheGuard",
    "DependencyRegistry",
    "GitRunner",
    "ImportScanner",
    "ResolutionContext",
    "VersionSync",
    "cache_dir_name",
    "classify_import",
    "default_cache_root",
    "derive_package_name",
    "find_entry_file",
    "find_import_directives",
    "materialize",
    "split_cache_dir_name",
]

"""
Unified data model exports for zigdeps.

Example:
    >>> from zigdeps.models import Managed, PackageTree
"""

from __future__ import annotations

from zigdeps.models.tree import BuildTarget, PackageTree
from zigdeps.models.dependency import (
    DependencyRecord,
    Managed,
    Package,
    SyncState,
    Tracked,
    Unmanaged,
    entry_of,
)

__all__ = [
    "BuildTarget",
    "DependencyRecord",
    "Managed",
    "Package",
    "PackageTree",
    "SyncState",
    "Tracked",
    "Unmanaged",
    "entry_of",
]

"""
Materialized dependency tree handed to the host build system.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Protocol, Tuple


@dataclass(frozen=True)
class PackageTree:
    """One node of a materialized dependency tree.

    Attributes:
        name: Package name the build system exposes to ``@import``.
        path: Entry file reference of the package.
        dependencies: Child nodes, in declaration order. Names that were
            not registered are already omitted.
    """

    name: str
    path: str
    dependencies: Tuple["PackageTree", ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "dependencies", tuple(self.dependencies))

    def walk(self) -> Iterator["PackageTree"]:
        """Yield this node and every descendant, depth first, pre-order."""
        yield self
        for child in self.dependencies:
            yield from child.walk()

    def child_names(self) -> Tuple[str, ...]:
        return tuple(child.name for child in self.dependencies)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "name": self.name,
            "path": self.path,
            "dependencies": [child.to_dict() for child in self.dependencies],
        }


class BuildTarget(Protocol):
    """Anything that can receive materialized packages (a compile step)."""

    def add_package(self, package: PackageTree) -> None:
        ...

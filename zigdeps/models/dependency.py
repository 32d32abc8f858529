"""
Dependency record models for zigdeps.

A registered dependency is exactly one of three variants:

- :class:`Managed`: cloned, fetched and switched by zigdeps itself.
- :class:`Tracked`: a working copy owned by someone else; only scanned.
- :class:`Unmanaged`: supplied whole by the caller; never scanned or fetched.

Records are frozen: they are built once at registration and never change.
"""

from __future__ import annotations

import enum
from pathlib import Path
from dataclasses import dataclass, field
from typing import Iterable, Tuple, Union


def _as_tuple(names: Iterable[str]) -> Tuple[str, ...]:
    return tuple(names)


@dataclass(frozen=True)
class Managed:
    """A dependency whose clone/fetch/switch lifecycle zigdeps owns.

    Attributes:
        name: Package name derived from the URL.
        url: Git remote the working copy was cloned from.
        path: Working copy directory inside the cache root.
        entry: Entry file inside ``path``.
        dependencies: External package names imported by the entry file.
    """

    name: str
    url: str
    path: Path
    entry: Path
    dependencies: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "dependencies", _as_tuple(self.dependencies))

    @property
    def kind(self) -> str:
        return "managed"


@dataclass(frozen=True)
class Tracked:
    """A dependency with an external working copy, scanned for imports."""

    name: str
    entry: Path
    dependencies: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "dependencies", _as_tuple(self.dependencies))

    @property
    def kind(self) -> str:
        return "tracked"


@dataclass(frozen=True)
class Unmanaged:
    """A dependency recorded exactly as the caller supplied it.

    ``entry`` is opaque: it is handed to the build system untouched and
    never checked for existence.
    """

    name: str
    entry: str
    dependencies: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "dependencies", _as_tuple(self.dependencies))

    @property
    def kind(self) -> str:
        return "unmanaged"


DependencyRecord = Union[Managed, Tracked, Unmanaged]


@dataclass(frozen=True)
class Package:
    """Caller-facing description of an unmanaged dependency.

    Passed to :meth:`DependencyRegistry.add_package`.
    """

    name: str
    path: str
    dependencies: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", str(self.path))
        object.__setattr__(self, "dependencies", _as_tuple(self.dependencies))


def entry_of(record: DependencyRecord) -> str:
    """Return the entry file reference handed to the build system."""
    if isinstance(record, (Managed, Tracked)):
        return str(record.entry)
    if isinstance(record, Unmanaged):
        return record.entry
    raise TypeError(f"Unknown dependency record: {record!r}")


class SyncState(str, enum.Enum):
    """Outcome of synchronizing one working copy."""

    SYNCED = "synced"
    DIRTY_SKIPPED = "dirty-skipped"

    def __str__(self) -> str:
        return self.value

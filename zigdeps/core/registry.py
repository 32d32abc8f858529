"""Dependency registry and tree materialization.

The registry records uniquely named dependencies for one resolution run
and expands any of them into a :class:`~zigdeps.models.PackageTree` for
the host build system.

Typical usage::

    ctx = ResolutionContext()
    deps = DependencyRegistry(ctx)

    deps.add("https://github.com/user/zig-uuid.git", "v1.2.0")
    deps.add_package_path("mylib", "libs/mylib/main.zig")
    deps.add_package(Package("raw", "vendor/raw.zig", ("uuid",)))

    deps.add_to(exe)     # exe.add_package(tree) for every package

A record's dependency names may mention packages that are never
registered. Those are dropped silently when the tree is built; the
compiler reports the unresolved import later.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, TypeVar, Union

from zigdeps.core.cache import split_cache_dir_name
from zigdeps.core.resolution import ResolutionContext
from zigdeps.utils.logger import get_logger
from zigdeps.utils.filesystem import probe_files
from zigdeps.exceptions import (
    DuplicatePackageError,
    EntryNotFoundError,
    ResolutionError,
)
from zigdeps.models import (
    BuildTarget,
    DependencyRecord,
    Managed,
    Package,
    PackageTree,
    SyncState,
    Tracked,
    Unmanaged,
    entry_of,
)
from zigdeps.constants import (
    ENTRY_FILE_CANDIDATES,
    PACKAGE_NAME_PREFIX,
    PACKAGE_NAME_SUFFIXES,
)

logger = get_logger("registry")

_Record = TypeVar("_Record", Managed, Tracked, Unmanaged)

__all__ = [
    "DependencyRegistry",
    "derive_package_name",
    "entry_candidates",
    "find_entry_file",
    "materialize",
]


def derive_package_name(url: str) -> str:
    """Derive a package name from a repository URL.

    The conventional prefix is stripped first, then each known suffix.

    Example::

        >>> derive_package_name("https://example.com/zig-uuid.git")
        'uuid'
        >>> derive_package_name("https://example.com/foo-zig")
        'foo'
    """
    base = url.rstrip("/").rsplit("/", 1)[-1]
    # scp-like URLs: git@host:repo.git
    base = base.rsplit(":", 1)[-1]

    if base.startswith(PACKAGE_NAME_PREFIX):
        base = base[len(PACKAGE_NAME_PREFIX) :]
    for suffix in PACKAGE_NAME_SUFFIXES:
        if base.endswith(suffix):
            base = base[: -len(suffix)]

    if not base:
        raise ResolutionError(f"Cannot derive a package name from URL: {url}")
    return base


def entry_candidates(name: str) -> List[str]:
    """Return the entry file candidates for ``name``, in probe order."""
    return [candidate.format(name=name) for candidate in ENTRY_FILE_CANDIDATES]


def find_entry_file(directory: Union[str, Path], name: str) -> Path:
    """Locate the entry file of a working copy.

    Raises:
        EntryNotFoundError: None of the candidates exist.
    """
    candidates = entry_candidates(name)
    found = probe_files(directory, candidates)
    if found is None:
        raise EntryNotFoundError(
            f"Could not find package entry file in {directory}, "
            f"attempted {', '.join(candidates)}",
            package_name=name,
            candidates=candidates,
        )
    return found


def materialize(records: Mapping[str, DependencyRecord], name: str) -> PackageTree:
    """Expand ``name`` into a tree using a snapshot of registry records.

    Dependency names with no record are omitted from the tree.

    Raises:
        ResolutionError: ``name`` is not registered, or the records form a
            cycle through ``name``.
    """
    if name not in records:
        raise ResolutionError(f"Package is not registered: {name}", package_name=name)
    return _materialize(records, name, [])


def _materialize(
    records: Mapping[str, DependencyRecord],
    name: str,
    chain: List[str],
) -> PackageTree:
    if name in chain:
        cycle = " -> ".join(chain[chain.index(name) :] + [name])
        raise ResolutionError(f"Dependency cycle detected: {cycle}", package_name=name)

    record = records[name]
    chain.append(name)
    try:
        children = []
        for dep_name in record.dependencies:
            if dep_name not in records:
                logger.debug("%s: dependency %s is not registered, omitting", name, dep_name)
                continue
            children.append(_materialize(records, dep_name, chain))
    finally:
        chain.pop()

    return PackageTree(name=name, path=entry_of(record), dependencies=tuple(children))


class DependencyRegistry:
    """Records dependencies for one resolution run.

    Registration order is preserved. The first registration of a name wins;
    a second one raises :class:`DuplicatePackageError` and leaves the
    registry unchanged.

    Args:
        context: Run-scoped context supplying the cache, git and scanner.
    """

    def __init__(self, context: ResolutionContext) -> None:
        self.context = context
        self._records: Dict[str, DependencyRecord] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add(self, url: str, version: str, *, sync: bool = True) -> Managed:
        """Register a managed dependency, synchronizing its working copy.

        With ``sync=False`` an existing working copy is scanned as it is on
        disk; a missing one is still cloned.

        Raises:
            DuplicatePackageError: The derived name is already registered.
            VCSError: A git command failed.
            EntryNotFoundError: The working copy has no entry file.
            ParseError: The entry file has a malformed import.
        """
        name = derive_package_name(url)
        self._check_unique(name)

        path = self.context.cache_path(url, version)
        if sync or not path.is_dir():
            self.context.version_sync.sync(name, url, version, path)

        entry = find_entry_file(path, name)
        record = Managed(
            name=name,
            url=url,
            path=path,
            entry=entry,
            dependencies=self.context.scan(entry),
        )
        return self._store(record)

    def add_package_path(self, name: str, entry_path: Union[str, Path]) -> Tracked:
        """Register an externally managed working copy by its entry file."""
        self._check_unique(name)

        entry = Path(entry_path)
        record = Tracked(name=name, entry=entry, dependencies=self.context.scan(entry))
        return self._store(record)

    def add_package(self, package: Package) -> Unmanaged:
        """Register a dependency exactly as given; nothing is scanned."""
        self._check_unique(package.name)

        record = Unmanaged(
            name=package.name,
            entry=package.path,
            dependencies=package.dependencies,
        )
        return self._store(record)

    def _check_unique(self, name: str) -> None:
        if name in self._records:
            raise DuplicatePackageError(
                f"Package is already registered: {name}",
                package_name=name,
            )

    def _store(self, record: _Record) -> _Record:
        self._check_unique(record.name)
        self._records[record.name] = record
        logger.info(
            "Registered %s package %s (%d dependency name(s))",
            record.kind,
            record.name,
            len(record.dependencies),
        )
        return record

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, name: str) -> Optional[DependencyRecord]:
        return self._records.get(name)

    def records(self) -> List[DependencyRecord]:
        """Return all records in registration order."""
        return list(self._records.values())

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._records))

    # ------------------------------------------------------------------
    # Build system integration
    # ------------------------------------------------------------------

    def materialize(self, name: str) -> PackageTree:
        """Expand a registered package into its dependency tree."""
        return materialize(dict(self._records), name)

    def add_to(self, target: BuildTarget) -> None:
        """Hand every registered package's tree to ``target``."""
        snapshot = dict(self._records)
        for name in snapshot:
            target.add_package(materialize(snapshot, name))

    def update(self) -> Dict[str, SyncState]:
        """Re-synchronize every managed dependency.

        The version label is recovered from each working copy's cache
        directory name. Dependency names are not rescanned; records keep
        the names found at registration.

        Returns:
            Sync outcome per managed package name.
        """
        results: Dict[str, SyncState] = {}
        for record in self._records.values():
            if isinstance(record, Managed):
                _, version = split_cache_dir_name(record.path.name)
                results[record.name] = self.context.version_sync.sync(
                    record.name, record.url, version, record.path
                )
            elif isinstance(record, (Tracked, Unmanaged)):
                logger.debug("Skipping %s package %s", record.kind, record.name)
            else:
                raise TypeError(f"Unknown dependency record: {record!r}")
        return results

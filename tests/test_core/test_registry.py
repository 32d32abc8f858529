from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from zigdeps.models import Managed, Package, PackageTree, SyncState, Tracked, Unmanaged
from zigdeps.core.registry import (
    DependencyRegistry,
    derive_package_name,
    entry_candidates,
    find_entry_file,
    materialize,
)
from zigdeps.exceptions import (
    DuplicatePackageError,
    EntryNotFoundError,
    ParseError,
    ResolutionError,
)

UUID_URL = "https://example.com/zig-uuid.git"


class RecordingTarget:
    """Stand-in for a build step that receives packages."""

    def __init__(self) -> None:
        self.packages: List[PackageTree] = []

    def add_package(self, package: PackageTree) -> None:
        self.packages.append(package)


@pytest.mark.unit
class TestDerivePackageName:
    """Tests for derive_package_name."""

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://example.com/zig-uuid.git", "uuid"),
            ("https://example.com/foo-zig", "foo"),
            ("https://example.com/foo-zig.git", "foo"),
            ("https://example.com/clap", "clap"),
            ("https://example.com/known-folders/", "known-folders"),
            ("git@github.com:user/zig-network.git", "network"),
            ("git@example.com:zig-xml.git", "xml"),
        ],
    )
    def test_derivation(self, url: str, expected: str) -> None:
        """Test the prefix and suffixes are stripped in order."""
        assert derive_package_name(url) == expected

    def test_empty_name(self) -> None:
        """Test a URL that derives to nothing is rejected."""
        with pytest.raises(ResolutionError):
            derive_package_name("https://example.com/zig-.git")


@pytest.mark.unit
class TestFindEntryFile:
    """Tests for entry file probing."""

    def test_candidate_order(self) -> None:
        assert entry_candidates("uuid") == [
            "uuid.zig",
            "main.zig",
            "src/uuid.zig",
            "src/main.zig",
        ]

    def test_first_match_wins(self, write_source, tmp_path: Path) -> None:
        """Test an earlier candidate is preferred over later ones."""
        write_source("src/main.zig", "")
        expected = write_source("main.zig", "")

        assert find_entry_file(tmp_path, "uuid") == expected

    def test_src_named_file(self, write_source, tmp_path: Path) -> None:
        """Test src/<name>.zig beats src/main.zig."""
        write_source("src/main.zig", "")
        expected = write_source("src/uuid.zig", "")

        assert find_entry_file(tmp_path, "uuid") == expected

    def test_no_candidate(self, tmp_path: Path) -> None:
        """Test the error lists every attempted path."""
        with pytest.raises(EntryNotFoundError) as exc_info:
            find_entry_file(tmp_path, "uuid")

        err = exc_info.value
        assert err.package_name == "uuid"
        assert err.candidates == tuple(entry_candidates("uuid"))
        assert "src/main.zig" in err.message


@pytest.mark.unit
class TestMaterialize:
    """Tests for the pure tree builder."""

    def test_nested_tree(self) -> None:
        records = {
            "app": Unmanaged("app", "app.zig", ("uuid", "clap")),
            "uuid": Unmanaged("uuid", "uuid.zig", ()),
            "clap": Unmanaged("clap", "clap.zig", ("uuid",)),
        }

        tree = materialize(records, "app")

        assert tree.child_names() == ("uuid", "clap")
        assert tree.dependencies[1].child_names() == ("uuid",)
        assert [n.name for n in tree.walk()] == ["app", "uuid", "clap", "uuid"]

    def test_unregistered_child_is_omitted(self) -> None:
        """Test a dependency name with no record is dropped silently."""
        records = {
            "app": Unmanaged("app", "app.zig", ("missing", "uuid")),
            "uuid": Unmanaged("uuid", "uuid.zig", ()),
        }

        tree = materialize(records, "app")

        assert tree.child_names() == ("uuid",)

    def test_all_children_missing(self) -> None:
        records = {"app": Unmanaged("app", "app.zig", ("a", "b"))}

        assert materialize(records, "app") == PackageTree("app", "app.zig", ())

    def test_unknown_root(self) -> None:
        with pytest.raises(ResolutionError) as exc_info:
            materialize({}, "nope")

        assert exc_info.value.package_name == "nope"

    def test_cycle_is_reported(self) -> None:
        records = {
            "a": Unmanaged("a", "a.zig", ("b",)),
            "b": Unmanaged("b", "b.zig", ("a",)),
        }

        with pytest.raises(ResolutionError) as exc_info:
            materialize(records, "a")

        assert "a -> b -> a" in exc_info.value.message

    def test_managed_and_tracked_paths(self, tmp_path: Path) -> None:
        """Test entry paths of every variant end up in the tree."""
        records = {
            "m": Managed("m", UUID_URL, tmp_path, tmp_path / "m.zig", ("t",)),
            "t": Tracked("t", tmp_path / "t.zig", ()),
        }

        tree = materialize(records, "m")

        assert tree.path == str(tmp_path / "m.zig")
        assert tree.dependencies[0].path == str(tmp_path / "t.zig")


@pytest.mark.unit
class TestDependencyRegistry:
    """Tests for registration, materialization and update."""

    @pytest.fixture
    def uuid_files(self) -> dict:
        return {
            "src/main.zig": (
                'const std = @import("std");\n'
                'const rng = @import("rng");\n'
                'const fmt = @import("fmt.zig");\n'
            ),
            "src/fmt.zig": 'const rng = @import("rng");\nconst b = @import("bytes");\n',
        }

    def test_add_managed(self, make_context, fake_git, uuid_files, cache_root: Path) -> None:
        """Test add syncs, probes the entry file and scans it."""
        runner = fake_git(files=uuid_files)
        registry = DependencyRegistry(make_context(runner))

        record = registry.add(UUID_URL, "main")

        assert isinstance(record, Managed)
        assert record.name == "uuid"
        assert record.url == UUID_URL
        assert record.path == cache_root.resolve() / "https:∕∕example.com∕zig-uuid.git@main"
        assert record.entry == record.path / "src" / "main.zig"
        assert record.dependencies == ("rng", "bytes")
        assert registry.get("uuid") is record
        assert runner.subcommands()[0] == "clone"

    def test_add_without_sync_uses_existing_copy(self, make_context, fake_git) -> None:
        """Test an existing working copy is scanned without running git."""
        runner = fake_git()
        context = make_context(runner)
        path = context.cache_path(UUID_URL, "main")
        path.mkdir()
        (path / "uuid.zig").write_text('const rng = @import("rng");\n', encoding="utf-8")
        registry = DependencyRegistry(context)

        record = registry.add(UUID_URL, "main", sync=False)

        assert record.entry == path / "uuid.zig"
        assert record.dependencies == ("rng",)
        assert runner.calls == []

    def test_add_without_sync_clones_missing_copy(self, make_context, fake_git) -> None:
        runner = fake_git(files={"uuid.zig": ""})
        registry = DependencyRegistry(make_context(runner))

        registry.add(UUID_URL, "main", sync=False)

        assert runner.subcommands()[0] == "clone"

    def test_add_without_entry_file(self, make_context, fake_git) -> None:
        """Test a working copy without any entry candidate is fatal."""
        registry = DependencyRegistry(make_context(fake_git(files={"README": "x"})))

        with pytest.raises(EntryNotFoundError):
            registry.add(UUID_URL, "main")

        assert "uuid" not in registry

    def test_add_with_malformed_import(self, make_context, fake_git) -> None:
        runner = fake_git(files={"uuid.zig": 'const x = @import(x);\n'})
        registry = DependencyRegistry(make_context(runner))

        with pytest.raises(ParseError):
            registry.add(UUID_URL, "main")

        assert len(registry) == 0

    def test_duplicate_is_fatal_and_first_wins(self, make_context, fake_git, uuid_files) -> None:
        """Test a second registration of a name fails before touching git."""
        runner = fake_git(files=uuid_files)
        registry = DependencyRegistry(make_context(runner))
        first = registry.add(UUID_URL, "main")
        calls_before = len(runner.calls)

        with pytest.raises(DuplicatePackageError) as exc_info:
            registry.add("https://mirror.example.com/uuid.git", "v2.0.0")

        assert exc_info.value.package_name == "uuid"
        assert registry.get("uuid") is first
        assert len(registry) == 1
        assert len(runner.calls) == calls_before

    @pytest.mark.parametrize("second", ["tracked", "unmanaged"])
    def test_duplicate_across_variants(
        self, make_context, write_source, second: str
    ) -> None:
        entry = write_source("lib/main.zig", "")
        registry = DependencyRegistry(make_context())
        first = registry.add_package(Package("lib", "vendor/lib.zig"))

        with pytest.raises(DuplicatePackageError):
            if second == "tracked":
                registry.add_package_path("lib", entry)
            else:
                registry.add_package(Package("lib", "other.zig"))

        assert registry.get("lib") is first

    def test_add_package_path_scans(self, make_context, fake_git, write_source) -> None:
        """Test tracked packages are scanned but never fetched."""
        runner = fake_git()
        entry = write_source(
            "libs/mylib/main.zig",
            'const u = @import("uuid");\nconst s = @import("std");\n',
        )
        registry = DependencyRegistry(make_context(runner))

        record = registry.add_package_path("mylib", entry)

        assert isinstance(record, Tracked)
        assert record.dependencies == ("uuid",)
        assert runner.calls == []

    def test_scans_are_independent(self, make_context, write_source) -> None:
        """Test two packages importing the same name both record it."""
        a = write_source("a/main.zig", 'const u = @import("uuid");\n')
        b = write_source("b/main.zig", 'const u = @import("uuid");\n')
        registry = DependencyRegistry(make_context())

        assert registry.add_package_path("a", a).dependencies == ("uuid",)
        assert registry.add_package_path("b", b).dependencies == ("uuid",)

    def test_add_package_is_stored_as_is(self, make_context, fake_git) -> None:
        """Test unmanaged packages are neither scanned nor fetched."""
        runner = fake_git()
        registry = DependencyRegistry(make_context(runner))

        record = registry.add_package(Package("raw", "does/not/exist.zig", ["uuid"]))

        assert isinstance(record, Unmanaged)
        assert record.entry == "does/not/exist.zig"
        assert record.dependencies == ("uuid",)
        assert runner.calls == []

    def test_materialize_omits_unregistered(self, make_context, write_source) -> None:
        """Test scanned names with no registration are dropped from the tree."""
        entry = write_source("app/main.zig", 'const u = @import("uuid");\nconst x = @import("xml");\n')
        registry = DependencyRegistry(make_context())
        registry.add_package_path("app", entry)
        registry.add_package(Package("uuid", "uuid.zig"))

        tree = registry.materialize("app")

        assert tree.child_names() == ("uuid",)
        assert tree.path == str(entry)

    def test_add_to_hands_every_package_over(self, make_context) -> None:
        registry = DependencyRegistry(make_context())
        registry.add_package(Package("a", "a.zig", ("b",)))
        registry.add_package(Package("b", "b.zig"))
        target = RecordingTarget()

        registry.add_to(target)

        assert [p.name for p in target.packages] == ["a", "b"]
        assert target.packages[0].child_names() == ("b",)

    def test_iteration_order(self, make_context) -> None:
        registry = DependencyRegistry(make_context())
        for name in ("c", "a", "b"):
            registry.add_package(Package(name, f"{name}.zig"))

        assert list(registry) == ["c", "a", "b"]
        assert [r.name for r in registry.records()] == ["c", "a", "b"]

    def test_update_resyncs_managed_only(
        self, make_context, fake_git, uuid_files, write_source
    ) -> None:
        """Test update re-runs sync with the version from the cache path."""
        runner = fake_git(files=uuid_files, branches={"main", "feature/x"})
        registry = DependencyRegistry(make_context(runner))
        managed = registry.add(UUID_URL, "feature/x")
        registry.add_package_path("mylib", write_source("mylib.zig", ""))
        registry.add_package(Package("raw", "raw.zig"))
        runner.calls.clear()

        results = registry.update()

        assert results == {"uuid": SyncState.SYNCED}
        assert "clone" not in runner.subcommands()
        argvs = [argv for argv, _ in runner.calls]
        assert ("switch", "-q", "--", "feature/x") in argvs
        assert all(cwd == str(managed.path) for _, cwd in runner.calls)

    def test_update_keeps_dependency_names(self, make_context, fake_git, uuid_files) -> None:
        """Test update does not rescan imports."""
        runner = fake_git(files=uuid_files)
        registry = DependencyRegistry(make_context(runner))
        record = registry.add(UUID_URL, "main")
        record.entry.write_text('const n = @import("new");\n', encoding="utf-8")

        registry.update()

        assert registry.get("uuid").dependencies == ("rng", "bytes")

    def test_update_reports_dirty(self, make_context, fake_git, uuid_files) -> None:
        runner = fake_git(files=uuid_files)
        registry = DependencyRegistry(make_context(runner))
        registry.add(UUID_URL, "main")
        runner.dirty = True

        assert registry.update() == {"uuid": SyncState.DIRTY_SKIPPED}

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from zigdeps.constants import CACHE_DIR_ENV, LOCK_FILE_NAME
from zigdeps.exceptions import CacheLockError, FileOperationError
from zigdeps.core.cache import (
    CacheGuard,
    cache_dir_name,
    default_cache_root,
    split_cache_dir_name,
)


@pytest.mark.unit
class TestCacheDirName:
    """Tests for cache_dir_name / split_cache_dir_name."""

    def test_replaces_separators_and_appends_version(self) -> None:
        """Test the name has no path separators and ends in @version."""
        name = cache_dir_name("https://example.com/user/zig-uuid.git", "v1.2.0")

        assert name == "https:∕∕example.com∕user∕zig-uuid.git@v1.2.0"
        assert "/" not in name

    def test_is_stable(self) -> None:
        """Test the same inputs always give the same name."""
        url = "https://example.com/zig-uuid.git"

        assert cache_dir_name(url, "main") == cache_dir_name(url, "main")
        assert cache_dir_name(url, "main") != cache_dir_name(url, "dev")

    def test_version_with_slash(self) -> None:
        """Test branch names containing '/' stay a single path component."""
        name = cache_dir_name("https://example.com/x.git", "feature/fast")

        assert Path(name).name == name

    def test_backslashes_replaced(self) -> None:
        """Test Windows separators are replaced too."""
        assert "\\" not in cache_dir_name("C:\\repos\\x", "main")

    @pytest.mark.parametrize(
        "url, version",
        [
            ("https://example.com/zig-uuid.git", "main"),
            ("git@github.com:user/zig-uuid.git", "v1.0.0"),
            ("https://example.com/x.git", "feature/fast"),
            ("file:///srv/git/repo", "0123abcd"),
        ],
    )
    def test_split_recovers_version(self, url: str, version: str) -> None:
        """Test the version label is recovered from a directory name."""
        recovered_url, recovered_version = split_cache_dir_name(cache_dir_name(url, version))

        assert recovered_version == version
        assert recovered_url == url

    @pytest.mark.parametrize("name", ["no-delimiter", "@main", "https:∕∕x@"])
    def test_split_rejects_malformed(self, name: str) -> None:
        """Test names without a url and version raise ValueError."""
        with pytest.raises(ValueError):
            split_cache_dir_name(name)


@pytest.mark.unit
class TestDefaultCacheRoot:
    """Tests for default_cache_root."""

    def test_environment_override(self, tmp_path: Path) -> None:
        """Test ZIGDEPS_CACHE_DIR wins over platform defaults."""
        with patch.dict("os.environ", {CACHE_DIR_ENV: str(tmp_path / "c")}):
            assert default_cache_root() == tmp_path / "c"

    def test_xdg_cache_home(self, tmp_path: Path) -> None:
        """Test XDG_CACHE_HOME is honoured on non-Windows platforms."""
        env = {"XDG_CACHE_HOME": str(tmp_path)}
        with patch.dict("os.environ", env), patch("zigdeps.core.cache.sys.platform", "linux"):
            with patch.dict("os.environ", {CACHE_DIR_ENV: ""}):
                assert default_cache_root() == tmp_path / "zigdeps"

    def test_home_fallback(self, tmp_path: Path) -> None:
        """Test ~/.cache/zigdeps is used when nothing is configured."""
        with patch.dict("os.environ", {CACHE_DIR_ENV: "", "XDG_CACHE_HOME": ""}), patch(
            "zigdeps.core.cache.sys.platform", "linux"
        ), patch("zigdeps.core.cache.Path.home", return_value=tmp_path):
            assert default_cache_root() == tmp_path / ".cache" / "zigdeps"


@pytest.mark.unit
class TestCacheGuard:
    """Tests for CacheGuard locking."""

    def test_creates_root_and_lock_file(self, tmp_path: Path) -> None:
        """Test acquire creates a missing cache root and its lock file."""
        root = tmp_path / "nested" / "cache"
        guard = CacheGuard(root)

        guard.acquire()

        assert root.is_dir()
        assert (root / LOCK_FILE_NAME).exists()
        assert guard.locked

    def test_existing_root_is_fine(self, tmp_path: Path) -> None:
        """Test an existing cache root is not an error."""
        guard = CacheGuard(tmp_path)

        guard.acquire()

        assert guard.locked

    def test_second_guard_fails_fast(self, tmp_path: Path) -> None:
        """Test a second run on a locked root fails and the first keeps it."""
        first = CacheGuard(tmp_path)
        first.acquire()
        second = CacheGuard(tmp_path)

        with pytest.raises(CacheLockError) as exc_info:
            second.acquire()

        assert exc_info.value.lock_path == str(tmp_path.resolve() / LOCK_FILE_NAME)
        assert first.locked
        assert not second.locked

    def test_reacquire_is_noop(self, tmp_path: Path) -> None:
        """Test acquiring twice on one guard does not deadlock itself."""
        guard = CacheGuard(tmp_path)
        guard.acquire()
        guard.acquire()

        assert guard.locked

    def test_root_is_a_file(self, tmp_path: Path) -> None:
        """Test an unusable cache root is an environment error."""
        blocker = tmp_path / "cache"
        blocker.write_text("not a directory")

        with pytest.raises(FileOperationError):
            CacheGuard(blocker).acquire()

    def test_unwritable_lock_file(self, tmp_path: Path) -> None:
        """Test an OS error opening the lock names the lock path."""
        with patch("zigdeps.core.cache.FileLock") as file_lock:
            file_lock.return_value.acquire.side_effect = PermissionError("denied")
            guard = CacheGuard(tmp_path)

            with pytest.raises(FileOperationError) as exc_info:
                guard.acquire()

        assert exc_info.value.file_path == str(tmp_path.resolve() / LOCK_FILE_NAME)
        assert isinstance(exc_info.value.original_error, PermissionError)
        assert not guard.locked

    def test_path_for(self, tmp_path: Path) -> None:
        """Test working copies live directly under the root."""
        guard = CacheGuard(tmp_path)

        path = guard.path_for("https://example.com/zig-uuid.git", "main")

        assert path.parent == tmp_path
        assert path.name.endswith("@main")

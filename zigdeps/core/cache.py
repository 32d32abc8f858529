"""Shared dependency cache: layout and cross-process guard.

Every managed dependency lives in one directory per ``(url, version)``
pair directly under the cache root::

    <root>/
        zigdeps.lock
        https:∕∕github.com∕user∕zig-uuid.git@main
        https:∕∕github.com∕user∕zig-uuid.git@v1.2.0

Directory names are a pure function of ``(url, version)`` so repeated runs
always reconcile the same working copy. Only one resolution run may touch
the cache at a time; :class:`CacheGuard` enforces that with a non-blocking
exclusive lock held for the lifetime of the process.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional, Tuple, Union

from filelock import FileLock, Timeout

from zigdeps.exceptions import CacheLockError, FileOperationError
from zigdeps.utils.logger import get_logger
from zigdeps.utils.filesystem import ensure_directory
from zigdeps.constants import (
    CACHE_DIR_ENV,
    CACHE_DIR_NAME,
    LOCK_FILE_NAME,
    PATH_SEPARATORS,
    PATH_SEPARATOR_PLACEHOLDER,
    VERSION_DELIMITER,
)

logger = get_logger("cache")

__all__ = [
    "CacheGuard",
    "cache_dir_name",
    "split_cache_dir_name",
    "default_cache_root",
]


def _escape(text: str) -> str:
    for sep in PATH_SEPARATORS:
        text = text.replace(sep, PATH_SEPARATOR_PLACEHOLDER)
    return text


def cache_dir_name(url: str, version: str) -> str:
    """Return the cache directory name for ``url`` at ``version``.

    Example::

        >>> cache_dir_name("https://example.com/zig-uuid.git", "main")
        'https:∕∕example.com∕zig-uuid.git@main'
    """
    return f"{_escape(url)}{VERSION_DELIMITER}{_escape(version)}"


def split_cache_dir_name(name: str) -> Tuple[str, str]:
    """Recover ``(url, version)`` from a cache directory name.

    The split happens on the last ``@`` since SSH-style URLs contain one.
    Separators inside the version label (``feature/x``) are restored as
    ``/``.

    Raises:
        ValueError: ``name`` has no version delimiter.
    """
    url, delim, version = name.rpartition(VERSION_DELIMITER)
    if not delim or not url or not version:
        raise ValueError(f"Not a cache directory name: {name!r}")
    return (
        url.replace(PATH_SEPARATOR_PLACEHOLDER, "/"),
        version.replace(PATH_SEPARATOR_PLACEHOLDER, "/"),
    )


def default_cache_root() -> Path:
    """Return the cache root, honouring ``ZIGDEPS_CACHE_DIR``."""
    override = os.environ.get(CACHE_DIR_ENV)
    if override:
        return Path(override).expanduser()

    if sys.platform == "win32":
        base = os.environ.get("LOCALAPPDATA")
        if base:
            return Path(base) / CACHE_DIR_NAME
    else:
        base = os.environ.get("XDG_CACHE_HOME")
        if base:
            return Path(base) / CACHE_DIR_NAME

    return Path.home() / ".cache" / CACHE_DIR_NAME


class CacheGuard:
    """Owns the cache root and the exclusive lock on it.

    There is no ``release``; the lock is held until the
    guard is garbage collected or the process exits.

    Example::

        >>> guard = CacheGuard(Path("/tmp/zigdeps-cache"))
        >>> guard.acquire()
        >>> guard.path_for("https://example.com/zig-uuid.git", "main")
        PosixPath('/tmp/zigdeps-cache/https:∕∕example.com∕zig-uuid.git@main')
    """

    def __init__(self, root: Optional[Union[str, Path]] = None) -> None:
        self.root: Path = Path(root) if root is not None else default_cache_root()
        self._lock: Optional[FileLock] = None

    @property
    def lock_path(self) -> Path:
        return self.root / LOCK_FILE_NAME

    @property
    def locked(self) -> bool:
        return self._lock is not None and self._lock.is_locked

    def acquire(self) -> None:
        """Create the cache root if needed and take the lock.

        Calling this again on a guard that already holds the lock is a
        no-op.

        Raises:
            FileOperationError: The cache root cannot be created or the lock
                file cannot be opened.
            CacheLockError: Another run already holds the lock.
        """
        if self.locked:
            return

        self.root = ensure_directory(self.root)

        lock = FileLock(str(self.lock_path), timeout=0)
        try:
            lock.acquire()
        except Timeout as exc:
            raise CacheLockError(
                f"Cache is locked by another zigdeps run: {self.root}",
                lock_path=str(self.lock_path),
            ) from exc
        except OSError as exc:
            raise FileOperationError(
                f"Cannot lock cache: {exc}",
                file_path=str(self.lock_path),
                operation="lock",
                original_error=exc,
            ) from exc

        self._lock = lock
        logger.debug("Acquired cache lock %s", self.lock_path)

    def path_for(self, url: str, version: str) -> Path:
        """Return the working copy directory for ``url`` at ``version``."""
        return self.root / cache_dir_name(url, version)

"""Run-scoped state shared by every registration in one resolution run."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple, Union

from zigdeps.constants import MAX_FILE_SIZE
from zigdeps.core.cache import CacheGuard
from zigdeps.core.scanner import ImportScanner
from zigdeps.core.vcs import GitRunner, VersionSync
from zigdeps.utils.logger import get_logger

logger = get_logger("resolution")


class ResolutionContext:
    """Owns the cache lock, the git runner and the scanner's visited set.

    Constructing a context acquires the cache lock immediately, so a second
    run against the same cache root fails before touching anything.

    Args:
        cache_root: Cache directory; ``None`` selects
            :func:`~zigdeps.core.cache.default_cache_root`.
        max_file_size: Size ceiling for scanned source files.
        runner: Git runner; a default :class:`GitRunner` when ``None``.

    Raises:
        FileOperationError: The cache root cannot be created.
        CacheLockError: Another run holds the cache lock.
    """

    def __init__(
        self,
        cache_root: Optional[Union[str, Path]] = None,
        *,
        max_file_size: Optional[int] = MAX_FILE_SIZE,
        runner: Optional[GitRunner] = None,
    ) -> None:
        self.guard = CacheGuard(cache_root)
        self.guard.acquire()

        self.runner = runner or GitRunner()
        self.version_sync = VersionSync(self.runner)
        self.scanner = ImportScanner(max_file_size=max_file_size)

        logger.debug("Resolution context ready (cache=%s)", self.guard.root)

    @property
    def cache_root(self) -> Path:
        return self.guard.root

    def cache_path(self, url: str, version: str) -> Path:
        return self.guard.path_for(url, version)

    def scan(self, entry: Union[str, Path]) -> Tuple[str, ...]:
        """Scan one entry file as an independent resolution."""
        self.scanner.reset()
        return self.scanner.scan(entry)

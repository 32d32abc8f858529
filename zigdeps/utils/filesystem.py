"""
Filesystem utilities for zigdeps.

Helpers for reading source files under a size ceiling, creating the cache
directory, and probing a working copy for candidate files. All filesystem
errors are normalized to ``FileOperationError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Union

from zigdeps.utils.logger import get_logger
from zigdeps.exceptions import FileOperationError
from zigdeps.constants import MAX_FILE_SIZE


logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _validated_file(path: Path, *, operation: str = "read") -> Path:
    """Check that ``path`` is an existing regular file and resolve it."""
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation=operation,
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation=operation,
        )
    return path.resolve()


def file_size(file_path: PathLike) -> int:
    """Return the size of an existing file in bytes."""
    path = _validated_file(Path(file_path), operation="stat")
    try:
        return path.stat().st_size
    except OSError as exc:
        raise FileOperationError(
            f"Failed to stat file: {exc}",
            file_path=str(path),
            operation="stat",
            original_error=exc,
        ) from exc


def exceeds_size_limit(file_path: PathLike, max_size: Optional[int]) -> bool:
    """Return True if the file is larger than ``max_size`` bytes."""
    return max_size is not None and file_size(file_path) > max_size


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Read a text file, refusing anything above ``max_size`` bytes.

    Undecodable bytes are replaced rather than rejected: only the import
    directives matter to callers, and those are ASCII.

    Args:
        file_path: Path to the file.
        max_size: Maximum allowed file size in bytes (None disables limit).
        encoding: Text encoding.

    Returns:
        File contents as a string.
    """
    path = _validated_file(Path(file_path))
    size = file_size(path)

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        return path.read_bytes().decode(encoding, errors="replace")
    except OSError as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def ensure_directory(directory: PathLike) -> Path:
    """Create ``directory`` (and parents) if missing; return it resolved."""
    path = Path(directory).expanduser()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FileOperationError(
            f"Cannot create directory: {exc}",
            file_path=str(path),
            operation="mkdir",
            original_error=exc,
        ) from exc

    if not path.is_dir():
        raise FileOperationError(
            f"Not a directory: {path}",
            file_path=str(path),
            operation="mkdir",
        )
    return path.resolve()


def probe_files(directory: PathLike, candidates: Iterable[str]) -> Optional[Path]:
    """Return the first candidate (relative to ``directory``) that is a file."""
    root = Path(directory)
    for candidate in candidates:
        path = root / candidate
        if path.is_file():
            logger.debug("Probe hit: %s", path)
            return path
        logger.debug("Probe miss: %s", path)
    return None

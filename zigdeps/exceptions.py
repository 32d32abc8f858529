"""
Custom exception hierarchy for zigdeps.

This module defines structured exception types used across zigdeps.
All exceptions inherit from :class:`ZigdepsError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.

Every exception here is fatal for a resolution run. Soft conditions
(oversized source files, dirty working copies) are logged as warnings
and never raised.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional, Sequence


class ZigdepsError(Exception):
    """Base exception for all zigdeps errors.

    All zigdeps-specific exceptions should inherit from this class.
    It supports structured metadata via ``details`` for richer error
    reporting and debugging.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        # Internally normalize to a mutable dict
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


class ParseError(ZigdepsError):
    """Raised when an import directive in a source file is malformed.

    Args:
        message: Error description.
        file_path: Path to the file being scanned.
        line_number: Line number (1-indexed) where scanning failed.
        column: Column (1-indexed) where scanning failed.
    """

    __slots__ = ("file_path", "line_number", "column")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        line_number: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "file", file_path)
        _add_if(details, "line", line_number)
        _add_if(details, "column", column)

        super().__init__(message, details)

        self.file_path = file_path
        self.line_number = line_number
        self.column = column


class FileOperationError(ZigdepsError):
    """Raised when file system operations fail.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (stat/read/mkdir/lock).
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class ConfigError(ZigdepsError):
    """Raised when a configuration file is missing, unreadable, or invalid.

    Args:
        message: Error description.
        config_path: Path to the configuration file.
        option: Name of the offending option, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "config", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


class CacheLockError(ZigdepsError):
    """Raised when another resolution run already holds the cache lock."""

    __slots__ = ("lock_path",)

    def __init__(self, message: str, *, lock_path: Optional[str] = None) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "lock", lock_path)

        super().__init__(message, details)

        self.lock_path = lock_path


class VCSError(ZigdepsError):
    """Raised when a git command fails to spawn, exits non-zero, or is killed.

    The full command line is kept so the failure can be reproduced by hand.

    Args:
        message: Error description.
        command: The argv that failed.
        cwd: Working directory of the command.
        returncode: Exit status, if the process exited.
        signal: Signal number, if the process was killed.
    """

    __slots__ = ("command", "cwd", "returncode", "signal")

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] = (),
        cwd: Optional[str] = None,
        returncode: Optional[int] = None,
        signal: Optional[int] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "cwd", cwd)
        _add_if(details, "returncode", returncode)
        _add_if(details, "signal", signal)

        super().__init__(message, details)

        self.command = tuple(command)
        self.cwd = cwd
        self.returncode = returncode
        self.signal = signal


class ResolutionError(ZigdepsError):
    """Raised when the dependency registry cannot satisfy a request.

    Args:
        message: Error description.
        package_name: Name of the package involved.
    """

    __slots__ = ("package_name",)

    def __init__(
        self,
        message: str,
        *,
        package_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

        self.package_name = package_name
        if package_name is not None:
            self.details["package"] = package_name


class DuplicatePackageError(ResolutionError):
    """Raised when a package name is registered twice."""


class EntryNotFoundError(ResolutionError):
    """Raised when no entry file candidate exists in a working copy.

    Args:
        message: Error description.
        package_name: Package whose entry file was probed.
        candidates: Every path that was attempted, in probe order.
    """

    __slots__ = ("candidates",)

    def __init__(
        self,
        message: str,
        *,
        package_name: Optional[str] = None,
        candidates: Sequence[str] = (),
    ) -> None:
        super().__init__(message, package_name=package_name)

        self.candidates = tuple(candidates)

"""
Centralized constants for zigdeps.

This module defines immutable configuration values used across zigdeps,
including cache layout, source scanning rules, git command lines, and
logging formats. All values are intended to be treated as read-only.
"""

from typing import Final, FrozenSet, Sequence, Tuple

# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

#: Environment variable selecting an alternate cache root.
CACHE_DIR_ENV: Final[str] = "ZIGDEPS_CACHE_DIR"

#: Environment variable pointing at an explicit configuration file.
CONFIG_ENV: Final[str] = "ZIGDEPS_CONFIG"

#: Directory name used under the platform cache location.
CACHE_DIR_NAME: Final[str] = "zigdeps"

# ---------------------------------------------------------------------------
# Cache layout
# ---------------------------------------------------------------------------

#: Lock file created directly under the cache root.
LOCK_FILE_NAME: Final[str] = "zigdeps.lock"

#: Replaces path separators of a URL inside a cache directory name.
#: U+2215 DIVISION SLASH never appears in a URL unescaped.
PATH_SEPARATOR_PLACEHOLDER: Final[str] = "∕"

#: Characters replaced by the placeholder.
PATH_SEPARATORS: Final[Tuple[str, ...]] = ("/", "\\")

#: Separates the URL part from the version label in a cache directory name.
VERSION_DELIMITER: Final[str] = "@"

# ---------------------------------------------------------------------------
# Source scanning
# ---------------------------------------------------------------------------

#: Suffix shared by all scannable source files.
SOURCE_SUFFIX: Final[str] = ".zig"

#: Builtin call whose argument names an import.
IMPORT_BUILTIN: Final[str] = "@import"

#: Import arguments resolved by the compiler itself, never packages.
RESERVED_IMPORTS: Final[FrozenSet[str]] = frozenset({"std", "builtin", "root"})

#: Maximum size (in bytes) of a source file the scanner will read.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Package naming
# ---------------------------------------------------------------------------

#: Conventional repository name prefix stripped when deriving a name.
PACKAGE_NAME_PREFIX: Final[str] = "zig-"

#: Suffixes stripped (in this order) when deriving a name.
PACKAGE_NAME_SUFFIXES: Final[Sequence[str]] = (".git", "-zig", ".zig")

#: Entry file candidates, relative to the working copy. ``{name}`` is the
#: derived package name.
ENTRY_FILE_CANDIDATES: Final[Sequence[str]] = (
    "{name}.zig",
    "main.zig",
    "src/{name}.zig",
    "src/main.zig",
)

# ---------------------------------------------------------------------------
# Git command surface
# ---------------------------------------------------------------------------

GIT: Final[str] = "git"

#: Remote whose tracking refs decide whether a version label is a branch.
DEFAULT_REMOTE: Final[str] = "origin"

GIT_CLONE_ARGS: Final[Sequence[str]] = (
    "clone",
    "--depth=1",
    "--no-single-branch",
    "--shallow-submodules",
)
GIT_FETCH_ARGS: Final[Sequence[str]] = ("fetch", "--all", "-Ppqt")
GIT_DIFF_ARGS: Final[Sequence[str]] = ("diff", "--quiet", "HEAD")
GIT_SHOW_REF_ARGS: Final[Sequence[str]] = ("show-ref", "--verify", "--quiet")
GIT_SWITCH_BRANCH_ARGS: Final[Sequence[str]] = ("switch", "-q")
GIT_SWITCH_DETACHED_ARGS: Final[Sequence[str]] = ("switch", "-dq")
GIT_PULL_ARGS: Final[Sequence[str]] = ("pull", "-q", "--ff-only")

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

"""Configuration file loader for zigdeps.

Supports two formats:

- ``zigdeps.toml``: settings under the ``[zigdeps]`` table
- ``pyproject.toml``: settings under the ``[tool.zigdeps]`` table

Discovery order:

1. Explicit path from ``--config`` or ``ZIGDEPS_CONFIG``
2. ``zigdeps.toml`` in the current directory
3. ``pyproject.toml`` with a ``[tool.zigdeps]`` section

Precedence for the cache root: defaults < config file <
``ZIGDEPS_CACHE_DIR`` < ``--cache-dir``.

Example (``zigdeps.toml``)::

    [zigdeps]
    cache_dir = "~/.cache/zigdeps"
    max_file_size = 1048576

    [[zigdeps.dependencies]]          # managed: cloned and switched
    url = "https://github.com/user/zig-uuid.git"
    version = "v1.2.0"

    [[zigdeps.dependencies]]          # tracked: scanned only
    name = "mylib"
    path = "libs/mylib/main.zig"

    [[zigdeps.dependencies]]          # unmanaged: taken as-is
    name = "raw"
    path = "vendor/raw.zig"
    dependencies = ["uuid"]

Relative paths are resolved against the configuration file's directory.
"""

from __future__ import annotations

import os
import tomli as tomllib
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from zigdeps.exceptions import ConfigError
from zigdeps.models import Package
from zigdeps.utils.logger import get_logger
from zigdeps.constants import CACHE_DIR_ENV, MAX_FILE_SIZE

logger = get_logger("config")

CONFIG_FILE_NAME = "zigdeps.toml"


@dataclass(frozen=True)
class DependencySpec:
    """One ``[[zigdeps.dependencies]]`` entry.

    Exactly one shape is valid per entry: ``url`` + ``version`` (managed),
    ``name`` + ``path`` (tracked) or ``name`` + ``path`` +
    ``dependencies`` (unmanaged).
    """

    kind: str
    url: Optional[str] = None
    version: Optional[str] = None
    name: Optional[str] = None
    path: Optional[Path] = None
    dependencies: Tuple[str, ...] = ()

    def as_package(self) -> Package:
        return Package(name=self.name or "", path=str(self.path), dependencies=self.dependencies)


@dataclass
class ZigdepsConfig:
    """Parsed and validated zigdeps configuration.

    Attributes:
        cache_dir: Cache root from the file, or ``None`` for the default.
        max_file_size: Size ceiling in bytes for scanned source files.
        dependencies: Declared dependencies, in file order.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    cache_dir: Optional[Path] = None
    max_file_size: int = MAX_FILE_SIZE
    dependencies: List[DependencySpec] = field(default_factory=list)

    source_path: Optional[Path] = field(default=None, repr=False)

    def resolve_cache_root(self, override: Optional[Path] = None) -> Optional[Path]:
        """Apply precedence: CLI override, then environment, then file.

        Returns ``None`` when nothing is set, leaving the platform default
        to :func:`~zigdeps.core.cache.default_cache_root`.
        """
        if override is not None:
            return override
        env = os.environ.get(CACHE_DIR_ENV)
        if env:
            return Path(env).expanduser()
        return self.cache_dir

    def to_log_dict(self) -> Dict[str, Any]:
        return {
            "cache_dir": str(self.cache_dir) if self.cache_dir else None,
            "max_file_size": self.max_file_size,
            "dependencies": len(self.dependencies),
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    zigdeps_toml = cwd / CONFIG_FILE_NAME
    if zigdeps_toml.is_file():
        logger.debug("Found %s: %s", CONFIG_FILE_NAME, zigdeps_toml)
        return zigdeps_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_zigdeps_section(pyproject_toml):
        logger.debug("Found [tool.zigdeps] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_zigdeps_section(path: Path) -> bool:
    """Check if pyproject.toml contains a [tool.zigdeps] section.

    Unparseable files count as not having one.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return "zigdeps" in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> ZigdepsConfig:
    """Load and validate zigdeps configuration.

    Returns a default configuration when no file is found.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return ZigdepsConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("zigdeps", {})
    else:
        section = raw.get("zigdeps", {})

    if not section:
        logger.debug("Config file found but no zigdeps section, using defaults")
        return ZigdepsConfig(source_path=resolved)

    config = _parse_section(section, config_path=resolved)
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(section: Dict[str, Any], *, config_path: Path) -> ZigdepsConfig:
    """Validate the ``[zigdeps]`` table.

    Raises:
        ConfigError: Unknown keys or incorrect types.
    """
    config = ZigdepsConfig()
    base_dir = config_path.parent

    known_top = {"cache_dir", "max_file_size", "dependencies"}
    unknown_top = set(section) - known_top
    if unknown_top:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown_top))}",
            config_path=str(config_path),
        )

    if "cache_dir" in section:
        val = section["cache_dir"]
        if not isinstance(val, str) or not val:
            raise ConfigError(
                "cache_dir must be a non-empty string",
                config_path=str(config_path),
                option="cache_dir",
            )
        config.cache_dir = _resolve_path(val, base_dir)

    if "max_file_size" in section:
        val = section["max_file_size"]
        # bool is an int subclass; reject it explicitly
        if isinstance(val, bool) or not isinstance(val, int) or val <= 0:
            raise ConfigError(
                f"max_file_size must be a positive integer, got {val!r}",
                config_path=str(config_path),
                option="max_file_size",
            )
        config.max_file_size = val

    if "dependencies" in section:
        entries = section["dependencies"]
        if not isinstance(entries, list):
            raise ConfigError(
                "dependencies must be an array of tables",
                config_path=str(config_path),
                option="dependencies",
            )
        config.dependencies = [
            _parse_dependency(entry, index, base_dir=base_dir, config_path=config_path)
            for index, entry in enumerate(entries)
        ]

    return config


def _parse_dependency(
    entry: Any,
    index: int,
    *,
    base_dir: Path,
    config_path: Path,
) -> DependencySpec:
    option = f"dependencies[{index}]"

    def fail(message: str) -> ConfigError:
        return ConfigError(message, config_path=str(config_path), option=option)

    if not isinstance(entry, dict):
        raise fail("dependency entries must be tables")

    unknown = set(entry) - {"url", "version", "name", "path", "dependencies"}
    if unknown:
        raise fail(f"Unknown dependency keys: {', '.join(sorted(unknown))}")

    for key in ("url", "version", "name", "path"):
        if key in entry and (not isinstance(entry[key], str) or not entry[key]):
            raise fail(f"{key} must be a non-empty string")

    if "url" in entry:
        if "version" not in entry:
            raise fail("a dependency with a url needs a version")
        if set(entry) - {"url", "version"}:
            raise fail("a dependency with a url takes only url and version")
        return DependencySpec(kind="managed", url=entry["url"], version=entry["version"])

    if "name" not in entry or "path" not in entry:
        raise fail("a dependency needs either url and version, or name and path")
    if "version" in entry:
        raise fail("version is only valid together with url")

    path = _resolve_path(entry["path"], base_dir)

    if "dependencies" not in entry:
        return DependencySpec(kind="tracked", name=entry["name"], path=path)

    deps = entry["dependencies"]
    if not isinstance(deps, list) or not all(isinstance(d, str) for d in deps):
        raise fail("dependencies must be an array of strings")
    return DependencySpec(
        kind="unmanaged",
        name=entry["name"],
        path=path,
        dependencies=tuple(deps),
    )


def _resolve_path(value: str, base_dir: Path) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else base_dir / path

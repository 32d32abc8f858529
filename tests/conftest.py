from __future__ import annotations

import logging
import textwrap
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pytest

from zigdeps.core import ResolutionContext
from zigdeps.core.vcs import GitRunner
from zigdeps.exceptions import VCSError
from zigdeps.utils.console import reconfigure_console

REMOTE_PREFIX = "refs/remotes/origin/"


class FakeGitRunner(GitRunner):
    """Records git invocations instead of spawning processes.

    ``clone`` creates the destination directory and writes ``files`` into
    it so entry probing and scanning can run against the result.

    Args:
        dirty: Whether ``git diff`` reports uncommitted changes.
        branches: Names reported by ``show-ref`` as remote branches.
        files: Relative path -> content written on clone.
        fail_on: Subcommand (``"fetch"``, ``"pull"``, ...) that fails.
        diff_returncode: Overrides the ``git diff`` exit status.
    """

    def __init__(
        self,
        *,
        dirty: bool = False,
        branches: Iterable[str] = ("main",),
        files: Optional[Mapping[str, str]] = None,
        fail_on: Optional[str] = None,
        diff_returncode: Optional[int] = None,
    ) -> None:
        super().__init__()
        self.dirty = dirty
        self.branches = set(branches)
        self.files: Dict[str, str] = dict(files or {})
        self.fail_on = fail_on
        self.diff_returncode = diff_returncode
        self.calls: List[Tuple[Tuple[str, ...], Optional[str]]] = []

    def run(self, argv: Sequence[str], cwd=None) -> None:
        argv = tuple(argv)
        self.calls.append((argv, str(cwd) if cwd is not None else None))

        if argv[0] == self.fail_on:
            command = (self.executable, *argv)
            raise VCSError(
                "Command failed: " + " ".join(command),
                command=command,
                returncode=1,
            )

        if argv[0] == "clone":
            dest = Path(argv[-1])
            dest.mkdir(parents=True)
            for rel, content in self.files.items():
                target = dest / rel
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content, encoding="utf-8")

    def check(self, argv: Sequence[str], cwd=None) -> int:
        argv = tuple(argv)
        self.calls.append((argv, str(cwd) if cwd is not None else None))

        if argv[0] == "diff":
            if self.diff_returncode is not None:
                return self.diff_returncode
            return 1 if self.dirty else 0
        if argv[0] == "show-ref":
            ref = argv[-1]
            branch = ref[len(REMOTE_PREFIX) :] if ref.startswith(REMOTE_PREFIX) else None
            return 0 if branch in self.branches else 1
        return 0

    def subcommands(self) -> List[str]:
        return [argv[0] for argv, _ in self.calls]


@pytest.fixture(autouse=True)
def reset_zigdeps_logging() -> None:
    """Undo CLI logging setup so caplog sees zigdeps records."""
    root_logger = logging.getLogger("zigdeps")
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True
    reconfigure_console()
    yield
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True
    reconfigure_console()


@pytest.fixture
def write_source(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a dedented source file under ``tmp_path`` and return its path."""

    def _write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def make_context(cache_root: Path) -> Callable[..., ResolutionContext]:
    """Build resolution contexts over the test cache root with a fake runner."""

    def _make(runner: Optional[GitRunner] = None, **kwargs) -> ResolutionContext:
        return ResolutionContext(cache_root, runner=runner or FakeGitRunner(), **kwargs)

    return _make


@pytest.fixture
def fake_git() -> type:
    return FakeGitRunner

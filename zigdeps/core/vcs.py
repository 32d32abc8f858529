"""Git-backed version synchronization for managed dependencies.

Each managed dependency has a working copy at a fixed cache path. A sync
moves it through these states, one git command per transition::

    Absent ──clone──> Cloned ──fetch + diff──> Clean ──switch(+pull)──> Synced
                                       └─────> Dirty ──warn──> DirtySkipped

Uncommitted edits are never discarded: a dirty working copy is left
exactly as it is and a warning names the package.

Any git command that fails to spawn, exits non-zero, or dies from a signal
raises :class:`~zigdeps.exceptions.VCSError` carrying the full command
line. Nothing is retried.
"""

from __future__ import annotations

import os
import shlex
import subprocess
from pathlib import Path
from typing import Mapping, Optional, Sequence, Union

from zigdeps.models import SyncState
from zigdeps.exceptions import VCSError
from zigdeps.utils.logger import get_logger
from zigdeps.constants import (
    DEFAULT_REMOTE,
    GIT,
    GIT_CLONE_ARGS,
    GIT_DIFF_ARGS,
    GIT_FETCH_ARGS,
    GIT_PULL_ARGS,
    GIT_SHOW_REF_ARGS,
    GIT_SWITCH_BRANCH_ARGS,
    GIT_SWITCH_DETACHED_ARGS,
)

logger = get_logger("vcs")

__all__ = ["GitRunner", "VersionSync", "format_command"]

PathLike = Union[str, Path]


def format_command(argv: Sequence[str]) -> str:
    """Render an argv the way a user would type it."""
    return " ".join(shlex.quote(str(arg)) for arg in argv)


class GitRunner:
    """Runs git (or any) subprocesses with uniform failure handling.

    Args:
        executable: Program name or path used for ``git``.
        env: Environment for child processes; inherits the current one
            when ``None``.
    """

    def __init__(
        self,
        executable: str = GIT,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.executable = executable
        self.env = dict(env) if env is not None else None

    def _spawn(
        self,
        argv: Sequence[str],
        cwd: Optional[PathLike],
        *,
        quiet: bool,
    ) -> int:
        command = [self.executable, *argv]
        logger.debug("$ %s (cwd=%s)", format_command(command), cwd or os.getcwd())

        output = subprocess.DEVNULL if quiet else None
        try:
            completed = subprocess.run(
                command,
                cwd=str(cwd) if cwd is not None else None,
                env=self.env,
                stdin=subprocess.DEVNULL,
                stdout=output,
                stderr=output,
                check=False,
            )
        except OSError as exc:
            raise VCSError(
                f"Unable to spawn {self.executable}: {exc}",
                command=command,
                cwd=str(cwd) if cwd is not None else None,
            ) from exc

        if completed.returncode < 0:
            raise VCSError(
                f"Command terminated by signal: {format_command(command)}",
                command=command,
                cwd=str(cwd) if cwd is not None else None,
                signal=-completed.returncode,
            )
        return completed.returncode

    def run(self, argv: Sequence[str], cwd: Optional[PathLike] = None) -> None:
        """Run a command with inherited output; any failure is fatal."""
        returncode = self._spawn(argv, cwd, quiet=False)
        if returncode != 0:
            command = [self.executable, *argv]
            raise VCSError(
                f"Command failed: {format_command(command)}",
                command=command,
                cwd=str(cwd) if cwd is not None else None,
                returncode=returncode,
            )

    def check(self, argv: Sequence[str], cwd: Optional[PathLike] = None) -> int:
        """Run a probe quietly and return its exit status.

        Spawn failures and signals still raise :class:`VCSError`.
        """
        return self._spawn(argv, cwd, quiet=True)


class VersionSync:
    """Reconciles working copies with requested version labels.

    Branch detection looks at remote-tracking refs
    (``refs/remotes/origin/<version>``) so a branch that exists only on the
    remote is still treated as a branch; ``git switch`` then creates the
    local tracking branch on first use.
    """

    def __init__(
        self,
        runner: Optional[GitRunner] = None,
        *,
        remote: str = DEFAULT_REMOTE,
    ) -> None:
        self.runner = runner or GitRunner()
        self.remote = remote

    def sync(self, name: str, url: str, version: str, path: PathLike) -> SyncState:
        """Bring the working copy at ``path`` to ``version``.

        Args:
            name: Package name, used in diagnostics.
            url: Remote to clone from when the working copy is absent.
            version: Branch, tag or commit to switch to.
            path: Working copy directory.

        Returns:
            :attr:`SyncState.SYNCED` or :attr:`SyncState.DIRTY_SKIPPED`.

        Raises:
            VCSError: A git command failed.
        """
        path = Path(path)

        if not path.exists():
            logger.info("Cloning %s from %s", name, url)
            self.runner.run([*GIT_CLONE_ARGS, "--", url, str(path)])

        logger.info("Fetching %s", name)
        self.runner.run(list(GIT_FETCH_ARGS), path)

        if not self.is_clean(path):
            logger.warning(
                "Package %s contains uncommitted changes, not attempting to update (%s)",
                name,
                path,
            )
            return SyncState.DIRTY_SKIPPED

        if self.is_branch(path, version):
            logger.info("Switching %s to branch %s", name, version)
            self.runner.run([*GIT_SWITCH_BRANCH_ARGS, "--", version], path)
            self.runner.run(list(GIT_PULL_ARGS), path)
        else:
            logger.info("Switching %s to %s (detached)", name, version)
            self.runner.run([*GIT_SWITCH_DETACHED_ARGS, "--", version], path)

        return SyncState.SYNCED

    def is_clean(self, path: PathLike) -> bool:
        """Return True if the working copy has no changes against HEAD.

        Raises:
            VCSError: ``git diff`` failed for a reason other than finding
                differences.
        """
        returncode = self.runner.check(list(GIT_DIFF_ARGS), path)
        if returncode == 0:
            return True
        if returncode == 1:
            return False

        command = [self.runner.executable, *GIT_DIFF_ARGS]
        raise VCSError(
            f"Command failed: {format_command(command)}",
            command=command,
            cwd=str(path),
            returncode=returncode,
        )

    def is_branch(self, path: PathLike, version: str) -> bool:
        ref = f"refs/remotes/{self.remote}/{version}"
        return self.runner.check([*GIT_SHOW_REF_ARGS, "--", ref], path) == 0

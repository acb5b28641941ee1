"""Production Git implementation using subprocess."""

import subprocess
from pathlib import Path

from retcon.gateway.git.abc import Git
from retcon.gateway.git.branch_ops.abc import GitBranchOps
from retcon.gateway.git.branch_ops.real import RealGitBranchOps
from retcon.gateway.git.commit_ops.abc import GitCommitOps
from retcon.gateway.git.commit_ops.real import RealGitCommitOps
from retcon.gateway.git.rebase_ops.abc import GitRebaseOps
from retcon.gateway.git.rebase_ops.real import RealGitRebaseOps
from retcon.gateway.git.remote_ops.abc import GitRemoteOps
from retcon.gateway.git.remote_ops.real import RealGitRemoteOps
from retcon.gateway.git.status_ops.abc import GitStatusOps
from retcon.gateway.git.status_ops.real import RealGitStatusOps
from retcon.gateway.time.abc import Time
from retcon.gateway.time.real import RealTime
from retcon.subprocess_utils import copied_env_for_git_subprocess


class RealGit(Git):
    """Production implementation using subprocess.

    All git operations execute actual git commands via subprocess.
    """

    def __init__(self, time: Time | None = None) -> None:
        """Initialize RealGit with optional Time provider.

        Args:
            time: Time provider for lock waiting. Defaults to RealTime().
        """
        self._time = time if time is not None else RealTime()
        self._branch = RealGitBranchOps()
        self._commit = RealGitCommitOps(time=self._time)
        self._rebase = RealGitRebaseOps(time=self._time, get_git_dir=self.get_git_dir)
        self._remote = RealGitRemoteOps()
        self._status = RealGitStatusOps()

    @property
    def branch(self) -> GitBranchOps:
        return self._branch

    @property
    def commit(self) -> GitCommitOps:
        return self._commit

    @property
    def rebase(self) -> GitRebaseOps:
        return self._rebase

    @property
    def remote(self) -> GitRemoteOps:
        return self._remote

    @property
    def status(self) -> GitStatusOps:
        return self._status

    def get_repository_root(self, cwd: Path) -> Path | None:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
            env=copied_env_for_git_subprocess(),
        )
        if result.returncode != 0:
            return None
        return Path(result.stdout.strip()).resolve()

    def get_git_dir(self, cwd: Path) -> Path | None:
        result = subprocess.run(
            ["git", "rev-parse", "--git-dir"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
            env=copied_env_for_git_subprocess(),
        )
        if result.returncode != 0:
            return None

        git_dir = Path(result.stdout.strip())
        if not git_dir.is_absolute():
            git_dir = cwd / git_dir
        return git_dir.resolve()

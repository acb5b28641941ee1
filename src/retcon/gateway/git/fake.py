"""Fake git operations for testing.

FakeGit is an in-memory implementation composed of the fake sub-gateways, all
sharing one FakeRepository. Construct instances directly with keyword
arguments.
"""

from __future__ import annotations

from pathlib import Path

from retcon.gateway.git.abc import Git
from retcon.gateway.git.branch_ops.fake import FakeGitBranchOps
from retcon.gateway.git.commit_ops.fake import FakeGitCommitOps
from retcon.gateway.git.fake_repo import FakeRepository
from retcon.gateway.git.rebase_ops.fake import FakeGitRebaseOps
from retcon.gateway.git.remote_ops.fake import FakeGitRemoteOps
from retcon.gateway.git.status_ops.fake import FakeGitStatusOps


class FakeGit(Git):
    """In-memory fake implementation of git operations.

    Constructor Injection:
    ---------------------
    All INITIAL state lives in the FakeRepository passed in (or a fresh one at
    /fake/repo). Sub-gateway fakes may be passed to configure failures; any
    omitted sub-gateway is built around the same repository.

    Examples:
    ---------
        repo = FakeRepository(root=Path("/repo"))
        first = repo.add_commit("First")
        git = FakeGit(repo=repo)

        git.commit.amend_head(repo.root, message="Edited", author_timestamp=None,
                              commit_timestamp=None)
        assert git.commit.get_head_sha(repo.root) != first.sha
    """

    def __init__(
        self,
        *,
        repo: FakeRepository | None = None,
        branch: FakeGitBranchOps | None = None,
        commit: FakeGitCommitOps | None = None,
        rebase: FakeGitRebaseOps | None = None,
        remote: FakeGitRemoteOps | None = None,
        status: FakeGitStatusOps | None = None,
    ) -> None:
        self._repo = repo if repo is not None else FakeRepository(root=Path("/fake/repo"))
        self._branch = branch if branch is not None else FakeGitBranchOps(self._repo)
        self._commit = commit if commit is not None else FakeGitCommitOps(self._repo)
        self._rebase = rebase if rebase is not None else FakeGitRebaseOps(self._repo)
        self._remote = remote if remote is not None else FakeGitRemoteOps()
        self._status = status if status is not None else FakeGitStatusOps()

    @property
    def repo(self) -> FakeRepository:
        """The shared in-memory repository (test access)."""
        return self._repo

    @property
    def branch(self) -> FakeGitBranchOps:
        return self._branch

    @property
    def commit(self) -> FakeGitCommitOps:
        return self._commit

    @property
    def rebase(self) -> FakeGitRebaseOps:
        return self._rebase

    @property
    def remote(self) -> FakeGitRemoteOps:
        return self._remote

    @property
    def status(self) -> FakeGitStatusOps:
        return self._status

    def get_repository_root(self, cwd: Path) -> Path | None:
        if cwd == self._repo.root or self._repo.root in cwd.parents:
            return self._repo.root
        return None

    def get_git_dir(self, cwd: Path) -> Path | None:
        if self.get_repository_root(cwd) is None:
            return None
        return self._repo.git_dir

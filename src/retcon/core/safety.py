"""Checks that must pass before any history is rewritten."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from retcon.core.errors import DirtyWorkingTreeError, IneligibleCommitError
from retcon.core.types import RepositoryHandle
from retcon.gateway.git.abc import Git

logger = logging.getLogger(__name__)


class SafetyVerifier:
    """Decides whether commits may be rewritten and whether the tree is clean.

    A commit reachable from any remote-tracking branch is treated as pushed,
    which covers the configured upstream as well as every other remote branch.
    """

    def __init__(self, git: Git) -> None:
        self._git = git

    def is_eligible_for_edit(self, repo: RepositoryHandle, commit_hash: str) -> bool:
        return not self._containing_remote_branches(repo, commit_hash)

    def is_working_tree_clean(self, repo: RepositoryHandle) -> bool:
        return self._git.status.get_porcelain_status(repo.root) == ""

    def ensure_eligible(self, repo: RepositoryHandle, commit_hashes: Iterable[str]) -> None:
        """Raise for the first commit that a remote-tracking branch contains.

        Raises:
            IneligibleCommitError: Naming the commit and the branches containing it
        """
        for commit_hash in commit_hashes:
            remote_branches = self._containing_remote_branches(repo, commit_hash)
            if remote_branches:
                raise IneligibleCommitError(commit_hash, remote_branches=remote_branches)

    def ensure_working_tree_clean(self, repo: RepositoryHandle, *, allow_dirty: bool) -> None:
        """Raise unless the tree is clean or the caller explicitly allows a dirty one.

        Raises:
            DirtyWorkingTreeError: With the porcelain status lines
        """
        status = self._git.status.get_porcelain_status(repo.root)
        if status == "":
            return
        if allow_dirty:
            logger.debug("Proceeding with dirty working tree (autostash):\n%s", status)
            return
        raise DirtyWorkingTreeError(status)

    def _containing_remote_branches(self, repo: RepositoryHandle, commit_hash: str) -> list[str]:
        return self._git.branch.list_remote_branches_containing(repo.root, commit_hash)

"""Resolve the current branch and its upstream from git config."""

from __future__ import annotations

import logging

from retcon.core.errors import NotOnBranchError
from retcon.core.types import BranchSnapshot, RepositoryHandle
from retcon.gateway.git.abc import Git

logger = logging.getLogger(__name__)


def resolve_branch_snapshot(git: Git, repo: RepositoryHandle) -> BranchSnapshot:
    """Read the current branch and its configured upstream.

    The upstream comes from `branch.<name>.remote` and `branch.<name>.merge`.
    A remote of "." means the branch tracks another local branch. For a real
    remote, has_upstream is True only when the remote is configured and the
    remote-tracking ref exists locally.

    Raises:
        NotOnBranchError: If HEAD is detached
    """
    branch = git.branch.get_current_branch(repo.root)
    if branch is None:
        raise NotOnBranchError()

    remote = git.branch.get_branch_config(repo.root, branch, "remote")
    merge = git.branch.get_branch_config(repo.root, branch, "merge")
    if remote is None or merge is None:
        return BranchSnapshot(current_branch=branch, upstream_branch=None, has_upstream=False)

    merge_branch = merge.removeprefix("refs/heads/")
    if remote == ".":
        upstream = merge_branch
        exists = git.branch.resolve_ref(repo.root, f"refs/heads/{merge_branch}") is not None
        return BranchSnapshot(current_branch=branch, upstream_branch=upstream, has_upstream=exists)

    upstream = f"{remote}/{merge_branch}"
    if remote not in git.branch.list_remotes(repo.root):
        logger.debug("Upstream remote %s of %s is not configured", remote, branch)
        return BranchSnapshot(current_branch=branch, upstream_branch=upstream, has_upstream=False)

    exists = git.branch.resolve_ref(repo.root, f"refs/remotes/{upstream}") is not None
    return BranchSnapshot(current_branch=branch, upstream_branch=upstream, has_upstream=exists)


def upstream_remote(git: Git, repo: RepositoryHandle, branch: str) -> str | None:
    """Name of the remote the branch tracks, or None for no or a local upstream."""
    remote = git.branch.get_branch_config(repo.root, branch, "remote")
    if remote is None or remote == ".":
        return None
    return remote

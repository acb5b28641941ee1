"""List the commits on the current branch that have not been pushed."""

from __future__ import annotations

import logging

from retcon.core.commit_parser import LOG_FORMAT, parse_commits
from retcon.core.types import CommitRecord, RepositoryHandle, ScanResult
from retcon.core.upstream import resolve_branch_snapshot, upstream_remote
from retcon.gateway.git.abc import Git
from retcon.subprocess_utils import CommandFailedError

logger = logging.getLogger(__name__)


class CommitLogReader:
    """Reads local-only commits, newest first.

    With an upstream, "local-only" means `<upstream>..HEAD`. Without one every
    commit on HEAD is listed; the safety verifier still rejects any of them
    that a remote-tracking branch contains.
    """

    def __init__(self, git: Git) -> None:
        self._git = git

    def scan(self, repo: RepositoryHandle, *, fetch: bool) -> ScanResult:
        """List local-only commits along with the branch state they were read against.

        Args:
            repo: Repository to read
            fetch: Fetch the upstream remote first; a failed fetch is logged and ignored

        Raises:
            NotOnBranchError: If HEAD is detached
        """
        snapshot = resolve_branch_snapshot(self._git, repo)

        if snapshot.has_upstream and fetch:
            remote = upstream_remote(self._git, repo, snapshot.current_branch)
            if remote is not None:
                self._fetch(repo, remote)
                # The tracking ref can disappear on fetch (pruned upstream)
                snapshot = resolve_branch_snapshot(self._git, repo)

        if self._git.branch.resolve_ref(repo.root, "HEAD") is None:
            logger.debug("Branch %s has no commits yet", snapshot.current_branch)
            return ScanResult(commits=[], snapshot=snapshot)

        if snapshot.has_upstream and snapshot.upstream_branch is not None:
            commits = self._read_range(repo, f"{snapshot.upstream_branch}..HEAD")
        else:
            commits = self._read_range(repo, None)
        return ScanResult(commits=commits, snapshot=snapshot)

    def list_local_commits(self, repo: RepositoryHandle, *, fetch: bool) -> list[CommitRecord]:
        return self.scan(repo, fetch=fetch).commits

    def _fetch(self, repo: RepositoryHandle, remote: str) -> None:
        try:
            self._git.remote.fetch_remote(repo.root, remote)
        except CommandFailedError as e:
            logger.warning("Fetch from %s failed, listing against local refs: %s", remote, e)

    def _read_range(self, repo: RepositoryHandle, revision_range: str | None) -> list[CommitRecord]:
        try:
            output = self._git.commit.read_log(
                repo.root, revision_range=revision_range, log_format=LOG_FORMAT
            )
        except CommandFailedError as e:
            if revision_range is None:
                raise
            logger.debug("Listing %s failed, falling back to all commits: %s", revision_range, e)
            output = self._git.commit.read_log(
                repo.root, revision_range=None, log_format=LOG_FORMAT
            )
        return parse_commits(output)

"""Fake Git commit operations for testing."""

from __future__ import annotations

import re
from pathlib import Path
from typing import NamedTuple

from retcon.gateway.git.commit_ops.abc import GitCommitOps
from retcon.gateway.git.fake_repo import FakeCommit, FakeRepository
from retcon.subprocess_utils import CommandFailedError

_PLACEHOLDER = re.compile(r"%(x[0-9a-fA-F]{2}|an|ae|at|ct|H|B|s)")


class AmendCall(NamedTuple):
    """Record of an amend_head() call."""

    message: str | None
    author_timestamp: int | None
    commit_timestamp: int | None


def render_log_format(commit: FakeCommit, log_format: str) -> str:
    """Expand the subset of git pretty-format placeholders retcon uses."""

    def expand(match: re.Match[str]) -> str:
        token = match.group(1)
        if token.startswith("x"):
            return chr(int(token[1:], 16))
        values = {
            "H": commit.sha,
            "an": commit.author_name,
            "ae": commit.author_email,
            "at": str(commit.author_timestamp),
            "ct": str(commit.commit_timestamp),
            "B": commit.message + "\n",
            "s": commit.message.splitlines()[0] if commit.message else "",
        }
        return values[token]

    return _PLACEHOLDER.sub(expand, log_format)


class FakeGitCommitOps(GitCommitOps):
    """In-memory fake implementation of Git commit operations.

    Reads and mutates a shared FakeRepository. amend_head() rewrites HEAD the
    way git does: new hash, same parent.

    Constructor Injection:
    ---------------------
    - amend_raises: Exception to raise from amend_head()
    - read_log_raises: Mapping of revision range -> exception to raise

    Mutation Tracking:
    -----------------
    - amend_calls: List of AmendCall from amend_head()
    - log_ranges: Revision ranges passed to read_log()
    """

    def __init__(
        self,
        repo: FakeRepository,
        *,
        amend_raises: Exception | None = None,
        read_log_raises: dict[str, Exception] | None = None,
    ) -> None:
        self._repo = repo
        self._amend_raises = amend_raises
        self._read_log_raises = read_log_raises if read_log_raises is not None else {}
        self._amend_calls: list[AmendCall] = []
        self._log_ranges: list[str | None] = []

    def amend_head(
        self,
        cwd: Path,
        *,
        message: str | None,
        author_timestamp: int | None,
        commit_timestamp: int | None,
    ) -> None:
        self._amend_calls.append(AmendCall(message, author_timestamp, commit_timestamp))
        if self._amend_raises is not None:
            raise self._amend_raises
        head = self._repo.head_sha()
        if head is None:
            raise CommandFailedError(
                cmd=["git", "commit", "--amend"],
                operation_context="amend HEAD commit",
                returncode=128,
                stderr="fatal: You have nothing to amend.",
            )
        self._repo.rewrite_commit(
            head,
            message=message,
            author_timestamp=author_timestamp,
            commit_timestamp=commit_timestamp,
        )

    def get_head_sha(self, cwd: Path) -> str:
        head = self._repo.head_sha()
        if head is None:
            raise CommandFailedError(
                cmd=["git", "rev-parse", "HEAD"],
                operation_context="resolve HEAD",
                returncode=128,
                stderr="fatal: ambiguous argument 'HEAD'",
            )
        return head

    def get_parent_sha(self, cwd: Path, commit_sha: str) -> str | None:
        commit = self._repo.commits.get(commit_sha)
        if commit is None:
            return None
        return commit.parent

    def read_log(self, cwd: Path, *, revision_range: str | None, log_format: str) -> str:
        self._log_ranges.append(revision_range)
        if revision_range is not None and revision_range in self._read_log_raises:
            raise self._read_log_raises[revision_range]

        chain = self._commits_in_range(
            revision_range, cmd=["git", "log", f"--format={log_format}"]
        )
        return "\n".join(render_log_format(commit, log_format) for commit in chain).strip()

    def list_merge_commits(self, cwd: Path, revision_range: str) -> list[str]:
        chain = self._commits_in_range(revision_range, cmd=["git", "rev-list", "--merges"])
        return [commit.sha for commit in chain if commit.sha in self._repo.merge_commits]

    def _commits_in_range(self, revision_range: str | None, *, cmd: list[str]) -> list[FakeCommit]:
        chain = self._repo.ancestry(self._repo.head_sha())
        if revision_range is None:
            return chain
        exclude_ref, _, _ = revision_range.partition("..")
        exclude_sha = self._repo.resolve(exclude_ref)
        if exclude_sha is None:
            raise CommandFailedError(
                cmd=[*cmd, revision_range],
                operation_context=f"read log for {revision_range}",
                returncode=128,
                stderr=f"fatal: ambiguous argument '{revision_range}'",
            )
        excluded = {commit.sha for commit in self._repo.ancestry(exclude_sha)}
        return [commit for commit in chain if commit.sha not in excluded]

    @property
    def amend_calls(self) -> list[AmendCall]:
        return list(self._amend_calls)

    @property
    def log_ranges(self) -> list[str | None]:
        return list(self._log_ranges)

"""Value types shared across the rewrite engine."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from retcon.core.errors import NotInRepositoryError

if TYPE_CHECKING:
    from retcon.gateway.git.abc import Git


@dataclass(frozen=True)
class RepositoryHandle:
    """An explicit repository passed to every engine call.

    Attributes:
        root: Work tree root, used as cwd for every git command
        git_dir: Git directory holding refs and rebase state
    """

    root: Path
    git_dir: Path


def discover_repository(git: Git, cwd: Path) -> RepositoryHandle:
    """Locate the repository containing cwd.

    Raises:
        NotInRepositoryError: If cwd is not inside a git work tree
    """
    root = git.get_repository_root(cwd)
    if root is None:
        raise NotInRepositoryError(cwd)
    git_dir = git.get_git_dir(root)
    if git_dir is None:
        raise NotInRepositoryError(cwd)
    return RepositoryHandle(root=root, git_dir=git_dir)


@dataclass(frozen=True)
class CommitRecord:
    """One commit as listed by the log reader."""

    hash: str
    short_hash: str
    author_name: str
    author_email: str
    author_timestamp: int
    commit_timestamp: int
    message: str

    @property
    def subject(self) -> str:
        """First line of the message."""
        return self.message.split("\n", 1)[0]


@dataclass(frozen=True)
class EditRequest:
    """Requested metadata changes for one commit.

    Fields left as None are not changed. Timestamps are epoch seconds.
    """

    commit_hash: str
    new_message: str | None = None
    new_author_timestamp: int | None = None
    new_commit_timestamp: int | None = None

    @property
    def is_noop(self) -> bool:
        return (
            self.new_message is None
            and self.new_author_timestamp is None
            and self.new_commit_timestamp is None
        )


@dataclass(frozen=True)
class BranchSnapshot:
    """Branch and upstream state observed by a single scan."""

    current_branch: str
    upstream_branch: str | None
    has_upstream: bool


@dataclass(frozen=True)
class ScanResult:
    """Unpushed commits (newest first) plus the branch state they were read against."""

    commits: list[CommitRecord]
    snapshot: BranchSnapshot

    @property
    def current_branch(self) -> str:
        return self.snapshot.current_branch

    @property
    def upstream_branch(self) -> str | None:
        return self.snapshot.upstream_branch

    @property
    def has_upstream(self) -> bool:
        return self.snapshot.has_upstream


@dataclass(frozen=True)
class BackupPointer:
    """A backup branch created before a rewrite."""

    branch_name: str
    commit_hash: str
    source_branch: str


@dataclass(frozen=True)
class RewriteOutcome:
    """Result of a completed rewrite session.

    Attributes:
        backup: Backup branch holding the pre-rewrite HEAD
        applied: Requests that were applied, in application order
        hash_map: Original commit hash -> hash after the rewrite
        scan: Fresh scan taken after the last edit
    """

    backup: BackupPointer
    applied: list[EditRequest]
    hash_map: dict[str, str]
    scan: ScanResult

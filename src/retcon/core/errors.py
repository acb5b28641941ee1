"""Errors raised by the rewrite engine.

Every error derives from RetconError so the CLI can report any of them as a
user-facing failure. Each carries the values needed to explain what happened
and, where a backup exists, how to get back to where the user started.
"""

from __future__ import annotations

from pathlib import Path


class RetconError(Exception):
    """Base class for rewrite engine errors."""


class NotInRepositoryError(RetconError):
    def __init__(self, cwd: Path) -> None:
        self.cwd = cwd
        super().__init__(f"Not inside a git repository: {cwd}")


class NotOnBranchError(RetconError):
    def __init__(self) -> None:
        super().__init__("HEAD is detached; check out a branch before editing commits")


class IneligibleCommitError(RetconError):
    """The commit has been pushed (or is not an unpushed commit of this branch)."""

    def __init__(self, commit_hash: str, *, remote_branches: list[str] | None = None) -> None:
        self.commit_hash = commit_hash
        self.remote_branches = remote_branches if remote_branches is not None else []
        message = f"Commit {commit_hash[:7]} cannot be edited"
        if self.remote_branches:
            message += f": it is contained in {', '.join(self.remote_branches)}"
        else:
            message += ": it is not an unpushed commit on the current branch"
        super().__init__(message)


class DirtyWorkingTreeError(RetconError):
    def __init__(self, status: str) -> None:
        self.status = status
        super().__init__(
            "Working tree has uncommitted changes; commit or stash them, "
            "or pass --allow-dirty\n" + status
        )


class BackupCreationFailedError(RetconError):
    def __init__(self, branch_name: str, reason: str) -> None:
        self.branch_name = branch_name
        self.reason = reason
        super().__init__(f"Could not create backup branch '{branch_name}': {reason}")


class RewriteCommandFailedError(RetconError):
    """A git command failed while rewriting.

    Attributes:
        commit_hash: Hash of the commit being edited when the failure happened
        command: The failing command line, if a command failed
        backup_branch: Backup to restore from, if one was created
    """

    def __init__(
        self,
        commit_hash: str,
        reason: str,
        *,
        command: str | None = None,
        backup_branch: str | None = None,
    ) -> None:
        self.commit_hash = commit_hash
        self.reason = reason
        self.command = command
        self.backup_branch = backup_branch
        message = f"Rewrite of {commit_hash[:7]} failed: {reason}"
        if backup_branch is not None:
            message += f"\nRestore with: retcon restore {backup_branch}"
        super().__init__(message)

    def with_backup(self, backup_branch: str) -> RewriteCommandFailedError:
        """Copy of this error naming the session's backup branch."""
        return RewriteCommandFailedError(
            self.commit_hash,
            self.reason,
            command=self.command,
            backup_branch=backup_branch,
        )


class IdentityResolutionAmbiguousError(RetconError):
    """A commit could not be re-identified with certainty after a rewrite."""

    def __init__(
        self, commit_hash: str, reason: str, *, backup_branch: str | None = None
    ) -> None:
        self.commit_hash = commit_hash
        self.reason = reason
        self.backup_branch = backup_branch
        message = f"Lost track of commit {commit_hash[:7]} after rewrite: {reason}"
        if backup_branch is not None:
            message += f"\nRestore with: retcon restore {backup_branch}"
        super().__init__(message)

    def with_backup(self, backup_branch: str) -> IdentityResolutionAmbiguousError:
        return IdentityResolutionAmbiguousError(
            self.commit_hash, self.reason, backup_branch=backup_branch
        )


class UnsupportedOperationError(RetconError):
    def __init__(self, message: str, *, commit_hash: str | None = None) -> None:
        self.commit_hash = commit_hash
        super().__init__(message)


class EditValidationError(RetconError, ValueError):
    """An edit request is malformed (for example an empty message)."""


class BackupNotFoundError(RetconError):
    def __init__(self, branch_name: str) -> None:
        self.branch_name = branch_name
        super().__init__(f"Backup branch '{branch_name}' does not exist")


class RestoreNotConfirmedError(RetconError):
    def __init__(self, branch_name: str) -> None:
        self.branch_name = branch_name
        super().__init__(f"Restore to '{branch_name}' discards the current branch state; confirm")


class SessionInProgressError(RetconError):
    def __init__(self, root: Path) -> None:
        self.root = root
        super().__init__(f"A rewrite is already running for {root}")

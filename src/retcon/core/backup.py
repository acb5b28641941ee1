"""Backup branches: created before every rewrite, restorable afterwards."""

from __future__ import annotations

import logging
import re

from retcon.core.errors import (
    BackupCreationFailedError,
    BackupNotFoundError,
    NotOnBranchError,
    RestoreNotConfirmedError,
)
from retcon.core.types import BackupPointer, RepositoryHandle
from retcon.gateway.git.abc import Git
from retcon.gateway.time.abc import Time
from retcon.subprocess_utils import CommandFailedError

logger = logging.getLogger(__name__)


def backup_branch_name(branch: str, prefix: str, epoch_millis: int) -> str:
    """Name of the backup branch for `branch` created at `epoch_millis`."""
    return f"{branch}-{prefix}-{epoch_millis}"


def _backup_pattern(branch: str, prefix: str) -> re.Pattern[str]:
    return re.compile(rf"^{re.escape(branch)}-{re.escape(prefix)}-(\d+)$")


class BackupManager:
    """Creates, lists and restores backup branches.

    Backup branches are never deleted automatically; removing them is left to
    the user (`git branch -D`).
    """

    def __init__(self, git: Git, time: Time) -> None:
        self._git = git
        self._time = time

    def create_backup(self, repo: RepositoryHandle, prefix: str) -> BackupPointer:
        """Create a branch at HEAD and confirm it landed there.

        Raises:
            NotOnBranchError: If HEAD is detached
            BackupCreationFailedError: If git fails or the branch does not point at HEAD
        """
        source = self._git.branch.get_current_branch(repo.root)
        if source is None:
            raise NotOnBranchError()

        name = backup_branch_name(source, prefix, self._time.epoch_millis())
        try:
            head = self._git.commit.get_head_sha(repo.root)
            self._git.branch.create_branch(repo.root, name, head)
        except CommandFailedError as e:
            raise BackupCreationFailedError(name, e.stderr.strip() or str(e)) from e

        created = self._git.branch.resolve_ref(repo.root, f"refs/heads/{name}")
        if created != head:
            raise BackupCreationFailedError(
                name, f"branch points at {created or 'nothing'}, expected HEAD {head}"
            )

        logger.debug("Created backup %s at %s", name, head)
        return BackupPointer(branch_name=name, commit_hash=head, source_branch=source)

    def restore_to_backup(
        self, repo: RepositoryHandle, branch_name: str, *, confirmed: bool
    ) -> str:
        """Hard-reset the current branch to a backup branch.

        Discards uncommitted changes, so the caller must pass confirmed=True.
        An interrupted rebase is aborted first.

        Returns:
            The commit hash HEAD points at after the reset

        Raises:
            RestoreNotConfirmedError: If confirmed is False
            BackupNotFoundError: If the branch does not exist
            CommandFailedError: If the reset fails
        """
        if not confirmed:
            raise RestoreNotConfirmedError(branch_name)

        target = self._git.branch.resolve_ref(repo.root, f"refs/heads/{branch_name}")
        if target is None:
            raise BackupNotFoundError(branch_name)

        if self._git.rebase.is_rebase_in_progress(repo.root):
            try:
                self._git.rebase.rebase_abort(repo.root)
            except CommandFailedError as e:
                logger.warning("Could not abort rebase before restore: %s", e)

        self._git.branch.reset_hard(repo.root, branch_name)
        return target

    def list_backups(self, repo: RepositoryHandle, prefix: str) -> list[str]:
        """Backup branches of the current branch, newest first."""
        source = self._git.branch.get_current_branch(repo.root)
        if source is None:
            raise NotOnBranchError()

        pattern = _backup_pattern(source, prefix)
        stamped: list[tuple[int, str]] = []
        for name in self._git.branch.list_local_branches(repo.root):
            match = pattern.match(name)
            if match is not None:
                stamped.append((int(match.group(1)), name))
        return [name for _, name in sorted(stamped, reverse=True)]

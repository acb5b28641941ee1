"""Rewrite orchestration: verify, back up, apply edits, confirm.

A session moves IDLE -> BACKED_UP -> REWRITING -> DONE, or to ABORTED when an
edit fails. Every check that can refuse the session runs before the backup
branch is created, so a refused session never writes anything. Once the
backup exists, every failure names it.
"""

from __future__ import annotations

import logging
from collections.abc import Generator, Iterable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TypeVar

from retcon.core.backup import BackupManager
from retcon.core.errors import (
    EditValidationError,
    IdentityResolutionAmbiguousError,
    IneligibleCommitError,
    RewriteCommandFailedError,
    UnsupportedOperationError,
)
from retcon.core.events import CompletionEvent, ProgressEvent
from retcon.core.identity import IdentityTracker
from retcon.core.log_reader import CommitLogReader
from retcon.core.rebase_driver import InteractiveRebaseDriver
from retcon.core.safety import SafetyVerifier
from retcon.core.types import (
    BackupPointer,
    CommitRecord,
    EditRequest,
    RepositoryHandle,
    RewriteOutcome,
)
from retcon.gateway.git.abc import Git
from retcon.gateway.time.abc import Time
from retcon.subprocess_utils import CommandFailedError

logger = logging.getLogger(__name__)

V = TypeVar("V")


class SessionState(Enum):
    IDLE = "idle"
    BACKED_UP = "backed_up"
    REWRITING = "rewriting"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class RewriteSession:
    """Mutable state of one rewrite, owned by the orchestrator."""

    requests: list[EditRequest]
    state: SessionState = SessionState.IDLE
    backup: BackupPointer | None = None
    tracker: IdentityTracker | None = None
    applied: list[EditRequest] = field(default_factory=list)


def validate_requests(requests: Iterable[EditRequest]) -> list[EditRequest]:
    """Drop no-ops, reject malformed edits, and merge edits of the same commit.

    When two requests name the same commit, fields set by the later one win.

    Raises:
        EditValidationError: For an empty message, a negative timestamp, or
            when nothing is left to do
    """
    merged: dict[str, EditRequest] = {}
    for request in requests:
        if request.new_message is not None and not request.new_message.strip():
            raise EditValidationError(
                f"New message for {request.commit_hash[:7]} is empty; a commit needs a message"
            )
        for label, value in (
            ("author", request.new_author_timestamp),
            ("commit", request.new_commit_timestamp),
        ):
            if value is not None and value < 0:
                raise EditValidationError(
                    f"New {label} date for {request.commit_hash[:7]} is before 1970"
                )
        if request.is_noop:
            logger.debug("Dropping no-op edit of %s", request.commit_hash)
            continue

        existing = merged.get(request.commit_hash)
        if existing is None:
            merged[request.commit_hash] = request
            continue
        merged[request.commit_hash] = EditRequest(
            commit_hash=request.commit_hash,
            new_message=_later(request.new_message, existing.new_message),
            new_author_timestamp=_later(
                request.new_author_timestamp, existing.new_author_timestamp
            ),
            new_commit_timestamp=_later(
                request.new_commit_timestamp, existing.new_commit_timestamp
            ),
        )

    if not merged:
        raise EditValidationError("Nothing to edit: no request changes a message or date")
    return list(merged.values())


def _later(later: V | None, earlier: V | None) -> V | None:
    return later if later is not None else earlier


class RewriteOrchestrator:
    """Applies a set of edit requests to the unpushed commits of a branch."""

    def __init__(self, git: Git, time: Time, *, sync_commit_timestamp: bool) -> None:
        self._git = git
        self._sync_commit_timestamp = sync_commit_timestamp
        self._reader = CommitLogReader(git)
        self._verifier = SafetyVerifier(git)
        self._backups = BackupManager(git, time)
        self._driver = InteractiveRebaseDriver(git, time)
        self.session: RewriteSession | None = None

    def execute_rewrite(
        self,
        repo: RepositoryHandle,
        requests: Iterable[EditRequest],
        *,
        allow_dirty: bool,
        backup_prefix: str,
    ) -> Generator[ProgressEvent | CompletionEvent[RewriteOutcome]]:
        """Apply edit requests, oldest author date first.

        Args:
            repo: Repository to rewrite
            requests: Edits naming commits by hash or any revision git resolves
            allow_dirty: Proceed with uncommitted changes (rebases autostash them)
            backup_prefix: Middle part of the backup branch name

        Yields:
            ProgressEvent per step, then CompletionEvent with the RewriteOutcome

        Raises:
            EditValidationError: Malformed or empty set of requests
            IneligibleCommitError: A target is pushed or not on this branch
            UnsupportedOperationError: Rebase already running, or a non-HEAD root commit
            DirtyWorkingTreeError: Uncommitted changes without allow_dirty
            BackupCreationFailedError: Backup could not be created
            RewriteCommandFailedError: A git command failed mid-rewrite
            IdentityResolutionAmbiguousError: History no longer matches after a rewrite
        """
        resolved = self._resolve_revisions(repo, requests)
        session = RewriteSession(requests=validate_requests(resolved))
        self.session = session

        if self._git.rebase.is_rebase_in_progress(repo.root):
            raise UnsupportedOperationError(
                "A rebase is already in progress; finish it or run `git rebase --abort` first"
            )

        scan = self._reader.scan(repo, fetch=False)
        targets = [request.commit_hash for request in session.requests]
        self._verifier.ensure_eligible(repo, targets)
        listed = {commit.hash for commit in scan.commits}
        for target in targets:
            if target not in listed:
                raise IneligibleCommitError(target)

        head = scan.commits[0].hash
        for target in targets:
            if target != head and self._git.commit.get_parent_sha(repo.root, target) is None:
                raise UnsupportedOperationError(
                    f"Commit {target[:7]} is the root commit; only HEAD can be edited there",
                    commit_hash=target,
                )
        self._ensure_no_merges_above(repo, scan.commits, targets)

        self._verifier.ensure_working_tree_clean(repo, allow_dirty=allow_dirty)

        backup = self._backups.create_backup(repo, backup_prefix)
        session.backup = backup
        session.state = SessionState.BACKED_UP
        yield ProgressEvent(f"Created backup branch {backup.branch_name}")

        tracker = IdentityTracker(scan.commits)
        session.tracker = tracker
        ordered = sorted(
            session.requests,
            key=lambda r: (
                tracker.original(r.commit_hash).author_timestamp,
                -tracker.position(r.commit_hash),
            ),
        )

        session.state = SessionState.REWRITING
        total = len(ordered)
        for index, request in enumerate(ordered, start=1):
            current = tracker.current(request.commit_hash)
            yield ProgressEvent(f"[{index}/{total}] {current.short_hash} {current.subject}")
            try:
                is_head = tracker.position(request.commit_hash) == 0
                self._apply(repo, request, current, is_head=is_head)
                tracker.refresh(request, self._reader.scan(repo, fetch=False).commits)
            except CommandFailedError as e:
                self._driver.abort_if_in_progress(repo)
                session.state = SessionState.ABORTED
                raise RewriteCommandFailedError(
                    current.hash,
                    e.stderr.strip() or str(e),
                    command=e.command_line,
                    backup_branch=backup.branch_name,
                ) from e
            except RewriteCommandFailedError as e:
                session.state = SessionState.ABORTED
                raise e.with_backup(backup.branch_name) from e
            except IdentityResolutionAmbiguousError as e:
                session.state = SessionState.ABORTED
                raise e.with_backup(backup.branch_name) from e
            session.applied.append(request)

        session.state = SessionState.DONE
        final_scan = self._reader.scan(repo, fetch=False)
        yield ProgressEvent(f"Rewrote {total} commit(s)", style="success")
        yield CompletionEvent(
            RewriteOutcome(
                backup=backup,
                applied=list(session.applied),
                hash_map=tracker.hash_map(),
                scan=final_scan,
            )
        )

    def commit_timestamp_for(self, request: EditRequest) -> int | None:
        """Commit date to write: explicit, else the new author date when syncing."""
        if request.new_commit_timestamp is not None:
            return request.new_commit_timestamp
        if request.new_author_timestamp is not None and self._sync_commit_timestamp:
            return request.new_author_timestamp
        return None

    def _apply(
        self, repo: RepositoryHandle, request: EditRequest, current: CommitRecord, *, is_head: bool
    ) -> None:
        commit_timestamp = self.commit_timestamp_for(request)
        if is_head:
            self._git.commit.amend_head(
                repo.root,
                message=request.new_message,
                author_timestamp=request.new_author_timestamp,
                commit_timestamp=commit_timestamp,
            )
        elif request.new_message is None:
            self._driver.retime_commit(
                repo,
                current.hash,
                author_timestamp=request.new_author_timestamp,
                commit_timestamp=commit_timestamp,
            )
        elif request.new_author_timestamp is None and commit_timestamp is None:
            self._driver.reword_commit(repo, current.hash, request.new_message)
        else:
            self._driver.edit_commit(
                repo,
                current.hash,
                new_message=request.new_message,
                author_timestamp=request.new_author_timestamp,
                commit_timestamp=commit_timestamp,
            )

    def _ensure_no_merges_above(
        self, repo: RepositoryHandle, commits: list[CommitRecord], targets: list[str]
    ) -> None:
        """Refuse edits below a merge commit, which a rebase would flatten."""
        positions = {commit.hash: index for index, commit in enumerate(commits)}
        below_head = [target for target in targets if positions[target] > 0]
        if not below_head:
            return
        oldest = max(below_head, key=lambda target: positions[target])
        parent = self._git.commit.get_parent_sha(repo.root, oldest)
        if parent is None:
            return
        merges = self._git.commit.list_merge_commits(repo.root, f"{parent}..HEAD")
        if merges:
            raise UnsupportedOperationError(
                f"Commit {oldest[:7]} is below merge commit {merges[-1][:7]}; "
                "rewriting it would flatten the merge",
                commit_hash=oldest,
            )

    def _resolve_revisions(
        self, repo: RepositoryHandle, requests: Iterable[EditRequest]
    ) -> list[EditRequest]:
        resolved: list[EditRequest] = []
        for request in requests:
            full_hash = self._git.branch.resolve_ref(repo.root, request.commit_hash)
            if full_hash is None:
                raise EditValidationError(f"Unknown revision: {request.commit_hash}")
            resolved.append(replace(request, commit_hash=full_hash))
        return resolved

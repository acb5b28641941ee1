"""Entry point to the rewrite engine for the CLI and other callers."""

from __future__ import annotations

import logging
import threading
from collections.abc import Generator, Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from retcon.core.backup import BackupManager
from retcon.core.config import RetconConfig
from retcon.core.errors import SessionInProgressError
from retcon.core.events import CompletionEvent, ProgressEvent
from retcon.core.log_reader import CommitLogReader
from retcon.core.orchestrator import RewriteOrchestrator
from retcon.core.types import (
    EditRequest,
    RepositoryHandle,
    RewriteOutcome,
    ScanResult,
    discover_repository,
)
from retcon.gateway.git.abc import Git
from retcon.gateway.time.abc import Time

logger = logging.getLogger(__name__)

_active_roots: set[Path] = set()
_active_lock = threading.Lock()


@contextmanager
def _exclusive(repo: RepositoryHandle) -> Iterator[None]:
    with _active_lock:
        if repo.root in _active_roots:
            raise SessionInProgressError(repo.root)
        _active_roots.add(repo.root)
    try:
        yield
    finally:
        with _active_lock:
            _active_roots.discard(repo.root)


class RewriteEngine:
    """Scan, edit, bulk edit, and restore, with one session per repository at a time.

    All operations block on git subprocesses. A second rewrite or restore on
    the same repository root while one is running in this process raises
    SessionInProgressError; nothing guards against other processes.
    """

    def __init__(self, git: Git, time: Time, config: RetconConfig) -> None:
        self._git = git
        self._time = time
        self._config = config
        self._reader = CommitLogReader(git)
        self._backups = BackupManager(git, time)

    def open_repository(self, cwd: Path) -> RepositoryHandle:
        return discover_repository(self._git, cwd)

    def scan(self, repo: RepositoryHandle, *, fetch: bool | None = None) -> ScanResult:
        """List unpushed commits; fetch defaults to the fetch_before_scan setting."""
        should_fetch = self._config.fetch_before_scan if fetch is None else fetch
        return self._reader.scan(repo, fetch=should_fetch)

    def edit(
        self, repo: RepositoryHandle, request: EditRequest, *, allow_dirty: bool
    ) -> Generator[ProgressEvent | CompletionEvent[RewriteOutcome]]:
        """Edit a single commit. See bulk_edit."""
        yield from self.bulk_edit(repo, [request], allow_dirty=allow_dirty)

    def bulk_edit(
        self, repo: RepositoryHandle, requests: Iterable[EditRequest], *, allow_dirty: bool
    ) -> Generator[ProgressEvent | CompletionEvent[RewriteOutcome]]:
        """Edit several commits under one backup branch.

        The session guard is held until the generator finishes or is closed.
        """
        orchestrator = RewriteOrchestrator(
            self._git, self._time, sync_commit_timestamp=self._config.sync_commit_timestamp
        )
        with _exclusive(repo):
            yield from orchestrator.execute_rewrite(
                repo,
                list(requests),
                allow_dirty=allow_dirty,
                backup_prefix=self._config.backup_prefix,
            )

    def restore(self, repo: RepositoryHandle, branch_name: str, *, confirmed: bool) -> str:
        """Reset the current branch to a backup branch. Returns the restored hash."""
        with _exclusive(repo):
            restored = self._backups.restore_to_backup(repo, branch_name, confirmed=confirmed)
        logger.debug("Restored %s to %s", repo.root, restored)
        return restored

    def list_backups(self, repo: RepositoryHandle) -> list[str]:
        return self._backups.list_backups(repo, self._config.backup_prefix)

"""Edit non-HEAD commits with a scripted interactive rebase."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager

from retcon.core.errors import RewriteCommandFailedError, UnsupportedOperationError
from retcon.core.rebase_scripts import RebaseAction, editor_command, message_editor, sequence_editor
from retcon.core.types import RepositoryHandle
from retcon.gateway.git.abc import Git
from retcon.gateway.time.abc import Time
from retcon.subprocess_utils import CommandFailedError

logger = logging.getLogger(__name__)


class InteractiveRebaseDriver:
    """Rewrites one commit below HEAD per call.

    Each call rebases onto the target's parent with the target's todo line
    changed to `reword` (message only) or `edit` (timestamps, optionally with
    a message). Descendants are replayed unchanged. A failure at any point
    aborts the rebase when one is in progress and raises
    RewriteCommandFailedError; the caller owns the backup branch.
    """

    def __init__(self, git: Git, time: Time) -> None:
        self._git = git
        self._time = time

    def reword_commit(self, repo: RepositoryHandle, commit_hash: str, new_message: str) -> None:
        """Replace the message of a commit below HEAD."""
        parent = self._require_parent(repo, commit_hash)
        with self._abort_on_failure(repo, commit_hash):
            with ExitStack() as stack:
                todo_editor = stack.enter_context(
                    sequence_editor(commit_hash, "reword", time=self._time)
                )
                msg_editor = stack.enter_context(message_editor(new_message, time=self._time))
                self._git.rebase.start_interactive_rebase(
                    repo.root,
                    parent,
                    sequence_editor=editor_command(todo_editor),
                    editor=editor_command(msg_editor),
                )
            self._finish_if_stopped(repo, commit_hash)

    def retime_commit(
        self,
        repo: RepositoryHandle,
        commit_hash: str,
        *,
        author_timestamp: int | None,
        commit_timestamp: int | None,
    ) -> None:
        """Replace the author and/or commit date of a commit below HEAD."""
        self.edit_commit(
            repo,
            commit_hash,
            new_message=None,
            author_timestamp=author_timestamp,
            commit_timestamp=commit_timestamp,
        )

    def edit_commit(
        self,
        repo: RepositoryHandle,
        commit_hash: str,
        *,
        new_message: str | None,
        author_timestamp: int | None,
        commit_timestamp: int | None,
    ) -> None:
        """Stop at a commit below HEAD, amend it, and replay the rest.

        Message and dates change in one pass.
        """
        parent = self._require_parent(repo, commit_hash)
        with self._abort_on_failure(repo, commit_hash):
            self._stop_at(repo, commit_hash, parent, "edit")
            if not self._git.rebase.is_rebase_in_progress(repo.root):
                raise RewriteCommandFailedError(
                    commit_hash, "rebase did not stop at the commit to edit"
                )
            self._git.commit.amend_head(
                repo.root,
                message=new_message,
                author_timestamp=author_timestamp,
                commit_timestamp=commit_timestamp,
            )
            self._git.rebase.rebase_continue(repo.root)
            self._finish_if_stopped(repo, commit_hash)

    def _stop_at(
        self, repo: RepositoryHandle, commit_hash: str, parent: str, action: RebaseAction
    ) -> None:
        with sequence_editor(commit_hash, action, time=self._time) as todo_editor:
            self._git.rebase.start_interactive_rebase(
                repo.root,
                parent,
                sequence_editor=editor_command(todo_editor),
                editor="true",
            )

    def _require_parent(self, repo: RepositoryHandle, commit_hash: str) -> str:
        parent = self._git.commit.get_parent_sha(repo.root, commit_hash)
        if parent is None:
            raise UnsupportedOperationError(
                f"Commit {commit_hash[:7]} is the root commit; only HEAD can be edited there",
                commit_hash=commit_hash,
            )
        return parent

    def _finish_if_stopped(self, repo: RepositoryHandle, commit_hash: str) -> None:
        if self._git.rebase.is_rebase_in_progress(repo.root):
            raise RewriteCommandFailedError(
                commit_hash, "rebase stopped before replaying every commit"
            )

    @contextmanager
    def _abort_on_failure(self, repo: RepositoryHandle, commit_hash: str) -> Iterator[None]:
        try:
            yield
        except CommandFailedError as e:
            self.abort_if_in_progress(repo)
            raise RewriteCommandFailedError(
                commit_hash, e.stderr.strip() or str(e), command=e.command_line
            ) from e
        except RewriteCommandFailedError:
            self.abort_if_in_progress(repo)
            raise

    def abort_if_in_progress(self, repo: RepositoryHandle) -> None:
        """Abort an interrupted rebase; failures are logged, never raised."""
        if not self._git.rebase.is_rebase_in_progress(repo.root):
            return
        try:
            self._git.rebase.rebase_abort(repo.root)
        except CommandFailedError as e:
            logger.warning("git rebase --abort failed: %s", e)

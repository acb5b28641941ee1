"""Fake implementation of Git rebase operations for testing."""

from __future__ import annotations

import re
import shlex
from pathlib import Path
from typing import NamedTuple

from retcon.gateway.git.fake_repo import FakeRepository
from retcon.gateway.git.rebase_ops.abc import GitRebaseOps
from retcon.subprocess_utils import CommandFailedError

_TODO_EDIT = re.compile(r"s/\^pick (?P<commit>[0-9a-f]+) /(?P<action>\w+) ")
_MESSAGE_SOURCE = re.compile(r"^cat (?P<path>.+) > \"\$1\"$", re.MULTILINE)


class RebaseStartCall(NamedTuple):
    """Record of a start_interactive_rebase() call."""

    cwd: Path
    base: str
    sequence_editor: str
    editor: str


class FakeGitRebaseOps(GitRebaseOps):
    """In-memory fake implementation of Git rebase operations.

    The fake reads the editor scripts it is handed instead of running them: the
    sequence editor names the todo action and commit, the message editor names
    the file holding the new message. A `reword` is applied immediately; an
    `edit` leaves the shared FakeRepository stopped at the commit until
    rebase_continue() replays the rest. Editors it cannot read (such as "true")
    leave history untouched.

    Constructor Injection:
    ---------------------
    - start_raises: Exception to raise from start_interactive_rebase(); the
      rebase is left in progress first, as a failed real rebase would be
    - continue_raises: Exception to raise from rebase_continue()
    - abort_raises: Exception to raise from rebase_abort()

    Mutation Tracking:
    -----------------
    - start_calls: List of RebaseStartCall
    - todo_actions: List of (action, commit_hash) read from sequence editors
    - continue_calls: List of cwd from rebase_continue()
    - abort_calls: List of cwd from rebase_abort()
    """

    def __init__(
        self,
        repo: FakeRepository,
        *,
        start_raises: Exception | None = None,
        continue_raises: Exception | None = None,
        abort_raises: Exception | None = None,
    ) -> None:
        self._repo = repo
        self._start_raises = start_raises
        self._continue_raises = continue_raises
        self._abort_raises = abort_raises
        self._start_calls: list[RebaseStartCall] = []
        self._todo_actions: list[tuple[str, str]] = []
        self._continue_calls: list[Path] = []
        self._abort_calls: list[Path] = []

    def start_interactive_rebase(
        self,
        cwd: Path,
        base: str,
        *,
        sequence_editor: str,
        editor: str,
    ) -> None:
        self._start_calls.append(RebaseStartCall(cwd, base, sequence_editor, editor))
        todo = _read_todo_edit(sequence_editor)
        if todo is not None:
            self._todo_actions.append(todo)

        if self._start_raises is not None:
            head = self._repo.head_sha()
            if head is not None:
                self._repo.stop_for_edit(head)
            else:
                self._repo.rebase_in_progress = True
            raise self._start_raises
        if todo is None:
            return

        action, todo_hash = todo
        target = self._repo.resolve(todo_hash)
        if target is None:
            raise CommandFailedError(
                cmd=["git", "rebase", "-i", "--autostash", base],
                operation_context=f"start interactive rebase onto {base[:7]}",
                returncode=1,
                stderr=f"error: invalid line: {action} {todo_hash}",
            )
        if action == "edit":
            self._repo.stop_for_edit(target)
        elif action == "reword":
            message = _read_message(editor)
            if message is not None:
                self._repo.rewrite_commit(target, message=message.strip())

    def rebase_continue(self, cwd: Path) -> None:
        self._continue_calls.append(cwd)
        if self._continue_raises is not None:
            raise self._continue_raises
        self._repo.continue_rebase()

    def rebase_abort(self, cwd: Path) -> None:
        self._abort_calls.append(cwd)
        if self._abort_raises is not None:
            raise self._abort_raises
        self._repo.abort_rebase()

    def is_rebase_in_progress(self, cwd: Path) -> bool:
        return self._repo.rebase_in_progress

    @property
    def start_calls(self) -> list[RebaseStartCall]:
        return list(self._start_calls)

    @property
    def todo_actions(self) -> list[tuple[str, str]]:
        return list(self._todo_actions)

    @property
    def continue_calls(self) -> list[Path]:
        return list(self._continue_calls)

    @property
    def abort_calls(self) -> list[Path]:
        return list(self._abort_calls)


def _script_text(editor: str) -> str | None:
    parts = shlex.split(editor)
    if not parts:
        return None
    path = Path(parts[0])
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8")


def _read_todo_edit(sequence_editor: str) -> tuple[str, str] | None:
    script = _script_text(sequence_editor)
    if script is None:
        return None
    match = _TODO_EDIT.search(script)
    if match is None:
        return None
    return match.group("action"), match.group("commit")


def _read_message(editor: str) -> str | None:
    script = _script_text(editor)
    if script is None:
        return None
    match = _MESSAGE_SOURCE.search(script)
    if match is None:
        return None
    message_path = Path(shlex.split(match.group("path"))[0])
    return message_path.read_text(encoding="utf-8")

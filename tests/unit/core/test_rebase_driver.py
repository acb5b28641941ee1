"""Tests for editing commits below HEAD through scripted rebases."""

import shlex
from pathlib import Path

import pytest

from retcon.core.errors import RewriteCommandFailedError, UnsupportedOperationError
from retcon.core.rebase_driver import InteractiveRebaseDriver
from retcon.gateway.git.fake import FakeGit
from retcon.gateway.git.rebase_ops.fake import FakeGitRebaseOps, RebaseStartCall
from retcon.gateway.time.fake import FakeTime
from retcon.subprocess_utils import CommandFailedError
from tests.test_utils.fake_repos import handle_for, make_repo, messages


def _rebase_error(stderr: str) -> CommandFailedError:
    return CommandFailedError(
        cmd=["git", "rebase", "--continue"],
        operation_context="continue rebase",
        returncode=1,
        stderr=stderr,
    )


def _script_paths(call: RebaseStartCall) -> list[Path]:
    paths = [Path(shlex.split(call.sequence_editor)[0])]
    if call.editor != "true":
        paths.append(Path(shlex.split(call.editor)[0]))
    return paths


def test_reword_commit_replaces_message_and_replays_descendants() -> None:
    repo, (c1, c2, c3) = make_repo("First", "Second", "Third")
    git = FakeGit(repo=repo)

    InteractiveRebaseDriver(git, FakeTime()).reword_commit(handle_for(repo), c2.sha, "Second v2")

    assert messages(repo) == ["Third", "Second v2", "First"]
    assert repo.ancestry(repo.head_sha())[2].sha == c1.sha
    assert repo.head_sha() != c3.sha
    assert git.rebase.todo_actions == [("reword", c2.sha)]
    [call] = git.rebase.start_calls
    assert call.base == c1.sha
    assert git.rebase.continue_calls == []
    assert all(not path.exists() for path in _script_paths(call))


def test_edit_commit_amends_message_and_dates_in_one_pass() -> None:
    repo, (_c1, c2, _c3) = make_repo("First", "Second", "Third")
    git = FakeGit(repo=repo)

    InteractiveRebaseDriver(git, FakeTime()).edit_commit(
        handle_for(repo),
        c2.sha,
        new_message="Second v2",
        author_timestamp=1600000000,
        commit_timestamp=1600000100,
    )

    edited = repo.ancestry(repo.head_sha())[1]
    assert edited.message == "Second v2"
    assert edited.author_timestamp == 1600000000
    assert edited.commit_timestamp == 1600000100
    assert messages(repo) == ["Third", "Second v2", "First"]
    assert git.rebase.todo_actions == [("edit", c2.sha)]
    assert len(git.commit.amend_calls) == 1
    assert len(git.rebase.continue_calls) == 1
    assert repo.rebase_in_progress is False
    [call] = git.rebase.start_calls
    assert call.editor == "true"
    assert all(not path.exists() for path in _script_paths(call))


def test_retime_commit_keeps_message() -> None:
    repo, (_c1, c2, _c3) = make_repo("First", "Second", "Third")
    git = FakeGit(repo=repo)

    InteractiveRebaseDriver(git, FakeTime()).retime_commit(
        handle_for(repo), c2.sha, author_timestamp=None, commit_timestamp=1600000100
    )

    edited = repo.ancestry(repo.head_sha())[1]
    assert edited.message == "Second"
    assert edited.author_timestamp == c2.author_timestamp
    assert edited.commit_timestamp == 1600000100
    assert git.commit.amend_calls[0].message is None


def test_root_commit_is_unsupported() -> None:
    repo, (c1, _c2) = make_repo("First", "Second")
    git = FakeGit(repo=repo)

    with pytest.raises(UnsupportedOperationError, match="root commit"):
        InteractiveRebaseDriver(git, FakeTime()).reword_commit(handle_for(repo), c1.sha, "New")

    assert git.rebase.start_calls == []


def test_failed_start_aborts_and_raises_with_command() -> None:
    repo, (_c1, c2, c3) = make_repo("First", "Second", "Third")
    error = CommandFailedError(
        cmd=["git", "rebase", "-i", "--autostash", "abc"],
        operation_context="start interactive rebase",
        returncode=1,
        stderr="error: could not apply",
    )
    git = FakeGit(repo=repo, rebase=FakeGitRebaseOps(repo, start_raises=error))

    with pytest.raises(RewriteCommandFailedError) as exc_info:
        InteractiveRebaseDriver(git, FakeTime()).reword_commit(handle_for(repo), c2.sha, "New")

    assert exc_info.value.commit_hash == c2.sha
    assert exc_info.value.command == "git rebase -i --autostash abc"
    assert "could not apply" in str(exc_info.value)
    assert exc_info.value.__cause__ is error
    assert git.rebase.abort_calls == [repo.root]
    assert repo.rebase_in_progress is False
    assert repo.head_sha() == c3.sha
    assert all(not path.exists() for path in _script_paths(git.rebase.start_calls[0]))


def test_failed_continue_aborts_back_to_original_history() -> None:
    repo, (_c1, c2, c3) = make_repo("First", "Second", "Third")
    git = FakeGit(
        repo=repo,
        rebase=FakeGitRebaseOps(repo, continue_raises=_rebase_error("CONFLICT (content)")),
    )

    with pytest.raises(RewriteCommandFailedError, match="CONFLICT"):
        InteractiveRebaseDriver(git, FakeTime()).retime_commit(
            handle_for(repo), c2.sha, author_timestamp=1600000000, commit_timestamp=None
        )

    assert git.rebase.abort_calls == [repo.root]
    assert repo.rebase_in_progress is False
    assert repo.head_sha() == c3.sha


def test_failed_abort_is_logged_not_raised() -> None:
    repo, (_c1, c2, _c3) = make_repo("First", "Second", "Third")
    git = FakeGit(
        repo=repo,
        rebase=FakeGitRebaseOps(
            repo,
            start_raises=_rebase_error("error: could not apply"),
            abort_raises=_rebase_error("fatal: no rebase in progress"),
        ),
    )

    with pytest.raises(RewriteCommandFailedError, match="could not apply"):
        InteractiveRebaseDriver(git, FakeTime()).reword_commit(handle_for(repo), c2.sha, "New")

    assert len(git.rebase.abort_calls) == 1

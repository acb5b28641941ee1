"""Tests for the engine facade and its per-repository session guard."""

from pathlib import Path

import pytest

from retcon.core.config import RetconConfig
from retcon.core.engine import RewriteEngine
from retcon.core.errors import NotInRepositoryError, SessionInProgressError
from retcon.core.events import ProgressEvent
from retcon.core.types import EditRequest
from retcon.gateway.git.fake import FakeGit
from retcon.gateway.time.fake import FakeTime
from tests.test_utils.fake_repos import FAKE_ROOT, drain, make_repo, messages, track_origin


def test_open_repository_finds_root_from_subdirectory() -> None:
    repo, _ = make_repo("First")
    engine = RewriteEngine(FakeGit(repo=repo), FakeTime(), RetconConfig())

    handle = engine.open_repository(FAKE_ROOT / "src" / "pkg")

    assert handle.root == FAKE_ROOT
    assert handle.git_dir == FAKE_ROOT / ".git"


def test_open_repository_outside_repo_raises() -> None:
    repo, _ = make_repo("First")
    engine = RewriteEngine(FakeGit(repo=repo), FakeTime(), RetconConfig())

    with pytest.raises(NotInRepositoryError):
        engine.open_repository(Path("/elsewhere"))


def test_scan_fetch_follows_config_unless_overridden() -> None:
    repo, (c1, _c2) = make_repo("First", "Second")
    track_origin(repo, c1)
    git = FakeGit(repo=repo)
    engine = RewriteEngine(git, FakeTime(), RetconConfig(fetch_before_scan=False))
    handle = engine.open_repository(FAKE_ROOT)

    engine.scan(handle)
    assert git.remote.fetched_remotes == []

    engine.scan(handle, fetch=True)
    assert git.remote.fetched_remotes == [(FAKE_ROOT, "origin")]


def test_edit_uses_configured_backup_prefix() -> None:
    repo, (_c1, c2) = make_repo("First", "Second")
    engine = RewriteEngine(FakeGit(repo=repo), FakeTime(), RetconConfig(backup_prefix="undo"))
    handle = engine.open_repository(FAKE_ROOT)

    _, outcome = drain(engine.edit(handle, EditRequest(c2.sha, new_message="x"), allow_dirty=False))

    assert outcome.backup.branch_name == "main-undo-1705329000000"
    assert engine.list_backups(handle) == ["main-undo-1705329000000"]
    assert messages(repo) == ["x", "First"]


def test_second_session_on_same_repository_is_rejected() -> None:
    repo, (_c1, c2) = make_repo("First", "Second")
    engine = RewriteEngine(FakeGit(repo=repo), FakeTime(), RetconConfig())
    handle = engine.open_repository(FAKE_ROOT)

    running = engine.bulk_edit(handle, [EditRequest(c2.sha, new_message="x")], allow_dirty=False)
    try:
        first = next(running)
        assert isinstance(first, ProgressEvent)

        with pytest.raises(SessionInProgressError):
            engine.restore(handle, first.message.rsplit(" ", 1)[1], confirmed=True)
        with pytest.raises(SessionInProgressError):
            drain(engine.edit(handle, EditRequest(c2.sha, new_message="y"), allow_dirty=False))
    finally:
        running.close()

    restored = engine.restore(handle, "main-backup-1705329000000", confirmed=True)
    assert restored == c2.sha

"""Tests for waiting on index.lock."""

from pathlib import Path

from retcon.gateway.git.lock import resolve_git_dir, wait_for_index_lock
from retcon.gateway.time.fake import FakeTime


def test_no_lock_returns_immediately(tmp_path: Path) -> None:
    (tmp_path / ".git").mkdir()
    time = FakeTime()

    assert wait_for_index_lock(tmp_path, time) is True
    assert time.sleep_calls == []


def test_stale_lock_times_out(tmp_path: Path) -> None:
    git_dir = tmp_path / ".git"
    git_dir.mkdir()
    (git_dir / "index.lock").touch()
    time = FakeTime()

    assert wait_for_index_lock(tmp_path, time, max_wait_seconds=1.0, poll_interval=0.25) is False
    assert time.sleep_calls == [0.25, 0.25, 0.25, 0.25]


def test_worktree_git_file_points_at_worktree_git_dir(tmp_path: Path) -> None:
    worktree_git_dir = tmp_path / "main" / ".git" / "worktrees" / "feature"
    worktree_git_dir.mkdir(parents=True)
    worktree = tmp_path / "feature"
    worktree.mkdir()
    (worktree / ".git").write_text(f"gitdir: {worktree_git_dir}\n", encoding="utf-8")

    assert resolve_git_dir(worktree) == worktree_git_dir


def test_plain_repository_uses_dot_git(tmp_path: Path) -> None:
    (tmp_path / ".git").mkdir()

    assert resolve_git_dir(tmp_path) == tmp_path / ".git"

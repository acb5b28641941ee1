"""Waiting on git's index.lock before history-rewriting writes.

An amend or rebase started while another git process (an editor integration,
a file watcher running `git status`) holds index.lock fails immediately. The
rewrite paths poll briefly for the lock to clear instead.
"""

from pathlib import Path

from retcon.gateway.time.abc import Time


def resolve_git_dir(repo_root: Path) -> Path:
    """Find the .git directory that holds index.lock for a work tree.

    A linked worktree has a `.git` file with a `gitdir:` pointer into
    `<main>/.git/worktrees/<name>`; its index lives in that per-worktree
    directory, so the pointer target is returned as is.

    Args:
        repo_root: Work tree root

    Returns:
        The directory expected to contain index.lock
    """
    git_path = repo_root / ".git"
    if git_path.is_file():
        content = git_path.read_text(encoding="utf-8").strip()
        if content.startswith("gitdir: "):
            target = Path(content.removeprefix("gitdir: "))
            if not target.is_absolute():
                target = (repo_root / target).resolve()
            if target.exists():
                return target
    return git_path


def wait_for_index_lock(
    repo_root: Path,
    time: Time,
    *,
    max_wait_seconds: float = 5.0,
    poll_interval: float = 0.25,
) -> bool:
    """Poll until index.lock disappears or the timeout passes.

    Args:
        repo_root: Work tree root
        time: Time provider (FakeTime in tests)
        max_wait_seconds: Upper bound on waiting
        poll_interval: Delay between checks

    Returns:
        True if no lock remains, False if it was still present at the timeout
    """
    lock_path = resolve_git_dir(repo_root) / "index.lock"
    waited = 0.0
    while lock_path.exists() and waited < max_wait_seconds:
        time.sleep(poll_interval)
        waited += poll_interval
    return not lock_path.exists()

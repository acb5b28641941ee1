"""Fake Git remote operations for testing."""

from pathlib import Path

from retcon.gateway.git.remote_ops.abc import GitRemoteOps


class FakeGitRemoteOps(GitRemoteOps):
    """In-memory fake of Git remote operations.

    Constructor Injection:
    ---------------------
    - fetch_raises: Exception to raise from fetch_remote()

    Mutation Tracking:
    -----------------
    - fetched_remotes: List of (cwd, remote) tuples from fetch_remote()
    """

    def __init__(self, *, fetch_raises: Exception | None = None) -> None:
        self._fetch_raises = fetch_raises
        self._fetched_remotes: list[tuple[Path, str]] = []

    def fetch_remote(self, cwd: Path, remote: str) -> None:
        self._fetched_remotes.append((cwd, remote))
        if self._fetch_raises is not None:
            raise self._fetch_raises

    @property
    def fetched_remotes(self) -> list[tuple[Path, str]]:
        return list(self._fetched_remotes)

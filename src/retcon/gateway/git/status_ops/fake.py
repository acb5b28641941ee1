"""Fake Git status operations for testing."""

from pathlib import Path

from retcon.gateway.git.status_ops.abc import GitStatusOps


class FakeGitStatusOps(GitStatusOps):
    """Returns a pre-configured porcelain status."""

    def __init__(self, *, porcelain_status: str = "") -> None:
        self._porcelain_status = porcelain_status

    def get_porcelain_status(self, cwd: Path) -> str:
        return self._porcelain_status

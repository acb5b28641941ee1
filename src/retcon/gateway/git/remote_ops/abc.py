"""Abstract base class for Git remote operations."""

from abc import ABC, abstractmethod
from pathlib import Path


class GitRemoteOps(ABC):
    """Abstract interface for Git remote operations."""

    @abstractmethod
    def fetch_remote(self, cwd: Path, remote: str) -> None:
        """Fetch all branches of a remote so remote-tracking refs are current.

        Args:
            cwd: Working directory
            remote: Remote name (e.g., "origin")

        Raises:
            CommandFailedError: If the fetch fails or times out
        """
        ...

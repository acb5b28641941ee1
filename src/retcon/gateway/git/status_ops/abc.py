"""Abstract base class for Git status operations."""

from abc import ABC, abstractmethod
from pathlib import Path


class GitStatusOps(ABC):
    """Abstract interface for Git status operations."""

    @abstractmethod
    def get_porcelain_status(self, cwd: Path) -> str:
        """Return `git status --porcelain` output (empty for a clean tree).

        Raises:
            CommandFailedError: If status cannot be read
        """
        ...

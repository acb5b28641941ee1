"""Abstract base class for Git commit operations."""

from abc import ABC, abstractmethod
from pathlib import Path


class GitCommitOps(ABC):
    """Abstract interface for Git commit operations.

    All implementations (real and fake) must implement this interface.
    """

    # ============================================================================
    # Mutation Operations
    # ============================================================================

    @abstractmethod
    def amend_head(
        self,
        cwd: Path,
        *,
        message: str | None,
        author_timestamp: int | None,
        commit_timestamp: int | None,
    ) -> None:
        """Rewrite the HEAD commit's metadata in place.

        Only metadata changes: staged changes in the index are not folded into
        the amended commit.

        Args:
            cwd: Working directory
            message: New full commit message, or None to keep the current one
            author_timestamp: New author date (epoch seconds), or None to keep it
            commit_timestamp: New committer date (epoch seconds), or None to let
                git stamp the current time
        """
        ...

    # ============================================================================
    # Query Operations
    # ============================================================================

    @abstractmethod
    def get_head_sha(self, cwd: Path) -> str:
        """Get the full hash of HEAD."""
        ...

    @abstractmethod
    def get_parent_sha(self, cwd: Path, commit_sha: str) -> str | None:
        """Get the first parent of a commit, or None for a root commit."""
        ...

    @abstractmethod
    def read_log(self, cwd: Path, *, revision_range: str | None, log_format: str) -> str:
        """Run `git log` and return its raw output.

        Args:
            cwd: Working directory
            revision_range: Range such as "origin/main..HEAD"; None lists all of HEAD
            log_format: Value for --format (git placeholders such as %H, %x1f)

        Returns:
            Stripped stdout; interpretation is left to the caller

        Raises:
            CommandFailedError: If the range does not resolve
        """
        ...

    @abstractmethod
    def list_merge_commits(self, cwd: Path, revision_range: str) -> list[str]:
        """Hashes of merge commits in a range such as "<base>..HEAD", newest first.

        Raises:
            CommandFailedError: If the range does not resolve
        """
        ...

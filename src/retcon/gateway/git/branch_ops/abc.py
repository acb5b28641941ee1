"""Abstract base class for Git branch and ref operations.

Covers the branch-level state the rewrite engine reads (current branch,
upstream configuration, remote-tracking containment) and the two branch
mutations it performs (creating a backup branch, hard-resetting to one).
"""

from abc import ABC, abstractmethod
from pathlib import Path


class GitBranchOps(ABC):
    """Abstract interface for Git branch operations.

    All implementations (real and fake) must implement this interface.
    """

    # ============================================================================
    # Mutation Operations
    # ============================================================================

    @abstractmethod
    def create_branch(self, cwd: Path, branch_name: str, start_point: str) -> None:
        """Create a branch at start_point without checking it out.

        Args:
            cwd: Working directory
            branch_name: Name of the new branch
            start_point: Commit or ref the branch should point at

        Raises:
            CommandFailedError: If the branch exists or the name is invalid
        """
        ...

    @abstractmethod
    def reset_hard(self, cwd: Path, ref: str) -> None:
        """Move the current branch and work tree to ref (git reset --hard).

        Args:
            cwd: Working directory
            ref: Target commit or ref
        """
        ...

    # ============================================================================
    # Query Operations
    # ============================================================================

    @abstractmethod
    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the checked-out branch name, or None for detached HEAD."""
        ...

    @abstractmethod
    def get_branch_config(self, cwd: Path, branch: str, key: str) -> str | None:
        """Read `branch.<branch>.<key>` from git config.

        Args:
            cwd: Working directory
            branch: Local branch name
            key: Config key under the branch section, e.g. "remote" or "merge"

        Returns:
            The configured value, or None if unset
        """
        ...

    @abstractmethod
    def list_remotes(self, cwd: Path) -> list[str]:
        """List configured remote names."""
        ...

    @abstractmethod
    def resolve_ref(self, cwd: Path, ref: str) -> str | None:
        """Resolve a ref to a full commit hash.

        Returns:
            40-hex commit hash, or None if the ref does not resolve to a commit
        """
        ...

    @abstractmethod
    def list_local_branches(self, cwd: Path) -> list[str]:
        """List local branch names."""
        ...

    @abstractmethod
    def list_remote_branches_containing(self, cwd: Path, commit_sha: str) -> list[str]:
        """List remote-tracking branches (short names) that contain a commit.

        Args:
            cwd: Working directory
            commit_sha: Commit to look for

        Returns:
            Names like "origin/main"; empty if no remote-tracking branch has it
        """
        ...

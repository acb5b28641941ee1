"""High-level git operations interface.

This module provides a clean abstraction over git subprocess calls, making the
rewrite engine testable without a real repository.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from retcon.gateway.git.branch_ops.abc import GitBranchOps
    from retcon.gateway.git.commit_ops.abc import GitCommitOps
    from retcon.gateway.git.rebase_ops.abc import GitRebaseOps
    from retcon.gateway.git.remote_ops.abc import GitRemoteOps
    from retcon.gateway.git.status_ops.abc import GitStatusOps


class Git(ABC):
    """Abstract interface for git operations.

    All implementations (real and fake) must implement this interface.
    This interface contains ONLY runtime operations - no test setup methods.
    """

    @property
    @abstractmethod
    def branch(self) -> GitBranchOps:
        """Access branch operations subgateway."""
        ...

    @property
    @abstractmethod
    def commit(self) -> GitCommitOps:
        """Access commit operations subgateway."""
        ...

    @property
    @abstractmethod
    def rebase(self) -> GitRebaseOps:
        """Access rebase operations subgateway."""
        ...

    @property
    @abstractmethod
    def remote(self) -> GitRemoteOps:
        """Access remote operations subgateway."""
        ...

    @property
    @abstractmethod
    def status(self) -> GitStatusOps:
        """Access status operations subgateway."""
        ...

    @abstractmethod
    def get_repository_root(self, cwd: Path) -> Path | None:
        """Get the work tree root containing cwd, or None outside a repository."""
        ...

    @abstractmethod
    def get_git_dir(self, cwd: Path) -> Path | None:
        """Get the (per-worktree) git directory, or None outside a repository."""
        ...

"""Abstract base class for Git rebase operations.

This sub-gateway covers the scripted interactive rebase used to rewrite
commits below HEAD: starting it with editor overrides, continuing after a
pause, aborting, and detecting whether one is in progress.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class GitRebaseOps(ABC):
    """Abstract interface for Git rebase operations.

    All implementations (real and fake) must implement this interface.
    """

    # ============================================================================
    # Mutation Operations
    # ============================================================================

    @abstractmethod
    def start_interactive_rebase(
        self,
        cwd: Path,
        base: str,
        *,
        sequence_editor: str,
        editor: str,
    ) -> None:
        """Run `git rebase -i --autostash <base>` with scripted editors.

        Args:
            cwd: Working directory
            base: Commit the replayed commits are rebased onto
            sequence_editor: Value for GIT_SEQUENCE_EDITOR (edits the todo list)
            editor: Value for GIT_EDITOR (edits commit messages during reword)

        Raises:
            CommandFailedError: If git exits non-zero; the rebase may be left in
                progress and must be aborted by the caller
        """
        ...

    @abstractmethod
    def rebase_continue(self, cwd: Path) -> None:
        """Continue an in-progress rebase (git rebase --continue).

        Raises:
            CommandFailedError: If continue fails (e.g., conflicts)
        """
        ...

    @abstractmethod
    def rebase_abort(self, cwd: Path) -> None:
        """Abort an in-progress rebase and restore the pre-rebase branch.

        Raises:
            CommandFailedError: If no rebase is in progress or abort fails
        """
        ...

    # ============================================================================
    # Query Operations
    # ============================================================================

    @abstractmethod
    def is_rebase_in_progress(self, cwd: Path) -> bool:
        """Check for the rebase-merge or rebase-apply state directory."""
        ...

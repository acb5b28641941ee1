"""Production implementation of Git rebase operations using subprocess."""

from collections.abc import Callable
from pathlib import Path

from retcon.gateway.git.lock import wait_for_index_lock
from retcon.gateway.git.rebase_ops.abc import GitRebaseOps
from retcon.gateway.time.abc import Time
from retcon.subprocess_utils import copied_env_for_git_subprocess, run_subprocess_with_context

# Todo lines must read "pick <full hash>" for the sequence editor to match them.
# Reworded messages keep "#" lines, as `commit -m` does. No other branch (the
# backup in particular) may be moved by the rebase.
_REBASE_CONFIG_OVERRIDES = (
    "-c",
    "rebase.abbreviateCommands=false",
    "-c",
    "core.abbrev=40",
    "-c",
    "commit.cleanup=whitespace",
    "-c",
    "rebase.updateRefs=false",
    "-c",
    "rebase.autoSquash=false",
)


class RealGitRebaseOps(GitRebaseOps):
    """Real implementation of Git rebase operations using subprocess."""

    def __init__(self, time: Time, get_git_dir: Callable[[Path], Path | None]) -> None:
        """Initialize RealGitRebaseOps.

        Args:
            time: Time provider for lock waiting
            get_git_dir: Function resolving the git directory for a work tree
        """
        self._time = time
        self._get_git_dir = get_git_dir

    def start_interactive_rebase(
        self,
        cwd: Path,
        base: str,
        *,
        sequence_editor: str,
        editor: str,
    ) -> None:
        wait_for_index_lock(cwd, self._time)
        run_subprocess_with_context(
            cmd=[
                "git",
                *_REBASE_CONFIG_OVERRIDES,
                "rebase",
                "-i",
                "--autostash",
                base,
            ],
            operation_context=f"start interactive rebase onto {base[:7]}",
            cwd=cwd,
            env=copied_env_for_git_subprocess(
                {"GIT_SEQUENCE_EDITOR": sequence_editor, "GIT_EDITOR": editor}
            ),
        )

    def rebase_continue(self, cwd: Path) -> None:
        run_subprocess_with_context(
            cmd=["git", "rebase", "--continue"],
            operation_context="continue rebase",
            cwd=cwd,
            env=copied_env_for_git_subprocess({"GIT_EDITOR": "true"}),  # Keep messages as-is
        )

    def rebase_abort(self, cwd: Path) -> None:
        run_subprocess_with_context(
            cmd=["git", "rebase", "--abort"],
            operation_context="abort rebase",
            cwd=cwd,
        )

    def is_rebase_in_progress(self, cwd: Path) -> bool:
        git_dir = self._get_git_dir(cwd)
        if git_dir is None:
            return False
        return (git_dir / "rebase-merge").exists() or (git_dir / "rebase-apply").exists()

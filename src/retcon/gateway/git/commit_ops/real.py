"""Production implementation of Git commit operations using subprocess."""

import subprocess
from pathlib import Path

from retcon.gateway.git.commit_ops.abc import GitCommitOps
from retcon.gateway.git.lock import wait_for_index_lock
from retcon.gateway.time.abc import Time
from retcon.subprocess_utils import copied_env_for_git_subprocess, run_subprocess_with_context


def format_git_date(timestamp: int, offset: str = "+0000") -> str:
    """Format epoch seconds in git's internal date format ("<seconds> <offset>")."""
    return f"{timestamp} {offset}"


class RealGitCommitOps(GitCommitOps):
    """Real implementation of Git commit operations using subprocess."""

    def __init__(self, time: Time) -> None:
        """Initialize RealGitCommitOps with Time provider.

        Args:
            time: Time provider for lock waiting
        """
        self._time = time

    def amend_head(
        self,
        cwd: Path,
        *,
        message: str | None,
        author_timestamp: int | None,
        commit_timestamp: int | None,
    ) -> None:
        wait_for_index_lock(cwd, self._time)

        # --only with no paths keeps staged changes out of the amended commit
        cmd = ["git", "commit", "--amend", "--only", "--allow-empty", "--no-verify"]
        if message is not None:
            cmd.extend(["-m", message])
        else:
            cmd.append("--no-edit")
        # New dates keep the timezone offsets HEAD was recorded with
        author_offset, committer_offset = "+0000", "+0000"
        if author_timestamp is not None or commit_timestamp is not None:
            author_offset, committer_offset = self._head_date_offsets(cwd)
        if author_timestamp is not None:
            cmd.append(f"--date={format_git_date(author_timestamp, author_offset)}")

        overrides = {"GIT_EDITOR": "true"}
        if commit_timestamp is not None:
            overrides["GIT_COMMITTER_DATE"] = format_git_date(commit_timestamp, committer_offset)

        run_subprocess_with_context(
            cmd=cmd,
            operation_context="amend HEAD commit",
            cwd=cwd,
            env=copied_env_for_git_subprocess(overrides),
        )

    def get_head_sha(self, cwd: Path) -> str:
        result = run_subprocess_with_context(
            cmd=["git", "rev-parse", "HEAD"],
            operation_context="resolve HEAD",
            cwd=cwd,
        )
        return result.stdout.strip()

    def get_parent_sha(self, cwd: Path, commit_sha: str) -> str | None:
        result = subprocess.run(
            ["git", "rev-parse", "--verify", "--quiet", f"{commit_sha}^1"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
            env=copied_env_for_git_subprocess(),
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def read_log(self, cwd: Path, *, revision_range: str | None, log_format: str) -> str:
        cmd = ["git", "log", f"--format={log_format}"]
        if revision_range is not None:
            cmd.append(revision_range)
        result = run_subprocess_with_context(
            cmd=cmd,
            operation_context=f"read log for {revision_range or 'HEAD'}",
            cwd=cwd,
        )
        return result.stdout.strip()

    def list_merge_commits(self, cwd: Path, revision_range: str) -> list[str]:
        result = run_subprocess_with_context(
            cmd=["git", "rev-list", "--merges", revision_range],
            operation_context=f"list merge commits in {revision_range}",
            cwd=cwd,
        )
        return result.stdout.split()

    def _head_date_offsets(self, cwd: Path) -> tuple[str, str]:
        """Timezone offsets such as "+0200" of HEAD's author and committer dates."""
        result = run_subprocess_with_context(
            cmd=["git", "log", "-1", "--format=%ai%x1f%ci", "HEAD"],
            operation_context="read HEAD date offsets",
            cwd=cwd,
        )
        author_date, _, committer_date = result.stdout.strip().partition("\x1f")
        return author_date.rsplit(" ", 1)[-1], committer_date.rsplit(" ", 1)[-1]

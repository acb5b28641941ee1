"""Production implementation of Git status operations using subprocess."""

from pathlib import Path

from retcon.gateway.git.status_ops.abc import GitStatusOps
from retcon.subprocess_utils import run_subprocess_with_context


class RealGitStatusOps(GitStatusOps):
    """Real implementation of Git status operations using subprocess."""

    def get_porcelain_status(self, cwd: Path) -> str:
        result = run_subprocess_with_context(
            cmd=["git", "status", "--porcelain"],
            operation_context="read working tree status",
            cwd=cwd,
        )
        return result.stdout.strip()

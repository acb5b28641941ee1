"""Production implementation of Git remote operations using subprocess."""

from pathlib import Path

from retcon.gateway.git.remote_ops.abc import GitRemoteOps
from retcon.subprocess_utils import copied_env_for_git_subprocess, run_subprocess_with_context

# Timeout in seconds for network-touching git operations.
# Prevents indefinite hangs on network issues or credential prompts.
_GIT_NETWORK_TIMEOUT = 120


class RealGitRemoteOps(GitRemoteOps):
    """Real implementation of Git remote operations using subprocess."""

    def fetch_remote(self, cwd: Path, remote: str) -> None:
        run_subprocess_with_context(
            cmd=["git", "fetch", remote],
            operation_context=f"fetch remote '{remote}'",
            cwd=cwd,
            timeout=_GIT_NETWORK_TIMEOUT,
            env=copied_env_for_git_subprocess(),
        )

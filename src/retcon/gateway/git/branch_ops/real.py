"""Production implementation of Git branch operations using subprocess."""

import subprocess
from pathlib import Path

from retcon.gateway.git.branch_ops.abc import GitBranchOps
from retcon.subprocess_utils import copied_env_for_git_subprocess, run_subprocess_with_context


class RealGitBranchOps(GitBranchOps):
    """Real implementation of Git branch operations using subprocess."""

    def create_branch(self, cwd: Path, branch_name: str, start_point: str) -> None:
        run_subprocess_with_context(
            cmd=["git", "branch", branch_name, start_point],
            operation_context=f"create branch '{branch_name}' at {start_point}",
            cwd=cwd,
        )

    def reset_hard(self, cwd: Path, ref: str) -> None:
        run_subprocess_with_context(
            cmd=["git", "reset", "--hard", ref],
            operation_context=f"reset current branch to '{ref}'",
            cwd=cwd,
        )

    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch."""
        result = subprocess.run(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
            env=copied_env_for_git_subprocess(),
        )
        if result.returncode != 0:
            return None

        branch = result.stdout.strip()
        if branch == "HEAD":
            return None
        return branch

    def get_branch_config(self, cwd: Path, branch: str, key: str) -> str | None:
        # Exit code 1 means the key is unset
        result = subprocess.run(
            ["git", "config", "--get", f"branch.{branch}.{key}"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
            env=copied_env_for_git_subprocess(),
        )
        if result.returncode != 0:
            return None
        value = result.stdout.strip()
        return value or None

    def list_remotes(self, cwd: Path) -> list[str]:
        result = run_subprocess_with_context(
            cmd=["git", "remote"],
            operation_context="list remotes",
            cwd=cwd,
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def resolve_ref(self, cwd: Path, ref: str) -> str | None:
        result = subprocess.run(
            ["git", "rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
            env=copied_env_for_git_subprocess(),
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def list_local_branches(self, cwd: Path) -> list[str]:
        result = run_subprocess_with_context(
            cmd=["git", "branch", "--format=%(refname:short)"],
            operation_context="list local branches",
            cwd=cwd,
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def list_remote_branches_containing(self, cwd: Path, commit_sha: str) -> list[str]:
        result = run_subprocess_with_context(
            cmd=["git", "branch", "-r", "--contains", commit_sha, "--format=%(refname:short)"],
            operation_context=f"list remote branches containing {commit_sha[:7]}",
            cwd=cwd,
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

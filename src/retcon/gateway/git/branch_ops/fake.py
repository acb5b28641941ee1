"""Fake Git branch operations for testing."""

from __future__ import annotations

from pathlib import Path

from retcon.gateway.git.branch_ops.abc import GitBranchOps
from retcon.gateway.git.fake_repo import FakeRepository
from retcon.subprocess_utils import CommandFailedError


class FakeGitBranchOps(GitBranchOps):
    """In-memory fake implementation of Git branch operations.

    Reads and mutates a shared FakeRepository.

    Constructor Injection:
    ---------------------
    - create_branch_raises: Exception to raise from create_branch()
    - created_branch_target: Force created branches to point at this hash
      instead of start_point (simulates a backup that did not land on HEAD)

    Mutation Tracking:
    -----------------
    - created_branches: List of (branch_name, start_point) from create_branch()
    - reset_calls: List of refs passed to reset_hard()
    """

    def __init__(
        self,
        repo: FakeRepository,
        *,
        create_branch_raises: Exception | None = None,
        created_branch_target: str | None = None,
    ) -> None:
        self._repo = repo
        self._create_branch_raises = create_branch_raises
        self._created_branch_target = created_branch_target
        self._created_branches: list[tuple[str, str]] = []
        self._reset_calls: list[str] = []

    def create_branch(self, cwd: Path, branch_name: str, start_point: str) -> None:
        self._created_branches.append((branch_name, start_point))
        if self._create_branch_raises is not None:
            raise self._create_branch_raises
        if branch_name in self._repo.branches:
            raise CommandFailedError(
                cmd=["git", "branch", branch_name, start_point],
                operation_context=f"create branch '{branch_name}' at {start_point}",
                returncode=128,
                stderr=f"fatal: a branch named '{branch_name}' already exists",
            )
        target = self._created_branch_target or self._repo.resolve(start_point)
        if target is None:
            raise CommandFailedError(
                cmd=["git", "branch", branch_name, start_point],
                operation_context=f"create branch '{branch_name}' at {start_point}",
                returncode=128,
                stderr=f"fatal: not a valid object name: '{start_point}'",
            )
        self._repo.branches[branch_name] = target

    def reset_hard(self, cwd: Path, ref: str) -> None:
        self._reset_calls.append(ref)
        target = self._repo.resolve(ref)
        if target is None:
            raise CommandFailedError(
                cmd=["git", "reset", "--hard", ref],
                operation_context=f"reset current branch to '{ref}'",
                returncode=128,
                stderr=f"fatal: ambiguous argument '{ref}'",
            )
        self._repo.set_head(target)

    def get_current_branch(self, cwd: Path) -> str | None:
        return self._repo.current_branch

    def get_branch_config(self, cwd: Path, branch: str, key: str) -> str | None:
        return self._repo.branch_config.get((branch, key))

    def list_remotes(self, cwd: Path) -> list[str]:
        return list(self._repo.remotes)

    def resolve_ref(self, cwd: Path, ref: str) -> str | None:
        return self._repo.resolve(ref)

    def list_local_branches(self, cwd: Path) -> list[str]:
        return sorted(self._repo.branches)

    def list_remote_branches_containing(self, cwd: Path, commit_sha: str) -> list[str]:
        return sorted(
            name
            for name, tip in self._repo.remote_branches.items()
            if self._repo.contains(tip, commit_sha)
        )

    @property
    def created_branches(self) -> list[tuple[str, str]]:
        return list(self._created_branches)

    @property
    def reset_calls(self) -> list[str]:
        return list(self._reset_calls)

"""Application context with dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from retcon.core.config import RetconConfig, load_config
from retcon.core.engine import RewriteEngine
from retcon.gateway.git.abc import Git
from retcon.gateway.git.real import RealGit
from retcon.gateway.time.abc import Time
from retcon.gateway.time.real import RealTime


@dataclass(frozen=True)
class RetconContext:
    """Immutable context holding all dependencies for retcon commands.

    Created at the CLI entry point and passed to commands through click's obj.
    """

    git: Git
    time: Time
    config: RetconConfig
    cwd: Path  # Current working directory at CLI invocation

    @property
    def engine(self) -> RewriteEngine:
        return RewriteEngine(self.git, self.time, self.config)

    @staticmethod
    def for_test(
        git: Git | None = None,
        time: Time | None = None,
        config: RetconConfig | None = None,
        cwd: Path | None = None,
    ) -> RetconContext:
        """Create a context with fakes for anything not supplied.

        Example:
            >>> from retcon.gateway.git.fake import FakeGit
            >>> ctx = RetconContext.for_test(git=FakeGit())
        """
        from retcon.gateway.git.fake import FakeGit
        from retcon.gateway.time.fake import FakeTime

        resolved_git = git if git is not None else FakeGit()
        return RetconContext(
            git=resolved_git,
            time=time if time is not None else FakeTime(),
            config=config if config is not None else RetconConfig(),
            cwd=cwd if cwd is not None else Path("/fake/repo"),
        )


def create_context(*, cwd: Path | None = None) -> RetconContext:
    """Create the production context.

    Configuration is read from the repository containing cwd; outside a
    repository the defaults apply and commands report the missing repository.
    """
    resolved_cwd = cwd if cwd is not None else Path.cwd()
    time = RealTime()
    git = RealGit(time=time)
    root = git.get_repository_root(resolved_cwd)
    config = load_config(root) if root is not None else RetconConfig()
    return RetconContext(git=git, time=time, config=config, cwd=resolved_cwd)

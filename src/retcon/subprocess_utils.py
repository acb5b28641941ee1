"""Subprocess helpers for running git with error context.

Every git invocation in retcon goes through `run_subprocess_with_context`, so a
failure always surfaces the command line, the operation being attempted, and
git's own stderr text.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

logger = logging.getLogger(__name__)


class CommandFailedError(RuntimeError):
    """A git command exited with a non-zero status (or could not be started).

    Attributes:
        cmd: The argument list that was executed
        operation_context: Human description of what was being attempted
        returncode: Exit status, or None if the process never ran
        stderr: Raw error text reported by the command
    """

    def __init__(
        self,
        *,
        cmd: Sequence[str],
        operation_context: str,
        returncode: int | None,
        stderr: str,
    ) -> None:
        self.cmd = list(cmd)
        self.operation_context = operation_context
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(self._format())

    @property
    def command_line(self) -> str:
        return shlex.join(self.cmd)

    def _format(self) -> str:
        message = f"Failed to {self.operation_context}\nCommand: {self.command_line}"
        if self.returncode is not None:
            message += f"\nExit code: {self.returncode}"
        if self.stderr.strip():
            message += f"\n{self.stderr.strip()}"
        return message


def copied_env_for_git_subprocess(overrides: Mapping[str, str] | None = None) -> dict[str, str]:
    """Copy the current environment for a git subprocess.

    GIT_TERMINAL_PROMPT is disabled so git never blocks waiting for credentials.

    Args:
        overrides: Extra variables applied on top of the copy

    Returns:
        A new environment dict; os.environ is not modified
    """
    env = os.environ.copy()
    env["GIT_TERMINAL_PROMPT"] = "0"
    if overrides is not None:
        env.update(overrides)
    return env


def run_subprocess_with_context(
    cmd: Sequence[str],
    *,
    operation_context: str,
    cwd: Path,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
    input: str | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a command, raising CommandFailedError with context on failure.

    Args:
        cmd: Command and arguments (never a shell string)
        operation_context: What is being attempted, e.g. "amend HEAD commit"
        cwd: Working directory for the command
        env: Full environment for the child; defaults to a git-safe copy of os.environ
        timeout: Seconds before the command is killed
        input: Text sent to the command's stdin

    Returns:
        The completed process with captured text stdout/stderr

    Raises:
        CommandFailedError: If the command fails, times out, or cannot be started
    """
    logger.debug("Running %s (cwd=%s)", shlex.join(cmd), cwd)
    try:
        return subprocess.run(
            list(cmd),
            cwd=cwd,
            env=dict(env) if env is not None else copied_env_for_git_subprocess(),
            capture_output=True,
            text=True,
            check=True,
            timeout=timeout,
            input=input,
        )
    except subprocess.CalledProcessError as e:
        raise CommandFailedError(
            cmd=cmd,
            operation_context=operation_context,
            returncode=e.returncode,
            stderr=e.stderr or e.stdout or "",
        ) from e
    except subprocess.TimeoutExpired as e:
        raise CommandFailedError(
            cmd=cmd,
            operation_context=operation_context,
            returncode=None,
            stderr=f"Timed out after {timeout} seconds",
        ) from e
    except OSError as e:
        raise CommandFailedError(
            cmd=cmd,
            operation_context=operation_context,
            returncode=None,
            stderr=str(e),
        ) from e

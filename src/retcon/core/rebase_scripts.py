"""Temporary editor scripts that drive a non-interactive `git rebase -i`.

git runs GIT_SEQUENCE_EDITOR on the todo list and GIT_EDITOR on each commit
message it wants edited. Pointing them at small shell scripts lets the engine
change one todo line and supply one message without user interaction.
"""

from __future__ import annotations

import logging
import os
import shlex
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Literal

from retcon.gateway.time.abc import Time

logger = logging.getLogger(__name__)

RebaseAction = Literal["reword", "edit"]

_SCRIPT_MODE = 0o755

# The rebase writes todo lines with this many hash digits (core.abbrev=40)
TODO_HASH_LENGTH = 40


def sequence_editor_script(commit_hash: str, action: RebaseAction) -> str:
    """Shell script turning `pick <hash>` into `<action> <hash>` in the todo file.

    The whole hash token up to the following space is matched, so a commit
    whose hash shares a prefix with the target is left alone. The output goes
    to a sibling file that is renamed over the todo list, so no editor backup
    file is left next to it.
    """
    todo_hash = commit_hash[:TODO_HASH_LENGTH]
    expression = shlex.quote(f"s/^pick {todo_hash} /{action} {todo_hash} /")
    return (
        "#!/bin/sh\n"
        f'sed {expression} "$1" > "$1.retcon" && mv "$1.retcon" "$1"\n'
    )


def message_editor_script(message_path: Path) -> str:
    """Shell script replacing the commit message file with a prepared message."""
    return f'#!/bin/sh\ncat {shlex.quote(str(message_path))} > "$1"\n'


def _write_temp_file(content: str, *, time: Time, suffix: str, executable: bool) -> Path:
    fd, name = tempfile.mkstemp(prefix=f"retcon-rebase-{time.epoch_millis()}-", suffix=suffix)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(content)
    path = Path(name)
    if executable:
        path.chmod(_SCRIPT_MODE)
    return path


def _remove_quietly(path: Path) -> None:
    for candidate in (path, path.with_name(path.name + ".bak")):
        try:
            candidate.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove temporary file %s: %s", candidate, e)


@contextmanager
def sequence_editor(commit_hash: str, action: RebaseAction, *, time: Time) -> Iterator[Path]:
    """Yield the path of a sequence editor script; it is deleted on exit."""
    path = _write_temp_file(
        sequence_editor_script(commit_hash, action), time=time, suffix=".sh", executable=True
    )
    logger.debug("Wrote sequence editor %s (%s %s)", path, action, commit_hash[:7])
    try:
        yield path
    finally:
        _remove_quietly(path)


@contextmanager
def message_editor(message: str, *, time: Time) -> Iterator[Path]:
    """Yield the path of an editor script that writes `message`; both files are deleted on exit."""
    message_path = _write_temp_file(message, time=time, suffix=".msg", executable=False)
    try:
        script_path = _write_temp_file(
            message_editor_script(message_path), time=time, suffix=".sh", executable=True
        )
        try:
            yield script_path
        finally:
            _remove_quietly(script_path)
    finally:
        _remove_quietly(message_path)


def editor_command(script_path: Path) -> str:
    """Value for GIT_EDITOR / GIT_SEQUENCE_EDITOR running the script."""
    return shlex.quote(str(script_path))

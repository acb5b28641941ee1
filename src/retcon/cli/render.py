"""Rendering helpers shared by the CLI commands."""

from __future__ import annotations

import sys
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from typing import NoReturn, TypeVar

import click

from retcon.core.errors import RetconError
from retcon.core.events import CompletionEvent, ProgressEvent
from retcon.output import user_output
from retcon.subprocess_utils import CommandFailedError

T = TypeVar("T")

# Style mapping for progress events
STYLE_MAP: dict[str, dict[str, str | bool]] = {
    "info": {},
    "success": {"fg": "green"},
    "warning": {"fg": "yellow"},
    "error": {"fg": "red", "bold": True},
}


def render_events(
    events: Generator[ProgressEvent | CompletionEvent[T]],
) -> T:
    """Consume an event stream, render progress to stderr, return the result.

    Raises:
        RuntimeError: If the operation ends without a CompletionEvent
    """
    for event in events:
        match event:
            case ProgressEvent(message=msg, style=style):
                click.echo(click.style(f"  {msg}", **STYLE_MAP[style]), err=True)
                sys.stderr.flush()
            case CompletionEvent(result=result):
                return result
    raise RuntimeError("Operation ended without completion")


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Report engine and git failures as `Error: ...` and exit with status 1."""
    try:
        yield
    except (RetconError, CommandFailedError) as e:
        user_output(click.style("Error: ", fg="red") + str(e))
        raise SystemExit(1) from None


def exit_with_error(message: str) -> NoReturn:
    user_output(click.style("Error: ", fg="red") + message)
    raise SystemExit(1)

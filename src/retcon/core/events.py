"""Event types yielded by long-running engine operations.

Operations are generators: they yield ProgressEvent while working and finish
with exactly one CompletionEvent carrying the result. The CLI renders the
progress; tests can collect the events and assert on them.
"""

from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

T = TypeVar("T")

ProgressStyle = Literal["info", "success", "warning", "error"]


@dataclass(frozen=True)
class ProgressEvent:
    """A status line for the user."""

    message: str
    style: ProgressStyle = "info"


@dataclass(frozen=True)
class CompletionEvent(Generic[T]):
    """Final event of an operation, carrying its result."""

    result: T

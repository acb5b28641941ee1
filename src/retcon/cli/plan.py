"""Loading bulk edit plans from JSON.

A plan is a list of objects, one per commit:

    [
      {"commit": "a1b2c3d", "message": "Fix parser"},
      {"commit": "HEAD~3", "author_date": "2024-05-01T09:30:00"},
      {"commit": "e4f5a6b", "commit_date": "@1714555800"}
    ]

Dates use the same forms as the command line options, or plain integers
(epoch seconds).
"""

import json
from pathlib import Path

from retcon.cli.dates import parse_date
from retcon.core.types import EditRequest

_KNOWN_KEYS = {"commit", "message", "author_date", "commit_date"}


def load_plan(path: Path) -> list[EditRequest]:
    """Read a plan file into edit requests, in file order.

    Raises:
        ValueError: If the file is not valid JSON or an entry is malformed
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"{path}: not valid JSON ({e})") from None
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of edits")
    return [_parse_entry(path, index, entry) for index, entry in enumerate(data)]


def _parse_entry(path: Path, index: int, entry: object) -> EditRequest:
    where = f"{path}: entry {index}"
    if not isinstance(entry, dict):
        raise ValueError(f"{where}: expected an object")
    unknown = sorted(set(entry) - _KNOWN_KEYS)
    if unknown:
        raise ValueError(f"{where}: unknown keys {', '.join(unknown)}")

    commit = entry.get("commit")
    if not isinstance(commit, str) or not commit.strip():
        raise ValueError(f"{where}: 'commit' must be a revision string")

    message = entry.get("message")
    if message is not None and not isinstance(message, str):
        raise ValueError(f"{where}: 'message' must be a string")

    return EditRequest(
        commit_hash=commit.strip(),
        new_message=message,
        new_author_timestamp=_parse_plan_date(where, "author_date", entry.get("author_date")),
        new_commit_timestamp=_parse_plan_date(where, "commit_date", entry.get("commit_date")),
    )


def _parse_plan_date(where: str, key: str, value: object) -> int | None:
    if value is None:
        return None
    # bool is an int subclass; true/false are not dates
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            return parse_date(value)
        except ValueError as e:
            raise ValueError(f"{where}: {e}") from None
    raise ValueError(f"{where}: '{key}' must be a date string or epoch seconds")

"""Parse `git log` output into CommitRecord values.

Fields are separated by the ASCII unit separator and records by the ASCII
record separator; neither appears in ordinary commit metadata, so messages
with newlines, tabs or pipes parse unchanged.
"""

import logging

from retcon.core.types import CommitRecord

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "\x1f"
RECORD_SEPARATOR = "\x1e"

# hash, author name, author email, author date, commit date, then the raw body
LOG_FORMAT = "%H%x1f%an%x1f%ae%x1f%at%x1f%ct%x1f%B%x1e"

_FIXED_FIELD_COUNT = 5


def parse_commit_record(record: str) -> CommitRecord | None:
    """Parse a single record, or return None if it is malformed.

    Everything after the fixed fields is the message, rejoined on the field
    separator so a separator inside the message is kept.
    """
    fields = record.strip("\n").split(FIELD_SEPARATOR)
    if len(fields) < _FIXED_FIELD_COUNT + 1:
        logger.debug("Skipping log record with %d fields: %r", len(fields), record)
        return None

    sha, author_name, author_email, author_ts, commit_ts = fields[:_FIXED_FIELD_COUNT]
    if not sha or not author_ts.isdigit() or not commit_ts.isdigit():
        logger.debug("Skipping malformed log record: %r", record)
        return None

    message = FIELD_SEPARATOR.join(fields[_FIXED_FIELD_COUNT:]).strip()
    return CommitRecord(
        hash=sha,
        short_hash=sha[:7],
        author_name=author_name,
        author_email=author_email,
        author_timestamp=int(author_ts),
        commit_timestamp=int(commit_ts),
        message=message,
    )


def parse_commits(output: str) -> list[CommitRecord]:
    """Parse the full output of `git log --format=LOG_FORMAT`."""
    commits: list[CommitRecord] = []
    for record in output.split(RECORD_SEPARATOR):
        if not record.strip():
            continue
        commit = parse_commit_record(record)
        if commit is not None:
            commits.append(commit)
    return commits

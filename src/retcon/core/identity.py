"""Track commits across rewrites that change their hashes.

Rewriting one commit gives it and every descendant a new hash. The tracker
follows each commit from the session's first scan to its current hash by
position in the newest-first list, and verifies every positional match
against a content fingerprint so a reordered or changed history stops the
session instead of silently editing the wrong commit.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from retcon.core.errors import IdentityResolutionAmbiguousError
from retcon.core.types import CommitRecord, EditRequest

logger = logging.getLogger(__name__)


class Fingerprint(NamedTuple):
    """Commit content that a metadata rewrite of another commit leaves unchanged."""

    message: str
    author_name: str
    author_email: str
    author_timestamp: int


def fingerprint(commit: CommitRecord) -> Fingerprint:
    return Fingerprint(
        message=commit.message,
        author_name=commit.author_name,
        author_email=commit.author_email,
        author_timestamp=commit.author_timestamp,
    )


class IdentityTracker:
    """Maps each original commit hash to the commit's current record."""

    def __init__(self, commits: list[CommitRecord]) -> None:
        self._original = list(commits)
        self._positions = {commit.hash: index for index, commit in enumerate(commits)}
        self._current = list(commits)

    def is_tracked(self, original_hash: str) -> bool:
        return original_hash in self._positions

    def position(self, original_hash: str) -> int:
        """Index in the newest-first list (0 is HEAD)."""
        if original_hash not in self._positions:
            raise IdentityResolutionAmbiguousError(original_hash, "commit was never tracked")
        return self._positions[original_hash]

    def original(self, original_hash: str) -> CommitRecord:
        return self._original[self.position(original_hash)]

    def current(self, original_hash: str) -> CommitRecord:
        return self._current[self.position(original_hash)]

    def hash_map(self) -> dict[str, str]:
        return {
            original.hash: current.hash
            for original, current in zip(self._original, self._current, strict=True)
        }

    def refresh(self, applied: EditRequest, commits: list[CommitRecord]) -> None:
        """Adopt a fresh commit list after `applied` was rewritten.

        `applied.commit_hash` is the original hash of the edited commit.

        Raises:
            IdentityResolutionAmbiguousError: If the list changed length or any
                commit no longer matches its position
        """
        if len(commits) != len(self._current):
            raise IdentityResolutionAmbiguousError(
                applied.commit_hash,
                f"expected {len(self._current)} unpushed commits after rewrite, "
                f"found {len(commits)}",
            )

        edited_position = self.position(applied.commit_hash)
        for original_hash, index in self._positions.items():
            previous = self._current[index]
            candidate = commits[index]
            if index == edited_position:
                _verify_edited(original_hash, previous, candidate, applied)
                continue

            expected = fingerprint(previous)
            if fingerprint(candidate) == expected:
                continue
            matches = [i for i, commit in enumerate(commits) if fingerprint(commit) == expected]
            if not matches:
                raise IdentityResolutionAmbiguousError(
                    original_hash, "no commit with the same content after rewrite"
                )
            raise IdentityResolutionAmbiguousError(
                original_hash,
                f"commit moved from position {index} to {matches}; history was reordered",
            )

        logger.debug("Identity map refreshed after rewriting %s", applied.commit_hash[:7])
        self._current = list(commits)


def _verify_edited(
    original_hash: str, previous: CommitRecord, candidate: CommitRecord, applied: EditRequest
) -> None:
    if (candidate.author_name, candidate.author_email) != (
        previous.author_name,
        previous.author_email,
    ):
        raise IdentityResolutionAmbiguousError(
            original_hash, "the commit at the edited position has a different author"
        )
    expected_timestamp = (
        applied.new_author_timestamp
        if applied.new_author_timestamp is not None
        else previous.author_timestamp
    )
    if candidate.author_timestamp != expected_timestamp:
        raise IdentityResolutionAmbiguousError(
            original_hash,
            f"author date is {candidate.author_timestamp}, expected {expected_timestamp}",
        )

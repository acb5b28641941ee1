"""In-memory repository model shared by the fake git sub-gateways.

Commits are content-addressed the same way git's are: a fake hash is a digest
of the parent hash, both identities, both timestamps, and the message. Rewriting
any commit therefore changes its hash and the hash of every descendant, which
is exactly the property the rewrite engine has to cope with.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class FakeCommit:
    """A commit in the fake repository."""

    sha: str
    parent: str | None
    author_name: str
    author_email: str
    author_timestamp: int
    commit_timestamp: int
    message: str


def compute_fake_sha(
    *,
    parent: str | None,
    author_name: str,
    author_email: str,
    author_timestamp: int,
    commit_timestamp: int,
    message: str,
) -> str:
    payload = "\0".join(
        [
            parent or "",
            author_name,
            author_email,
            str(author_timestamp),
            str(commit_timestamp),
            message,
        ]
    )
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


class FakeRepository:
    """Mutable state of a fake repository.

    State Management:
    -----------------
    Tests build history with add_commit() and set remote-tracking refs with
    set_remote_branch(). The fake sub-gateways read and mutate this object, so
    a rewrite performed through one sub-gateway is visible to all others.

    Examples:
    ---------
        repo = FakeRepository(root=Path("/repo"))
        c1 = repo.add_commit("First")
        c2 = repo.add_commit("Second")
        repo.set_remote_branch("origin/main", c1.sha)
        repo.rewrite_commit(c1.sha, message="First (edited)")
        assert repo.head_sha() != c2.sha
    """

    def __init__(
        self,
        *,
        root: Path,
        current_branch: str | None = "main",
        clock: int = 1_700_000_000,
    ) -> None:
        self.root = root
        self.git_dir = root / ".git"
        self.commits: dict[str, FakeCommit] = {}
        self.merge_commits: set[str] = set()
        self.branches: dict[str, str] = {}
        self.remote_branches: dict[str, str] = {}
        self.branch_config: dict[tuple[str, str], str] = {}
        self.remotes: list[str] = []
        self.current_branch = current_branch
        self.detached_head: str | None = None
        self.rebase_in_progress = False
        self.rebase_orig_head: str | None = None
        self.rebase_pending: list[FakeCommit] = []
        self.clock = clock

    # ============================================================================
    # Test setup
    # ============================================================================

    def add_commit(
        self,
        message: str,
        *,
        author_name: str = "Test User",
        author_email: str = "test@example.com",
        author_timestamp: int | None = None,
        commit_timestamp: int | None = None,
    ) -> FakeCommit:
        """Append a commit on top of HEAD and advance the current branch."""
        self.clock += 60
        at = author_timestamp if author_timestamp is not None else self.clock
        ct = commit_timestamp if commit_timestamp is not None else at
        parent = self.head_sha()
        commit = self._store(
            parent=parent,
            author_name=author_name,
            author_email=author_email,
            author_timestamp=at,
            commit_timestamp=ct,
            message=message,
        )
        self.set_head(commit.sha)
        return commit

    def set_remote_branch(self, name: str, sha: str) -> None:
        """Point a remote-tracking branch such as "origin/main" at a commit."""
        self.remote_branches[name] = sha

    def mark_merge(self, sha: str) -> None:
        """Treat a commit as a merge commit. Rewrites replay it with one parent."""
        self.merge_commits.add(sha)

    def set_upstream(self, branch: str, *, remote: str, merge: str) -> None:
        """Configure branch.<branch>.remote/merge and register the remote."""
        self.branch_config[(branch, "remote")] = remote
        self.branch_config[(branch, "merge")] = merge
        if remote != "." and remote not in self.remotes:
            self.remotes.append(remote)

    # ============================================================================
    # Queries
    # ============================================================================

    def head_sha(self) -> str | None:
        if self.current_branch is None:
            return self.detached_head
        return self.branches.get(self.current_branch)

    def resolve(self, ref: str) -> str | None:
        """Resolve HEAD, branch names, remote branches, hashes and `<ref>^1`."""
        if ref.endswith("^{commit}"):
            ref = ref.removesuffix("^{commit}")
        for suffix in ("^1", "^", "~1"):
            if ref.endswith(suffix):
                base = self.resolve(ref.removesuffix(suffix))
                if base is None:
                    return None
                return self.commits[base].parent
        if ref == "HEAD":
            return self.head_sha()
        ref = ref.removeprefix("refs/heads/")
        if ref in self.branches:
            return self.branches[ref]
        remote_ref = ref.removeprefix("refs/remotes/")
        if remote_ref in self.remote_branches:
            return self.remote_branches[remote_ref]
        if len(ref) >= 4:
            matches = [sha for sha in self.commits if sha.startswith(ref)]
            if len(matches) == 1:
                return matches[0]
        return None

    def ancestry(self, sha: str | None) -> list[FakeCommit]:
        """First-parent chain from sha back to the root, newest first."""
        chain: list[FakeCommit] = []
        while sha is not None:
            commit = self.commits[sha]
            chain.append(commit)
            sha = commit.parent
        return chain

    def contains(self, tip_sha: str, sha: str) -> bool:
        return any(commit.sha == sha for commit in self.ancestry(tip_sha))

    # ============================================================================
    # Mutations
    # ============================================================================

    def set_head(self, sha: str) -> None:
        if self.current_branch is None:
            self.detached_head = sha
        else:
            self.branches[self.current_branch] = sha

    def rewrite_commit(
        self,
        sha: str,
        *,
        message: str | None = None,
        author_timestamp: int | None = None,
        commit_timestamp: int | None = None,
    ) -> str:
        """Rewrite one commit on the current branch and replay its descendants.

        Descendants keep their metadata but get new hashes through their new
        parents. HEAD moves to the replayed tip.

        Returns:
            The rewritten commit's new hash
        """
        head = self.head_sha()
        chain = self.ancestry(head)
        index = next(i for i, commit in enumerate(chain) if commit.sha == sha)
        self.clock += 1

        target = chain[index]
        rewritten = self._store(
            parent=target.parent,
            author_name=target.author_name,
            author_email=target.author_email,
            author_timestamp=(
                author_timestamp if author_timestamp is not None else target.author_timestamp
            ),
            commit_timestamp=commit_timestamp if commit_timestamp is not None else self.clock,
            message=message if message is not None else target.message,
        )

        self.set_head(self._replay(list(reversed(chain[:index])), onto=rewritten.sha))
        return rewritten.sha

    def stop_for_edit(self, sha: str) -> None:
        """Begin a rebase that has stopped at `sha`, as an `edit` todo line does.

        HEAD moves to the commit; its descendants wait in rebase_pending until
        continue_rebase().
        """
        head = self.head_sha()
        chain = self.ancestry(head)
        index = next(i for i, commit in enumerate(chain) if commit.sha == sha)
        self.rebase_orig_head = head
        self.rebase_pending = list(reversed(chain[:index]))
        self.rebase_in_progress = True
        self.set_head(sha)

    def continue_rebase(self) -> None:
        """Replay the pending commits onto HEAD and end the rebase."""
        head = self.head_sha()
        if self.rebase_pending and head is not None:
            self.clock += 1
            self.set_head(self._replay(self.rebase_pending, onto=head))
        self._end_rebase()

    def abort_rebase(self) -> None:
        """Return HEAD to where the rebase started and end it."""
        if self.rebase_orig_head is not None:
            self.set_head(self.rebase_orig_head)
        self._end_rebase()

    def _end_rebase(self) -> None:
        self.rebase_in_progress = False
        self.rebase_orig_head = None
        self.rebase_pending = []

    def _replay(self, commits: list[FakeCommit], *, onto: str) -> str:
        parent = onto
        for commit in commits:
            replayed = self._store(
                parent=parent,
                author_name=commit.author_name,
                author_email=commit.author_email,
                author_timestamp=commit.author_timestamp,
                commit_timestamp=self.clock,
                message=commit.message,
            )
            parent = replayed.sha
        return parent

    def _store(
        self,
        *,
        parent: str | None,
        author_name: str,
        author_email: str,
        author_timestamp: int,
        commit_timestamp: int,
        message: str,
    ) -> FakeCommit:
        sha = compute_fake_sha(
            parent=parent,
            author_name=author_name,
            author_email=author_email,
            author_timestamp=author_timestamp,
            commit_timestamp=commit_timestamp,
            message=message,
        )
        commit = FakeCommit(
            sha=sha,
            parent=parent,
            author_name=author_name,
            author_email=author_email,
            author_timestamp=author_timestamp,
            commit_timestamp=commit_timestamp,
            message=message,
        )
        self.commits[sha] = commit
        return commit


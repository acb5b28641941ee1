"""Tests for the in-memory repository behind the git fakes."""

from retcon.core.commit_parser import LOG_FORMAT, parse_commits
from retcon.gateway.git.fake import FakeGit
from tests.test_utils.fake_repos import FAKE_ROOT, make_repo, messages


def test_rewrite_changes_hashes_of_commit_and_descendants() -> None:
    repo, (c1, c2, c3) = make_repo("First", "Second", "Third")

    new_c2 = repo.rewrite_commit(c2.sha, message="Second v2")

    chain = repo.ancestry(repo.head_sha())
    assert [c.sha for c in chain][1:] == [new_c2, c1.sha]
    assert chain[0].sha != c3.sha
    assert chain[0].message == "Third"


def test_edit_stop_then_continue_replays_descendants() -> None:
    repo, (_c1, c2, _c3) = make_repo("First", "Second", "Third")

    repo.stop_for_edit(c2.sha)
    assert repo.head_sha() == c2.sha
    repo.rewrite_commit(c2.sha, author_timestamp=1)
    repo.continue_rebase()

    assert repo.rebase_in_progress is False
    assert messages(repo) == ["Third", "Second", "First"]
    assert repo.ancestry(repo.head_sha())[1].author_timestamp == 1


def test_abort_restores_original_head() -> None:
    repo, (_c1, c2, c3) = make_repo("First", "Second", "Third")

    repo.stop_for_edit(c2.sha)
    repo.abort_rebase()

    assert repo.head_sha() == c3.sha


def test_fake_log_output_parses_like_git_output() -> None:
    repo, (c1, c2) = make_repo("First", "Second\n\nWith body")
    git = FakeGit(repo=repo)

    output = git.commit.read_log(FAKE_ROOT, revision_range=None, log_format=LOG_FORMAT)
    commits = parse_commits(output)

    assert [c.hash for c in commits] == [c2.sha, c1.sha]
    assert commits[0].message == "Second\n\nWith body"


def test_resolve_supports_parents_and_prefixes() -> None:
    repo, (c1, c2) = make_repo("First", "Second")

    assert repo.resolve("HEAD") == c2.sha
    assert repo.resolve("HEAD^1") == c1.sha
    assert repo.resolve(f"{c2.sha[:7]}^{{commit}}") == c2.sha
    assert repo.resolve("refs/heads/main") == c2.sha
    assert repo.resolve("nope") is None


def test_fake_merge_listing_covers_only_the_range() -> None:
    repo, (c1, c2, c3) = make_repo("First", "Merge side", "After")
    repo.mark_merge(c2.sha)
    commit_ops = FakeGit(repo=repo).commit

    assert commit_ops.list_merge_commits(FAKE_ROOT, f"{c1.sha}..HEAD") == [c2.sha]
    assert commit_ops.list_merge_commits(FAKE_ROOT, f"{c2.sha}..HEAD") == []
    assert c3.sha not in repo.merge_commits

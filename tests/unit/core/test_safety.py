"""Tests for the pushed-commit and working tree checks."""

import pytest

from retcon.core.errors import DirtyWorkingTreeError, IneligibleCommitError
from retcon.core.safety import SafetyVerifier
from retcon.gateway.git.fake import FakeGit
from retcon.gateway.git.status_ops.fake import FakeGitStatusOps
from tests.test_utils.fake_repos import handle_for, make_repo, track_origin


def test_commit_without_remote_branches_is_eligible() -> None:
    repo, (c1,) = make_repo("First")

    assert SafetyVerifier(FakeGit(repo=repo)).is_eligible_for_edit(handle_for(repo), c1.sha)


def test_commit_contained_in_upstream_is_not_eligible() -> None:
    repo, (c1, c2) = make_repo("First", "Second")
    track_origin(repo, c1)
    verifier = SafetyVerifier(FakeGit(repo=repo))

    assert verifier.is_eligible_for_edit(handle_for(repo), c1.sha) is False
    assert verifier.is_eligible_for_edit(handle_for(repo), c2.sha) is True


def test_commit_pushed_to_another_remote_branch_is_not_eligible() -> None:
    repo, (c1, c2) = make_repo("First", "Second")
    track_origin(repo, c1)
    repo.set_remote_branch("origin/review", c2.sha)

    verifier = SafetyVerifier(FakeGit(repo=repo))

    assert verifier.is_eligible_for_edit(handle_for(repo), c2.sha) is False


def test_ensure_eligible_names_containing_branches() -> None:
    repo, (c1, c2) = make_repo("First", "Second")
    track_origin(repo, c1)

    with pytest.raises(IneligibleCommitError) as exc_info:
        SafetyVerifier(FakeGit(repo=repo)).ensure_eligible(handle_for(repo), [c2.sha, c1.sha])

    assert exc_info.value.commit_hash == c1.sha
    assert exc_info.value.remote_branches == ["origin/main"]
    assert "origin/main" in str(exc_info.value)


def test_clean_tree_passes() -> None:
    repo, _ = make_repo("First")
    verifier = SafetyVerifier(FakeGit(repo=repo))

    assert verifier.is_working_tree_clean(handle_for(repo))
    verifier.ensure_working_tree_clean(handle_for(repo), allow_dirty=False)


def test_dirty_tree_raises_unless_allowed() -> None:
    repo, _ = make_repo("First")
    git = FakeGit(repo=repo, status=FakeGitStatusOps(porcelain_status=" M src/app.py"))
    verifier = SafetyVerifier(git)

    assert verifier.is_working_tree_clean(handle_for(repo)) is False
    with pytest.raises(DirtyWorkingTreeError, match="src/app.py"):
        verifier.ensure_working_tree_clean(handle_for(repo), allow_dirty=False)
    verifier.ensure_working_tree_clean(handle_for(repo), allow_dirty=True)

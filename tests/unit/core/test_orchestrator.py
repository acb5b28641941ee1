"""Tests for the rewrite session: checks, backup, ordered edits, outcome."""

import pytest

from retcon.core.errors import (
    DirtyWorkingTreeError,
    EditValidationError,
    IneligibleCommitError,
    RewriteCommandFailedError,
    UnsupportedOperationError,
)
from retcon.core.events import ProgressEvent
from retcon.core.orchestrator import RewriteOrchestrator, SessionState, validate_requests
from retcon.core.types import EditRequest, RewriteOutcome
from retcon.gateway.git.commit_ops.fake import FakeGitCommitOps
from retcon.gateway.git.fake import FakeGit
from retcon.gateway.git.fake_repo import FakeRepository
from retcon.gateway.git.rebase_ops.fake import FakeGitRebaseOps
from retcon.gateway.git.status_ops.fake import FakeGitStatusOps
from retcon.gateway.time.fake import FakeTime
from retcon.subprocess_utils import CommandFailedError
from tests.test_utils.fake_repos import (
    FAKE_ROOT,
    drain,
    handle_for,
    make_repo,
    messages,
    track_origin,
)

BACKUP = "main-backup-1705329000000"


def _run(
    git: FakeGit,
    requests: list[EditRequest],
    *,
    allow_dirty: bool = False,
    sync_commit_timestamp: bool = True,
) -> tuple[RewriteOrchestrator, list[ProgressEvent], RewriteOutcome]:
    orchestrator = RewriteOrchestrator(
        git, FakeTime(), sync_commit_timestamp=sync_commit_timestamp
    )
    progress, outcome = drain(
        orchestrator.execute_rewrite(
            handle_for(git.repo), requests, allow_dirty=allow_dirty, backup_prefix="backup"
        )
    )
    assert isinstance(outcome, RewriteOutcome)
    return orchestrator, progress, outcome


def _start(git: FakeGit, requests: list[EditRequest], **kwargs: bool) -> None:
    orchestrator = RewriteOrchestrator(git, FakeTime(), sync_commit_timestamp=True)
    list(
        orchestrator.execute_rewrite(
            handle_for(git.repo), requests, backup_prefix="backup", **kwargs
        )
    )


# ============================================================================
# validate_requests
# ============================================================================


def test_validate_requests_drops_noops_and_merges_duplicates() -> None:
    requests = validate_requests(
        [
            EditRequest("a" * 40, new_message="First"),
            EditRequest("b" * 40),
            EditRequest("a" * 40, new_author_timestamp=100),
            EditRequest("a" * 40, new_message="First again"),
        ]
    )

    assert requests == [
        EditRequest("a" * 40, new_message="First again", new_author_timestamp=100)
    ]


@pytest.mark.parametrize("message", ["", "   ", "\n\n"])
def test_validate_requests_rejects_blank_message(message: str) -> None:
    with pytest.raises(EditValidationError, match="empty"):
        validate_requests([EditRequest("a" * 40, new_message=message)])


def test_validate_requests_rejects_nothing_to_do() -> None:
    with pytest.raises(EditValidationError, match="Nothing to edit"):
        validate_requests([EditRequest("a" * 40)])


def test_validate_requests_rejects_negative_timestamp() -> None:
    with pytest.raises(EditValidationError, match="before 1970"):
        validate_requests([EditRequest("a" * 40, new_commit_timestamp=-1)])


# ============================================================================
# HEAD edits (amend)
# ============================================================================


def test_head_message_edit_amends_and_reports_outcome() -> None:
    repo, (c1, c2) = make_repo("First", "Second")
    git = FakeGit(repo=repo)

    orchestrator, progress, outcome = _run(git, [EditRequest(c2.sha, new_message="Second v2")])

    assert messages(repo) == ["Second v2", "First"]
    assert git.commit.amend_calls[0].message == "Second v2"
    assert git.rebase.start_calls == []
    assert outcome.backup.branch_name == BACKUP
    assert repo.branches[BACKUP] == c2.sha
    assert outcome.hash_map[c2.sha] == repo.head_sha()
    assert outcome.hash_map[c1.sha] == c1.sha
    assert outcome.scan.commits[0].message == "Second v2"
    assert [e.message for e in progress][:2] == [
        f"Created backup branch {BACKUP}",
        f"[1/1] {c2.sha[:7]} Second",
    ]
    assert orchestrator.session is not None
    assert orchestrator.session.state is SessionState.DONE


def test_head_author_date_edit_moves_commit_date_too() -> None:
    repo, (_c1, c2) = make_repo("First", "Second")
    git = FakeGit(repo=repo)

    _run(git, [EditRequest(c2.sha, new_author_timestamp=1600000000)])

    head = repo.commits[repo.head_sha()]
    assert head.author_timestamp == 1600000000
    assert head.commit_timestamp == 1600000000
    assert head.message == "Second"


def test_head_author_date_edit_without_sync_leaves_commit_date_to_git() -> None:
    repo, (_c1, c2) = make_repo("First", "Second")
    git = FakeGit(repo=repo)

    _run(git, [EditRequest(c2.sha, new_author_timestamp=1600000000)], sync_commit_timestamp=False)

    assert git.commit.amend_calls[0].commit_timestamp is None


def test_commit_date_only_edit_leaves_author_date() -> None:
    repo, (_c1, c2) = make_repo("First", "Second")
    git = FakeGit(repo=repo)

    _run(git, [EditRequest(c2.sha, new_commit_timestamp=1600000000)])

    head = repo.commits[repo.head_sha()]
    assert head.author_timestamp == c2.author_timestamp
    assert head.commit_timestamp == 1600000000


def test_single_root_commit_at_head_is_amended() -> None:
    repo, (c1,) = make_repo("Initial")
    git = FakeGit(repo=repo)

    _run(git, [EditRequest(c1.sha, new_message="Initial commit")])

    assert messages(repo) == ["Initial commit"]


# ============================================================================
# Non-HEAD edits (rebase)
# ============================================================================


def test_middle_commit_message_edit_preserves_neighbours() -> None:
    repo, (c1, c2, c3) = make_repo("First", "Second", "Third")
    git = FakeGit(repo=repo)

    _, _, outcome = _run(git, [EditRequest(c2.sha, new_message="Second v2")])

    chain = repo.ancestry(repo.head_sha())
    assert [c.message for c in chain] == ["Third", "Second v2", "First"]
    assert chain[2].sha == c1.sha
    assert [c.author_timestamp for c in chain] == [
        c3.author_timestamp,
        c2.author_timestamp,
        c1.author_timestamp,
    ]
    assert git.rebase.todo_actions == [("reword", c2.sha)]
    assert outcome.hash_map[c3.sha] == chain[0].sha
    assert outcome.hash_map[c2.sha] == chain[1].sha


def test_message_and_date_edit_uses_single_edit_pass() -> None:
    repo, (_c1, c2, _c3) = make_repo("First", "Second", "Third")
    git = FakeGit(repo=repo)

    _run(git, [EditRequest(c2.sha, new_message="Second v2", new_author_timestamp=1600000000)])

    edited = repo.ancestry(repo.head_sha())[1]
    assert edited.message == "Second v2"
    assert edited.author_timestamp == 1600000000
    assert git.rebase.todo_actions == [("edit", c2.sha)]


def test_bulk_edits_apply_oldest_author_date_first() -> None:
    repo, (c1, c2, c3, c4) = make_repo("One", "Two", "Three", "Four")
    track_origin(repo, c1)
    git = FakeGit(repo=repo)

    _, progress, outcome = _run(
        git,
        [
            EditRequest(c4.sha, new_message="Four v2"),
            EditRequest(c2.sha, new_message="Two v2"),
            EditRequest(c3.sha, new_author_timestamp=c3.author_timestamp + 5),
        ],
    )

    assert messages(repo) == ["Four v2", "Three", "Two v2", "One"]
    assert [r.commit_hash for r in outcome.applied] == [c2.sha, c3.sha, c4.sha]
    assert [action for action, _ in git.rebase.todo_actions] == ["reword", "edit"]
    assert len(git.commit.amend_calls) == 2
    assert [e.message[:5] for e in progress[1:4]] == ["[1/3]", "[2/3]", "[3/3]"]
    assert [c.message for c in outcome.scan.commits] == ["Four v2", "Three", "Two v2"]
    assert repo.branches[BACKUP] == c4.sha


def test_edits_accept_revision_names() -> None:
    repo, (_c1, _c2) = make_repo("First", "Second")
    git = FakeGit(repo=repo)

    _run(git, [EditRequest("HEAD", new_message="Second v2")])

    assert messages(repo) == ["Second v2", "First"]


def test_duplicate_subjects_edit_the_requested_commit() -> None:
    repo = FakeRepository(root=FAKE_ROOT)
    base = repo.add_commit("Base")
    wip = [repo.add_commit("WIP", author_timestamp=1700000000) for _ in range(3)]
    git = FakeGit(repo=repo)

    _, _, outcome = _run(
        git,
        [
            EditRequest(wip[1].sha, new_message="WIP: parser"),
            EditRequest(wip[0].sha, new_message="WIP: lexer"),
        ],
    )

    assert messages(repo) == ["WIP", "WIP: parser", "WIP: lexer", "Base"]
    assert outcome.hash_map[base.sha] == base.sha


# ============================================================================
# Refusals before any write
# ============================================================================


def test_pushed_commit_is_refused_without_backup() -> None:
    repo, (c1, _c2) = make_repo("First", "Second")
    track_origin(repo, c1)
    git = FakeGit(repo=repo)

    with pytest.raises(IneligibleCommitError):
        _start(git, [EditRequest(c1.sha, new_message="x")], allow_dirty=False)

    assert git.branch.created_branches == []
    assert git.commit.amend_calls == []


def test_commit_outside_unpushed_range_is_refused() -> None:
    repo, (c1,) = make_repo("First")
    repo.branches["feature"] = c1.sha
    repo.current_branch = "feature"
    repo.add_commit("Feature work")
    repo.set_upstream("feature", remote=".", merge="refs/heads/main")
    git = FakeGit(repo=repo)

    with pytest.raises(IneligibleCommitError, match="not an unpushed commit"):
        _start(git, [EditRequest(c1.sha, new_message="x")], allow_dirty=False)

    assert git.branch.created_branches == []


def test_unknown_revision_is_refused() -> None:
    repo, _ = make_repo("First")
    git = FakeGit(repo=repo)

    with pytest.raises(EditValidationError, match="Unknown revision"):
        _start(git, [EditRequest("deadbeef", new_message="x")], allow_dirty=False)


def test_empty_message_is_refused_without_backup() -> None:
    repo, (c1,) = make_repo("First")
    git = FakeGit(repo=repo)

    with pytest.raises(EditValidationError):
        _start(git, [EditRequest(c1.sha, new_message="  ")], allow_dirty=False)

    assert git.branch.created_branches == []
    assert messages(repo) == ["First"]


def test_dirty_tree_is_refused_unless_allowed() -> None:
    repo, (_c1, c2) = make_repo("First", "Second")
    git = FakeGit(repo=repo, status=FakeGitStatusOps(porcelain_status="?? notes.txt"))

    with pytest.raises(DirtyWorkingTreeError):
        _start(git, [EditRequest(c2.sha, new_message="x")], allow_dirty=False)
    assert git.branch.created_branches == []

    _start(git, [EditRequest(c2.sha, new_message="x")], allow_dirty=True)
    assert messages(repo) == ["x", "First"]


def test_rebase_in_progress_is_refused() -> None:
    repo, (_c1, c2) = make_repo("First", "Second")
    repo.rebase_in_progress = True
    git = FakeGit(repo=repo)

    with pytest.raises(UnsupportedOperationError, match="already in progress"):
        _start(git, [EditRequest(c2.sha, new_message="x")], allow_dirty=False)


def test_root_commit_below_head_is_refused_without_backup() -> None:
    repo, (c1, _c2) = make_repo("First", "Second")
    git = FakeGit(repo=repo)

    with pytest.raises(UnsupportedOperationError, match="root commit"):
        _start(git, [EditRequest(c1.sha, new_message="x")], allow_dirty=False)

    assert git.branch.created_branches == []


def test_commit_below_merge_is_refused_without_backup() -> None:
    repo, (_c1, c2, merge, _c4) = make_repo("First", "Second", "Merge side", "After")
    repo.mark_merge(merge.sha)
    git = FakeGit(repo=repo)

    with pytest.raises(UnsupportedOperationError, match=f"below merge commit {merge.sha[:7]}"):
        _start(git, [EditRequest(c2.sha, new_message="x")], allow_dirty=False)

    assert git.branch.created_branches == []
    assert git.rebase.start_calls == []


def test_commit_above_merge_can_be_edited() -> None:
    repo, (c1, merge, c3, _c4) = make_repo("First", "Merge side", "Third", "After")
    repo.mark_merge(merge.sha)
    git = FakeGit(repo=repo)

    _run(git, [EditRequest(c3.sha, new_message="Third v2")])

    assert messages(repo) == ["After", "Third v2", "Merge side", "First"]
    assert repo.ancestry(repo.head_sha())[3].sha == c1.sha


# ============================================================================
# Failures after the backup
# ============================================================================


def test_failure_mid_rewrite_aborts_and_names_backup() -> None:
    repo, (_c1, c2, c3) = make_repo("First", "Second", "Third")
    error = CommandFailedError(
        cmd=["git", "rebase", "--continue"],
        operation_context="continue rebase",
        returncode=1,
        stderr="CONFLICT (content): Merge conflict in app.py",
    )
    git = FakeGit(repo=repo, rebase=FakeGitRebaseOps(repo, continue_raises=error))
    orchestrator = RewriteOrchestrator(git, FakeTime(), sync_commit_timestamp=True)

    with pytest.raises(RewriteCommandFailedError) as exc_info:
        list(
            orchestrator.execute_rewrite(
                handle_for(repo),
                [EditRequest(c2.sha, new_author_timestamp=1600000000)],
                allow_dirty=False,
                backup_prefix="backup",
            )
        )

    assert exc_info.value.backup_branch == BACKUP
    assert exc_info.value.commit_hash == c2.sha
    assert f"retcon restore {BACKUP}" in str(exc_info.value)
    assert orchestrator.session is not None
    assert orchestrator.session.state is SessionState.ABORTED
    assert repo.rebase_in_progress is False
    assert repo.head_sha() == c3.sha
    assert repo.branches[BACKUP] == c3.sha


def test_failed_head_amend_names_backup() -> None:
    repo, (_c1, c2) = make_repo("First", "Second")
    error = CommandFailedError(
        cmd=["git", "commit", "--amend"],
        operation_context="amend HEAD commit",
        returncode=1,
        stderr="fatal: unable to write new index file",
    )
    git = FakeGit(repo=repo, commit=FakeGitCommitOps(repo, amend_raises=error))

    with pytest.raises(RewriteCommandFailedError) as exc_info:
        _start(git, [EditRequest(c2.sha, new_message="x")], allow_dirty=False)

    assert exc_info.value.backup_branch == BACKUP
    assert exc_info.value.command == "git commit --amend"

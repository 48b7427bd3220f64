"""Tests for rebuilding a stack on trunk with cherry-picks."""

from pathlib import Path
from typing import Any

import pytest

from prstack.core.git.fake import FakeGit, picked_sha
from prstack.core.rebase import (
    DirtyWorkingTreeError,
    RebaseCompleted,
    RebasePaused,
    RebasePublishFailed,
    RebaseStateMismatchError,
    RebaseStepError,
    abort_rebase,
    autorebase,
    collect_commits,
)
from prstack.core.rebase_state import InMemoryRebaseStateStore, RebaseState
from tests.test_utils.builders import linear_chain

REPO = Path("/repo")
GIT_DIR = REPO / ".git"

# main moved from m0 to m1 after feat-1 (a1, a2) and feat-2 (b1) were branched
HISTORY = [
    ("m0", None, "initial"),
    ("a1", "m0", "feat-1 part one"),
    ("a2", "a1", "feat-1 part two"),
    ("b1", "a2", "feat-2"),
    ("m1", "m0", "trunk moved"),
]
BRANCHES = {"main": "m1", "feat-1": "a2", "feat-2": "b1"}


def _git(**kwargs: Any) -> FakeGit:
    return FakeGit(
        branches=dict(BRANCHES),
        commits=list(HISTORY),
        current_branch="feat-2",
        **kwargs,
    )


def _expected_heads() -> dict[str, str]:
    x1 = picked_sha("m1", "a1")
    x2 = picked_sha(x1, "a2")
    x3 = picked_sha(x2, "b1")
    return {"feat-1": x2, "feat-2": x3}


def test_collect_commits_assigns_each_node_its_own_commits() -> None:
    commits = collect_commits(linear_chain(2), _git(), REPO, boundary=None)

    assert [[c.sha for c in node_commits] for node_commits in commits] == [["a1", "a2"], ["b1"]]


def test_collect_commits_respects_boundary() -> None:
    commits = collect_commits(linear_chain(2), _git(), REPO, boundary="a1")

    assert [[c.sha for c in node_commits] for node_commits in commits] == [["a2"], ["b1"]]


def test_autorebase_replays_moves_and_pushes_all_branches() -> None:
    git = _git()
    store = InMemoryRebaseStateStore()

    outcome = autorebase(linear_chain(2), git, REPO, state_store=store)

    assert outcome == RebaseCompleted(new_heads=_expected_heads())
    assert git.cherry_picked == ["a1", "a2", "b1"]
    assert git.branches["feat-1"] == _expected_heads()["feat-1"]
    assert git.branches["feat-2"] == _expected_heads()["feat-2"]
    assert git.pushed == [("origin", ["feat-1", "feat-2"], True)]
    assert git.current_branch == "feat-2"
    assert store.states == {}


def test_autorebase_starts_from_trunk_tip() -> None:
    git = _git()

    autorebase(linear_chain(2), git, REPO, state_store=InMemoryRebaseStateStore())

    assert git.checked_out[0] == "main"


def test_conflict_pauses_and_saves_position() -> None:
    git = _git(conflicting_shas={"b1": ["src/app.py"]})
    store = InMemoryRebaseStateStore()
    chain = linear_chain(2)

    outcome = autorebase(chain, git, REPO, state_store=store)

    assert isinstance(outcome, RebasePaused)
    assert outcome.node == chain[1]
    assert outcome.commit.sha == "b1"
    assert outcome.conflicted_paths == ["src/app.py"]
    saved = store.states[GIT_DIR]
    assert (saved.node_index, saved.commit_index) == (1, 0)
    assert saved.new_heads == {"feat-1": _expected_heads()["feat-1"]}
    assert git.pushed == []
    assert git.branches["feat-2"] == "b1"


def test_resume_after_conflict_matches_uninterrupted_run() -> None:
    """Pausing and resuming ends with the same heads as a run without conflicts."""
    git = _git(conflicting_shas={"a2": ["README.md"]})
    store = InMemoryRebaseStateStore()
    chain = linear_chain(2)

    first = autorebase(chain, git, REPO, state_store=store)
    second = autorebase(chain, git, REPO, state_store=store)

    assert isinstance(first, RebasePaused)
    assert second == RebaseCompleted(new_heads=_expected_heads())
    assert git.cherry_picked == ["a1", "a2", "b1"]
    assert git.pushed == [("origin", ["feat-1", "feat-2"], True)]
    assert store.states == {}


def test_resume_with_unresolved_conflict_pauses_again() -> None:
    git = _git(conflicting_shas={"b1": ["src/app.py"]}, unresolvable_shas={"b1"})
    store = InMemoryRebaseStateStore()
    chain = linear_chain(2)

    autorebase(chain, git, REPO, state_store=store)
    outcome = autorebase(chain, git, REPO, state_store=store)

    assert isinstance(outcome, RebasePaused)
    assert outcome.commit.sha == "b1"
    assert GIT_DIR in store.states
    assert git.pushed == []


def test_rejected_push_reports_publish_failure() -> None:
    git = _git(push_error="Failed to push: stale info")
    store = InMemoryRebaseStateStore()

    outcome = autorebase(linear_chain(2), git, REPO, state_store=store)

    assert isinstance(outcome, RebasePublishFailed)
    assert outcome.new_heads == _expected_heads()
    assert "stale info" in outcome.error
    assert git.branches["feat-2"] == _expected_heads()["feat-2"]
    assert store.states == {}


def test_dirty_working_tree_is_refused() -> None:
    git = _git(dirty=True)

    with pytest.raises(DirtyWorkingTreeError):
        autorebase(linear_chain(2), git, REPO, state_store=InMemoryRebaseStateStore())

    assert git.checked_out == []


def test_saved_state_for_other_branches_is_refused() -> None:
    other = RebaseState(
        trunk="main",
        remote="origin",
        original_branch="other",
        branches=("other",),
        commits=((),),
    )
    store = InMemoryRebaseStateStore({GIT_DIR: other})

    with pytest.raises(RebaseStateMismatchError) as exc_info:
        autorebase(linear_chain(2), _git(), REPO, state_store=store)

    assert exc_info.value.saved_branches == ["other"]


def test_abort_restores_original_branch_and_clears_state() -> None:
    git = _git(conflicting_shas={"b1": ["src/app.py"]})
    store = InMemoryRebaseStateStore()
    autorebase(linear_chain(2), git, REPO, state_store=store)

    aborted = abort_rebase(git, REPO, state_store=store)

    assert aborted is True
    assert git.aborted_cherry_picks == 1
    assert git.current_branch == "feat-2"
    assert git.branches == BRANCHES
    assert store.states == {}


def test_abort_without_rebase_in_progress() -> None:
    assert abort_rebase(_git(), REPO, state_store=InMemoryRebaseStateStore()) is False


def test_commit_already_on_trunk_is_skipped() -> None:
    git = _git(empty_shas={"a1"})

    outcome = autorebase(linear_chain(2), git, REPO, state_store=InMemoryRebaseStateStore())

    x2 = picked_sha("m1", "a2")
    assert outcome == RebaseCompleted(new_heads={"feat-1": x2, "feat-2": picked_sha(x2, "b1")})
    assert git.skipped_empty == ["a1"]
    assert git.cherry_picked == ["a2", "b1"]


def test_unexpected_cherry_pick_failure_restores_original_branch() -> None:
    git = _git(cherry_pick_errors={"b1": "Failed to cherry-pick b1\nExit code: 128"})
    store = InMemoryRebaseStateStore()

    with pytest.raises(RebaseStepError) as exc_info:
        autorebase(linear_chain(2), git, REPO, state_store=store)

    assert "replaying b1 onto #11 feat-2" in exc_info.value.step
    assert exc_info.value.new_heads == {"feat-1": _expected_heads()["feat-1"]}
    assert "Exit code: 128" in str(exc_info.value)
    assert git.branches == BRANCHES
    assert git.current_branch == "feat-2"
    assert git.pushed == []
    assert store.states == {}


def test_failure_moving_a_branch_rolls_back_moved_branches() -> None:
    git = _git(set_branch_errors={"feat-2": "Failed to move branch 'feat-2'"})
    store = InMemoryRebaseStateStore()

    with pytest.raises(RebaseStepError) as exc_info:
        autorebase(linear_chain(2), git, REPO, state_store=store)

    assert exc_info.value.step == "moving branch 'feat-2'"
    assert exc_info.value.new_heads == _expected_heads()
    assert git.set_branches == [("feat-1", _expected_heads()["feat-1"]), ("feat-1", "a2")]
    assert git.branches == BRANCHES
    assert git.current_branch == "feat-2"
    assert git.pushed == []
    assert store.states == {}

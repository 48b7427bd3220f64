"""Tests for choosing and executing a land."""

from dataclasses import replace

import pytest

from prstack.core.github.dry_run import DryRunGitHub
from prstack.core.github.fake import FakeGitHub
from prstack.core.land import (
    InvalidCountError,
    LandMergeError,
    LandPolicy,
    NoLandableNodeError,
    execute_land,
    format_land_plan,
    plan_land,
)
from prstack.core.status import resolve_statuses
from prstack.core.types import Chain, CheckState
from tests.test_utils.builders import checks, linear_chain, linear_prs

FAIL = CheckState.FAIL


def test_all_approved_lands_top_and_closes_the_rest() -> None:
    chain = linear_chain(3)
    statuses = resolve_statuses(chain, {i: checks() for i in chain.ids})

    plan = plan_land(chain, statuses)

    assert plan.frontier.id == 12
    assert [node.id for node in plan.to_close] == [10, 11]
    assert plan.untouched == ()
    assert plan.landed_count == 3


def test_unapproved_top_lands_the_node_below() -> None:
    chain = linear_chain(3)
    statuses = resolve_statuses(chain, {10: checks(), 11: checks(), 12: checks(approved=FAIL)})

    plan = plan_land(chain, statuses)

    assert plan.frontier.id == 11
    assert [node.id for node in plan.to_close] == [10]
    assert [node.id for node in plan.untouched] == [12]


def test_conflicting_top_is_skipped() -> None:
    chain = linear_chain(3)
    statuses = resolve_statuses(chain, {10: checks(), 11: checks(), 12: checks(mergeable=FAIL)})

    plan = plan_land(chain, statuses)

    assert plan.frontier.id == 11


def test_nothing_landable_reports_every_blocked_node() -> None:
    chain = linear_chain(2)
    statuses = resolve_statuses(chain, {10: checks(approved=FAIL), 11: checks(approved=FAIL)})

    with pytest.raises(NoLandableNodeError) as exc_info:
        plan_land(chain, statuses)

    assert [blocked.node.id for blocked in exc_info.value.blocked] == [11, 10]
    assert exc_info.value.blocked[0].reasons == ("is not approved",)


def test_count_limits_the_window() -> None:
    chain = linear_chain(3)
    statuses = resolve_statuses(chain, {i: checks() for i in chain.ids})

    plan = plan_land(chain, statuses, count=2)

    assert plan.frontier.id == 11
    assert [node.id for node in plan.untouched] == [12]


def test_count_larger_than_chain_uses_whole_chain() -> None:
    chain = linear_chain(2)
    statuses = resolve_statuses(chain, {i: checks() for i in chain.ids})

    assert plan_land(chain, statuses, count=5).frontier.id == 11


def test_count_below_one_is_rejected() -> None:
    chain = linear_chain(2)

    with pytest.raises(InvalidCountError):
        plan_land(chain, {}, count=0)


def test_approval_not_required_by_policy() -> None:
    chain = linear_chain(2)
    statuses = resolve_statuses(chain, {10: checks(approved=FAIL), 11: checks(approved=FAIL)})

    plan = plan_land(chain, statuses, policy=LandPolicy(require_approval=False))

    assert plan.frontier.id == 11


def test_stack_clear_gate_is_off_by_default() -> None:
    """An approved node can land over unapproved nodes below it unless asked otherwise."""
    chain = linear_chain(2)
    statuses = resolve_statuses(chain, {10: checks(approved=FAIL), 11: checks()})

    default_plan = plan_land(chain, statuses)
    assert default_plan.frontier.id == 11

    with pytest.raises(NoLandableNodeError):
        plan_land(chain, statuses, policy=LandPolicy(require_stack_clear=True))


def test_drafts_never_land() -> None:
    prs = linear_prs(2)
    prs[1] = replace(prs[1], is_draft=True)
    chain = Chain(trunk="main", nodes=tuple(pr.to_node() for pr in prs))
    statuses = resolve_statuses(chain, {i: checks() for i in chain.ids})

    plan = plan_land(chain, statuses)

    assert plan.frontier.id == 10


def test_execute_merges_then_closes_with_comment() -> None:
    chain = linear_chain(3)
    github = FakeGitHub(pull_requests=linear_prs(3))
    plan = plan_land(chain, resolve_statuses(chain, {i: checks() for i in chain.ids}))

    result = execute_land(plan, github, "owner/repo")

    assert github.operations == [
        "base #12 -> main",
        "merge #12",
        "close #10",
        "close #11",
    ]
    assert github.closed_prs == [(10, "Landed via #12"), (11, "Landed via #12")]
    assert result.closed == [10, 11]
    assert result.close_failures == {}
    assert result.merge.pr_number == 12


def test_bottom_frontier_is_not_retargeted() -> None:
    chain = linear_chain(2)
    github = FakeGitHub(pull_requests=linear_prs(2))
    statuses = resolve_statuses(chain, {10: checks(), 11: checks(approved=FAIL)})
    plan = plan_land(chain, statuses)

    execute_land(plan, github, "owner/repo")

    assert github.operations == ["merge #10"]


def test_merge_failure_closes_nothing() -> None:
    chain = linear_chain(3)
    github = FakeGitHub(pull_requests=linear_prs(3), merge_errors={12: "Failed to merge"})
    plan = plan_land(chain, resolve_statuses(chain, {i: checks() for i in chain.ids}))

    with pytest.raises(LandMergeError) as exc_info:
        execute_land(plan, github, "owner/repo")

    assert exc_info.value.node.id == 12
    assert github.closed_prs == []
    assert github.merged_prs == []


def test_close_failure_is_recorded_and_others_still_close() -> None:
    chain = linear_chain(3)
    github = FakeGitHub(pull_requests=linear_prs(3), close_errors={10: "Failed to close"})
    plan = plan_land(chain, resolve_statuses(chain, {i: checks() for i in chain.ids}))

    result = execute_land(plan, github, "owner/repo")

    assert result.closed == [11]
    assert result.close_failures == {10: "Failed to close"}
    assert github.merged_prs == [12]


def test_dry_run_uses_the_same_plan_and_changes_nothing() -> None:
    chain = linear_chain(3)
    github = FakeGitHub(pull_requests=linear_prs(3))
    statuses = resolve_statuses(chain, {i: checks() for i in chain.ids})

    plan = plan_land(chain, statuses)
    dry_plan = plan_land(chain, statuses)
    result = execute_land(dry_plan, DryRunGitHub(github), "owner/repo")

    assert dry_plan == plan
    assert result.merge.merge_commit is None
    assert github.operations == []


def test_format_land_plan_lists_actions() -> None:
    chain = linear_chain(3)
    statuses = resolve_statuses(chain, {10: checks(), 11: checks(), 12: checks(approved=FAIL)})
    plan = plan_land(chain, statuses)

    text = format_land_plan(plan)

    assert text.startswith("Landing Plan:")
    assert "Update PR #11 base branch: feat-1 -> main" in text
    assert "Squash-merge PR #11 into main" in text
    assert 'Close PR #10 with comment: "Landed via #11"' in text
    assert "[ ] #12" in text

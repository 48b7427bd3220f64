"""Tests for parsing gh CLI JSON output."""

from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from prstack.core.github.parsing import (
    determine_ci_state,
    mergeable_to_state,
    parse_checks,
    parse_pull_request_list,
    parse_repository_from_remote_url,
    review_decision_to_state,
)
from prstack.core.types import CheckState, RawChecks


def test_parse_pull_request_list(load_fixture: Callable[[str], str]) -> None:
    prs = parse_pull_request_list(load_fixture("github/pr_list.json"))

    assert [pr.number for pr in prs] == [11, 10]
    draft = prs[0]
    assert draft.head_branch == "feat-2"
    assert draft.base_branch == "feat-1"
    assert draft.is_draft is True
    assert draft.is_open is True
    assert draft.updated_at == datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)

    node = draft.to_node()
    assert (node.id, node.branch, node.base) == (11, "feat-2", "feat-1")


def test_parse_checks_passing(load_fixture: Callable[[str], str]) -> None:
    raw = parse_checks(load_fixture("github/checks_passing.json"))

    assert raw == RawChecks(ci=CheckState.PASS, approved=CheckState.PASS, mergeable=CheckState.PASS)


def test_parse_checks_failing(load_fixture: Callable[[str], str]) -> None:
    raw = parse_checks(load_fixture("github/checks_failing.json"))

    assert raw == RawChecks(ci=CheckState.FAIL, approved=CheckState.FAIL, mergeable=CheckState.FAIL)


def test_ci_state_pending_when_nothing_failed() -> None:
    rollup = [
        {"__typename": "CheckRun", "status": "COMPLETED", "conclusion": "SUCCESS"},
        {"__typename": "CheckRun", "status": "QUEUED", "conclusion": None},
    ]

    assert determine_ci_state(rollup) == CheckState.PENDING


def test_ci_state_without_checks_is_not_applicable() -> None:
    assert determine_ci_state(None) == CheckState.NOT_APPLICABLE
    assert determine_ci_state([]) == CheckState.NOT_APPLICABLE
    skipped = [{"__typename": "CheckRun", "status": "COMPLETED", "conclusion": "SKIPPED"}]
    assert determine_ci_state(skipped) == CheckState.NOT_APPLICABLE


def test_status_context_states() -> None:
    assert determine_ci_state([{"state": "PENDING"}]) == CheckState.PENDING
    assert determine_ci_state([{"state": "ERROR"}]) == CheckState.FAIL


@pytest.mark.parametrize(
    ("decision", "expected"),
    [
        ("APPROVED", CheckState.PASS),
        ("REVIEW_REQUIRED", CheckState.FAIL),
        ("CHANGES_REQUESTED", CheckState.FAIL),
        (None, CheckState.FAIL),
    ],
)
def test_review_decision(decision: str | None, expected: CheckState) -> None:
    assert review_decision_to_state(decision) == expected


def test_unknown_mergeability_is_pending() -> None:
    assert mergeable_to_state("UNKNOWN") == CheckState.PENDING


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("git@github.com:octo/widgets.git", "octo/widgets"),
        ("https://github.com/octo/widgets", "octo/widgets"),
        ("https://github.com/octo/widgets.git", "octo/widgets"),
        ("ssh://git@github.com/octo/widgets.git", "octo/widgets"),
        ("/local/path/repo", None),
        ("https://github.com/octo", None),
    ],
)
def test_parse_repository_from_remote_url(url: str, expected: str | None) -> None:
    assert parse_repository_from_remote_url(url) == expected

"""Parsing of gh CLI JSON output into prstack types."""

import json
from datetime import datetime
from typing import Any

from prstack.core.github.types import PullRequest
from prstack.core.types import CheckState, RawChecks

PR_JSON_FIELDS = "number,title,headRefName,baseRefName,headRefOid,state,isDraft,url,updatedAt"
CHECKS_JSON_FIELDS = "statusCheckRollup,reviewDecision,mergeable"

# Completed check-run conclusions that count as neither passing nor failing.
_NEUTRAL_CONCLUSIONS = {"NEUTRAL", "SKIPPED", "STALE"}
_PENDING_CONTEXT_STATES = {"PENDING", "EXPECTED"}


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def parse_pull_request(data: dict[str, Any]) -> PullRequest:
    return PullRequest(
        number=data["number"],
        title=data.get("title", ""),
        head_branch=data["headRefName"],
        base_branch=data["baseRefName"],
        head_sha=data.get("headRefOid", ""),
        state=data.get("state", "OPEN"),
        is_draft=bool(data.get("isDraft", False)),
        url=data.get("url", ""),
        updated_at=_parse_timestamp(data.get("updatedAt")),
    )


def parse_pull_request_list(stdout: str) -> list[PullRequest]:
    """Parse `gh pr list --json ...` output."""
    return [parse_pull_request(item) for item in json.loads(stdout)]


def _check_entry_state(check: dict[str, Any]) -> CheckState:
    """Classify one statusCheckRollup entry.

    Check runs carry status/conclusion; commit status contexts carry state.
    """
    if check.get("__typename") == "StatusContext" or "state" in check:
        state = check.get("state", "")
        if state == "SUCCESS":
            return CheckState.PASS
        if state in _PENDING_CONTEXT_STATES:
            return CheckState.PENDING
        return CheckState.FAIL

    if check.get("status") != "COMPLETED":
        return CheckState.PENDING
    conclusion = check.get("conclusion")
    if conclusion == "SUCCESS":
        return CheckState.PASS
    if conclusion in _NEUTRAL_CONCLUSIONS:
        return CheckState.NOT_APPLICABLE
    return CheckState.FAIL


def determine_ci_state(check_rollup: list[dict[str, Any]] | None) -> CheckState:
    """Aggregate a statusCheckRollup into one CI bit.

    Returns:
        FAIL if any check failed, otherwise PENDING if any is still running,
        otherwise PASS if any passed, otherwise NOT_APPLICABLE (no checks, or
        only neutral/skipped ones)
    """
    states = [_check_entry_state(check) for check in check_rollup or []]
    if CheckState.FAIL in states:
        return CheckState.FAIL
    if CheckState.PENDING in states:
        return CheckState.PENDING
    if CheckState.PASS in states:
        return CheckState.PASS
    return CheckState.NOT_APPLICABLE


def review_decision_to_state(decision: str | None) -> CheckState:
    """Only an explicit APPROVED review decision passes."""
    if decision == "APPROVED":
        return CheckState.PASS
    return CheckState.FAIL


def mergeable_to_state(mergeable: str | None) -> CheckState:
    if mergeable == "MERGEABLE":
        return CheckState.PASS
    if mergeable == "CONFLICTING":
        return CheckState.FAIL
    # UNKNOWN while GitHub is still computing mergeability
    return CheckState.PENDING


def parse_checks(stdout: str) -> RawChecks:
    """Parse `gh pr view N --json statusCheckRollup,reviewDecision,mergeable` output."""
    data = json.loads(stdout)
    return RawChecks(
        ci=determine_ci_state(data.get("statusCheckRollup")),
        approved=review_decision_to_state(data.get("reviewDecision")),
        mergeable=mergeable_to_state(data.get("mergeable")),
    )


def parse_repository_from_remote_url(url: str) -> str | None:
    """Extract owner/name from a GitHub remote URL.

    Example:
        >>> parse_repository_from_remote_url("git@github.com:octo/widgets.git")
        'octo/widgets'
        >>> parse_repository_from_remote_url("https://github.com/octo/widgets")
        'octo/widgets'
    """
    url = url.strip()
    if url.startswith("git@"):
        _, _, path = url.partition(":")
    elif "://" in url:
        _, _, rest = url.partition("://")
        _, _, path = rest.partition("/")
    else:
        return None

    path = path.removesuffix("/").removesuffix(".git")
    parts = path.split("/")
    if len(parts) != 2 or not all(parts):
        return None
    return f"{parts[0]}/{parts[1]}"

"""Tests for the land command."""

from click.testing import CliRunner

from prstack.cli.cli import cli
from prstack.core.context import StackContext
from prstack.core.git.fake import FakeGit
from prstack.core.github.fake import FakeGitHub
from prstack.core.global_config import GlobalConfig
from prstack.core.types import CheckState, RawChecks
from tests.test_utils.builders import checks, linear_prs

FAIL = CheckState.FAIL


def _ctx(github: FakeGitHub, global_config: GlobalConfig | None = None) -> StackContext:
    return StackContext.for_test(
        git=FakeGit(current_branch="main"), github=github, global_config=global_config
    )


def _github(
    raw: dict[int, RawChecks] | None = None,
    *,
    merge_errors: dict[int, str] | None = None,
    close_errors: dict[int, str] | None = None,
) -> FakeGitHub:
    if raw is None:
        raw = {10: checks(), 11: checks(), 12: checks()}
    return FakeGitHub(
        pull_requests=linear_prs(3),
        checks=raw,
        merge_errors=merge_errors,
        close_errors=close_errors,
    )


def test_land_merges_top_and_closes_below() -> None:
    github = _github()

    result = CliRunner().invoke(
        cli, ["land", "ABC-1", "--ci"], obj=_ctx(github), catch_exceptions=False
    )

    assert result.exit_code == 0, result.output
    assert github.operations == ["base #12 -> main", "merge #12", "close #10", "close #11"]
    assert github.closed_prs == [(10, "Landed via #12"), (11, "Landed via #12")]
    assert "Landing Plan:" in result.output
    assert "$ gh pr merge 12 --squash" in result.output
    assert "Closed: #10, #11" in result.output


def test_land_stops_below_unapproved_pr() -> None:
    github = _github({10: checks(), 11: checks(), 12: checks(approved=FAIL)})

    result = CliRunner().invoke(
        cli, ["land", "ABC-1", "--ci"], obj=_ctx(github), catch_exceptions=False
    )

    assert result.exit_code == 0, result.output
    assert github.merged_prs == [11]
    assert github.closed_prs == [(10, "Landed via #11")]
    assert "Still open: #12" in result.output


def test_land_dry_run_changes_nothing() -> None:
    github = _github()

    result = CliRunner().invoke(
        cli, ["land", "ABC-1", "--dry-run"], obj=_ctx(github), catch_exceptions=False
    )

    assert result.exit_code == 0, result.output
    assert github.operations == []
    assert "Squash-merge PR #12 into main" in result.output
    assert "Dry run" in result.output


def test_land_asks_for_confirmation() -> None:
    github = _github()

    result = CliRunner().invoke(
        cli, ["land", "ABC-1"], obj=_ctx(github), input="n\n", catch_exceptions=False
    )

    assert result.exit_code == 0, result.output
    assert "Aborted." in result.output
    assert github.operations == []


def test_land_count_limits_to_bottom() -> None:
    github = _github()

    result = CliRunner().invoke(
        cli, ["land", "ABC-1", "--ci", "--count", "1"], obj=_ctx(github), catch_exceptions=False
    )

    assert result.exit_code == 0, result.output
    assert github.operations == ["merge #10"]


def test_land_invalid_count() -> None:
    result = CliRunner().invoke(cli, ["land", "ABC-1", "--ci", "--count", "0"], obj=_ctx(_github()))

    assert result.exit_code == 1
    assert "--count must be at least 1" in result.output


def test_land_require_stack_clear_blocks() -> None:
    github = _github({10: checks(approved=FAIL), 11: checks(), 12: checks(approved=FAIL)})
    runner = CliRunner()

    blocked = runner.invoke(
        cli, ["land", "ABC-1", "--ci", "--require-stack-clear"], obj=_ctx(github)
    )

    assert blocked.exit_code == 1
    assert "No pull request in the stack can be landed" in blocked.output
    assert github.operations == []

    allowed = runner.invoke(cli, ["land", "ABC-1", "--ci"], obj=_ctx(github))

    assert allowed.exit_code == 0, allowed.output
    assert github.merged_prs == [11]


def test_land_no_approval_flag() -> None:
    github = _github({10: checks(approved=FAIL), 11: checks(approved=FAIL)})

    result = CliRunner().invoke(
        cli, ["land", "ABC-1", "--ci", "--no-approval"], obj=_ctx(github), catch_exceptions=False
    )

    assert result.exit_code == 0, result.output
    assert github.merged_prs == [12]


def test_land_approval_disabled_in_config() -> None:
    github = _github({10: checks(approved=FAIL), 11: checks(approved=FAIL)})
    config = GlobalConfig(repository="owner/repo", require_approval=False)

    result = CliRunner().invoke(
        cli, ["land", "ABC-1", "--ci"], obj=_ctx(github, global_config=config)
    )

    assert result.exit_code == 0, result.output
    assert github.merged_prs == [12]


def test_land_merge_failure_closes_nothing() -> None:
    github = _github(merge_errors={12: "Failed to merge: required checks pending"})

    result = CliRunner().invoke(cli, ["land", "ABC-1", "--ci"], obj=_ctx(github))

    assert result.exit_code == 1
    assert "Failed to land #12" in result.output
    assert github.closed_prs == []


def test_land_close_failure_exits_non_zero_after_merge() -> None:
    github = _github(close_errors={10: "Failed to close pull request #10"})

    result = CliRunner().invoke(cli, ["land", "ABC-1", "--ci"], obj=_ctx(github))

    assert result.exit_code == 1
    assert github.merged_prs == [12]
    assert github.closed_prs == [(11, "Landed via #12")]
    assert "Failed to close #10" in result.output

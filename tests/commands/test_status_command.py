"""Tests for the status command."""

import json

from click.testing import CliRunner

from prstack.cli.cli import cli
from prstack.core.context import StackContext
from prstack.core.git.fake import FakeGit
from prstack.core.github.fake import FakeGitHub
from prstack.core.global_config import GlobalConfig
from prstack.core.legend import InMemoryLegendTracker
from prstack.core.types import CheckState
from tests.test_utils.builders import checks, linear_prs, make_pr


def _github() -> FakeGitHub:
    return FakeGitHub(
        pull_requests=linear_prs(3),
        checks={10: checks(), 11: checks(approved=CheckState.FAIL), 12: checks()},
    )


def test_status_for_current_branch() -> None:
    """Without an identifier the stack containing the current branch is shown."""
    ctx = StackContext.for_test(
        git=FakeGit(current_branch="feat-2"),
        github=_github(),
    )

    result = CliRunner().invoke(cli, ["status", "--no-color"], obj=ctx, catch_exceptions=False)

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0] == "◯ feat-3 #12 - ABC-1 change 12"
    assert lines[1].startswith("│ [✓ ✓ ✓ ✗]")
    assert lines[2] == "◉ feat-2 (current) #11 - ABC-1 change 11"
    assert lines[6] == "◯ main"


def test_status_by_identifier_ascii() -> None:
    ctx = StackContext.for_test(git=FakeGit(current_branch="main"), github=_github())

    result = CliRunner().invoke(
        cli, ["status", "ABC-1", "--ascii", "--no-color"], obj=ctx, catch_exceptions=False
    )

    assert result.exit_code == 0, result.output
    assert "o feat-1 #10 - ABC-1 change 10" in result.output
    assert "| [Y N Y Y]" in result.output
    assert "* main (current)" in result.output


def test_status_shows_legend_first_time_only() -> None:
    legend = InMemoryLegendTracker(seen=False)
    ctx = StackContext.for_test(
        git=FakeGit(current_branch="feat-1"), github=_github(), legend=legend
    )
    runner = CliRunner()

    first = runner.invoke(cli, ["status"], obj=ctx, catch_exceptions=False)
    second = runner.invoke(cli, ["status"], obj=ctx, catch_exceptions=False)

    assert "Status: [CI | Approved | Mergeable | Stack]" in first.output
    assert "Status: [CI | Approved | Mergeable | Stack]" not in second.output


def test_status_no_checks_skips_fetching() -> None:
    github = _github()
    ctx = StackContext.for_test(git=FakeGit(current_branch="feat-1"), github=github)

    result = CliRunner().invoke(
        cli, ["status", "--no-checks", "--no-color"], obj=ctx, catch_exceptions=False
    )

    assert result.exit_code == 0, result.output
    assert github.fetch_checks_calls == []
    assert "[─ ─ ─ ─]" in result.output


def test_status_json() -> None:
    ctx = StackContext.for_test(git=FakeGit(current_branch="feat-1"), github=_github())

    result = CliRunner().invoke(
        cli, ["status", "ABC-1", "--json"], obj=ctx, catch_exceptions=False
    )

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert [entry["branch"] for entry in data["stack"]] == ["feat-3", "feat-2", "feat-1", "main"]
    assert data["stack"][0]["status"]["stack_clear"] == "fail"
    assert data["stack"][2]["is_current"] is True


def test_status_ascii_from_config() -> None:
    ctx = StackContext.for_test(
        git=FakeGit(current_branch="feat-1"),
        github=_github(),
        global_config=GlobalConfig(repository="owner/repo", use_unicode=False),
    )

    result = CliRunner().invoke(cli, ["status", "--no-color"], obj=ctx, catch_exceptions=False)

    assert "* feat-1 (current)" in result.output


def test_status_on_trunk_without_identifier_fails() -> None:
    ctx = StackContext.for_test(git=FakeGit(current_branch="main"), github=_github())

    result = CliRunner().invoke(cli, ["status"], obj=ctx)

    assert result.exit_code == 1
    assert "Error: No stack identifier given" in result.output


def test_status_unknown_identifier_fails() -> None:
    ctx = StackContext.for_test(git=FakeGit(current_branch="main"), github=_github())

    result = CliRunner().invoke(cli, ["status", "XYZ-9"], obj=ctx)

    assert result.exit_code == 1
    assert "No pull requests found matching 'XYZ-9'" in result.output


def test_status_forked_stack_fails_with_ids() -> None:
    github = FakeGitHub(
        pull_requests=[
            make_pr(10, "feat-1", "main"),
            make_pr(11, "feat-2", "feat-1"),
            make_pr(12, "feat-x", "feat-1"),
        ]
    )
    ctx = StackContext.for_test(git=FakeGit(current_branch="main"), github=github)

    result = CliRunner().invoke(cli, ["status", "ABC-1"], obj=ctx)

    assert result.exit_code == 1
    assert "Multiple pull requests merge into 'feat-1': #11, #12" in result.output


def test_status_excluding_a_fork_branch() -> None:
    github = FakeGitHub(
        pull_requests=[
            make_pr(10, "feat-1", "main"),
            make_pr(11, "feat-2", "feat-1"),
            make_pr(12, "feat-x", "feat-1"),
        ]
    )
    ctx = StackContext.for_test(git=FakeGit(current_branch="main"), github=github)

    result = CliRunner().invoke(
        cli, ["status", "ABC-1", "-e", "12", "--no-checks"], obj=ctx, catch_exceptions=False
    )

    assert result.exit_code == 0, result.output
    assert "#12" not in result.output

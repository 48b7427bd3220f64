"""Tests for the printing and dry-run gateway wrappers."""

from pathlib import Path

import pytest

from prstack.core.git.dry_run import DryRunGit
from prstack.core.git.fake import FakeGit
from prstack.core.git.printing import PrintingGit
from prstack.core.github.dry_run import DryRunGitHub
from prstack.core.github.fake import FakeGitHub
from prstack.core.github.printing import PrintingGitHub
from tests.test_utils.builders import linear_prs

REPO = Path("/repo")


def test_dry_run_github_reads_but_does_not_write() -> None:
    fake = FakeGitHub(pull_requests=linear_prs(2))
    github = DryRunGitHub(fake)

    assert [pr.number for pr in github.search_pull_requests("owner/repo", "abc-1")] == [10, 11]
    github.update_pr_base("owner/repo", 11, "main")
    github.close_pr("owner/repo", 10, comment="Landed via #11")
    result = github.merge_pr_squash("owner/repo", 11)

    assert fake.operations == []
    assert result.url == "https://github.com/owner/repo/pull/11"


def test_printing_github_echoes_commands(capsys: pytest.CaptureFixture[str]) -> None:
    fake = FakeGitHub(pull_requests=linear_prs(2))
    github = PrintingGitHub(fake)

    github.merge_pr_squash("owner/repo", 11)
    github.close_pr("owner/repo", 10, comment="Landed via #11")

    err = capsys.readouterr().err
    assert "$ gh pr merge 11 --squash" in err
    assert "$ gh pr close 10 --comment 'Landed via #11'" in err
    assert fake.operations == ["merge #11", "close #10"]


def test_printing_dry_run_marks_output(capsys: pytest.CaptureFixture[str]) -> None:
    github = PrintingGitHub(DryRunGitHub(FakeGitHub()), dry_run=True)

    github.update_pr_base("owner/repo", 11, "main")

    assert "(dry run)" in capsys.readouterr().err


def test_dry_run_git_does_not_move_branches() -> None:
    fake = FakeGit(branches={"main": "m1", "feat-1": "a1"}, current_branch="feat-1")
    git = DryRunGit(fake)

    git.set_branch(REPO, "main", "zzz")
    git.push_branches(REPO, "origin", ["feat-1"], force=True)

    assert fake.branches["main"] == "m1"
    assert fake.pushed == []
    assert git.get_current_branch(REPO) == "feat-1"


def test_printing_git_push(capsys: pytest.CaptureFixture[str]) -> None:
    fake = FakeGit()
    git = PrintingGit(fake)

    git.push_branches(REPO, "origin", ["feat-1", "feat-2"], force=True)

    assert "origin feat-1 feat-2" in capsys.readouterr().err
    assert fake.pushed == [("origin", ["feat-1", "feat-2"], True)]

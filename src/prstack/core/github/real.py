"""Production implementation of GitHub operations via the gh CLI."""

import json
import logging

from prstack.core.github.abc import GitHub
from prstack.core.github.parsing import (
    CHECKS_JSON_FIELDS,
    PR_JSON_FIELDS,
    parse_checks,
    parse_pull_request_list,
)
from prstack.core.github.types import PullRequest
from prstack.core.subprocess import execute_gh_command
from prstack.core.types import MergeResult, RawChecks

logger = logging.getLogger(__name__)

LIST_LIMIT = "200"


class RealGitHub(GitHub):
    """Production implementation using gh CLI.

    All GitHub operations execute actual gh commands via subprocess. Failures
    surface as RuntimeError from execute_gh_command.
    """

    def _list(
        self, repository: str, extra_args: list[str], operation_context: str
    ) -> list[PullRequest]:
        cmd = [
            "gh",
            "pr",
            "list",
            "--repo",
            repository,
            *extra_args,
            "--json",
            PR_JSON_FIELDS,
            "--limit",
            LIST_LIMIT,
        ]
        stdout = execute_gh_command(cmd, operation_context)
        return parse_pull_request_list(stdout)

    def search_pull_requests(self, repository: str, query: str) -> list[PullRequest]:
        prs = self._list(
            repository,
            ["--search", f"{query} in:title", "--state", "open"],
            f"search pull requests matching '{query}'",
        )
        logger.debug("Search for %r in %s returned %d PRs", query, repository, len(prs))
        return prs

    def list_open_pull_requests(self, repository: str) -> list[PullRequest]:
        return self._list(repository, ["--state", "open"], "list open pull requests")

    def list_closed_pull_requests(self, repository: str) -> list[PullRequest]:
        # gh counts merged pull requests as closed
        return self._list(repository, ["--state", "closed"], "list closed pull requests")

    def get_pull_request_for_branch(self, repository: str, branch: str) -> PullRequest | None:
        prs = self._list(
            repository,
            ["--head", branch, "--state", "open"],
            f"find pull request for branch '{branch}'",
        )
        # --head also matches same-named branches on forks
        matching = [pr for pr in prs if pr.head_branch == branch]
        if not matching:
            return None
        return matching[0]

    def list_pull_requests_by_base(self, repository: str, base: str) -> list[PullRequest]:
        return self._list(
            repository,
            ["--base", base, "--state", "open"],
            f"list pull requests based on '{base}'",
        )

    def fetch_checks(self, repository: str, number: int) -> RawChecks:
        stdout = execute_gh_command(
            ["gh", "pr", "view", str(number), "--repo", repository, "--json", CHECKS_JSON_FIELDS],
            f"fetch checks for pull request #{number}",
        )
        try:
            return parse_checks(stdout)
        except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            raise RuntimeError(f"Failed to parse checks for pull request #{number}: {e}") from e

    def get_pr_body(self, repository: str, number: int) -> str:
        stdout = execute_gh_command(
            [
                "gh",
                "pr",
                "view",
                str(number),
                "--repo",
                repository,
                "--json",
                "body",
                "--jq",
                ".body",
            ],
            f"read description of pull request #{number}",
        )
        return stdout.rstrip("\n")

    def update_pr_body(self, repository: str, number: int, body: str) -> None:
        execute_gh_command(
            ["gh", "pr", "edit", str(number), "--repo", repository, "--body", body],
            f"update description of pull request #{number}",
        )

    def update_pr_base(self, repository: str, number: int, new_base: str) -> None:
        execute_gh_command(
            ["gh", "pr", "edit", str(number), "--repo", repository, "--base", new_base],
            f"change base of pull request #{number} to '{new_base}'",
        )

    def merge_pr_squash(self, repository: str, number: int) -> MergeResult:
        execute_gh_command(
            ["gh", "pr", "merge", str(number), "--repo", repository, "--squash"],
            f"squash-merge pull request #{number}",
        )
        stdout = execute_gh_command(
            ["gh", "pr", "view", str(number), "--repo", repository, "--json", "url,mergeCommit"],
            f"read merge result of pull request #{number}",
        )
        data = json.loads(stdout)
        merge_commit = data.get("mergeCommit") or {}
        return MergeResult(
            pr_number=number,
            url=data.get("url", ""),
            merge_commit=merge_commit.get("oid"),
        )

    def close_pr(self, repository: str, number: int, *, comment: str | None) -> None:
        cmd = ["gh", "pr", "close", str(number), "--repo", repository]
        if comment is not None:
            cmd.extend(["--comment", comment])
        execute_gh_command(cmd, f"close pull request #{number}")

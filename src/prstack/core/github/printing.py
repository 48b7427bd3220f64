"""Printing wrapper for GitHub operations."""

import shlex

from prstack.core.github.abc import GitHub
from prstack.core.github.types import PullRequest
from prstack.core.printing import PrintingBase
from prstack.core.types import MergeResult, RawChecks


class PrintingGitHub(PrintingBase, GitHub):
    """Wrapper that prints operations before delegating to inner implementation.

    Usage:
        # For production
        printing_ops = PrintingGitHub(real_ops)

        # For dry-run
        printing_ops = PrintingGitHub(DryRunGitHub(real_ops), dry_run=True)
    """

    # Read-only operations: delegate without printing

    def search_pull_requests(self, repository: str, query: str) -> list[PullRequest]:
        return self._wrapped.search_pull_requests(repository, query)

    def list_open_pull_requests(self, repository: str) -> list[PullRequest]:
        return self._wrapped.list_open_pull_requests(repository)

    def list_closed_pull_requests(self, repository: str) -> list[PullRequest]:
        return self._wrapped.list_closed_pull_requests(repository)

    def get_pull_request_for_branch(self, repository: str, branch: str) -> PullRequest | None:
        return self._wrapped.get_pull_request_for_branch(repository, branch)

    def list_pull_requests_by_base(self, repository: str, base: str) -> list[PullRequest]:
        return self._wrapped.list_pull_requests_by_base(repository, base)

    def fetch_checks(self, repository: str, number: int) -> RawChecks:
        return self._wrapped.fetch_checks(repository, number)

    def get_pr_body(self, repository: str, number: int) -> str:
        return self._wrapped.get_pr_body(repository, number)

    # Operations that change state: print, then delegate

    def update_pr_body(self, repository: str, number: int, body: str) -> None:
        self._emit(self._format_command(f"gh pr edit {number} --body <stack table>"))
        self._wrapped.update_pr_body(repository, number, body)

    def update_pr_base(self, repository: str, number: int, new_base: str) -> None:
        self._emit(self._format_command(f"gh pr edit {number} --base {new_base}"))
        self._wrapped.update_pr_base(repository, number, new_base)

    def merge_pr_squash(self, repository: str, number: int) -> MergeResult:
        self._emit(self._format_command(f"gh pr merge {number} --squash"))
        return self._wrapped.merge_pr_squash(repository, number)

    def close_pr(self, repository: str, number: int, *, comment: str | None) -> None:
        command = f"gh pr close {number}"
        if comment is not None:
            command += f" --comment {shlex.quote(comment)}"
        self._emit(self._format_command(command))
        self._wrapped.close_pr(repository, number, comment=comment)

"""No-op wrapper for GitHub operations."""

from prstack.core.github.abc import GitHub
from prstack.core.github.types import PullRequest
from prstack.core.types import MergeResult, RawChecks


class DryRunGitHub(GitHub):
    """No-op wrapper for GitHub operations.

    Read operations are delegated to the wrapped implementation.
    Write operations return without executing (no-op behavior).

    This wrapper prevents destructive GitHub operations from executing in dry-run mode,
    while still allowing read operations for validation.
    """

    def __init__(self, wrapped: GitHub) -> None:
        """Initialize dry-run wrapper with a real implementation.

        Args:
            wrapped: The real GitHub operations implementation to wrap
        """
        self._wrapped = wrapped

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

    def update_pr_body(self, repository: str, number: int, body: str) -> None:
        """No-op for updating PR description in dry-run mode."""
        pass

    def update_pr_base(self, repository: str, number: int, new_base: str) -> None:
        """No-op for updating PR base branch in dry-run mode."""
        pass

    def merge_pr_squash(self, repository: str, number: int) -> MergeResult:
        """Report a merge without performing it."""
        return MergeResult(
            pr_number=number,
            url=f"https://github.com/{repository}/pull/{number}",
            merge_commit=None,
        )

    def close_pr(self, repository: str, number: int, *, comment: str | None) -> None:
        """No-op for closing PR in dry-run mode."""
        pass

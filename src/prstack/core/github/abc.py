"""Abstract base class for GitHub operations."""

from abc import ABC, abstractmethod

from prstack.core.github.types import PullRequest
from prstack.core.types import MergeResult, RawChecks


class GitHub(ABC):
    """Abstract interface for GitHub operations.

    All implementations (real and fake) must implement this interface. Every
    method takes the target repository as "owner/name".
    """

    @abstractmethod
    def search_pull_requests(self, repository: str, query: str) -> list[PullRequest]:
        """Pull requests whose title contains the query.

        Args:
            repository: Repository in owner/name form
            query: Text to look for in titles (e.g. a ticket key)
        """
        ...

    @abstractmethod
    def list_open_pull_requests(self, repository: str) -> list[PullRequest]:
        """All open pull requests in the repository."""
        ...

    @abstractmethod
    def list_closed_pull_requests(self, repository: str) -> list[PullRequest]:
        """Recently closed or merged pull requests in the repository."""
        ...

    @abstractmethod
    def get_pull_request_for_branch(self, repository: str, branch: str) -> PullRequest | None:
        """Open pull request whose head is `branch`, or None."""
        ...

    @abstractmethod
    def list_pull_requests_by_base(self, repository: str, base: str) -> list[PullRequest]:
        """Open pull requests that merge into `base`."""
        ...

    @abstractmethod
    def fetch_checks(self, repository: str, number: int) -> RawChecks:
        """CI, review and mergeability state of a pull request.

        Raises:
            RuntimeError: If the gh command fails or its output cannot be read
        """
        ...

    @abstractmethod
    def get_pr_body(self, repository: str, number: int) -> str:
        """Current description of a pull request."""
        ...

    @abstractmethod
    def update_pr_body(self, repository: str, number: int, body: str) -> None:
        """Replace the description of a pull request."""
        ...

    @abstractmethod
    def update_pr_base(self, repository: str, number: int, new_base: str) -> None:
        """Change the branch a pull request merges into.

        Raises:
            RuntimeError: If GitHub rejects the change
        """
        ...

    @abstractmethod
    def merge_pr_squash(self, repository: str, number: int) -> MergeResult:
        """Squash-merge a pull request.

        Raises:
            RuntimeError: If the merge is rejected
        """
        ...

    @abstractmethod
    def close_pr(self, repository: str, number: int, *, comment: str | None) -> None:
        """Close a pull request without merging, optionally leaving a comment.

        Raises:
            RuntimeError: If the pull request could not be closed
        """
        ...

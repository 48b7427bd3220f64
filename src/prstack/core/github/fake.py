"""Fake GitHub operations for testing.

FakeGitHub is an in-memory implementation that accepts pre-configured state
in its constructor. Construct instances directly with keyword arguments.
"""

from dataclasses import replace

from prstack.core.github.abc import GitHub
from prstack.core.github.types import PullRequest
from prstack.core.types import MergeResult, RawChecks


class FakeGitHub(GitHub):
    """In-memory fake implementation of GitHub operations.

    This class has NO public setup methods. All state is provided via constructor
    using keyword arguments with sensible defaults (empty collections).
    Mutations update the stored pull requests so later reads observe them.
    """

    def __init__(
        self,
        *,
        pull_requests: list[PullRequest] | None = None,
        checks: dict[int, RawChecks] | None = None,
        bodies: dict[int, str] | None = None,
        check_errors: set[int] | None = None,
        merge_errors: dict[int, str] | None = None,
        close_errors: dict[int, str] | None = None,
        base_update_errors: dict[int, str] | None = None,
    ) -> None:
        """Create FakeGitHub with pre-configured state.

        Args:
            pull_requests: Pull requests in the repository (any state)
            checks: Mapping of PR number -> RawChecks returned by fetch_checks
            bodies: Mapping of PR number -> description
            check_errors: PR numbers whose fetch_checks raises RuntimeError
            merge_errors: Mapping of PR number -> error raised by merge_pr_squash
            close_errors: Mapping of PR number -> error raised by close_pr
            base_update_errors: Mapping of PR number -> error raised by update_pr_base
        """
        self._prs: dict[int, PullRequest] = {pr.number: pr for pr in pull_requests or []}
        self._checks = checks or {}
        self._bodies = dict(bodies or {})
        self._check_errors = check_errors or set()
        self._merge_errors = merge_errors or {}
        self._close_errors = close_errors or {}
        self._base_update_errors = base_update_errors or {}

        self._merged_prs: list[int] = []
        self._closed_prs: list[tuple[int, str | None]] = []
        self._updated_bases: list[tuple[int, str]] = []
        self._updated_bodies: dict[int, str] = {}
        self._operations: list[str] = []
        self._fetch_checks_calls: list[int] = []

    @property
    def merged_prs(self) -> list[int]:
        """List of PR numbers that were merged."""
        return self._merged_prs

    @property
    def closed_prs(self) -> list[tuple[int, str | None]]:
        """(PR number, comment) for every closed PR, in order."""
        return self._closed_prs

    @property
    def updated_bases(self) -> list[tuple[int, str]]:
        """(PR number, new base) for every base change, in order."""
        return self._updated_bases

    @property
    def updated_bodies(self) -> dict[int, str]:
        """Latest description written per PR number."""
        return self._updated_bodies

    @property
    def operations(self) -> list[str]:
        """Every mutating call in order, e.g. "merge #12" or "close #10"."""
        return self._operations

    @property
    def fetch_checks_calls(self) -> list[int]:
        return self._fetch_checks_calls

    def _open(self) -> list[PullRequest]:
        return [pr for pr in self._prs.values() if pr.is_open]

    def search_pull_requests(self, repository: str, query: str) -> list[PullRequest]:
        needle = query.lower()
        return [pr for pr in self._open() if needle in pr.title.lower()]

    def list_open_pull_requests(self, repository: str) -> list[PullRequest]:
        return self._open()

    def list_closed_pull_requests(self, repository: str) -> list[PullRequest]:
        return [pr for pr in self._prs.values() if not pr.is_open]

    def get_pull_request_for_branch(self, repository: str, branch: str) -> PullRequest | None:
        for pr in self._open():
            if pr.head_branch == branch:
                return pr
        return None

    def list_pull_requests_by_base(self, repository: str, base: str) -> list[PullRequest]:
        return [pr for pr in self._open() if pr.base_branch == base]

    def fetch_checks(self, repository: str, number: int) -> RawChecks:
        self._fetch_checks_calls.append(number)
        if number in self._check_errors:
            raise RuntimeError(f"Failed to fetch checks for pull request #{number}")
        return self._checks.get(number, RawChecks())

    def get_pr_body(self, repository: str, number: int) -> str:
        return self._bodies.get(number, "")

    def update_pr_body(self, repository: str, number: int, body: str) -> None:
        self._operations.append(f"edit body #{number}")
        self._bodies[number] = body
        self._updated_bodies[number] = body

    def update_pr_base(self, repository: str, number: int, new_base: str) -> None:
        if number in self._base_update_errors:
            raise RuntimeError(self._base_update_errors[number])
        self._operations.append(f"base #{number} -> {new_base}")
        self._updated_bases.append((number, new_base))
        if number in self._prs:
            self._prs[number] = replace(self._prs[number], base_branch=new_base)

    def merge_pr_squash(self, repository: str, number: int) -> MergeResult:
        if number in self._merge_errors:
            raise RuntimeError(self._merge_errors[number])
        self._operations.append(f"merge #{number}")
        self._merged_prs.append(number)
        url = f"https://github.com/{repository}/pull/{number}"
        if number in self._prs:
            url = self._prs[number].url or url
            self._prs[number] = replace(self._prs[number], state="MERGED")
        return MergeResult(pr_number=number, url=url, merge_commit=f"merge{number}")

    def close_pr(self, repository: str, number: int, *, comment: str | None) -> None:
        if number in self._close_errors:
            raise RuntimeError(self._close_errors[number])
        self._operations.append(f"close #{number}")
        self._closed_prs.append((number, comment))
        if number in self._prs:
            self._prs[number] = replace(self._prs[number], state="CLOSED")

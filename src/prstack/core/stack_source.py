"""Load chains from GitHub pull requests."""

from collections.abc import Collection

from prstack.core.chain import build_chain, discover_chain
from prstack.core.github.abc import GitHub
from prstack.core.types import Chain, Node


class GitHubPullRequestSource:
    """Adapts the GitHub gateway to the lookups chain discovery needs."""

    def __init__(self, github: GitHub, repository: str) -> None:
        self._github = github
        self._repository = repository

    def get_by_branch(self, branch: str) -> Node | None:
        pr = self._github.get_pull_request_for_branch(self._repository, branch)
        if pr is None:
            return None
        return pr.to_node()

    def list_by_base(self, base: str) -> list[Node]:
        return [
            pr.to_node() for pr in self._github.list_pull_requests_by_base(self._repository, base)
        ]


def search_nodes(github: GitHub, repository: str, identifier: str) -> list[Node]:
    """Open pull requests whose title contains the identifier."""
    return [pr.to_node() for pr in github.search_pull_requests(repository, identifier)]


def load_chain_by_identifier(
    github: GitHub,
    repository: str,
    identifier: str,
    trunk: str,
    excluded_ids: Collection[int] = (),
) -> Chain | None:
    """Chain made of every open pull request matching the identifier.

    Returns:
        None when no pull request matches

    Raises:
        ChainError: The matching pull requests do not form one linear stack
    """
    nodes = search_nodes(github, repository, identifier)
    if not nodes:
        return None
    return build_chain(nodes, trunk, excluded_ids)


def load_chain_for_branch(
    github: GitHub,
    repository: str,
    branch: str,
    trunk: str,
    excluded_ids: Collection[int] = (),
) -> Chain | None:
    """Chain containing the open pull request whose head is `branch`.

    Returns:
        None when the branch has no open pull request

    Raises:
        ChainError: The surrounding pull requests do not form one linear stack
    """
    pr = github.get_pull_request_for_branch(repository, branch)
    if pr is None:
        return None
    source = GitHubPullRequestSource(github, repository)
    return discover_chain(pr.to_node(), trunk, source, excluded_ids)

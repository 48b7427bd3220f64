"""Assemble and validate linear stacks of pull requests.

Two entry points share one validator:

- build_chain: order an unordered candidate set (e.g. all PRs matching a title
  search) into a chain rooted at trunk.
- discover_chain: start from one known PR and walk base pointers up to trunk
  and child pointers down to the tip, then validate the collected set.

Only strictly linear stacks are accepted. Anything else raises a ChainError
subclass that names the offending pull requests.
"""

import logging
from collections.abc import Collection, Iterable
from dataclasses import dataclass
from typing import Protocol

from prstack.core.types import Chain, Node

logger = logging.getLogger(__name__)


class ChainError(Exception):
    """Base class for malformed stack input."""


class NoRootError(ChainError):
    """No candidate merges into trunk."""

    def __init__(self, trunk: str, candidate_ids: list[int]) -> None:
        self.trunk = trunk
        self.candidate_ids = candidate_ids
        if candidate_ids:
            ids = ", ".join(f"#{i}" for i in candidate_ids)
            message = f"None of the pull requests ({ids}) merges into '{trunk}'"
        else:
            message = f"No pull requests to build a stack on '{trunk}'"
        super().__init__(message)


class MultipleRootsError(ChainError):
    """More than one candidate merges into trunk."""

    def __init__(self, trunk: str, root_ids: list[int]) -> None:
        self.trunk = trunk
        self.root_ids = root_ids
        ids = ", ".join(f"#{i}" for i in root_ids)
        super().__init__(f"Multiple pull requests merge into '{trunk}': {ids}")


class BrokenChainError(ChainError):
    """Candidates remain that cannot be reached from the chain built so far."""

    def __init__(self, last_branch: str, unplaced_ids: list[int]) -> None:
        self.last_branch = last_branch
        self.unplaced_ids = unplaced_ids
        ids = ", ".join(f"#{i}" for i in unplaced_ids)
        super().__init__(
            f"Stack is broken after '{last_branch}': nothing merges into it, "
            f"but {ids} could not be placed"
        )


class MultipleChildrenError(ChainError):
    """Several candidates merge into the same branch."""

    def __init__(self, parent_branch: str, child_ids: list[int]) -> None:
        self.parent_branch = parent_branch
        self.child_ids = child_ids
        ids = ", ".join(f"#{i}" for i in child_ids)
        super().__init__(f"Multiple pull requests merge into '{parent_branch}': {ids}")


class DuplicateBranchError(ChainError):
    """Two candidates share a head branch, or a candidate's head is trunk."""

    def __init__(self, branch: str, node_ids: list[int]) -> None:
        self.branch = branch
        self.node_ids = node_ids
        ids = ", ".join(f"#{i}" for i in node_ids)
        super().__init__(f"Branch '{branch}' is used by more than one stack entry: {ids}")


class PullRequestSource(Protocol):
    """Lookups needed to discover a stack from a single pull request."""

    def get_by_branch(self, branch: str) -> Node | None: ...

    def list_by_base(self, base: str) -> list[Node]: ...


@dataclass(frozen=True)
class StackGroups:
    """All stacks found among a set of open pull requests."""

    chains: list[Chain]
    errors: list[ChainError]


def _sorted_ids(nodes: Iterable[Node]) -> list[int]:
    return sorted(node.id for node in nodes)


def _ensure_unique_branches(nodes: list[Node], trunk: str) -> None:
    by_branch: dict[str, list[Node]] = {}
    for node in nodes:
        by_branch.setdefault(node.branch, []).append(node)

    for branch, owners in sorted(by_branch.items()):
        if branch == trunk or len(owners) > 1:
            raise DuplicateBranchError(branch, _sorted_ids(owners))


def build_chain(
    candidates: Iterable[Node],
    trunk: str,
    excluded_ids: Collection[int] = (),
) -> Chain:
    """Order candidates into a linear chain rooted at trunk.

    Excluded ids are removed before assembly. The result does not depend on the
    order in which candidates are supplied.

    Raises:
        NoRootError: No remaining candidate has trunk as its base
        MultipleRootsError: Several remaining candidates have trunk as their base
        MultipleChildrenError: Several candidates share the same base branch
        BrokenChainError: Candidates remain that are not reachable from the root
        DuplicateBranchError: A branch name appears more than once
    """
    excluded = set(excluded_ids)
    remaining = [node for node in candidates if node.id not in excluded]
    logger.debug(
        "Building chain on %s from %d candidates (excluded: %s)",
        trunk,
        len(remaining),
        sorted(excluded),
    )

    _ensure_unique_branches(remaining, trunk)

    roots = [node for node in remaining if node.base == trunk]
    if not roots:
        raise NoRootError(trunk, _sorted_ids(remaining))
    if len(roots) > 1:
        raise MultipleRootsError(trunk, _sorted_ids(roots))

    children_by_base: dict[str, list[Node]] = {}
    for node in remaining:
        children_by_base.setdefault(node.base, []).append(node)

    ordered = [roots[0]]
    while len(ordered) < len(remaining):
        last = ordered[-1]
        children = children_by_base.get(last.branch, [])
        if not children:
            placed = {node.id for node in ordered}
            unplaced = [node for node in remaining if node.id not in placed]
            raise BrokenChainError(last.branch, _sorted_ids(unplaced))
        if len(children) > 1:
            raise MultipleChildrenError(last.branch, _sorted_ids(children))
        ordered.append(children[0])

    chain = Chain(trunk=trunk, nodes=tuple(ordered))
    logger.debug("Built chain: %s", " <- ".join([trunk, *chain.branches]))
    return chain


def discover_chain(
    start: Node,
    trunk: str,
    source: PullRequestSource,
    excluded_ids: Collection[int] = (),
) -> Chain:
    """Discover the full stack that contains `start`.

    Walks up by looking up the pull request whose head is the current base,
    until trunk is reached. Then walks down from `start` by listing pull
    requests based on the current tip. The collected set is validated with
    build_chain.

    Raises:
        BrokenChainError: A base branch has no open pull request and is not trunk,
            or base pointers form a cycle
        MultipleChildrenError: Several pull requests are based on the same tip
    """
    excluded = set(excluded_ids)
    collected: dict[int, Node] = {start.id: start}
    seen_branches = {start.branch}

    current = start
    while current.base != trunk:
        parent = source.get_by_branch(current.base)
        if parent is None:
            raise BrokenChainError(current.base, _sorted_ids(collected.values()))
        if parent.branch in seen_branches:
            raise BrokenChainError(parent.branch, _sorted_ids(collected.values()))
        logger.debug("Discovered parent #%d (%s) of %s", parent.id, parent.branch, current.branch)
        collected[parent.id] = parent
        seen_branches.add(parent.branch)
        current = parent

    tip = start
    while True:
        children = source.list_by_base(tip.branch)
        if not children:
            break
        # An excluded child is followed when it is the only one; build_chain drops it.
        kept = [child for child in children if child.id not in excluded]
        candidates = kept or children
        if len(candidates) > 1:
            raise MultipleChildrenError(tip.branch, _sorted_ids(candidates))
        child = candidates[0]
        if child.branch in seen_branches:
            raise BrokenChainError(child.branch, _sorted_ids(collected.values()))
        logger.debug("Discovered child #%d (%s) of %s", child.id, child.branch, tip.branch)
        collected[child.id] = child
        seen_branches.add(child.branch)
        tip = child

    return build_chain(collected.values(), trunk, excluded)


def group_stacks(candidates: Iterable[Node], trunk: str) -> StackGroups:
    """Split open pull requests into independent stacks rooted at trunk.

    Each pull request based on trunk starts a group that collects everything
    reachable through base pointers. Linear groups become chains, largest
    first; non-linear groups are returned as errors.
    """
    nodes = list(candidates)
    children_by_base: dict[str, list[Node]] = {}
    for node in nodes:
        children_by_base.setdefault(node.base, []).append(node)

    chains: list[Chain] = []
    errors: list[ChainError] = []
    roots = sorted((node for node in nodes if node.base == trunk), key=lambda n: n.id)
    for root in roots:
        group: list[Node] = []
        frontier = [root]
        seen: set[int] = set()
        while frontier:
            node = frontier.pop()
            if node.id in seen:
                continue
            seen.add(node.id)
            group.append(node)
            frontier.extend(children_by_base.get(node.branch, []))
        try:
            chains.append(build_chain(group, trunk))
        except ChainError as e:
            errors.append(e)

    chains.sort(key=lambda chain: (-len(chain), chain.bottom.id))
    return StackGroups(chains=chains, errors=errors)

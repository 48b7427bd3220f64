"""Core data model shared by chain building, status, rebase and land.

A Chain is an immutable, ordered snapshot of a stack of pull requests. Index 0
is the bottom (its base is trunk), the last node is the top. Every other
component consumes a Chain and never mutates it; observing a remote change
requires fetching a fresh snapshot.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class CheckState(Enum):
    """Four-valued readiness signal used for every status bit."""

    PASS = "pass"
    FAIL = "fail"
    PENDING = "pending"
    NOT_APPLICABLE = "n/a"


@dataclass(frozen=True)
class Node:
    """One pull request in a stack.

    `id` is the pull request number. `branch` is its head ref and `base` the
    ref it merges into.
    """

    id: int
    branch: str
    base: str
    head_commit: str
    title: str
    is_draft: bool = False
    updated_at: datetime | None = None
    url: str = ""


@dataclass(frozen=True)
class RawChecks:
    """Externally sourced check results for a single node."""

    ci: CheckState = CheckState.NOT_APPLICABLE
    approved: CheckState = CheckState.NOT_APPLICABLE
    mergeable: CheckState = CheckState.NOT_APPLICABLE


@dataclass(frozen=True)
class StatusBits:
    """Readiness of a node: three copied bits plus the chain-derived stack_clear."""

    ci: CheckState
    approved: CheckState
    mergeable: CheckState
    stack_clear: CheckState

    @staticmethod
    def not_applicable() -> "StatusBits":
        """Status shown when checks were not fetched."""
        return StatusBits(
            ci=CheckState.NOT_APPLICABLE,
            approved=CheckState.NOT_APPLICABLE,
            mergeable=CheckState.NOT_APPLICABLE,
            stack_clear=CheckState.NOT_APPLICABLE,
        )


@dataclass(frozen=True)
class Commit:
    """A commit owned by a stack branch; replayed by rebase and listed by log."""

    sha: str
    message: str
    authored_at: datetime | None = None


@dataclass(frozen=True)
class MergeResult:
    """Outcome of a successful squash merge."""

    pr_number: int
    url: str
    merge_commit: str | None = None


@dataclass(frozen=True)
class Chain:
    """Ordered bottom-to-top sequence of nodes rooted at trunk.

    Construction validates linearity: the bottom node's base is trunk, each
    following node's base is the previous node's branch, and no branch
    appears twice. Use prstack.core.chain.build_chain to assemble one from
    unordered candidates.
    """

    trunk: str
    nodes: tuple[Node, ...]

    def __post_init__(self) -> None:
        expected_base = self.trunk
        seen: set[str] = set()
        for node in self.nodes:
            if node.base != expected_base:
                raise ValueError(
                    f"Node #{node.id} has base '{node.base}', expected '{expected_base}'"
                )
            if node.branch in seen or node.branch == self.trunk:
                raise ValueError(f"Branch '{node.branch}' appears more than once in chain")
            seen.add(node.branch)
            expected_base = node.branch

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __getitem__(self, index: int) -> Node:
        return self.nodes[index]

    @property
    def bottom(self) -> Node:
        return self.nodes[0]

    @property
    def top(self) -> Node:
        return self.nodes[-1]

    @property
    def branches(self) -> list[str]:
        return [node.branch for node in self.nodes]

    @property
    def ids(self) -> list[int]:
        return [node.id for node in self.nodes]

    def index_of(self, node_id: int) -> int:
        """Position of the node with the given id.

        Raises:
            KeyError: If no node has that id
        """
        for index, node in enumerate(self.nodes):
            if node.id == node_id:
                return index
        raise KeyError(node_id)

    def node_for_branch(self, branch: str) -> Node | None:
        for node in self.nodes:
            if node.branch == branch:
                return node
        return None

"""Land a stack by merging its highest ready node and closing everything below.

Because each node contains the commits of the nodes below it, squash-merging
the frontier node into trunk lands the whole lower part of the stack at once.
The nodes below the frontier are then closed with a comment pointing at the
merge.

plan_land is pure and produces the same LandPlan whether or not the land is
a dry run; execute_land runs a plan against a GitHub gateway (pass a
DryRunGitHub to preview without side effects).
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from prstack.core.github.abc import GitHub
from prstack.core.types import Chain, CheckState, MergeResult, Node, StatusBits

logger = logging.getLogger(__name__)


class LandError(Exception):
    """The stack cannot be landed as requested."""


class InvalidCountError(LandError):
    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"--count must be at least 1, got {count}")


@dataclass(frozen=True)
class BlockedNode:
    """Why a node cannot be the frontier."""

    node: Node
    reasons: tuple[str, ...]


class NoLandableNodeError(LandError):
    """No node in the window passes every gate."""

    def __init__(self, blocked: list[BlockedNode]) -> None:
        self.blocked = blocked
        details = "; ".join(f"#{b.node.id} {', '.join(b.reasons)}" for b in blocked)
        super().__init__(f"No pull request in the stack can be landed: {details}")


class LandMergeError(LandError):
    """Retargeting or merging the frontier failed; nothing was closed."""

    def __init__(self, node: Node, cause: str) -> None:
        self.node = node
        self.cause = cause
        super().__init__(f"Failed to land #{node.id}: {cause}")


@dataclass(frozen=True)
class LandPolicy:
    """Gates a node must pass to be chosen as the frontier.

    Attributes:
        require_approval: The node itself must be approved
        require_stack_clear: Every node below it must be approved and not a draft
    """

    require_approval: bool = True
    require_stack_clear: bool = False


@dataclass(frozen=True)
class LandPlan:
    """What a land will do.

    Attributes:
        trunk: Branch the frontier is merged into
        frontier: Node that is squash-merged
        to_close: Nodes below the frontier, bottom first, closed after the merge
        untouched: Nodes in the chain above the frontier, bottom first
    """

    trunk: str
    frontier: Node
    to_close: tuple[Node, ...]
    untouched: tuple[Node, ...]

    @property
    def needs_retarget(self) -> bool:
        return self.frontier.base != self.trunk

    @property
    def close_comment(self) -> str:
        return f"Landed via #{self.frontier.id}"

    @property
    def landed_count(self) -> int:
        return len(self.to_close) + 1


@dataclass(frozen=True)
class LandResult:
    """Outcome of executing a plan.

    close_failures maps a node id to the error raised while closing it. The
    merge already happened, so these nodes need to be closed by hand.
    """

    plan: LandPlan
    merge: MergeResult
    closed: list[int] = field(default_factory=list)
    close_failures: dict[int, str] = field(default_factory=dict)


def _blocking_reasons(node: Node, status: StatusBits, policy: LandPolicy) -> list[str]:
    reasons: list[str] = []
    if status.mergeable == CheckState.FAIL:
        reasons.append("has merge conflicts")
    if node.is_draft:
        reasons.append("is a draft")
    if policy.require_approval and status.approved != CheckState.PASS:
        reasons.append("is not approved")
    if policy.require_stack_clear and status.stack_clear != CheckState.PASS:
        reasons.append("has unapproved or draft pull requests below it")
    return reasons


def plan_land(
    chain: Chain,
    statuses: Mapping[int, StatusBits],
    *,
    count: int | None = None,
    policy: LandPolicy = LandPolicy(),
) -> LandPlan:
    """Choose the frontier and the nodes to close.

    Args:
        chain: Stack to land
        statuses: Status per node id; missing entries count as all n/a
        count: Only consider the bottom `count` nodes (whole chain when None)
        policy: Gates the frontier must pass

    Raises:
        InvalidCountError: count is less than 1
        NoLandableNodeError: No node in the window passes the gates
    """
    if count is not None and count < 1:
        raise InvalidCountError(count)

    window = chain.nodes if count is None else chain.nodes[:count]
    blocked: list[BlockedNode] = []

    for index in range(len(window) - 1, -1, -1):
        node = window[index]
        status = statuses.get(node.id, StatusBits.not_applicable())
        reasons = _blocking_reasons(node, status, policy)
        if reasons:
            logger.debug("#%d cannot be the frontier: %s", node.id, reasons)
            blocked.append(BlockedNode(node=node, reasons=tuple(reasons)))
            continue

        plan = LandPlan(
            trunk=chain.trunk,
            frontier=node,
            to_close=tuple(window[:index]),
            untouched=tuple(chain.nodes[index + 1 :]),
        )
        logger.debug(
            "Frontier #%d; closing %s", node.id, [n.id for n in plan.to_close]
        )
        return plan

    raise NoLandableNodeError(blocked)


def execute_land(plan: LandPlan, github: GitHub, repository: str) -> LandResult:
    """Retarget and merge the frontier, then close the nodes below it.

    Closures only start after the merge succeeded. A failing closure is
    recorded and the remaining closures still run.

    Raises:
        LandMergeError: Retargeting or merging failed
    """
    frontier = plan.frontier
    try:
        if plan.needs_retarget:
            github.update_pr_base(repository, frontier.id, plan.trunk)
        merge = github.merge_pr_squash(repository, frontier.id)
    except RuntimeError as e:
        raise LandMergeError(frontier, str(e)) from e

    closed: list[int] = []
    failures: dict[int, str] = {}
    for node in plan.to_close:
        try:
            github.close_pr(repository, node.id, comment=plan.close_comment)
        except RuntimeError as e:
            logger.debug("Closing #%d failed: %s", node.id, e)
            failures[node.id] = str(e)
            continue
        closed.append(node.id)

    return LandResult(plan=plan, merge=merge, closed=closed, close_failures=failures)


def format_land_plan(plan: LandPlan) -> str:
    """Human-readable preview of a plan, as printed for --dry-run."""
    lines = [
        "Landing Plan:",
        f"  Target branch: {plan.trunk}",
        "",
        f"  PRs to land ({plan.landed_count}):",
    ]
    for node in plan.to_close:
        lines.append(f"    [x] #{node.id}: {node.title} (will close)")
    lines.append(f"    [x] #{plan.frontier.id}: {plan.frontier.title} <- will merge")

    if plan.untouched:
        lines.append("")
        lines.append(f"  PRs not included ({len(plan.untouched)}):")
        for node in plan.untouched:
            lines.append(f"    [ ] #{node.id}: {node.title}")

    lines.append("")
    lines.append("  Actions that would be taken:")
    step = 1
    if plan.needs_retarget:
        lines.append(
            f"    {step}. Update PR #{plan.frontier.id} base branch: "
            f"{plan.frontier.base} -> {plan.trunk}"
        )
        step += 1
    lines.append(f"    {step}. Squash-merge PR #{plan.frontier.id} into {plan.trunk}")
    step += 1
    for node in plan.to_close:
        lines.append(f'    {step}. Close PR #{node.id} with comment: "{plan.close_comment}"')
        step += 1

    return "\n".join(lines)

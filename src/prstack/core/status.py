"""Per-node readiness for a chain.

resolve_statuses is pure: given a chain and the raw checks fetched for its
nodes it derives the stack_clear bit in a single bottom-up pass. Fetching the
raw checks is done separately by collect_checks so callers can skip it.
"""

import logging
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor

from prstack.core.types import Chain, CheckState, Node, RawChecks, StatusBits

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


def resolve_statuses(chain: Chain, checks: Mapping[int, RawChecks]) -> dict[int, StatusBits]:
    """Compute StatusBits for every node in the chain.

    ci, approved and mergeable are copied from `checks` (n/a when a node has no
    entry). stack_clear is PASS for the bottom node; above it a node is stack
    clear only if the node directly below is approved, not a draft, and itself
    stack clear. Once a node fails, every node above it fails too.
    """
    statuses: dict[int, StatusBits] = {}
    below: Node | None = None
    below_clear = True

    for node in chain:
        raw = checks.get(node.id, RawChecks())
        if below is not None:
            below_approved = statuses[below.id].approved == CheckState.PASS
            below_clear = below_clear and below_approved and not below.is_draft

        statuses[node.id] = StatusBits(
            ci=raw.ci,
            approved=raw.approved,
            mergeable=raw.mergeable,
            stack_clear=CheckState.PASS if below_clear else CheckState.FAIL,
        )
        below = node

    return statuses


def collect_checks(
    chain: Chain,
    fetch: Callable[[Node], RawChecks],
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> dict[int, RawChecks]:
    """Fetch raw checks for every node concurrently.

    A node whose fetch raises RuntimeError (the gateway reports unreadable
    payloads that way too) is recorded with all fields n/a so
    one unreachable check source does not hide the rest of the stack.
    """
    if len(chain) == 0:
        return {}

    def _fetch_one(node: Node) -> tuple[int, RawChecks]:
        try:
            return node.id, fetch(node)
        except RuntimeError as e:
            logger.debug("Could not fetch checks for #%d: %s", node.id, e)
            return node.id, RawChecks()

    workers = max(1, min(max_workers, len(chain)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(executor.map(_fetch_one, chain.nodes))

    return dict(results)

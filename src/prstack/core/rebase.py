"""Rebuild every branch of a chain on top of trunk by cherry-picking.

The engine is a strict sequence: detach at trunk, collect each node's own
commits, replay them node by node onto the evolving tip, then move all branch
pointers and push them in one atomic push. A conflicting cherry-pick pauses
the run; the paused position is persisted so invoking the engine again picks
up at the same node and commit.

Pause and a rejected push are ordinary return values. Exceptions are reserved
for preconditions (dirty tree, mismatched resume state) and for unexpected git
failures, which abandon the run and put the original branch back.
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path

from prstack.core.git.abc import Git
from prstack.core.rebase_state import RebaseState, RebaseStateStore
from prstack.core.types import Chain, Commit, Node

logger = logging.getLogger(__name__)


class RebaseError(Exception):
    """A rebase could not be started or resumed."""


class DirtyWorkingTreeError(RebaseError):
    def __init__(self) -> None:
        super().__init__(
            "Working tree has uncommitted changes. Commit or stash them before rebasing."
        )


class RebaseStateMismatchError(RebaseError):
    """A paused rebase exists for a different set of branches."""

    def __init__(self, saved_branches: list[str], chain_branches: list[str]) -> None:
        self.saved_branches = saved_branches
        self.chain_branches = chain_branches
        super().__init__(
            "A paused rebase exists for a different stack "
            f"({', '.join(saved_branches)}). Finish it or abort it first."
        )


class NotInRepositoryError(RebaseError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Not inside a git repository: {path}")


class RebaseStepError(RebaseError):
    """Git failed for a reason other than a conflict.

    The rebase is abandoned: branch pointers keep their previous commits and the
    original branch is checked out again. `new_heads` lists what was rebuilt
    before the failure; those commits stay reachable by SHA only.
    """

    def __init__(self, step: str, error: str, new_heads: dict[str, str]) -> None:
        self.step = step
        self.error = error
        self.new_heads = new_heads
        lines = [f"Rebase failed while {step}:", error]
        if new_heads:
            lines.append("Rebuilt before the failure (branches not moved):")
            lines.extend(f"  {branch} -> {sha[:12]}" for branch, sha in new_heads.items())
        lines.append("Local branches and the remote are unchanged.")
        super().__init__("\n".join(lines))


@dataclass(frozen=True)
class RebaseCompleted:
    """All branches were rebuilt and pushed."""

    new_heads: dict[str, str]


@dataclass(frozen=True)
class RebasePaused:
    """Replay stopped on a conflict; resolve it and run the rebase again."""

    node: Node
    commit: Commit
    conflicted_paths: list[str]


@dataclass(frozen=True)
class RebasePublishFailed:
    """Local branches were rebuilt but the remote rejected the push.

    The remote is unchanged because the push is atomic.
    """

    new_heads: dict[str, str]
    error: str


RebaseOutcome = RebaseCompleted | RebasePaused | RebasePublishFailed


def _git_dir(git: Git, repo_root: Path) -> Path:
    git_dir = git.get_git_dir(repo_root)
    if git_dir is None:
        raise NotInRepositoryError(repo_root)
    return git_dir


def collect_commits(
    chain: Chain, git: Git, repo_root: Path, boundary: str | None
) -> tuple[tuple[Commit, ...], ...]:
    """Each node's own commits, oldest first.

    The bottom node owns everything between `boundary` (or trunk) and its
    branch. Every other node owns what its branch adds over the node below.
    """
    collected: list[tuple[Commit, ...]] = []
    previous = boundary or chain.trunk
    for node in chain:
        commits = git.commits_between(repo_root, previous, node.branch)
        logger.debug("Node #%d (%s) owns %d commit(s)", node.id, node.branch, len(commits))
        collected.append(tuple(commits))
        previous = node.branch
    return tuple(collected)


def autorebase(
    chain: Chain,
    git: Git,
    repo_root: Path,
    *,
    state_store: RebaseStateStore,
    remote: str = "origin",
    boundary: str | None = None,
) -> RebaseOutcome:
    """Rebase the chain onto trunk, or resume a paused rebase of it.

    Args:
        chain: Stack to rebuild
        git: Git gateway
        repo_root: Repository to operate in
        state_store: Where paused state is kept between invocations
        remote: Remote all branches are pushed to
        boundary: Commit the bottom node's collection stops at (exclusive);
            trunk when None

    Raises:
        DirtyWorkingTreeError: Starting fresh with uncommitted changes
        RebaseStateMismatchError: A paused rebase exists for other branches
        RebaseStepError: Git failed other than by a conflict; the rebase was abandoned
    """
    git_dir = _git_dir(git, repo_root)
    state = state_store.load(git_dir)

    if state is None:
        if git.has_uncommitted_changes(repo_root):
            raise DirtyWorkingTreeError()
        state = RebaseState(
            trunk=chain.trunk,
            remote=remote,
            original_branch=git.get_current_branch(repo_root),
            branches=tuple(chain.branches),
            commits=collect_commits(chain, git, repo_root, boundary),
        )
        logger.debug("Starting rebase of %s onto %s", chain.branches, chain.trunk)
        git.checkout_detached(repo_root, chain.trunk)
    else:
        if list(state.branches) != chain.branches:
            raise RebaseStateMismatchError(list(state.branches), chain.branches)
        logger.debug(
            "Resuming rebase at node %d, commit %d", state.node_index, state.commit_index
        )
        paused = _finish_stopped_pick(chain, git, repo_root, state)
        if paused is not None:
            return paused
        state = replace(state, commit_index=state.commit_index + 1)

    return _replay(chain, git, repo_root, git_dir, state_store, state)


def _finish_stopped_pick(
    chain: Chain, git: Git, repo_root: Path, state: RebaseState
) -> RebasePaused | None:
    """Complete the cherry-pick that paused the previous run.

    If the user already committed the resolution there is nothing in progress
    and HEAD is taken as the result.
    """
    if not git.is_cherry_pick_in_progress(repo_root):
        return None

    conflict = git.continue_cherry_pick(repo_root)
    if conflict is None:
        return None

    return RebasePaused(
        node=chain[state.node_index],
        commit=state.commits[state.node_index][state.commit_index],
        conflicted_paths=conflict.conflicted_paths,
    )


def _replay(
    chain: Chain,
    git: Git,
    repo_root: Path,
    git_dir: Path,
    state_store: RebaseStateStore,
    state: RebaseState,
) -> RebaseOutcome:
    new_heads = dict(state.new_heads)
    commit_start = state.commit_index

    for node_index in range(state.node_index, len(chain)):
        node = chain[node_index]
        node_commits = state.commits[node_index]

        for commit_index in range(commit_start, len(node_commits)):
            commit = node_commits[commit_index]
            try:
                conflict = git.cherry_pick(repo_root, commit.sha)
            except RuntimeError as e:
                logger.debug("Cherry-pick of %s failed without conflicts: %s", commit.sha, e)
                _abandon(git, repo_root, git_dir, state_store, state)
                raise RebaseStepError(
                    f"replaying {commit.sha[:12]} onto #{node.id} {node.branch}",
                    str(e),
                    new_heads,
                ) from e
            if conflict is not None:
                logger.debug("Conflict replaying %s onto #%d", commit.sha, node.id)
                state_store.save(
                    git_dir,
                    replace(
                        state,
                        new_heads=new_heads,
                        node_index=node_index,
                        commit_index=commit_index,
                    ),
                )
                return RebasePaused(
                    node=node, commit=commit, conflicted_paths=conflict.conflicted_paths
                )

        new_heads[node.branch] = git.get_head_commit(repo_root)
        commit_start = 0

    return _publish(chain, git, repo_root, git_dir, state_store, state, new_heads)


def _publish(
    chain: Chain,
    git: Git,
    repo_root: Path,
    git_dir: Path,
    state_store: RebaseStateStore,
    state: RebaseState,
    new_heads: dict[str, str],
) -> RebaseOutcome:
    previous_heads: dict[str, str | None] = {}
    for branch in chain.branches:
        previous_heads[branch] = git.get_branch_head(repo_root, branch)
        try:
            git.set_branch(repo_root, branch, new_heads[branch])
        except RuntimeError as e:
            logger.debug("Moving %s failed: %s", branch, e)
            for moved, sha in previous_heads.items():
                if moved != branch and sha is not None:
                    git.set_branch(repo_root, moved, sha)
            _abandon(git, repo_root, git_dir, state_store, state)
            raise RebaseStepError(f"moving branch '{branch}'", str(e), new_heads) from e

    if state.original_branch is not None:
        git.checkout_branch(repo_root, state.original_branch)
    state_store.clear(git_dir)

    try:
        git.push_branches(repo_root, state.remote, chain.branches, force=True)
    except RuntimeError as e:
        logger.debug("Atomic push failed: %s", e)
        return RebasePublishFailed(new_heads=new_heads, error=str(e))

    return RebaseCompleted(new_heads=new_heads)


def _abandon(
    git: Git,
    repo_root: Path,
    git_dir: Path,
    state_store: RebaseStateStore,
    state: RebaseState,
) -> None:
    if git.is_cherry_pick_in_progress(repo_root):
        git.abort_cherry_pick(repo_root)
    if state.original_branch is not None:
        git.checkout_branch(repo_root, state.original_branch)
    state_store.clear(git_dir)


def abort_rebase(git: Git, repo_root: Path, *, state_store: RebaseStateStore) -> bool:
    """Abandon a paused rebase and return to the branch it started from.

    Returns:
        False if no rebase was in progress
    """
    git_dir = _git_dir(git, repo_root)
    state = state_store.load(git_dir)
    if state is None:
        return False

    _abandon(git, repo_root, git_dir, state_store, state)
    return True

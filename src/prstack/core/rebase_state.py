"""Persisted state of a paused autorebase.

The state file lives inside the repository's git directory so it travels with
the working tree it describes and is never committed. Its presence doubles as
the marker that a rebase is in progress.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from prstack.core.types import Commit

STATE_DIR_NAME = "prstack"
STATE_FILE_NAME = "autorebase.json"


@dataclass(frozen=True)
class RebaseState:
    """Everything needed to continue a rebase at the commit that conflicted.

    Attributes:
        trunk: Trunk the chain is being rebuilt on
        remote: Remote the branches will be pushed to
        original_branch: Branch checked out before the rebase started
        branches: Chain branches, bottom first
        commits: Commits to replay per branch, aligned with `branches`
        new_heads: Rebuilt head per branch for nodes already replayed
        node_index: Index of the node being replayed
        commit_index: Index of the commit within that node that stopped
    """

    trunk: str
    remote: str
    original_branch: str | None
    branches: tuple[str, ...]
    commits: tuple[tuple[Commit, ...], ...]
    new_heads: dict[str, str] = field(default_factory=dict)
    node_index: int = 0
    commit_index: int = 0

    def to_json(self) -> str:
        data = {
            "trunk": self.trunk,
            "remote": self.remote,
            "original_branch": self.original_branch,
            "branches": list(self.branches),
            "commits": [
                [{"sha": c.sha, "message": c.message} for c in node_commits]
                for node_commits in self.commits
            ],
            "new_heads": self.new_heads,
            "node_index": self.node_index,
            "commit_index": self.commit_index,
        }
        return json.dumps(data, indent=2)

    @staticmethod
    def from_json(text: str) -> "RebaseState":
        data: dict[str, Any] = json.loads(text)
        return RebaseState(
            trunk=data["trunk"],
            remote=data["remote"],
            original_branch=data.get("original_branch"),
            branches=tuple(data["branches"]),
            commits=tuple(
                tuple(Commit(sha=c["sha"], message=c["message"]) for c in node_commits)
                for node_commits in data["commits"]
            ),
            new_heads=dict(data.get("new_heads", {})),
            node_index=data.get("node_index", 0),
            commit_index=data.get("commit_index", 0),
        )


class RebaseStateStore(ABC):
    """Storage for the state of a paused rebase, keyed by git directory."""

    @abstractmethod
    def load(self, git_dir: Path) -> RebaseState | None:
        """Saved state, or None if no rebase is in progress."""
        ...

    @abstractmethod
    def save(self, git_dir: Path, state: RebaseState) -> None: ...

    @abstractmethod
    def clear(self, git_dir: Path) -> None:
        """Forget saved state. Does nothing when there is none."""
        ...


class FileRebaseStateStore(RebaseStateStore):
    """Production implementation storing JSON at <git-dir>/prstack/autorebase.json."""

    @staticmethod
    def path_for(git_dir: Path) -> Path:
        return git_dir / STATE_DIR_NAME / STATE_FILE_NAME

    def load(self, git_dir: Path) -> RebaseState | None:
        path = self.path_for(git_dir)
        if not path.exists():
            return None
        return RebaseState.from_json(path.read_text(encoding="utf-8"))

    def save(self, git_dir: Path, state: RebaseState) -> None:
        path = self.path_for(git_dir)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(state.to_json(), encoding="utf-8")

    def clear(self, git_dir: Path) -> None:
        path = self.path_for(git_dir)
        if path.exists():
            path.unlink()


class InMemoryRebaseStateStore(RebaseStateStore):
    """Test implementation that keeps state in memory without touching filesystem."""

    def __init__(self, states: dict[Path, RebaseState] | None = None) -> None:
        self._states = dict(states or {})

    @property
    def states(self) -> dict[Path, RebaseState]:
        return self._states

    def load(self, git_dir: Path) -> RebaseState | None:
        return self._states.get(git_dir)

    def save(self, git_dir: Path, state: RebaseState) -> None:
        self._states[git_dir] = state

    def clear(self, git_dir: Path) -> None:
        self._states.pop(git_dir, None)

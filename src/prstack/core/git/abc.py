"""Abstract interface for the git operations prstack needs.

Architecture:
- Git: abstract base class defining the interface
- RealGit: production implementation shelling out to git
- FakeGit: in-memory implementation for tests
- DryRunGit / PrintingGit: wrappers for --dry-run and verbose output
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from prstack.core.types import Commit


@dataclass(frozen=True)
class CherryPickConflict:
    """A cherry-pick stopped because of conflicts."""

    sha: str
    conflicted_paths: list[str]


class Git(ABC):
    """Abstract interface for git operations.

    All implementations (real and fake) must implement this interface.
    This interface contains ONLY runtime operations - no test setup methods.
    """

    # Read-only queries

    @abstractmethod
    def get_repository_root(self, cwd: Path) -> Path | None:
        """Top-level directory of the repository containing cwd, or None."""
        ...

    @abstractmethod
    def get_git_dir(self, cwd: Path) -> Path | None:
        """Absolute path of the .git directory, or None outside a repository."""
        ...

    @abstractmethod
    def get_current_branch(self, cwd: Path) -> str | None:
        """Currently checked-out branch, or None when HEAD is detached."""
        ...

    @abstractmethod
    def get_trunk_branch(self, repo_root: Path, remote: str) -> str:
        """Detect trunk from the remote HEAD, falling back to main/master."""
        ...

    @abstractmethod
    def get_branch_head(self, repo_root: Path, branch: str) -> str | None:
        """Commit SHA the branch points to, or None if it does not exist."""
        ...

    @abstractmethod
    def get_head_commit(self, cwd: Path) -> str:
        """Commit SHA of HEAD."""
        ...

    @abstractmethod
    def list_local_branches(self, repo_root: Path) -> list[str]:
        """Names of all local branches."""
        ...

    @abstractmethod
    def commits_between(self, repo_root: Path, base: str, head: str) -> list[Commit]:
        """Commits reachable from head but not from base, oldest first."""
        ...

    @abstractmethod
    def has_uncommitted_changes(self, cwd: Path) -> bool:
        """Check if the working tree has staged or unstaged changes."""
        ...

    @abstractmethod
    def is_cherry_pick_in_progress(self, cwd: Path) -> bool:
        """Check if a cherry-pick is stopped waiting for conflict resolution."""
        ...

    @abstractmethod
    def get_remote_url(self, repo_root: Path, remote: str) -> str | None:
        """Fetch URL of a remote, or None if the remote is not configured."""
        ...

    # Mutations

    @abstractmethod
    def checkout_branch(self, cwd: Path, branch: str) -> None:
        """Checkout a branch."""
        ...

    @abstractmethod
    def checkout_detached(self, cwd: Path, ref: str) -> None:
        """Checkout a detached HEAD at the given ref."""
        ...

    @abstractmethod
    def cherry_pick(self, cwd: Path, sha: str) -> CherryPickConflict | None:
        """Apply a commit on top of HEAD.

        Returns:
            None on success (a commit whose changes are already on HEAD is
            skipped), CherryPickConflict when git stopped on conflicts

        Raises:
            RuntimeError: If the cherry-pick failed for any other reason
        """
        ...

    @abstractmethod
    def continue_cherry_pick(self, cwd: Path) -> CherryPickConflict | None:
        """Commit a cherry-pick whose conflicts were resolved.

        Returns:
            None when the commit was created, CherryPickConflict when
            conflicts remain unresolved
        """
        ...

    @abstractmethod
    def abort_cherry_pick(self, cwd: Path) -> None:
        """Abandon the in-progress cherry-pick."""
        ...

    @abstractmethod
    def set_branch(self, repo_root: Path, branch: str, sha: str) -> None:
        """Point a branch at a commit, creating or moving it."""
        ...

    @abstractmethod
    def push_branches(
        self, repo_root: Path, remote: str, branches: list[str], *, force: bool
    ) -> None:
        """Push branches to the remote in a single atomic push.

        Either every ref is updated on the remote or none is.

        Raises:
            RuntimeError: If the push was rejected
        """
        ...

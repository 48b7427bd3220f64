"""No-op wrapper for git operations."""

from pathlib import Path

from prstack.core.git.abc import CherryPickConflict, Git
from prstack.core.types import Commit


class DryRunGit(Git):
    """No-op wrapper for git operations.

    Read operations are delegated to the wrapped implementation.
    Write operations return without executing (no-op behavior).
    """

    def __init__(self, wrapped: Git) -> None:
        self._wrapped = wrapped

    def get_repository_root(self, cwd: Path) -> Path | None:
        return self._wrapped.get_repository_root(cwd)

    def get_git_dir(self, cwd: Path) -> Path | None:
        return self._wrapped.get_git_dir(cwd)

    def get_current_branch(self, cwd: Path) -> str | None:
        return self._wrapped.get_current_branch(cwd)

    def get_trunk_branch(self, repo_root: Path, remote: str) -> str:
        return self._wrapped.get_trunk_branch(repo_root, remote)

    def get_branch_head(self, repo_root: Path, branch: str) -> str | None:
        return self._wrapped.get_branch_head(repo_root, branch)

    def get_head_commit(self, cwd: Path) -> str:
        return self._wrapped.get_head_commit(cwd)

    def list_local_branches(self, repo_root: Path) -> list[str]:
        return self._wrapped.list_local_branches(repo_root)

    def commits_between(self, repo_root: Path, base: str, head: str) -> list[Commit]:
        return self._wrapped.commits_between(repo_root, base, head)

    def has_uncommitted_changes(self, cwd: Path) -> bool:
        return self._wrapped.has_uncommitted_changes(cwd)

    def is_cherry_pick_in_progress(self, cwd: Path) -> bool:
        return self._wrapped.is_cherry_pick_in_progress(cwd)

    def get_remote_url(self, repo_root: Path, remote: str) -> str | None:
        return self._wrapped.get_remote_url(repo_root, remote)

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        """No-op for checkout in dry-run mode."""
        pass

    def checkout_detached(self, cwd: Path, ref: str) -> None:
        """No-op for detached checkout in dry-run mode."""
        pass

    def cherry_pick(self, cwd: Path, sha: str) -> CherryPickConflict | None:
        """No-op for cherry-pick in dry-run mode; reports success."""
        return None

    def continue_cherry_pick(self, cwd: Path) -> CherryPickConflict | None:
        return None

    def abort_cherry_pick(self, cwd: Path) -> None:
        pass

    def set_branch(self, repo_root: Path, branch: str, sha: str) -> None:
        pass

    def push_branches(
        self, repo_root: Path, remote: str, branches: list[str], *, force: bool
    ) -> None:
        pass

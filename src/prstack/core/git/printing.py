"""Printing Git wrapper for verbose output."""

from pathlib import Path

from prstack.core.git.abc import CherryPickConflict, Git
from prstack.core.printing import PrintingBase
from prstack.core.types import Commit


class PrintingGit(PrintingBase, Git):
    """Wrapper that prints operations before delegating to inner implementation.

    Usage:
        # For production
        printing_ops = PrintingGit(real_ops)

        # For dry-run
        printing_ops = PrintingGit(DryRunGit(real_ops), dry_run=True)
    """

    # Read-only operations: delegate without printing

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

    # Operations that change state: print, then delegate

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        self._emit(self._format_command(f"git checkout {branch}"))
        self._wrapped.checkout_branch(cwd, branch)

    def checkout_detached(self, cwd: Path, ref: str) -> None:
        self._emit(self._format_command(f"git checkout --detach {ref}"))
        self._wrapped.checkout_detached(cwd, ref)

    def cherry_pick(self, cwd: Path, sha: str) -> CherryPickConflict | None:
        self._emit(self._format_command(f"git cherry-pick {sha[:8]}"))
        return self._wrapped.cherry_pick(cwd, sha)

    def continue_cherry_pick(self, cwd: Path) -> CherryPickConflict | None:
        self._emit(self._format_command("git cherry-pick --continue"))
        return self._wrapped.continue_cherry_pick(cwd)

    def abort_cherry_pick(self, cwd: Path) -> None:
        self._emit(self._format_command("git cherry-pick --abort"))
        self._wrapped.abort_cherry_pick(cwd)

    def set_branch(self, repo_root: Path, branch: str, sha: str) -> None:
        self._emit(self._format_command(f"git branch --force {branch} {sha[:8]}"))
        self._wrapped.set_branch(repo_root, branch, sha)

    def push_branches(
        self, repo_root: Path, remote: str, branches: list[str], *, force: bool
    ) -> None:
        flags = "--atomic --force" if force else "--atomic"
        self._emit(self._format_command(f"git push {flags} {remote} {' '.join(branches)}"))
        self._wrapped.push_branches(repo_root, remote, branches, force=force)

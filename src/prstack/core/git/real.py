"""Production Git implementation using subprocess."""

import logging
import subprocess
from datetime import datetime
from pathlib import Path

from prstack.core.git.abc import CherryPickConflict, Git
from prstack.core.subprocess import run_subprocess_with_context
from prstack.core.types import Commit

logger = logging.getLogger(__name__)

# Fields of `git log` output are separated by NUL; records by newline.
_LOG_FORMAT = "--format=%H%x00%s%x00%aI"


class RealGit(Git):
    """Production implementation using subprocess.

    All git operations execute actual git commands via subprocess.
    """

    def get_repository_root(self, cwd: Path) -> Path | None:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return Path(result.stdout.strip())

    def get_git_dir(self, cwd: Path) -> Path | None:
        result = subprocess.run(
            ["git", "rev-parse", "--git-dir"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None

        git_dir = Path(result.stdout.strip())
        if not git_dir.is_absolute():
            git_dir = cwd / git_dir
        return git_dir.resolve()

    def get_current_branch(self, cwd: Path) -> str | None:
        result = subprocess.run(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None

        branch = result.stdout.strip()
        if branch == "HEAD":
            return None
        return branch

    def get_trunk_branch(self, repo_root: Path, remote: str) -> str:
        """Get the trunk branch name for the repository.

        Checks the remote's HEAD reference first, then falls back to the first
        existing local branch among main and master, then to main.
        """
        prefix = f"refs/remotes/{remote}/"
        result = subprocess.run(
            ["git", "symbolic-ref", f"{prefix}HEAD"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode == 0:
            ref = result.stdout.strip()
            if ref.startswith(prefix):
                return ref.removeprefix(prefix)

        for candidate in ["main", "master"]:
            result = subprocess.run(
                ["git", "show-ref", "--verify", f"refs/heads/{candidate}"],
                cwd=repo_root,
                capture_output=True,
                check=False,
            )
            if result.returncode == 0:
                return candidate

        return "main"

    def get_branch_head(self, repo_root: Path, branch: str) -> str | None:
        result = subprocess.run(
            ["git", "rev-parse", "--verify", "--quiet", f"{branch}^{{commit}}"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def get_head_commit(self, cwd: Path) -> str:
        result = run_subprocess_with_context(
            ["git", "rev-parse", "HEAD"],
            operation_context="read HEAD commit",
            cwd=cwd,
        )
        return result.stdout.strip()

    def list_local_branches(self, repo_root: Path) -> list[str]:
        result = run_subprocess_with_context(
            ["git", "branch", "--format=%(refname:short)"],
            operation_context="list local branches",
            cwd=repo_root,
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def commits_between(self, repo_root: Path, base: str, head: str) -> list[Commit]:
        result = run_subprocess_with_context(
            ["git", "log", "--reverse", _LOG_FORMAT, f"{base}..{head}"],
            operation_context=f"list commits in {base}..{head}",
            cwd=repo_root,
        )
        commits: list[Commit] = []
        for line in result.stdout.splitlines():
            if not line:
                continue
            sha, message, authored = line.split("\x00", 2)
            commits.append(
                Commit(sha=sha, message=message, authored_at=datetime.fromisoformat(authored))
            )
        return commits

    def has_uncommitted_changes(self, cwd: Path) -> bool:
        result = run_subprocess_with_context(
            ["git", "status", "--porcelain", "--untracked-files=no"],
            operation_context="check working tree status",
            cwd=cwd,
        )
        return bool(result.stdout.strip())

    def is_cherry_pick_in_progress(self, cwd: Path) -> bool:
        git_dir = self.get_git_dir(cwd)
        if git_dir is None:
            return False
        return (git_dir / "CHERRY_PICK_HEAD").exists()

    def get_remote_url(self, repo_root: Path, remote: str) -> str | None:
        result = subprocess.run(
            ["git", "remote", "get-url", remote],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        run_subprocess_with_context(
            ["git", "checkout", branch],
            operation_context=f"checkout branch '{branch}'",
            cwd=cwd,
        )

    def checkout_detached(self, cwd: Path, ref: str) -> None:
        run_subprocess_with_context(
            ["git", "checkout", "--detach", ref],
            operation_context=f"checkout detached HEAD at '{ref}'",
            cwd=cwd,
        )

    def _conflicted_paths(self, cwd: Path) -> list[str]:
        result = run_subprocess_with_context(
            ["git", "diff", "--name-only", "--diff-filter=U"],
            operation_context="list conflicted files",
            cwd=cwd,
        )
        return [line for line in result.stdout.splitlines() if line]

    def _has_staged_changes(self, cwd: Path) -> bool:
        result = subprocess.run(
            ["git", "diff", "--cached", "--quiet"],
            cwd=cwd,
            capture_output=True,
            check=False,
        )
        return result.returncode != 0

    def _skip_empty_pick(self, cwd: Path, sha: str) -> None:
        logger.debug("Cherry-pick of %s is empty on the new base, skipping it", sha)
        run_subprocess_with_context(
            ["git", "cherry-pick", "--skip"],
            operation_context=f"skip empty cherry-pick of {sha}",
            cwd=cwd,
        )

    def cherry_pick(self, cwd: Path, sha: str) -> CherryPickConflict | None:
        result = run_subprocess_with_context(
            ["git", "cherry-pick", "--allow-empty", sha],
            operation_context=f"cherry-pick {sha}",
            cwd=cwd,
            check=False,
        )
        if result.returncode == 0:
            return None

        paths = self._conflicted_paths(cwd)
        if paths:
            return CherryPickConflict(sha=sha, conflicted_paths=paths)

        # Trunk already has the change: git stops with nothing to commit.
        if self.is_cherry_pick_in_progress(cwd) and not self._has_staged_changes(cwd):
            self._skip_empty_pick(cwd, sha)
            return None

        raise RuntimeError(
            f"Failed to cherry-pick {sha}\n"
            f"Exit code: {result.returncode}\n"
            f"stderr: {result.stderr.strip()}"
        )

    def continue_cherry_pick(self, cwd: Path) -> CherryPickConflict | None:
        paths = self._conflicted_paths(cwd)
        if paths:
            sha = self._cherry_pick_head(cwd)
            return CherryPickConflict(sha=sha, conflicted_paths=paths)

        if not self._has_staged_changes(cwd):
            self._skip_empty_pick(cwd, self._cherry_pick_head(cwd))
            return None

        run_subprocess_with_context(
            ["git", "-c", "core.editor=true", "cherry-pick", "--continue"],
            operation_context="continue cherry-pick",
            cwd=cwd,
        )
        return None

    def _cherry_pick_head(self, cwd: Path) -> str:
        result = subprocess.run(
            ["git", "rev-parse", "CHERRY_PICK_HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        return result.stdout.strip()

    def abort_cherry_pick(self, cwd: Path) -> None:
        run_subprocess_with_context(
            ["git", "cherry-pick", "--abort"],
            operation_context="abort cherry-pick",
            cwd=cwd,
        )

    def set_branch(self, repo_root: Path, branch: str, sha: str) -> None:
        run_subprocess_with_context(
            ["git", "branch", "--force", branch, sha],
            operation_context=f"move branch '{branch}' to {sha[:8]}",
            cwd=repo_root,
        )

    def push_branches(
        self, repo_root: Path, remote: str, branches: list[str], *, force: bool
    ) -> None:
        cmd = ["git", "push", "--atomic"]
        if force:
            cmd.append("--force")
        cmd.append(remote)
        cmd.extend(f"refs/heads/{branch}:refs/heads/{branch}" for branch in branches)
        run_subprocess_with_context(
            cmd,
            operation_context=f"push {len(branches)} branch(es) to '{remote}'",
            cwd=repo_root,
        )

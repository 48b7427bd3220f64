"""Fake git operations for testing.

FakeGit is an in-memory implementation that accepts pre-configured state in its
constructor. History is a simple parent map with one parent per commit, which is
all a linear stack needs.
"""

import hashlib
from pathlib import Path

from prstack.core.git.abc import CherryPickConflict, Git
from prstack.core.types import Commit


def picked_sha(onto: str, sha: str) -> str:
    """SHA a cherry-pick of `sha` onto `onto` produces in FakeGit.

    Deterministic so a resumed rebase ends with exactly the same heads as an
    uninterrupted one.
    """
    return hashlib.sha1(f"{onto}:{sha}".encode()).hexdigest()[:12]


class FakeGit(Git):
    """In-memory fake implementation of git operations.

    This class has NO public setup methods. All state is provided via constructor
    using keyword arguments with sensible defaults.
    """

    def __init__(
        self,
        *,
        repo_root: Path = Path("/repo"),
        git_dir: Path | None = None,
        branches: dict[str, str] | None = None,
        commits: list[tuple[str, str | None, str]] | None = None,
        current_branch: str | None = None,
        trunk_branch: str = "main",
        remotes: dict[str, str] | None = None,
        dirty: bool = False,
        conflicting_shas: dict[str, list[str]] | None = None,
        unresolvable_shas: set[str] | None = None,
        empty_shas: set[str] | None = None,
        cherry_pick_errors: dict[str, str] | None = None,
        set_branch_errors: dict[str, str] | None = None,
        push_error: str | None = None,
    ) -> None:
        """Create FakeGit with pre-configured state.

        Args:
            repo_root: Repository root returned for any cwd
            git_dir: .git directory (defaults to repo_root / ".git")
            branches: Mapping of branch name -> commit sha
            commits: (sha, parent_sha, subject) triples describing history
            current_branch: Checked-out branch (None for detached HEAD)
            trunk_branch: Value returned from get_trunk_branch
            remotes: Mapping of remote name -> URL
            dirty: Whether the working tree has uncommitted changes
            conflicting_shas: Mapping of sha -> conflicted paths. Cherry-picking
                one of these stops with a conflict
            unresolvable_shas: Conflicting shas whose conflicts stay unresolved
                when the cherry-pick is continued
            empty_shas: Shas whose changes are already on HEAD. Cherry-picking
                one of these is skipped and leaves HEAD where it is
            cherry_pick_errors: Mapping of sha -> error text. Cherry-picking one
                of these raises RuntimeError without a conflict
            set_branch_errors: Mapping of branch -> error text raised by set_branch
            push_error: If set, push_branches raises RuntimeError with this text
        """
        self._repo_root = repo_root
        self._git_dir = git_dir if git_dir is not None else repo_root / ".git"
        self._branches = dict(branches or {})
        self._parents: dict[str, str | None] = {}
        self._messages: dict[str, str] = {}
        for sha, parent, message in commits or []:
            self._parents[sha] = parent
            self._messages[sha] = message
        self._current_branch = current_branch
        self._head: str | None = (
            self._branches.get(current_branch) if current_branch is not None else None
        )
        self._trunk_branch = trunk_branch
        self._remotes = remotes or {}
        self._dirty = dirty
        self._conflicting_shas = conflicting_shas or {}
        self._unresolvable_shas = unresolvable_shas or set()
        self._empty_shas = empty_shas or set()
        self._cherry_pick_errors = cherry_pick_errors or {}
        self._set_branch_errors = set_branch_errors or {}
        self._push_error = push_error
        self._pending_pick: str | None = None

        self._checked_out: list[str] = []
        self._cherry_picked: list[str] = []
        self._skipped_empty: list[str] = []
        self._aborted_cherry_picks = 0
        self._set_branches: list[tuple[str, str]] = []
        self._pushed: list[tuple[str, list[str], bool]] = []

    # Mutation tracking for test assertions

    @property
    def branches(self) -> dict[str, str]:
        """Current branch -> sha mapping."""
        return self._branches

    @property
    def checked_out(self) -> list[str]:
        """Refs passed to checkout_branch or checkout_detached, in order."""
        return self._checked_out

    @property
    def cherry_picked(self) -> list[str]:
        """Source shas applied successfully, in order."""
        return self._cherry_picked

    @property
    def skipped_empty(self) -> list[str]:
        """Source shas skipped because they were empty on HEAD."""
        return self._skipped_empty

    @property
    def aborted_cherry_picks(self) -> int:
        return self._aborted_cherry_picks

    @property
    def set_branches(self) -> list[tuple[str, str]]:
        """(branch, sha) pairs passed to set_branch."""
        return self._set_branches

    @property
    def pushed(self) -> list[tuple[str, list[str], bool]]:
        """(remote, branches, force) for every successful push."""
        return self._pushed

    @property
    def current_branch(self) -> str | None:
        return self._current_branch

    def message_for(self, sha: str) -> str | None:
        """Subject of a commit, including commits created by cherry-picks."""
        return self._messages.get(sha)

    # Queries

    def get_repository_root(self, cwd: Path) -> Path | None:
        return self._repo_root

    def get_git_dir(self, cwd: Path) -> Path | None:
        return self._git_dir

    def get_current_branch(self, cwd: Path) -> str | None:
        return self._current_branch

    def get_trunk_branch(self, repo_root: Path, remote: str) -> str:
        return self._trunk_branch

    def get_branch_head(self, repo_root: Path, branch: str) -> str | None:
        return self._branches.get(branch)

    def get_head_commit(self, cwd: Path) -> str:
        if self._head is None:
            raise RuntimeError("Failed to read HEAD commit")
        return self._head

    def list_local_branches(self, repo_root: Path) -> list[str]:
        return sorted(self._branches)

    def _resolve(self, ref: str) -> str:
        if ref in self._branches:
            return self._branches[ref]
        if ref in self._parents:
            return ref
        raise RuntimeError(f"Failed to resolve ref '{ref}'")

    def _ancestors(self, sha: str | None) -> list[str]:
        chain: list[str] = []
        while sha is not None:
            chain.append(sha)
            sha = self._parents.get(sha)
        return chain

    def commits_between(self, repo_root: Path, base: str, head: str) -> list[Commit]:
        excluded = set(self._ancestors(self._resolve(base)))
        picked = [sha for sha in self._ancestors(self._resolve(head)) if sha not in excluded]
        picked.reverse()
        return [Commit(sha=sha, message=self._messages.get(sha, "")) for sha in picked]

    def has_uncommitted_changes(self, cwd: Path) -> bool:
        return self._dirty

    def is_cherry_pick_in_progress(self, cwd: Path) -> bool:
        return self._pending_pick is not None

    def get_remote_url(self, repo_root: Path, remote: str) -> str | None:
        return self._remotes.get(remote)

    # Mutations

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        if branch not in self._branches:
            raise RuntimeError(f"Failed to checkout branch '{branch}'")
        self._checked_out.append(branch)
        self._current_branch = branch
        self._head = self._branches[branch]

    def checkout_detached(self, cwd: Path, ref: str) -> None:
        self._checked_out.append(ref)
        self._head = self._resolve(ref)
        self._current_branch = None

    def _apply(self, sha: str) -> None:
        assert self._head is not None
        new_sha = picked_sha(self._head, sha)
        self._parents[new_sha] = self._head
        self._messages[new_sha] = self._messages.get(sha, "")
        self._head = new_sha
        self._cherry_picked.append(sha)

    def cherry_pick(self, cwd: Path, sha: str) -> CherryPickConflict | None:
        if self._pending_pick is not None:
            raise RuntimeError("Failed to cherry-pick: a cherry-pick is already in progress")
        if sha in self._conflicting_shas:
            self._pending_pick = sha
            return CherryPickConflict(sha=sha, conflicted_paths=self._conflicting_shas[sha])
        if sha in self._cherry_pick_errors:
            raise RuntimeError(self._cherry_pick_errors[sha])
        if sha in self._empty_shas:
            self._skipped_empty.append(sha)
            return None
        self._apply(sha)
        return None

    def continue_cherry_pick(self, cwd: Path) -> CherryPickConflict | None:
        sha = self._pending_pick
        if sha is None:
            raise RuntimeError("Failed to continue cherry-pick: no cherry-pick in progress")
        if sha in self._unresolvable_shas:
            return CherryPickConflict(sha=sha, conflicted_paths=self._conflicting_shas[sha])
        self._pending_pick = None
        self._apply(sha)
        return None

    def abort_cherry_pick(self, cwd: Path) -> None:
        self._pending_pick = None
        self._aborted_cherry_picks += 1

    def set_branch(self, repo_root: Path, branch: str, sha: str) -> None:
        if self._current_branch == branch:
            raise RuntimeError(f"Failed to move branch '{branch}': it is checked out")
        if branch in self._set_branch_errors:
            raise RuntimeError(self._set_branch_errors[branch])
        self._branches[branch] = sha
        self._set_branches.append((branch, sha))

    def push_branches(
        self, repo_root: Path, remote: str, branches: list[str], *, force: bool
    ) -> None:
        if self._push_error is not None:
            raise RuntimeError(self._push_error)
        self._pushed.append((remote, list(branches), force))

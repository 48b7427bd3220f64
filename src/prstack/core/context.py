"""Application context with dependency injection."""

import os
from dataclasses import dataclass, replace
from pathlib import Path

import click

from prstack.cli.output import user_output
from prstack.core.git.abc import Git
from prstack.core.git.dry_run import DryRunGit
from prstack.core.git.printing import PrintingGit
from prstack.core.git.real import RealGit
from prstack.core.github.abc import GitHub
from prstack.core.github.dry_run import DryRunGitHub
from prstack.core.github.printing import PrintingGitHub
from prstack.core.github.real import RealGitHub
from prstack.core.global_config import (
    ConfigStore,
    FilesystemConfigStore,
    GlobalConfig,
    InMemoryConfigStore,
)
from prstack.core.legend import FilesystemLegendTracker, InMemoryLegendTracker, LegendTracker
from prstack.core.rebase_state import (
    FileRebaseStateStore,
    InMemoryRebaseStateStore,
    RebaseStateStore,
)
from prstack.core.repository import REPOSITORY_ENV_VAR


@dataclass(frozen=True)
class StackContext:
    """Immutable context holding all dependencies for prstack commands.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.
    """

    git: Git
    github: GitHub
    config_store: ConfigStore
    global_config: GlobalConfig
    legend: LegendTracker
    rebase_state_store: RebaseStateStore
    cwd: Path  # Current working directory at CLI invocation
    repository_env: str | None  # Value of PRSTACK_TARGET_REPOSITORY
    dry_run: bool

    def with_cwd(self, cwd: Path) -> "StackContext":
        return replace(self, cwd=cwd)

    def with_printing(self) -> "StackContext":
        """Copy whose gateways echo each mutation before performing it."""
        return replace(self, git=PrintingGit(self.git), github=PrintingGitHub(self.github))

    def as_dry_run(self) -> "StackContext":
        """Copy whose gateways print mutations instead of performing them."""
        return replace(
            self,
            git=PrintingGit(DryRunGit(self.git), dry_run=True),
            github=PrintingGitHub(DryRunGitHub(self.github), dry_run=True),
            dry_run=True,
        )

    @staticmethod
    def for_test(
        git: Git | None = None,
        github: GitHub | None = None,
        config_store: ConfigStore | None = None,
        global_config: GlobalConfig | None = None,
        legend: LegendTracker | None = None,
        rebase_state_store: RebaseStateStore | None = None,
        cwd: Path | None = None,
        repository_env: str | None = None,
        dry_run: bool = False,
    ) -> "StackContext":
        """Create test context with optional pre-configured integration classes.

        Unspecified dependencies default to empty in-memory fakes. The global
        config defaults to repository "owner/repo" so commands do not need a
        git remote.

        Example:
            >>> github = FakeGitHub(pull_requests=[...])
            >>> ctx = StackContext.for_test(github=github)
        """
        from prstack.core.git.fake import FakeGit
        from prstack.core.github.fake import FakeGitHub

        if global_config is None:
            global_config = GlobalConfig(repository="owner/repo")

        return StackContext(
            git=git if git is not None else FakeGit(),
            github=github if github is not None else FakeGitHub(),
            config_store=(
                config_store if config_store is not None else InMemoryConfigStore(global_config)
            ),
            global_config=global_config,
            legend=legend if legend is not None else InMemoryLegendTracker(seen=True),
            rebase_state_store=(
                rebase_state_store
                if rebase_state_store is not None
                else InMemoryRebaseStateStore()
            ),
            cwd=cwd if cwd is not None else Path("/repo"),
            repository_env=repository_env,
            dry_run=dry_run,
        )


def create_context() -> StackContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire command
    execution. Commands that support --dry-run derive a wrapped copy with
    StackContext.as_dry_run().
    """
    try:
        cwd = Path.cwd()
    except FileNotFoundError:
        user_output(click.style("Error: ", fg="red") + "Current working directory no longer exists")
        raise SystemExit(1) from None

    config_store = FilesystemConfigStore()
    try:
        global_config = config_store.load_or_default()
    except ValueError as e:
        user_output(click.style("Error: ", fg="red") + str(e))
        raise SystemExit(1) from None

    return StackContext(
        git=RealGit(),
        github=RealGitHub(),
        config_store=config_store,
        global_config=global_config,
        legend=FilesystemLegendTracker(),
        rebase_state_store=FileRebaseStateStore(),
        cwd=cwd,
        repository_env=os.environ.get(REPOSITORY_ENV_VAR) or None,
        dry_run=False,
    )

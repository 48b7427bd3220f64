"""Options and setup shared by the stack commands."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click

from prstack.cli.ensure import fail, user_errors
from prstack.core.chain import ChainError
from prstack.core.context import StackContext
from prstack.core.repository import RepositoryNotFoundError, resolve_repository
from prstack.core.stack_source import load_chain_by_identifier, load_chain_for_branch
from prstack.core.types import Chain

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StackTarget:
    """Where a command operates: local checkout, GitHub repository and trunk."""

    repo_root: Path | None
    repository: str
    remote: str
    trunk: str


def stack_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add the options every stack command accepts."""
    options = [
        click.option(
            "-C",
            "--project",
            type=click.Path(exists=True, file_okay=False, path_type=Path),
            default=None,
            help="Run as if started in this directory.",
        ),
        click.option(
            "-r",
            "--repository",
            default=None,
            help="Target GitHub repository as owner/name.",
        ),
        click.option(
            "-o",
            "--origin",
            "remote",
            default=None,
            help="Git remote used to detect the repository and to push (default: origin).",
        ),
        click.option(
            "-e",
            "--excl",
            "excluded",
            type=int,
            multiple=True,
            help="Exclude a pull request number from the stack. Repeatable.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def resolve_target(
    ctx: StackContext,
    *,
    project: Path | None,
    repository: str | None,
    remote: str | None,
) -> tuple[StackContext, StackTarget]:
    """Apply -C and work out the repository, remote and trunk.

    Returns the context re-rooted at the project directory alongside the target.
    """
    if project is not None:
        ctx = ctx.with_cwd(project)

    config = ctx.global_config
    remote_name = remote or config.remote
    repo_root = ctx.git.get_repository_root(ctx.cwd)

    with user_errors(RepositoryNotFoundError):
        resolved = resolve_repository(
            flag=repository,
            env_value=ctx.repository_env,
            configured=config.repository,
            git=ctx.git,
            repo_root=repo_root,
            remote=remote_name,
        )

    if config.trunk is not None:
        trunk = config.trunk
    elif repo_root is not None:
        trunk = ctx.git.get_trunk_branch(repo_root, remote_name)
    else:
        trunk = "main"

    target = StackTarget(
        repo_root=repo_root, repository=resolved, remote=remote_name, trunk=trunk
    )
    logger.debug("Target: %s", target)
    return ctx, target


def load_chain(
    ctx: StackContext,
    target: StackTarget,
    identifier: str | None,
    excluded: tuple[int, ...],
    *,
    current_branch: str | None,
) -> Chain:
    """Load the stack named by `identifier`, or the one containing current_branch.

    Exits with a styled error when nothing matches or the pull requests do not
    form a linear stack.
    """
    with user_errors(ChainError, RuntimeError):
        if identifier is not None:
            chain = load_chain_by_identifier(
                ctx.github, target.repository, identifier, target.trunk, excluded
            )
            if chain is None:
                raise fail(f"No pull requests found matching '{identifier}'")
            return chain

        if current_branch is None or current_branch == target.trunk:
            raise fail(
                "No stack identifier given and the current branch is not part of a stack",
                hint="Pass the text shared by the stack's PR titles, e.g. a ticket key",
            )

        chain = load_chain_for_branch(
            ctx.github, target.repository, current_branch, target.trunk, excluded
        )
        if chain is None:
            raise fail(f"Branch '{current_branch}' has no open pull request")
        return chain

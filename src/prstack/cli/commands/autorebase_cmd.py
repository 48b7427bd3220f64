"""Rebuild a stack on top of trunk by cherry-picking each branch's commits."""

import logging
from pathlib import Path

import click

from prstack.cli.common import load_chain, resolve_target, stack_options
from prstack.cli.ensure import Ensure, fail, user_errors
from prstack.cli.output import user_output
from prstack.core.context import StackContext
from prstack.core.rebase import (
    RebaseCompleted,
    RebaseError,
    RebasePaused,
    RebasePublishFailed,
    abort_rebase,
    autorebase,
)

logger = logging.getLogger(__name__)


@click.command("autorebase")
@click.argument("identifier", required=False)
@click.option(
    "-b",
    "--initial-cherry-pick-boundary",
    "boundary",
    default=None,
    help="Commit (exclusive) where the bottom branch's own commits start.",
)
@click.option("--abort", "abort", is_flag=True, help="Abandon a paused rebase.")
@stack_options
@click.pass_obj
def autorebase_cmd(
    ctx: StackContext,
    identifier: str | None,
    boundary: str | None,
    abort: bool,
    project: Path | None,
    repository: str | None,
    remote: str | None,
    excluded: tuple[int, ...],
) -> None:
    """Rebase every branch of the stack onto the latest trunk and force-push them.

    Commits are replayed one at a time. When one conflicts the command stops;
    resolve the conflict, stage the files and run the same command again to
    continue. All branches are pushed together in one atomic push at the end.
    """
    ctx, target = resolve_target(ctx, project=project, repository=repository, remote=remote)
    repo_root = Ensure.not_none(target.repo_root, f"Not inside a git repository: {ctx.cwd}")
    git_dir = Ensure.not_none(ctx.git.get_git_dir(repo_root), "Could not locate the .git directory")

    if abort:
        with user_errors(RebaseError, RuntimeError):
            aborted = abort_rebase(ctx.git, repo_root, state_store=ctx.rebase_state_store)
        if not aborted:
            raise fail("No rebase in progress")
        user_output(click.style("✓", fg="green") + " Rebase aborted")
        return

    ctx = ctx.with_printing()
    current_branch = ctx.git.get_current_branch(repo_root)
    saved = ctx.rebase_state_store.load(git_dir)
    if saved is not None and identifier is None:
        # Resuming leaves HEAD detached; locate the stack from where it started
        current_branch = saved.original_branch or saved.branches[-1]
        logger.debug("Resuming rebase started from %s", current_branch)

    chain = load_chain(ctx, target, identifier, excluded, current_branch=current_branch)

    with user_errors(RebaseError, RuntimeError):
        outcome = autorebase(
            chain,
            ctx.git,
            repo_root,
            state_store=ctx.rebase_state_store,
            remote=target.remote,
            boundary=boundary,
        )

    match outcome:
        case RebasePaused(node=node, commit=commit, conflicted_paths=paths):
            user_output(
                click.style("Conflict ", fg="red")
                + f"replaying {commit.sha[:12]} ({commit.message}) onto #{node.id} {node.branch}"
            )
            for path in paths:
                user_output(f"  both modified: {path}")
            user_output()
            user_output("Resolve the conflicts, `git add` the files, then run this command again.")
            user_output("To give up, run it with --abort.")
            raise SystemExit(1)
        case RebasePublishFailed(error=error):
            raise fail(
                f"Branches were rebuilt locally but the push was rejected:\n{error}",
                hint=f"Nothing on '{target.remote}' changed; push the branches again when ready",
            )
        case RebaseCompleted(new_heads=new_heads):
            for branch in chain.branches:
                user_output(f"  {branch} -> {new_heads[branch][:12]}")
            summary = f"Rebased {len(chain)} branch(es) onto {chain.trunk}"
            summary += f" and pushed to {target.remote}"
            user_output(click.style("✓", fg="green") + f" {summary}")

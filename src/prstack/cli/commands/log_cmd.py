"""Show the pull requests that make up a stack."""

import logging
from pathlib import Path

import click

from prstack.cli.common import StackTarget, load_chain, resolve_target, stack_options
from prstack.cli.ensure import user_errors
from prstack.cli.output import user_output
from prstack.cli.rendering import (
    MAX_LOG_COMMITS,
    LogEntry,
    RenderOptions,
    format_log_line,
    render_log,
)
from prstack.core.chain import group_stacks
from prstack.core.context import StackContext
from prstack.core.github.types import PRState
from prstack.core.types import Chain, Node

logger = logging.getLogger(__name__)


def _list_stacks(ctx: StackContext, target: StackTarget) -> None:
    with user_errors(RuntimeError):
        pull_requests = ctx.github.list_open_pull_requests(target.repository)

    groups = group_stacks((pr.to_node() for pr in pull_requests), target.trunk)
    if not groups.chains and not groups.errors:
        user_output(f"No stacks found on '{target.trunk}' in {target.repository}")
        return

    user_output(click.style(f"Stacks on {target.trunk}:", bold=True))
    for chain in groups.chains:
        ids = " -> ".join(f"#{node_id}" for node_id in chain.ids)
        user_output(f"  {chain.top.branch} ({len(chain)} PRs): {ids}")

    for error in groups.errors:
        user_output(click.style("  Warning: ", fg="yellow") + str(error))


def _entry(
    ctx: StackContext,
    repo_root: Path | None,
    node: Node,
    local_branches: set[str],
    state: PRState = "OPEN",
) -> LogEntry:
    """Log entry for a node, with local commits when both refs exist here."""
    if repo_root is None or node.branch not in local_branches or node.base not in local_branches:
        return LogEntry(node=node, state=state)

    # Newest first, like `git log`
    commits = list(reversed(ctx.git.commits_between(repo_root, node.base, node.branch)))
    return LogEntry(
        node=node,
        state=state,
        commits=tuple(commits[:MAX_LOG_COMMITS]),
        extra_commits=max(len(commits) - MAX_LOG_COMMITS, 0),
    )


def _closed_entries(
    ctx: StackContext,
    target: StackTarget,
    chain: Chain,
    identifier: str | None,
    local_branches: set[str],
) -> list[LogEntry]:
    """Closed or merged pull requests of this stack whose branch still exists locally.

    A closed pull request belongs to the stack when it merged into trunk or into
    one of the stack's branches, and, given an identifier, its title matches it.
    """
    bases = {chain.trunk, *chain.branches}
    entries: list[LogEntry] = []
    with user_errors(RuntimeError):
        closed = ctx.github.list_closed_pull_requests(target.repository)
        for pr in sorted(closed, key=lambda pr: pr.number, reverse=True):
            if pr.base_branch not in bases or pr.head_branch in chain.branches:
                continue
            if pr.head_branch not in local_branches:
                continue
            if identifier is not None and identifier.lower() not in pr.title.lower():
                continue
            entries.append(
                _entry(ctx, target.repo_root, pr.to_node(), local_branches, state=pr.state)
            )
    logger.debug("Including %d closed pull request(s)", len(entries))
    return entries


@click.command("log")
@click.argument("identifier", required=False)
@click.option("-s", "--short", is_flag=True, help="One line per pull request.")
@click.option(
    "--include-closed",
    is_flag=True,
    help="Also show local branches whose pull requests are closed or merged.",
)
@click.option("--no-color", is_flag=True, help="Disable colored output.")
@stack_options
@click.pass_obj
def log_cmd(
    ctx: StackContext,
    identifier: str | None,
    short: bool,
    include_closed: bool,
    no_color: bool,
    project: Path | None,
    repository: str | None,
    remote: str | None,
    excluded: tuple[int, ...],
) -> None:
    """Show the stack matching IDENTIFIER, top first.

    Without IDENTIFIER the stack containing the current branch is shown. On
    trunk, every stack of open pull requests is listed instead. Branches that
    exist locally also show their newest commits.
    """
    ctx, target = resolve_target(ctx, project=project, repository=repository, remote=remote)
    repo_root = target.repo_root
    current_branch = ctx.git.get_current_branch(ctx.cwd) if repo_root else None
    logger.debug("log: identifier=%s current_branch=%s", identifier, current_branch)

    if identifier is None and (current_branch is None or current_branch == target.trunk):
        _list_stacks(ctx, target)
        return

    chain = load_chain(ctx, target, identifier, excluded, current_branch=current_branch)

    local_branches: set[str] = set()
    if repo_root is not None:
        with user_errors(RuntimeError):
            local_branches = set(ctx.git.list_local_branches(repo_root))

    with user_errors(RuntimeError):
        entries = [
            _entry(ctx, repo_root, node, local_branches) for node in reversed(chain.nodes)
        ]
    if include_closed:
        entries.extend(_closed_entries(ctx, target, chain, identifier, local_branches))

    if short:
        for entry in entries:
            is_current = entry.node.branch == current_branch
            user_output(format_log_line(entry.node, is_current=is_current, state=entry.state))
        return

    options = RenderOptions(use_unicode=ctx.global_config.use_unicode, use_color=not no_color)
    user_output(
        render_log(
            entries,
            chain.trunk,
            current_branch=current_branch,
            options=options,
            has_repo=repo_root is not None,
        )
    )

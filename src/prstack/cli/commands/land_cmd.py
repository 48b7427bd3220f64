"""Land a stack: squash-merge the highest ready pull request, close the rest below."""

import logging
from pathlib import Path

import click
from rich.text import Text

from prstack.cli.common import load_chain, resolve_target, stack_options
from prstack.cli.ensure import fail, user_errors
from prstack.cli.output import print_panel, titled_panel, user_output
from prstack.core.context import StackContext
from prstack.core.land import (
    LandError,
    LandPolicy,
    LandResult,
    execute_land,
    format_land_plan,
    plan_land,
)
from prstack.core.status import collect_checks, resolve_statuses

logger = logging.getLogger(__name__)


def _format_land_summary(result: LandResult) -> list[Text]:
    plan = result.plan
    lines = [
        Text.assemble(
            ("Merged: ", "bold"), f"#{plan.frontier.id} {plan.frontier.title} into {plan.trunk}"
        ),
        Text.assemble(("URL: ", "bold"), result.merge.url),
    ]
    if result.merge.merge_commit is not None:
        lines.append(Text.assemble(("Commit: ", "bold"), result.merge.merge_commit))
    if result.closed:
        closed = ", ".join(f"#{node_id}" for node_id in result.closed)
        lines.append(Text.assemble(("Closed: ", "bold"), closed))
    for node_id, error in result.close_failures.items():
        lines.append(Text(f"Failed to close #{node_id}: {error}", style="red"))
    if plan.untouched:
        remaining = ", ".join(f"#{node.id}" for node in plan.untouched)
        lines.append(Text.assemble(("Still open: ", "bold"), remaining))
    return lines


@click.command("land")
@click.argument("identifier", required=False)
@click.option(
    "-c",
    "--count",
    type=int,
    default=None,
    help="Only consider the bottom COUNT pull requests of the stack.",
)
@click.option("--no-approval", is_flag=True, help="Land pull requests that are not approved.")
@click.option(
    "--require-stack-clear",
    is_flag=True,
    help="Also require every pull request below the landed one to be approved.",
)
@click.option("--dry-run", is_flag=True, help="Print the landing plan without changing anything.")
@click.option("--ci", is_flag=True, help="Do not ask for confirmation.")
@stack_options
@click.pass_obj
def land_cmd(
    ctx: StackContext,
    identifier: str | None,
    count: int | None,
    no_approval: bool,
    require_stack_clear: bool,
    dry_run: bool,
    ci: bool,
    project: Path | None,
    repository: str | None,
    remote: str | None,
    excluded: tuple[int, ...],
) -> None:
    """Land the stack matching IDENTIFIER (or containing the current branch).

    The highest pull request that is mergeable, not a draft and approved is
    squash-merged into trunk. Since it contains every commit below it, the
    pull requests below are then closed with a "Landed via" comment. Pull
    requests above it stay open.

    Example:
        Stack: main <- #10 <- #11 <- #12 (#12 not approved)
        Result: #11 is merged, #10 is closed, #12 stays open
    """
    ctx, target = resolve_target(ctx, project=project, repository=repository, remote=remote)
    current_branch = ctx.git.get_current_branch(ctx.cwd) if target.repo_root else None
    chain = load_chain(ctx, target, identifier, excluded, current_branch=current_branch)

    policy = LandPolicy(
        require_approval=ctx.global_config.require_approval and not no_approval,
        require_stack_clear=require_stack_clear,
    )
    logger.debug("land: chain=%s policy=%s count=%s", chain.ids, policy, count)

    checks = collect_checks(chain, lambda node: ctx.github.fetch_checks(target.repository, node.id))
    statuses = resolve_statuses(chain, checks)

    with user_errors(LandError):
        plan = plan_land(chain, statuses, count=count, policy=policy)

    user_output(format_land_plan(plan))
    user_output()

    if dry_run:
        user_output(click.style("Dry run: no pull requests were changed", fg="yellow"))
        return

    if not ci and not click.confirm("Proceed with landing?", default=False):
        user_output("Aborted.")
        return

    ctx = ctx.with_printing()
    with user_errors(LandError):
        result = execute_land(plan, ctx.github, target.repository)

    success = not result.close_failures
    title = "Landed" if success else "Landed with errors"
    print_panel(titled_panel(title, _format_land_summary(result), success=success))

    if not success:
        raise fail("Some pull requests below the merged one are still open; close them by hand")

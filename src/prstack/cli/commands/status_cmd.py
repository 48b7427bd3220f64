"""Show readiness of every pull request in a stack."""

import logging
from pathlib import Path

import click

from prstack.cli.common import load_chain, resolve_target, stack_options
from prstack.cli.json_output import build_status_output, emit_json
from prstack.cli.output import user_output
from prstack.cli.rendering import RenderOptions, render_status
from prstack.core.context import StackContext
from prstack.core.legend import format_legend
from prstack.core.status import collect_checks, resolve_statuses
from prstack.core.types import StatusBits

logger = logging.getLogger(__name__)


@click.command("status")
@click.argument("identifier", required=False)
@click.option("--no-checks", is_flag=True, help="Skip fetching CI, review and merge checks.")
@click.option("--json", "output_json", is_flag=True, help="Output JSON to stdout.")
@click.option("--ascii", "use_ascii", is_flag=True, help="Use ASCII symbols instead of Unicode.")
@click.option("--no-color", is_flag=True, help="Disable colored output.")
@click.option("--legend", "show_legend", is_flag=True, help="Always show the status legend.")
@stack_options
@click.pass_obj
def status_cmd(
    ctx: StackContext,
    identifier: str | None,
    no_checks: bool,
    output_json: bool,
    use_ascii: bool,
    no_color: bool,
    show_legend: bool,
    project: Path | None,
    repository: str | None,
    remote: str | None,
    excluded: tuple[int, ...],
) -> None:
    """Show the stack with status bits for each pull request.

    Each pull request gets four bits: CI, Approved, Mergeable and Stack. The
    Stack bit is only clear when every pull request below is approved and not
    a draft.
    """
    ctx, target = resolve_target(ctx, project=project, repository=repository, remote=remote)
    current_branch = ctx.git.get_current_branch(ctx.cwd) if target.repo_root else None
    chain = load_chain(ctx, target, identifier, excluded, current_branch=current_branch)

    statuses: dict[int, StatusBits] | None = None
    if not no_checks:
        checks = collect_checks(
            chain, lambda node: ctx.github.fetch_checks(target.repository, node.id)
        )
        statuses = resolve_statuses(chain, checks)
        logger.debug("Statuses: %s", statuses)

    if output_json:
        emit_json(build_status_output(chain, statuses, current_branch=current_branch))
        return

    options = RenderOptions(
        use_unicode=ctx.global_config.use_unicode and not use_ascii,
        use_color=not no_color,
    )
    user_output(
        render_status(chain, statuses or {}, current_branch=current_branch, options=options)
    )

    if not no_checks and (show_legend or ctx.legend.should_show()):
        user_output()
        user_output(format_legend(options.use_unicode))

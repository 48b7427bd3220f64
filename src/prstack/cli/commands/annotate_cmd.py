"""Write the stack table into every pull request description."""

import logging
from pathlib import Path

import click

from prstack.cli.common import load_chain, resolve_target, stack_options
from prstack.cli.ensure import user_errors
from prstack.cli.output import user_output
from prstack.core.context import StackContext
from prstack.core.markdown import build_table, replace_table

logger = logging.getLogger(__name__)


@click.command("annotate")
@click.argument("identifier", required=False)
@click.option("--badges", is_flag=True, help="Show PR state as shields.io badges.")
@click.option(
    "--prefix",
    default=None,
    help='Strip tags wrapped in these two delimiters from titles, e.g. "[]".',
)
@click.option(
    "-p",
    "--prelude",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Put the contents of this file above the table.",
)
@click.option("--ci", is_flag=True, help="Do not ask for confirmation.")
@click.option("--dry-run", is_flag=True, help="Print what would change without editing PRs.")
@stack_options
@click.pass_obj
def annotate_cmd(
    ctx: StackContext,
    identifier: str | None,
    badges: bool,
    prefix: str | None,
    prelude: Path | None,
    ci: bool,
    dry_run: bool,
    project: Path | None,
    repository: str | None,
    remote: str | None,
    excluded: tuple[int, ...],
) -> None:
    """Add a table describing the stack to each pull request description.

    Any table written earlier is replaced; the rest of the description is
    kept as is.
    """
    ctx, target = resolve_target(ctx, project=project, repository=repository, remote=remote)
    current_branch = ctx.git.get_current_branch(ctx.cwd) if target.repo_root else None
    chain = load_chain(ctx, target, identifier, excluded, current_branch=current_branch)
    title = identifier if identifier is not None else chain.top.branch
    prelude_text = prelude.read_text(encoding="utf-8") if prelude is not None else None

    user_output(f"Annotating {len(chain)} pull request(s) in {target.repository}:")
    for node in chain:
        user_output(f"  #{node.id}: {node.title}")

    if prefix is not None and len(prefix) != 2:
        warning = click.style("Warning: ", fg="yellow")
        user_output(warning + "--prefix needs two characters, ignored")
        prefix = None

    if not ci and not dry_run and not click.confirm("Update these descriptions?", default=True):
        user_output("Aborted.")
        return

    ctx = ctx.as_dry_run() if dry_run else ctx.with_printing()
    with user_errors(RuntimeError):
        for node in chain:
            table = build_table(
                chain,
                title,
                target.repository,
                current_id=node.id,
                badges=badges,
                prefix=prefix,
                prelude=prelude_text,
            )
            body = ctx.github.get_pr_body(target.repository, node.id)
            updated = replace_table(body, table)
            if updated == body:
                logger.debug("#%d already up to date", node.id)
                continue
            ctx.github.update_pr_body(target.repository, node.id, updated)

    user_output(click.style("✓", fg="green") + " Stack table updated")

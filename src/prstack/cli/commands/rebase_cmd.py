"""Print a bash script that rebases a stack with `git rebase --onto`."""

from pathlib import Path

import click

from prstack.cli.common import load_chain, resolve_target, stack_options
from prstack.cli.output import machine_output
from prstack.core.context import StackContext
from prstack.core.rebase_script import generate_rebase_script


@click.command("rebase")
@click.argument("identifier", required=False)
@stack_options
@click.pass_obj
def rebase_cmd(
    ctx: StackContext,
    identifier: str | None,
    project: Path | None,
    repository: str | None,
    remote: str | None,
    excluded: tuple[int, ...],
) -> None:
    """Print a script that rebases the stack onto trunk.

    Nothing is run. Review the script, then pipe it to bash:

        prstack rebase ABC-123 > rebase.sh && bash rebase.sh
    """
    ctx, target = resolve_target(ctx, project=project, repository=repository, remote=remote)
    current_branch = ctx.git.get_current_branch(ctx.cwd) if target.repo_root else None
    chain = load_chain(ctx, target, identifier, excluded, current_branch=current_branch)
    machine_output(generate_rebase_script(chain, target.remote), nl=False)

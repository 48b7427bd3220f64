import click

from prstack.cli.commands.annotate_cmd import annotate_cmd
from prstack.cli.commands.autorebase_cmd import autorebase_cmd
from prstack.cli.commands.config_cmd import config_cmd
from prstack.cli.commands.land_cmd import land_cmd
from prstack.cli.commands.log_cmd import log_cmd
from prstack.cli.commands.rebase_cmd import rebase_cmd
from prstack.cli.commands.status_cmd import status_cmd
from prstack.cli.debug import configure_logging
from prstack.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="prstack")
@click.option("--debug", is_flag=True, help="Log debug output to stderr.")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Manage stacks of dependent GitHub pull requests."""
    configure_logging(debug)
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context()


cli.add_command(annotate_cmd)
cli.add_command(autorebase_cmd)
cli.add_command(config_cmd)
cli.add_command(land_cmd)
cli.add_command(log_cmd)
cli.add_command(rebase_cmd)
cli.add_command(status_cmd)


def main() -> None:
    """CLI entry point used by the `prstack` console script."""
    cli()

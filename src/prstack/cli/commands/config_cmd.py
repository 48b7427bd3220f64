"""Show where configuration is read from and the values in effect."""

import click

from prstack.cli.output import machine_output, user_output
from prstack.core.context import StackContext
from prstack.core.repository import REPOSITORY_ENV_VAR


@click.command("config")
@click.pass_obj
def config_cmd(ctx: StackContext) -> None:
    """Show the effective configuration.

    Settings live in ~/.prstack/config.toml:

        repository = "owner/name"
        remote = "origin"
        trunk = "main"
        require_approval = true
        use_unicode = true
    """
    store = ctx.config_store
    if store.exists():
        user_output(f"Config file: {store.path()}")
    else:
        user_output(f"Config file: {store.path()} (not found, using defaults)")

    config = ctx.global_config
    unset = click.style("<unset>", dim=True)
    machine_output(f"repository={config.repository or unset}")
    machine_output(f"remote={config.remote}")
    machine_output(f"trunk={config.trunk or unset}")
    machine_output(f"require_approval={str(config.require_approval).lower()}")
    machine_output(f"use_unicode={str(config.use_unicode).lower()}")

    if ctx.repository_env:
        user_output(f"{REPOSITORY_ENV_VAR}={ctx.repository_env} (overrides repository)")

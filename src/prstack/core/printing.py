"""Shared base for gateway wrappers that echo mutating operations."""

from typing import Any

import click

from prstack.cli.output import user_output


class PrintingBase:
    """Holds the wrapped gateway and formats the commands it is about to run.

    Subclasses delegate every call to `self._wrapped`, printing a command-style
    line before each mutating one.
    """

    def __init__(self, wrapped: Any, *, script_mode: bool = False, dry_run: bool = False) -> None:
        self._wrapped = wrapped
        self._script_mode = script_mode
        self._dry_run = dry_run

    def _emit(self, message: str) -> None:
        if self._script_mode:
            return
        user_output(message)

    def _format_command(self, command: str) -> str:
        styled = click.style(f"  $ {command}", dim=True)
        if self._dry_run:
            styled += click.style(" (dry run)", fg="yellow")
        return styled

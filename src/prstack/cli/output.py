"""Output routing for CLI commands.

Human-facing messages go to stderr through user_output. Data meant for pipes
(JSON, generated scripts, plain lists) goes to stdout through machine_output.
"""

import click
from rich.console import Console
from rich.panel import Panel
from rich.text import Text


def user_output(message: str = "", nl: bool = True) -> None:
    """Print a message for the person running the command (stderr)."""
    click.echo(message, err=True, nl=nl)


def machine_output(message: str = "", nl: bool = True) -> None:
    """Print data for other programs (stdout)."""
    click.echo(message, nl=nl)


def print_panel(panel: Panel) -> None:
    """Render a rich panel to stderr alongside other user output."""
    console = Console(stderr=True, highlight=False)
    console.print(panel)


def titled_panel(title: str, lines: list[Text], *, success: bool) -> Panel:
    content = Text("\n").join(lines)
    return Panel(
        content,
        title=title,
        border_style="green" if success else "red",
        padding=(1, 2),
    )

"""CLI error handling utilities with styled output.

All errors use a red "Error:" prefix on stderr and exit with status 1.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TypeVar

import click

from prstack.cli.output import user_output

T = TypeVar("T")


def fail(error_message: str, *, hint: str | None = None) -> SystemExit:
    """Print a styled error (and optional hint) and return the exit to raise.

    Usage:
        raise fail("No pull requests found")
    """
    user_output(click.style("Error: ", fg="red") + error_message)
    if hint is not None:
        user_output(f"  Hint: {hint}")
    return SystemExit(1)


class Ensure:
    """Helper class for asserting invariants with consistent error handling."""

    @staticmethod
    def invariant(condition: bool, error_message: str) -> None:
        """Ensure condition is true, otherwise output styled error and exit.

        Raises:
            SystemExit: If condition is false (with exit code 1)
        """
        if not condition:
            raise fail(error_message)

    @staticmethod
    def not_none(value: T | None, error_message: str) -> T:
        """Ensure value is not None, otherwise output styled error and exit.

        Narrows `T | None` to `T` for the type checker.

        Raises:
            SystemExit: If value is None (with exit code 1)
        """
        if value is None:
            raise fail(error_message)
        return value


@contextmanager
def user_errors(*error_types: type[Exception]) -> Iterator[None]:
    """Turn the listed domain errors into styled CLI errors.

    Example:
        with user_errors(ChainError, RuntimeError):
            chain = build_chain(nodes, trunk)
    """
    try:
        yield
    except error_types as e:
        raise fail(str(e)) from e

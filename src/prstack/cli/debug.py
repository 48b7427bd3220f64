"""Debug logging switch shared by all commands."""

import logging
import os

DEBUG_ENV_VAR = "PRSTACK_DEBUG"


def debug_enabled() -> bool:
    return bool(os.getenv(DEBUG_ENV_VAR))


def configure_logging(debug: bool) -> None:
    """Enable DEBUG logging when --debug is passed or PRSTACK_DEBUG is set."""
    if debug or debug_enabled():
        logging.basicConfig(
            level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s"
        )

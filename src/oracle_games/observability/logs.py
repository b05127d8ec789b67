"""
logs.py

PURPOSE: Route library logging to the terminal without trampling game output.
DEPENDENCIES: rich
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

_HANDLER_NAME = "oracle-games"


def configure_logging(level: str = "WARNING", console: Console | None = None) -> None:
    """
    Install a RichHandler on the package logger.

    Safe to call more than once; the handler is replaced, not duplicated.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ...).
        console: Console to log to. Defaults to stderr.
    """
    package_logger = logging.getLogger("oracle_games")
    for handler in list(package_logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            package_logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.set_name(_HANDLER_NAME)
    package_logger.addHandler(handler)
    package_logger.setLevel(level.upper())
    package_logger.propagate = False

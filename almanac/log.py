"""Logging setup for the almanac command line."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = "%(message)s"


def configure_logging(verbose: bool = False, console: Console | None = None) -> None:
    """Route almanac log records through rich on stderr.

    Args:
        verbose: Log DEBUG records when True, otherwise WARNING and above.
        console: Console to write to. If None, a stderr console is created.
    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))

    logger = logging.getLogger("almanac")
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False

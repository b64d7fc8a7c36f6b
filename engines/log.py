"""Logging setup — rich console handler for CLI runs."""

import logging
import os

from rich.logging import RichHandler

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def setup_logging(level: str | int | None = None, console=None) -> None:
    """Route all `engines.*` loggers through a RichHandler.

    Level comes from the argument, then INDEXER_LOG_LEVEL, then INFO.
    """
    if level is None:
        level = os.getenv("INDEXER_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = _LEVELS.get(level.upper(), logging.INFO)

    handler = RichHandler(console=console, show_path=False, markup=False, rich_tracebacks=True)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )

"""Logging configuration for the CLI."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(*, debug: bool = False, level: str = "WARNING") -> None:
    """Send log records to stderr through rich."""
    resolved = (
        logging.DEBUG
        if debug
        else logging.getLevelNamesMapping().get(level.upper(), logging.WARNING)
    )
    logging.basicConfig(
        level=resolved,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=debug)],
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

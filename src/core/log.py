"""Logging helpers.

Library modules only ask for a named logger; the CLI decides where records
go (a Rich handler on stderr) and at which level.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_ROOT = "rsef"


def get_logger(name: str) -> logging.Logger:
    """Logger namespaced under `rsef.` so the CLI can configure them together."""

    return logging.getLogger(f"{_ROOT}.{name}")


def configure_logging(level: str = "WARNING", *, console: Console | None = None) -> None:
    """Install a single Rich handler on the `rsef` logger tree."""

    logger = logging.getLogger(_ROOT)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False

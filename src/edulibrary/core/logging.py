from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def configure_logging(verbosity: int = 0, console: Console | None = None) -> None:
    """Route the root logger through rich; -v for INFO, -vv for DEBUG."""
    level = _LEVELS.get(verbosity, logging.DEBUG)
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbosity > 1,
        rich_tracebacks=True,
        markup=False,
    )
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )

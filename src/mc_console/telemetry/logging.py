"""Log handler setup for the mc-console CLI."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_HANDLER_NAME = "mc_console.rich"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Route ``mc_console.*`` records to stderr through rich, once per process."""
    logger = logging.getLogger("mc_console")
    logger.setLevel(level.upper())
    if not any(handler.get_name() == _HANDLER_NAME for handler in logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=False)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    return logger

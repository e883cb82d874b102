"""Logging utilities for NSM clients."""

import logging
from typing import Literal

from rich.console import Console
from rich.logging import RichHandler

_NSM_LOGGER_NAME = "nsm"


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO",
) -> None:
    """Configure the ``nsm`` namespace logger.

    Records go to stderr through rich, leaving stdout to the application. The
    root logger is left alone. Repeated calls only change the level.

    Args:
        level: the log level to use
    """
    nsm_logger = logging.getLogger(_NSM_LOGGER_NAME)
    nsm_logger.setLevel(level)

    if nsm_logger.handlers:
        return

    nsm_logger.addHandler(RichHandler(console=Console(stderr=True), rich_tracebacks=True))

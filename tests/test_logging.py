import logging

import pytest
from rich.logging import RichHandler

from nsm.utilities.logging import configure_logging


@pytest.fixture
def nsm_logger():
    logger = logging.getLogger("nsm")
    handlers, level = logger.handlers[:], logger.level
    logger.handlers = []
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)


def test_configure_logging_installs_one_rich_handler(nsm_logger: logging.Logger):
    configure_logging("DEBUG")
    configure_logging("WARNING")

    assert nsm_logger.level == logging.WARNING
    [handler] = nsm_logger.handlers
    assert isinstance(handler, RichHandler)
    assert handler.console.stderr

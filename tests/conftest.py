"""Shared fixtures."""

import logging

import pytest

from lib.ndmtelnet import logging as ndm_logging


@pytest.fixture(autouse=True)
def reset_logging() -> None:
    """Drop handlers installed by CLI invocations between tests."""
    yield
    logger = logging.getLogger(ndm_logging.LOGGER_NAME)
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    ndm_logging._logger = None

import logging

import pytest

from owm_forecast.logging_config import THIRD_PARTY_LOGGERS, configure_logging


@pytest.fixture(autouse=True)
def restore_logging():
    names = ("", *THIRD_PARTY_LOGGERS)
    saved = {
        name: (logger.level, logger.handlers[:], logger.propagate)
        for name, logger in ((name, logging.getLogger(name)) for name in names)
    }
    yield
    for name, (level, handlers, propagate) in saved.items():
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.handlers[:] = handlers
        logger.propagate = propagate


def test_root_logger_level():
    configure_logging("warning")

    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert len(root.handlers) == 1


def test_third_party_loggers_use_own_handler():
    configure_logging("DEBUG")
    configure_logging("DEBUG")

    httpx_logger = logging.getLogger("httpx")
    assert httpx_logger.level == logging.DEBUG
    assert httpx_logger.propagate is False
    assert len(httpx_logger.handlers) == 1

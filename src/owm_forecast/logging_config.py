"""Centralized logging configuration."""

import logging
from typing import Optional

from owm_forecast.config import LOG_LEVEL

# Third-party loggers that get the application format instead of their own
THIRD_PARTY_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "httpx",
    "fastapi",
)


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure a consistent logging format for the entire application.

    Args:
        level: Log level name; defaults to LOG_LEVEL from config
    """
    level = (level or LOG_LEVEL).upper()
    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.addHandler(_make_handler(formatter, level))

    for logger_name in THIRD_PARTY_LOGGERS:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)

        # Remove existing handlers to avoid duplicate logs
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)

        logger.propagate = False
        logger.addHandler(_make_handler(formatter, level))


def _make_handler(formatter: logging.Formatter, level: str) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler

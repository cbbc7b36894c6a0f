"""Logging setup for the image variants pipeline.

Everything logs under the ``image-variants`` logger (helpers use children
such as ``image-variants.retry``), written to stdout.

Environment Variables:
    LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL (default INFO)
    LOG_FORMAT: "structured" (file, line and function) or "simple"
"""

import os
import sys
import logging
from typing import Optional

DEFAULT_LOGGER_NAME = "image-variants"

LOG_FORMATS = {
    "structured": (
        "%(asctime)s | %(name)s | %(levelname)-8s | "
        "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
    ),
    "simple": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _level_from_name(level_name: str) -> int:
    level = logging.getLevelName(level_name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _build_handler(format_type: str) -> logging.Handler:
    format_name = os.getenv("LOG_FORMAT", format_type).lower()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(LOG_FORMATS.get(format_name, LOG_FORMATS["simple"]), datefmt=DATE_FORMAT)
    )
    return handler


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Return ``name``'s logger, attaching a stdout handler the first time.

    Args:
        name: Logger name (defaults to "image-variants")
        level: Level override; otherwise LOG_LEVEL seeds a new logger
        format_type: "structured" or "simple", overridden by LOG_FORMAT

    A logger that already has a handler keeps its level unless ``level``
    is given, so ``enable_debug_logging`` survives later ``get_logger`` calls.
    """
    logger = logging.getLogger(name)
    is_new = not logger.handlers

    if level:
        logger.setLevel(_level_from_name(level))
    elif is_new:
        logger.setLevel(_level_from_name(os.getenv("LOG_LEVEL", "INFO")))

    if is_new:
        logger.addHandler(_build_handler(format_type))
        logger.propagate = False

    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    return setup_logger(name)


def enable_debug_logging(name: str = DEFAULT_LOGGER_NAME) -> None:
    """Lower the pipeline logger and the root logger to DEBUG."""
    get_logger(name).setLevel(logging.DEBUG)
    logging.getLogger().setLevel(logging.DEBUG)

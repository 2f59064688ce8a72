"""Logging setup for the gridpainter command line tools."""

import logging
import os
import sys


def setup_logging(verbose: bool = False):
    """Send log records to stdout.

    DEBUG when ``verbose`` is set or GRIDPAINTER_VERBOSE is truthy, INFO otherwise.
    """
    logger = logging.getLogger()
    env = os.getenv("GRIDPAINTER_VERBOSE", "").lower() in ("1", "true", "yes")
    level = logging.DEBUG if (verbose or env) else logging.INFO
    logger.setLevel(level)

    if logger.hasHandlers():
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(handler)
    logging.debug("Logging initialized (DEBUG)")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)

"""Logging utilities for the nbp_statement package."""

from __future__ import annotations

import logging
from typing import Optional

PACKAGE_LOGGER = "nbp_statement"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_LOGGER: Optional[logging.Logger] = None


def get_logger(name: str = PACKAGE_LOGGER) -> logging.Logger:
    """Return a logger, configuring the root handler on first use."""
    global _LOGGER
    if _LOGGER is None:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        _LOGGER = logging.getLogger(PACKAGE_LOGGER)
    return logging.getLogger(name)


def set_verbosity(verbose: bool) -> None:
    """Switch package loggers between INFO and DEBUG (per-date fallbacks, cache hits)."""

    get_logger().setLevel(logging.DEBUG if verbose else logging.INFO)
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

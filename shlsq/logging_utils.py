"""Logging helpers for scripts that drive the expansion routines."""

from __future__ import annotations

import logging
from typing import TextIO

__all__ = ["PACKAGE_LOGGER", "setup_logging"]

PACKAGE_LOGGER = "shlsq"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(verbose: bool = False, stream: TextIO | None = None) -> logging.Logger:
    """Attach a single stream handler to the package logger.

    The determinacy messages are emitted at INFO and the solver workspace
    advisory at WARNING, so the default level shows both.

    Args:
        verbose: If True, use DEBUG level; otherwise INFO.
        stream: Destination stream (defaults to stderr).

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    for handler in list(logger.handlers):
        if getattr(handler, "_shlsq_owned", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    handler._shlsq_owned = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger

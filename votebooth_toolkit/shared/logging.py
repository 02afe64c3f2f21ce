"""
Logging for the Voting Booth toolkit.

Every module logger is a child of the `votebooth_toolkit` package logger,
which owns the single stderr handler. The level comes from VB_LOG_LEVEL and
can be changed at runtime (the CLI's --log-level does this).
"""

import logging
import os
from typing import Optional, Union

from votebooth_toolkit.shared.constants import EnvVars

PACKAGE_LOGGER = "votebooth_toolkit"

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _package_logger() -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(_resolve_level(os.getenv(EnvVars.LOG_LEVEL, "INFO")))
    return logger


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Logger for a toolkit module, e.g. get_logger(__name__).

    Names outside the package are nested under it so that they share its
    handler and level.
    """
    package = _package_logger()
    if not name or name == PACKAGE_LOGGER:
        return package
    if not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def set_log_level(level: Union[int, str]) -> None:
    """Change the level of every toolkit logger at once."""
    _package_logger().setLevel(_resolve_level(level))

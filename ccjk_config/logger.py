# CCJK Config Logging
# Loguru-based diagnostics, silent by default when used as a library

import sys

import loguru
from loguru import logger

from ccjk_config import APP_NAME

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

# Library mode: nothing is emitted until the host application opts in
logger.disable(APP_NAME)


def create_logger(scope: str) -> "loguru.Logger":
    """Return a logger bound to a component scope (e.g. "store", "watcher")."""
    return logger.bind(scope=scope)


def disable_logging() -> None:
    logger.disable(APP_NAME)


def enable_logging(level: str = "INFO") -> int:
    """
    Enable diagnostic logging to stderr.

    Args:
        level: Minimum loguru level name.

    Returns:
        Handler id, usable with ``logger.remove``.
    """
    logger.enable(APP_NAME)
    logger.remove()
    logger.configure(extra={"scope": APP_NAME})
    return logger.add(sys.stderr, level=level.upper(), format=_get_text_format(), colorize=False)


def setup_cli_logging(level: str = "WARNING", *, verbose: bool = False) -> int:
    """Install the stderr handler used by the command line interface."""
    logger.enable(APP_NAME)
    logger.remove()
    logger.configure(extra={"scope": "cli"})
    return logger.add(
        sys.stderr,
        level="DEBUG" if verbose else level.upper(),
        format=_get_text_format(),
        colorize=True,
    )


def _get_text_format() -> str:
    return "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[scope]} - {message}"

"""Logging setup for the ``expense_tracker`` package.

The application entrypoint calls ``configure_logging`` once; modules only
ever do ``logging.getLogger(__name__)`` and never attach handlers themselves.
"""

import logging
import sys

_PKG_LOGGER_NAME = "expense_tracker"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
        numeric = getattr(logging, level, None)
        if isinstance(numeric, int):
            return numeric
    return logging.INFO


def configure_logging(level: int | str | None = None, fmt: str | None = None) -> logging.Logger:
    """
    Attach a single stderr handler to the package logger.

    Calling it again only adjusts the level, so reloading the app (or the test
    client starting it several times) does not duplicate output.
    """
    global _CONFIGURED

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    numeric_level = _parse_level(level)

    if not _CONFIGURED:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
        logger.addHandler(handler)
        _CONFIGURED = True

    for handler in logger.handlers:
        handler.setLevel(numeric_level)
    logger.setLevel(numeric_level)
    # Avoid double emission via the root logger (uvicorn configures it too)
    logger.propagate = False
    return logger

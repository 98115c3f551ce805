"""
Logging setup.

Library modules only create module-level loggers; setup_logging() is for
the process hosting the provider.
"""

import logging
import os

ENV_LOG_LEVEL = "JUJUFORM_LOG_LEVEL"
ENV_TF_LOG = "TF_LOG"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# TF_LOG uses its own level names
_TF_LEVELS = {
    "TRACE": logging.DEBUG,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}


def resolve_level(level: str | int | None = None) -> int:
    """Pick the log level from the argument, JUJUFORM_LOG_LEVEL or TF_LOG."""
    if isinstance(level, int):
        return level
    name = level or os.environ.get(ENV_LOG_LEVEL) or os.environ.get(ENV_TF_LOG) or "WARNING"
    name = name.strip().upper()
    if name in _TF_LEVELS:
        return _TF_LEVELS[name]
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.WARNING


def setup_logging(level: str | int | None = None) -> logging.Logger:
    """Attach a stderr handler to the jujuform logger tree."""
    logger = logging.getLogger("jujuform")
    logger.setLevel(resolve_level(level))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger

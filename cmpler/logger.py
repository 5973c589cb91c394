"""Logging set-up for the compiler: console output plus a daily log file."""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

LOGGER_NAME = "cmpler"
LOG_ENV_VAR = "CMPLER_LOG"
LOG_FILE_NAME = "cmpler.log"
DEFAULT_LOG_DIR = "logs"

_CONSOLE_HANDLER = "cmpler.console"
_FILE_HANDLER = "cmpler.file"

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "off": logging.CRITICAL + 10,
}

_CONSOLE_FORMAT = "%(asctime)s %(levelname)8s %(name)s:%(lineno)d\n    %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s:%(lineno)d: %(message)s"


def _level_from_env() -> int:
    """The level named by the environment, or INFO when it names none."""
    value = os.environ.get(LOG_ENV_VAR, "").strip().lower()
    return _LEVELS.get(value, logging.INFO)


def init_logger(log_dir: str | os.PathLike[str] | None = None) -> logging.Logger:
    """Send the compiler's log records to stdout and to a daily-rotated file.

    The level is read from the ``CMPLER_LOG`` environment variable and falls
    back to ``info``. The log file ``cmpler.log`` is kept in ``log_dir``,
    which defaults to ``logs`` in the working directory. Calling this again
    replaces the handlers installed by the previous call.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if handler.get_name() in (_CONSOLE_HANDLER, _FILE_HANDLER):
            logger.removeHandler(handler)
            handler.close()

    directory = Path(log_dir) if log_dir is not None else Path(DEFAULT_LOG_DIR)
    directory.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.set_name(_CONSOLE_HANDLER)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))

    log_file = TimedRotatingFileHandler(
        directory / LOG_FILE_NAME, when="midnight", encoding="utf-8"
    )
    log_file.set_name(_FILE_HANDLER)
    log_file.setFormatter(logging.Formatter(_FILE_FORMAT))

    logger.addHandler(console)
    logger.addHandler(log_file)
    logger.setLevel(_level_from_env())
    logger.propagate = False
    return logger
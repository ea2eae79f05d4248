# === FILE: site_lingo/logger.py ===
"""Logging for the SiteLingo proxy.

Every module logs through the ``SiteLingo`` logger or one of its children
(``SiteLingo.crawler``, ``SiteLingo.storage`` ...) obtained with
:func:`get_logger`. :func:`configure` installs the handlers once, on the
project logger and on the aiohttp server loggers, so proxied requests and
application events end up in the same stream and format.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Tuple, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "SiteLingo"

# aiohttp.web request log and server errors
SERVER_LOGGERS: Final[Tuple[str, ...]] = ("aiohttp.access", "aiohttp.server")

LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


def _build_handlers(log_file: str | Path | None, fmt: str) -> List[logging.Handler]:
    formatter = logging.Formatter(fmt)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                filename=str(log_file),
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def _install(lg: logging.Logger, level: _LevelT, handlers: List[logging.Handler], replace: bool) -> None:
    lg.setLevel(level)
    if replace:
        for old in list(lg.handlers):
            old.close()
        lg.handlers.clear()
    for handler in handlers:
        lg.addHandler(handler)
    lg.propagate = False


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Point the project logger and the aiohttp server loggers at stdout (and *log_file*, rotated).

    With ``replace_handlers=False`` the new handlers are added next to the
    existing ones. Returns the project logger.
    """
    handlers = _build_handlers(log_file, log_format)
    project = logging.getLogger(LOGGER_NAME)
    _install(project, level, handlers, replace_handlers)
    for name in SERVER_LOGGERS:
        _install(logging.getLogger(name), level, handlers, replace_handlers)
    return project


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Called by the CLI group before any command runs."""
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


def get_logger(suffix: str | None = None) -> logging.Logger:
    """``SiteLingo`` or its ``SiteLingo.<suffix>`` child."""
    return logging.getLogger(LOGGER_NAME if not suffix else f"{LOGGER_NAME}.{suffix}")


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "get_logger", "DEFAULT_FORMAT", "LOGGER_NAME", "SERVER_LOGGERS"]

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from shopagent.core.config import Settings

from .json_formatter import JSONFormatter

_LOGGER_NAME = "shopagent"
_OWNED_ATTR = "_shopagent_owned"


def _owned(logger: logging.Logger) -> list[logging.Handler]:
    return [handler for handler in logger.handlers if getattr(handler, _OWNED_ATTR, False)]


def _attach(logger: logging.Logger, handler: logging.Handler) -> None:
    handler.setFormatter(JSONFormatter())
    setattr(handler, _OWNED_ATTR, True)
    logger.addHandler(handler)


def _same_file(handler: logging.Handler, path: Path) -> bool:
    return isinstance(handler, RotatingFileHandler) and Path(handler.baseFilename).resolve() == path.resolve()


def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """Point the ``shopagent`` logger at stdout, plus a rotating file when enabled.

    Safe to call repeatedly: the level follows ``settings`` each time, the stdout
    handler is installed once, and a file handler for a path that is no longer
    configured is closed and replaced.
    """
    settings = settings or Settings.from_env()
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(getattr(logging, settings.log_level, logging.INFO))
    logger.propagate = False

    owned = _owned(logger)
    if not any(type(handler) is logging.StreamHandler for handler in owned):
        _attach(logger, logging.StreamHandler(stream=sys.stdout))

    log_path = settings.log_path
    for handler in owned:
        if isinstance(handler, RotatingFileHandler) and (log_path is None or not _same_file(handler, log_path)):
            logger.removeHandler(handler)
            handler.close()

    if log_path is not None and not any(_same_file(handler, log_path) for handler in _owned(logger)):
        log_path.parent.mkdir(parents=True, exist_ok=True)
        _attach(
            logger,
            RotatingFileHandler(
                filename=log_path,
                maxBytes=settings.log_max_bytes,
                backupCount=settings.log_backup_count,
                encoding="utf-8",
            ),
        )
    return logger

from __future__ import annotations

import logging
import os
import sys
import uuid
from logging.handlers import RotatingFileHandler
from pathlib import Path

from platformdirs import user_log_dir

from ctxforge.settings import APP_NAME, LOG_LEVEL_ENV

SESSION_ID = uuid.uuid4().hex[:8]
LOGGER_NAME = "ctxforge"


class EnsureSessionFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "session"):
            record.session = SESSION_ID
        return True


def setup_logging(console_level: int | str | None = None, log_dir: Path | None = None) -> logging.Logger:
    """Attach file + console handlers to the package logger. Safe to call twice."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    if logger.handlers:
        return logger

    level = console_level or os.environ.get(LOG_LEVEL_ENV, "WARNING")
    if isinstance(level, str):
        level = level.upper()

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s | sid=%(session)s"
    )
    session_filter = EnsureSessionFilter()

    log_dir = log_dir or Path(user_log_dir(APP_NAME, appauthor=False))
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            log_dir / f"{APP_NAME}.log", maxBytes=2 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
    except OSError as exc:
        fh = None
        print(f"ctxforge: file logging disabled ({exc})", file=sys.stderr)
    if fh is not None:
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        fh.addFilter(session_filter)
        logger.addHandler(fh)

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    ch.addFilter(session_filter)
    logger.addHandler(ch)

    logger.debug("Logging initialized. log_dir=%s", log_dir)
    return logger


def install_global_exception_hooks() -> None:
    log = logging.getLogger(LOGGER_NAME)

    def _excepthook(exc_type, exc, tb):
        log.critical("Uncaught exception", exc_info=(exc_type, exc, tb))
        sys.__excepthook__(exc_type, exc, tb)

    sys.excepthook = _excepthook

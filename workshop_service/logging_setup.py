"""
logging_setup.py
================

Route the std-lib `logging` package (application modules *and* uvicorn)
into a single Loguru stderr sink, exactly once.

Modules keep doing `logger = logging.getLogger(__name__)`; the records show
up in Loguru with the caller's module and line.
"""

from __future__ import annotations

import inspect
import logging
import sys

from loguru import logger

_LOG_INITIALISED = False

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level:<8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Forward std-lib log records into Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            lvl: int | str = logger.level(record.levelname).name
        except ValueError:
            lvl = record.levelno
        # skip this frame and every frame inside the logging package
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1
        logger.opt(depth=depth, exception=record.exc_info).log(lvl, record.getMessage())


def configure_logging(*, console_level: str | int = "INFO") -> None:
    """Install the stderr sink and the std-lib bridge; later calls are no-ops."""
    global _LOG_INITIALISED
    if _LOG_INITIALISED:
        return
    _LOG_INITIALISED = True

    logging.root.handlers = [InterceptHandler()]
    logging.root.setLevel(console_level)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uv_logger = logging.getLogger(name)
        uv_logger.handlers = []
        uv_logger.propagate = True

    logger.remove()
    logger.add(
        sys.stderr,
        level=console_level,
        backtrace=False,
        diagnose=False,
        format=_FORMAT,
        enqueue=True,
    )
    logging.getLogger(__name__).debug("Logging initialised")

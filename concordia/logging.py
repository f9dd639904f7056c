"""
Diagnostic logging for concordia.

Every module logs through a child of the ``concordia`` logger. Diagnostics
always go to stderr because ``compare``/``scan``/``report`` may print a
JSON report on stdout, and that stream has to stay machine-readable.
Scans run on worker threads, so the detailed format names the thread.
"""

import logging
import sys
from pathlib import Path
from typing import Literal

LogLevel = Literal["debug", "info", "warning", "error"]
FormatStyle = Literal["simple", "detailed"]

ROOT_LOGGER = "concordia"

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

_FORMATS = {
    "simple": "%(levelname)s: %(message)s",
    "detailed": "%(asctime)s [%(threadName)s] %(name)s %(levelname)s: %(message)s",
}

_configured = False


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def setup_logging(
    level: LogLevel = "info",
    log_file: str | None = None,
    format_style: FormatStyle = "simple",
) -> None:
    """
    Point the ``concordia`` logger at stderr and, optionally, a log file.

    Calling it again replaces the handlers, so each CLI invocation starts
    from the ``logging`` section of its own merged config.

    Args:
        level: Minimum level for both handlers; unknown names mean info
        log_file: Append diagnostics here as well (parent dirs are created)
        format_style: 'simple' for the terminal, 'detailed' adds time,
            thread and logger name
    """
    global _configured

    log_level = _LOG_LEVELS.get(level, logging.INFO)
    fmt = _FORMATS.get(format_style, _FORMATS["simple"])

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)
    logger.handlers.clear()
    logger.addHandler(_handler(logging.StreamHandler(sys.stderr), log_level, fmt))

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(_handler(logging.FileHandler(path, encoding="utf-8"), log_level, fmt))

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Logger for a concordia module, e.g. ``get_logger("scanners.eslint")``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def is_configured() -> bool:
    """Whether setup_logging has run in this process."""
    return _configured

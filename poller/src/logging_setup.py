"""Logging configuration for the poller.

Logging is configured explicitly by the caller, once, at startup. Calling
:func:`configure_logging` again replaces the handlers it installed earlier
instead of stacking duplicates. Failures raise :class:`LoggingSetupError`.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .errors import LoggingSetupError

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
FILE_LOG_FORMAT = "%(levelname)s - %(message)s"

# Third-party loggers that are too chatty below WARNING.
NOISY_LOGGERS = ("web3", "httpx", "httpcore", "urllib3", "aiohttp", "asyncio")

# Marks handlers installed by configure_logging.
_HANDLER_FLAG = "_poller_handler"


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise LoggingSetupError(f"Unknown log level '{level}'")
    return resolved


def configure_logging(
    level: str | int = "INFO",
    log_file: str | Path | None = None,
    logger_name: str | None = None,
) -> logging.Logger:
    """Install console (and optionally file) logging.

    :param level: Level name or number (e.g., "INFO", "DEBUG").
    :param log_file: Optional path of a log file to append to.
    :param logger_name: Logger to configure (default: root logger).
    :returns: The configured logger, ready to pass to ``configure()``.
    :raises LoggingSetupError: If the level is unknown or the file cannot
        be opened.
    """
    numeric_level = _resolve_level(level)
    target = logging.getLogger(logger_name)

    handlers: list[logging.Handler] = []
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    handlers.append(stream_handler)

    if log_file is not None:
        try:
            file_handler = logging.FileHandler(log_file)
        except OSError as e:
            raise LoggingSetupError(f"Cannot open log file {log_file}: {e}") from e
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        handlers.append(file_handler)

    for handler in list(target.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            target.removeHandler(handler)
            handler.close()

    for handler in handlers:
        setattr(handler, _HANDLER_FLAG, True)
        target.addHandler(handler)
    target.setLevel(numeric_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, numeric_level))

    return target

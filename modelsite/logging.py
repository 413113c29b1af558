"""Build logging for modelsite.

Every module logs through a child of the ``modelsite`` logger. A per-file
failure is reported once at ERROR; its traceback only shows up with ``-v``.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "modelsite"
_CONSOLE_FORMAT = "[modelsite] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``modelsite.<name>``, or the build's root logger when ``name`` is empty."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME)


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send build progress to stderr, and to ``log_file`` when one is given.

    Calling this again replaces the handlers installed by the previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_handler(logging.StreamHandler(), level, _CONSOLE_FORMAT))
    if log_file is not None:
        logger.addHandler(
            _handler(logging.FileHandler(log_file, encoding="utf-8"), level, _FILE_FORMAT)
        )
    return logger


def log_exception(logger: logging.Logger, message: str, exc: BaseException) -> None:
    """Report a failed build step as ``<message>: <error>``.

    The traceback is attached only when the logger is running at DEBUG.
    """
    logger.error("%s: %s", message, exc, exc_info=logger.isEnabledFor(logging.DEBUG))


__all__ = ["configure_logging", "get_logger", "log_exception"]

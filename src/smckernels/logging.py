"""Logging utilities for smckernels.

Loggers live under the ``smckernels`` namespace and write to stderr.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

__all__ = [
    "get_logger",
    "set_log_level",
    "configure_logging",
]

_DEFAULT_LEVEL = logging.WARNING
_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

_loggers: dict[str, logging.Logger] = {}


def _resolve_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get or create a logger for the given module name.

    Parameters
    ----------
    name : str, optional
        Logger name, typically ``__name__``. Names outside the
        ``smckernels`` namespace are prefixed with it.

    Returns
    -------
    logger : logging.Logger
        Cached logger with a single stderr handler.
    """
    if name is None:
        name = "smckernels"

    logger_name = name if name.startswith("smckernels") else f"smckernels.{name}"

    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)

    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(_DEFAULT_LEVEL)
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the level of every smckernels logger, including future ones."""
    global _DEFAULT_LEVEL
    level = _resolve_level(level)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

    _DEFAULT_LEVEL = level


def configure_logging(
    level: int | str = logging.WARNING,
    stream: Optional[TextIO] = None,
) -> None:
    """Send all smckernels loggers to ``stream`` at ``level``.

    Parameters
    ----------
    level : int or str
        Logging level, e.g. ``logging.INFO`` or ``"DEBUG"``.
    stream : TextIO, optional
        Output stream. Defaults to ``sys.stderr``.
    """
    global _DEFAULT_LEVEL
    level = _resolve_level(level)
    stream = sys.stderr if stream is None else stream
    formatter = logging.Formatter(_DEFAULT_FORMAT)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        handler = logging.StreamHandler(stream)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    _DEFAULT_LEVEL = level

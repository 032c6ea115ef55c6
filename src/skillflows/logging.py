"""
Logging for skillflows.

Every module logs through a child of the ``skillflows`` logger obtained with
:func:`get_logger`. Nothing is printed until :func:`setup_logging` attaches
handlers; the CLI does that from ``FlowsConfig.log_level``.

On an interactive terminal records are rendered by rich; anywhere else (pipes,
files, test capture) they are plain formatted lines.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "skillflows"
PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_package_logger = logging.getLogger(PACKAGE_LOGGER)
_level_before_disable: int | None = None


def _level_number(level: str | int) -> int:
    if isinstance(level, int):
        return level
    number = logging.getLevelName(level.upper())
    return number if isinstance(number, int) else logging.INFO


def _stream_handler(stream: TextIO | None, format: str | None) -> logging.Handler:
    target = stream or sys.stderr
    if stream is None and format is None and target.isatty():
        return RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
    handler = logging.StreamHandler(target)
    handler.setFormatter(logging.Formatter(format or PLAIN_FORMAT))
    return handler


def setup_logging(
    level: str | int = "INFO",
    format: str | None = None,
    stream: TextIO | None = None,
    file: str | None = None,
) -> None:
    """
    Attach handlers to the ``skillflows`` logger, replacing earlier ones.

    Args:
        level: Level name (``"debug"``, ``"WARNING"``...) or number
        format: Format for plain output; passing one disables rich rendering
        stream: Write here instead of stderr
        file: Also append records to this file, always in plain format
    """
    number = _level_number(level)
    handlers = [_stream_handler(stream, format)]
    if file:
        file_handler = logging.FileHandler(file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(format or PLAIN_FORMAT))
        handlers.append(file_handler)

    for handler in list(_package_logger.handlers):
        _package_logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        handler.setLevel(number)
        _package_logger.addHandler(handler)
    _package_logger.setLevel(number)


def get_logger(name: str) -> logging.Logger:
    """``get_logger("store")`` → the ``skillflows.store`` logger."""
    prefix = f"{PACKAGE_LOGGER}."
    return logging.getLogger(name if name.startswith(prefix) else prefix + name)


def set_level(level: str | int) -> None:
    _package_logger.setLevel(_level_number(level))


def disable() -> None:
    """Silence the package, child loggers included, until :func:`enable`."""
    global _level_before_disable
    if _level_before_disable is None:
        _level_before_disable = _package_logger.level
    _package_logger.setLevel(logging.CRITICAL + 1)


def enable() -> None:
    global _level_before_disable
    if _level_before_disable is not None:
        _package_logger.setLevel(_level_before_disable)
        _level_before_disable = None

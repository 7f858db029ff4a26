"""Logging setup for derivekit runs.

Console records always go to stderr because `derivekit expand -o -` writes the
expanded Rust source to stdout. Verbose runs tag each record with the
subsystem that emitted it (`syntax.parser`, `orchestrator`, `generators.builder`).
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import IO

_LOGGER_NAME = "derivekit"
_CONSOLE_FORMAT = "[derivekit] %(levelname)s %(message)s"
_VERBOSE_FORMAT = "[derivekit:%(subsystem)s] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(subsystem)s: %(message)s"


class SubsystemFormatter(logging.Formatter):
    """Formatter exposing `%(subsystem)s`: the logger name below `derivekit`."""

    def format(self, record: logging.LogRecord) -> str:
        prefix = f"{_LOGGER_NAME}."
        name = record.name
        record.subsystem = name[len(prefix) :] if name.startswith(prefix) else name
        return super().format(record)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the derivekit hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def console_level(*, verbose: bool = False, quiet: bool = False) -> int:
    """Level for console output; `verbose` wins over `quiet`."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Install derivekit's console handler and, optionally, a full DEBUG log file."""
    level = console_level(verbose=verbose, quiet=quiet)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file is not None else level)
    logger.propagate = False

    # main() may run several times in one process (tests, embedding tools).
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console.setLevel(level)
    console.setFormatter(SubsystemFormatter(_VERBOSE_FORMAT if verbose else _CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(SubsystemFormatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


__all__ = ["SubsystemFormatter", "configure_logging", "console_level", "get_logger"]

"""Logging utilities for capibara commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "capibara"


class StageFormatter(logging.Formatter):
    """Tags console lines with the pipeline stage (walker, loader, ...) that emitted them."""

    def format(self, record: logging.LogRecord) -> str:
        stage = record.name.removeprefix(_LOGGER_NAME).lstrip(".")
        record.stage = f"{_LOGGER_NAME}/{stage}" if stage else _LOGGER_NAME
        return super().format(record)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a stage logger (``walker``, ``loader``, ``pipeline`` ...) under capibara."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure console output and an optional file sink for a build.

    ``quiet`` keeps the console to diagnostics (warnings and errors) and drops
    the per-pass ``Found N ...`` progress lines. The file sink always records
    the per-fragment debug trace.
    """
    if verbose:
        console_level = logging.DEBUG
    elif quiet:
        console_level = logging.WARNING
    else:
        console_level = logging.INFO

    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file is not None else console_level)
    logger.propagate = False

    # Reset handlers so repeated CLI invocations in one process do not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(console_level)
    stream_handler.setFormatter(StageFormatter("[%(stage)s] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["StageFormatter", "configure_logging", "get_logger"]

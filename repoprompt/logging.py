"""Logging for repoprompt runs.

Every module logs through a child of the ``repoprompt`` logger:

- ``repoprompt.orchestrator``: run start and end totals (INFO), facets that
  do not apply (DEBUG) and analysis steps that raised (WARNING, with a
  traceback when verbose).
- ``repoprompt.scanner``: snapshot size (DEBUG) and budget or cancellation
  truncation (WARNING).
- ``repoprompt.technology`` and ``repoprompt.examples``: detection and
  extraction counts (DEBUG).
- ``repoprompt.analyzers``: facet entry points naming no facet (WARNING).
- ``repoprompt.prompting``: templates skipped for missing evidence (DEBUG);
  ``repoprompt.prompting.validator`` logs the library score (DEBUG).
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "repoprompt"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``repoprompt.<name>``, or the package logger when ``name`` is empty."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send repoprompt records to stderr and, optionally, to ``log_file``.

    INFO shows run start and totals plus facet failures; ``verbose`` lowers
    the level to DEBUG so per-template skips and scanner sizes appear too.
    Records do not propagate to the root logger.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Repeated CLI invocations in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[repoprompt] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "get_logger"]

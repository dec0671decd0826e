"""Logging setup for lrsim.

Modules log through ``logging.getLogger(__name__)`` and so sit under the
``lrsim`` logger configured here. Records always go to stderr because the
reads themselves may be streamed to a file next to the log.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Mapping, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _configure(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logger(
    name: str = "lrsim",
    log_file: Optional[str] = None,
    level: int = logging.INFO,
) -> logging.Logger:
    """
    Configure a logger with a stderr handler and an optional log file.

    Calling it again replaces the handlers installed by the previous call,
    so repeated CLI invocations in one process do not duplicate output.

    Args:
        name: Logger name
        log_file: Optional path to a log file (parent directories are created)
        level: Logging level (default: INFO)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_configure(logging.StreamHandler(sys.stderr), level))

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(_configure(logging.FileHandler(log_path), level))

    return logger


def get_logger(name: str = "lrsim") -> logging.Logger:
    """Return ``name``, configuring it with defaults if it has no handlers yet."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        return setup_logger(name)
    return logger


def log_parameters(logger: logging.Logger, params: Mapping[str, Any], title: str = "Parameters"):
    """
    Log a (possibly nested) parameter mapping, one section per line.

    ``{"length": {"mean": 15000, "stdev": 13000}}`` is logged as
    ``  length: mean=15000, stdev=13000``.
    """
    logger.info(f"{title}:")
    for key, value in params.items():
        if isinstance(value, Mapping):
            value = ", ".join(f"{k}={v}" for k, v in value.items())
        logger.info(f"  {key}: {value}")

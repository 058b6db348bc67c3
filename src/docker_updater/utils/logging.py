"""Logging utilities for docker-updater."""

import logging
import sys
from pathlib import Path

from pythonjsonlogger import jsonlogger

# Success lines sit between INFO and WARNING
OK = 25

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"

logging.addLevelName(OK, "OK")
logging.addLevelName(logging.WARNING, "WARN")


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "text",
    log_file: str | Path | None = None,
) -> None:
    """
    Setup logging for a run.

    Lines go to stderr and, when possible, are appended to ``log_file``.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format type (json or text)
        log_file: Optional path of the log file
    """
    level = getattr(logging, log_level.upper())

    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_format.lower() == "json":
        formatter: logging.Formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "asctime": "timestamp"},
        )
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    file_error: OSError | None = None
    if log_file:
        path = Path(log_file)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(path, encoding="utf-8"))
        except OSError as e:
            file_error = e

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # Noisy transport logs from the docker SDK
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("docker").setLevel(logging.WARNING)

    if file_error is not None:
        logger.warning(
            "Cannot write log file, logging to stderr only",
            extra={"log_file": str(log_file), "error": str(file_error)},
        )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for the given name.

    Args:
        name: Name for the logger (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)

"""
Logging setup for the simulation.

Bakes run on the background context's thread, so every line carries the
thread name next to the logger.
"""
import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "pychladni"
LOG_FORMAT = "%(asctime)s.%(msecs)03d [%(threadName)s] %(name)s %(levelname)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Attaches a stdout handler (and optionally a file handler) to the package
    logger, replacing whatever a previous call installed.

    Args:
        level: Threshold for the package logger and its handlers.
        log_file: Path of a log file, truncated on every run.
    Returns: The configured package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging to stdout%s at %s", f" and {log_file}" if log_file else "",
                 logging.getLevelName(level))
    return logger

"""Logging configuration for SteamCity."""

import logging
import sys

# Create logger for SteamCity
logger = logging.getLogger("steamcity")


def setup_logger(level: int = logging.INFO, log_file: str | None = None) -> None:
    """Setup the SteamCity logger with default configuration.

    The terminal UI owns stdout while it runs, so it passes ``log_file``
    to send records to a file instead.

    Args:
        level: Logging level (default: INFO)
        log_file: Optional path of a file to log to instead of stdout
    """
    if logger.handlers:
        # Already configured
        return

    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter("steamcity: %(message)s")
    handler.setFormatter(formatter)

    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def reset_logger() -> None:
    """Remove handlers installed by ``setup_logger``."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True

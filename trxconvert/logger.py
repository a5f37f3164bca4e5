"""
Logging utility for trxconvert.
"""
import logging
from pathlib import Path
from typing import Optional
from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)

LOGGER_NAME = "trxconvert"
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: The component name, e.g. 'reader'

    Returns:
        A logger below the 'trxconvert' namespace
    """
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def setup_logging(debug: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """
    Set up logging for the trxconvert namespace.

    Console output goes through rich; a plain-text file handler is added when
    a log file is given. Calling this again replaces the handlers.

    Args:
        debug: Whether to enable debug logging
        log_file: Optional path of a detailed log file

    Returns:
        The package logger
    """
    level = logging.DEBUG if debug else logging.INFO
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(console=console, show_path=debug)
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)

    return logger

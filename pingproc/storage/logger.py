"""
Logging configuration using loguru.

Runs execute on pool and drain threads, so every sink that shows more than a
one-line summary carries the thread name.
"""

from pathlib import Path
from typing import Optional
from loguru import logger
import sys

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"

VERBOSE_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{thread.name: <22}</cyan> | <level>{message}</level>"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {thread.name} | {name}:{function}:{line} | {message}"


def setup_logging(
    output_dir: Path,
    verbose: bool = False,
    log_name: str = "pingproc",
    console_level: Optional[str] = None,
) -> logger:
    """
    Setup application logging.

    Args:
        output_dir: Directory for log files, created if missing
        verbose: DEBUG on the console, with the thread each message came from
        log_name: Stem of the two log files
        console_level: Overrides the console level picked from ``verbose``

    Returns:
        Configured logger instance
    """
    logger.remove()

    output_dir.mkdir(parents=True, exist_ok=True)

    logger.add(
        sys.stderr,
        level=console_level or ("DEBUG" if verbose else "INFO"),
        format=VERBOSE_CONSOLE_FORMAT if verbose else CONSOLE_FORMAT,
    )

    log_file = output_dir / f"{log_name}.log"
    logger.add(
        log_file,
        rotation="10 MB",
        retention="30 days",
        level="DEBUG",
        format=FILE_FORMAT,
    )

    # Launch failures and batch aborts
    error_log = output_dir / f"{log_name}_errors.log"
    logger.add(
        error_log,
        rotation="10 MB",
        retention="90 days",
        level="ERROR",
        format=FILE_FORMAT,
    )

    logger.debug(f"Log files: {log_file}, {error_log}")

    return logger

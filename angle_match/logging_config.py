"""Console and optional file logging for the ``angle_match`` package.

Only the command-line entry point configures handlers; library modules just
call ``logging.getLogger(__name__)``.
"""
import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "angle_match"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """Attach a stderr handler (and a file handler if ``log_file``) to the package logger.

    Args:
        level: threshold for the package logger and its handlers.
        log_file: path of a log file, truncated on each start.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # main() can run several times in one process; drop the previous handlers.
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(
        '%(asctime)s %(levelname)-7s %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging configured at level %s.", logging.getLevelName(level))

"""
Logging configuration for the embodied MRIO analysis package.

Every module obtains its logger through ``setup_logger(__name__)`` so that
pipeline milestones and matrix diagnostics share one format.
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(
    name: str,
    level: str = "INFO",
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up a logger with consistent formatting.

    Parameters
    ----------
    name : str
        Name of the logger (typically __name__ from calling module).
    level : str, optional
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL), by default "INFO".
    log_file : str, optional
        If provided, also log to this file, by default None.

    Returns
    -------
    logging.Logger
        Configured logger instance.

    Examples
    --------
    >>> logger = setup_logger(__name__)
    >>> logger.info("Computing Leontief inverse...")
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Handlers are attached once per logger name
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level.upper()))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(getattr(logging, level.upper()))
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def set_package_level(level: str) -> None:
    """
    Change the level of every logger already created under this package.

    Used by the command-line driver for ``--verbose``.

    Parameters
    ----------
    level : str
        Logging level name, e.g. "DEBUG".
    """
    numeric_level = getattr(logging, level.upper())
    for name, logger in logging.Logger.manager.loggerDict.items():
        if not isinstance(logger, logging.Logger):
            continue
        if name == 'embodied_mrio' or name.startswith('embodied_mrio.'):
            logger.setLevel(numeric_level)
            for handler in logger.handlers:
                handler.setLevel(numeric_level)

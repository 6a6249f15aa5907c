"""
Logging configuration for the statemap tools.

Diagnostics go to stderr; stdout is reserved for statemap data.
"""

import logging
import sys

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application logging.

    Args:
        level: Log level for the package logger

    Returns:
        Root logger of the minio_statemap package
    """
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)]
    )

    logger = logging.getLogger('minio_statemap')
    logger.setLevel(level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Args:
        name: The module name for the logger

    Returns:
        Logger instance under the minio_statemap namespace
    """
    return logging.getLogger(f'minio_statemap.{name}')

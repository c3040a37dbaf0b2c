"""
Logging Configuration.

One logger factory for all packages, so that georeferencing diagnostics
(CRS changes, rejected specifications, points outside a projection's
domain) share one format on stdout.
"""

import logging
import sys


LOG_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Return the named logger, attaching the stdout handler once.

    Parameters
    ----------
    name : str
        Usually the module's ``__name__``.
    level : int
        Threshold of the logger.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        stream = logging.StreamHandler(sys.stdout)
        stream.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(stream)
    logger.setLevel(level)
    return logger

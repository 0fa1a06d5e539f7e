""" Logging configuration. The library emits records through
    ``loguru.logger`` and never configures sinks at import time; applications,
    including the bundled examples, call :func:`setup_logging` once at startup.
"""

from __future__ import annotations

import os
import sys

from loguru import logger


log_format = '<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | ' + \
             '<level>{level: <8}</level> | ' + \
             '<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>'


def default_level() -> str:
    return os.environ.get('TCPBUS_LOG_LEVEL', 'INFO')


def setup_logging(level: str = None) -> None:
    """ Replace any existing loguru sinks with a single sink on stderr. The
        *level* defaults to ``$TCPBUS_LOG_LEVEL``, or INFO if that is unset.
    """

    if level is None:
        level = default_level()

    level = level.upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format=log_format)
    logger.debug('logging initialized at level {}', level)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

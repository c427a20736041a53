"""Logging setup shared by the command line tools."""
from __future__ import annotations

import logging
import logging.handlers
import os

LOG_FORMAT = '[%(asctime)s L:%(lineno)d %(levelname)s] %(message)s'
MAX_LOG_BYTES = 10485760

# Logging in the working directory
g_log_path = os.path.join(os.path.abspath(os.getcwd()), 'log', 'runtime.log')

# --debug levels
DEBUG_LEVELS = {
    0: logging.ERROR,
    1: logging.INFO,
    2: logging.INFO,
    3: logging.DEBUG,
}


def logger_config(log_path=None, console_level=logging.INFO):
    """
    Send package logs to a rotating file (everything) and the console.

    :param log_path: log file, defaults to log/runtime.log under the working directory
    :param console_level: level shown on the console
    :return: the configured package logger
    """
    log_path = log_path or g_log_path
    logger = logging.getLogger('facen')
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if not os.path.isdir(os.path.dirname(log_path)):
        os.makedirs(os.path.dirname(log_path))
    file_handler = logging.handlers.RotatingFileHandler(log_path, maxBytes=MAX_LOG_BYTES, backupCount=1)
    file_handler.setLevel(logging.DEBUG)
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(console_level)
    formatter = logging.Formatter(LOG_FORMAT)
    file_handler.setFormatter(formatter)
    stream_handler.setFormatter(formatter)
    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)
    return logger


def debug_level_to_log_level(debug_level: int) -> int:
    return DEBUG_LEVELS.get(debug_level, logging.DEBUG)

"""
Logging configuration
"""

import logging
import os
from logging.handlers import RotatingFileHandler

LOGGER_NAME = 'upload-gatekeeper'

# Library loggers whose records belong in the gatekeeper log (rate-limit breaches)
LIBRARY_LOGGERS = ('flask-limiter',)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _build_handlers(logging_config):
    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
    handlers = []

    if logging_config.console:
        handlers.append(logging.StreamHandler())

    if logging_config.file:
        log_dir = os.path.dirname(logging_config.file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        handlers.append(RotatingFileHandler(
            logging_config.file,
            maxBytes=logging_config.max_bytes,
            backupCount=logging_config.backup_count
        ))

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def _replace_handlers(target, handlers, level):
    for handler in list(target.handlers):
        target.removeHandler(handler)
        handler.close()
    for handler in handlers:
        target.addHandler(handler)
    target.setLevel(level)


def setup_logger(config, name=LOGGER_NAME):
    """
    Setup the gatekeeper logger and route rate-limiter records to it

    Handlers are replaced on every call, so rebuilding the app does not
    duplicate output.

    Args:
        config: Application configuration
        name: Logger name

    Returns:
        Logger instance
    """
    level = getattr(logging, config.logging.level.upper(), logging.INFO)
    handlers = _build_handlers(config.logging)

    logger = logging.getLogger(name)
    _replace_handlers(logger, handlers, level)

    for library in LIBRARY_LOGGERS:
        library_logger = logging.getLogger(library)
        _replace_handlers(library_logger, handlers, level)
        library_logger.propagate = False

    return logger

# =============================================================================
# BACKOFFICE SERVICE - LOGGER FACTORY
# =============================================================================
# File: backoffice/logger/factory.py
# Description: Builds the application logger for the configured channel
# =============================================================================

import logging
from enum import Enum
from typing import List, Optional, Union

from backoffice.core.exceptions import LoggerConfigError
from backoffice.logger.formatter import FieldsFormatter
from backoffice.logger.handlers import (
    DailyRotatingFileHandler,
    FileLoggerConfig,
    console_handlers,
)


LOGGER_NAME = "backoffice"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
}


class LoggerChannel(str, Enum):
    """Where log records are written."""
    STDOUT = "stdout"
    FILE = "file"
    # stdout and file together
    STACK = "stack"


def create_logger(
    channel: Union[LoggerChannel, str],
    level: str = "debug",
    file_config: Optional[FileLoggerConfig] = None,
    name: str = LOGGER_NAME,
) -> logging.Logger:
    """
    Configure the application logger.

    Every module logger below ``name`` (``logging.getLogger(__name__)``
    inside the package) inherits the handlers set here. Calling this again
    replaces the previous handlers.

    Args:
        channel: stdout, file or stack
        level: debug, info, warn, error or fatal
        file_config: Required for the file and stack channels
        name: Logger namespace to configure

    Returns:
        logging.Logger: The configured logger

    Raises:
        LoggerConfigError: Unknown channel or level, missing file config,
                           or an unusable log directory
    """
    try:
        channel = LoggerChannel(channel)
    except ValueError:
        raise LoggerConfigError(
            f"unsupported logger type: {channel}",
            details={"channel": str(channel)},
        ) from None

    try:
        log_level = LOG_LEVELS[level.lower()]
    except KeyError:
        raise LoggerConfigError(
            f"unsupported log level: {level}",
            details={"level": level},
        ) from None

    if channel in (LoggerChannel.FILE, LoggerChannel.STACK) and file_config is None:
        raise LoggerConfigError(
            "invalid file logger config",
            details={"channel": channel.value},
        )

    handlers: List[logging.Handler] = []
    if channel in (LoggerChannel.STDOUT, LoggerChannel.STACK):
        handlers.extend(console_handlers())
    if channel in (LoggerChannel.FILE, LoggerChannel.STACK):
        try:
            handlers.append(DailyRotatingFileHandler(file_config))
        except OSError as exc:
            raise LoggerConfigError(
                f"failed to create log directory: {exc}",
                details={"log_path": file_config.log_path},
            ) from exc

    logger = logging.getLogger(name)
    close_logger(logger)

    formatter = FieldsFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(log_level)
    logger.propagate = False
    return logger


def close_logger(logger: logging.Logger) -> None:
    """
    Detach and close every handler of the logger.

    File handlers flush on close. Console handlers leave their stream
    alone, which may already be closed by its owner.
    """
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

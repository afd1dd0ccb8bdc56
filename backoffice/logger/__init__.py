# =============================================================================
# LOGGER MODULE INITIALIZATION
# =============================================================================
# File: backoffice/logger/__init__.py
# Description: Logger module exports
# =============================================================================

from backoffice.logger.factory import (
    LOGGER_NAME,
    LoggerChannel,
    create_logger,
    close_logger,
)
from backoffice.logger.formatter import FieldsFormatter, fields
from backoffice.logger.handlers import (
    DailyRotatingFileHandler,
    FileLoggerConfig,
    console_handlers,
)

__all__ = [
    "LOGGER_NAME",
    "LoggerChannel",
    "create_logger",
    "close_logger",
    "FieldsFormatter",
    "fields",
    "DailyRotatingFileHandler",
    "FileLoggerConfig",
    "console_handlers",
]

# =============================================================================
# CORE MODULE INITIALIZATION
# =============================================================================
# File: backoffice/core/__init__.py
# Description: Core module exports
#              Settings and security live in their own modules
#              (backoffice.core.config, backoffice.core.security)
# =============================================================================

from backoffice.core.exceptions import (
    # Base
    BackofficeError,

    # Configuration
    ConfigurationError,
    UnsupportedDriverError,
    InvalidDriverConfigError,
    DriverNotImplementedError,
    LoggerConfigError,

    # Database
    DatabaseError,
    DatabaseConnectionError,
    DatabaseNotConnectedError,
    DatabaseQueryError,
    DriverNotFoundError,
    DriverAlreadyExistsError,
    DatabaseManagerError,

    # Authentication
    AuthenticationError,
    InvalidCredentialsError,
    TokenExpiredError,
    TokenInvalidError,
    TokenMissingError,

    # User
    UserNotFoundError,
    UserExistsError,
)

__all__ = [
    "BackofficeError",
    "ConfigurationError",
    "UnsupportedDriverError",
    "InvalidDriverConfigError",
    "DriverNotImplementedError",
    "LoggerConfigError",
    "DatabaseError",
    "DatabaseConnectionError",
    "DatabaseNotConnectedError",
    "DatabaseQueryError",
    "DriverNotFoundError",
    "DriverAlreadyExistsError",
    "DatabaseManagerError",
    "AuthenticationError",
    "InvalidCredentialsError",
    "TokenExpiredError",
    "TokenInvalidError",
    "TokenMissingError",
    "UserNotFoundError",
    "UserExistsError",
]

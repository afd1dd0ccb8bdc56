# =============================================================================
# BACKOFFICE SERVICE - CORE EXCEPTIONS MODULE
# =============================================================================
# File: backoffice/core/exceptions.py
# Description: Custom exception hierarchy for the backoffice service
#              Every error carries the HTTP status code it surfaces as
# =============================================================================

from typing import Optional, Dict, Any
from fastapi import status


class BackofficeError(Exception):
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    BASE EXCEPTION CLASS                                  │
    │  All custom exceptions inherit from this base class                      │
    │  Provides consistent error structure across the application             │
    └─────────────────────────────────────────────────────────────────────────┘

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error identifier
        status_code: HTTP status code for API responses
        details: Additional context for debugging
    """

    def __init__(
        self,
        message: str = "An error occurred",
        error_code: str = "BACKOFFICE_ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


# =============================================================================
# CONFIGURATION EXCEPTIONS
# =============================================================================

class ConfigurationError(BackofficeError):
    """
    Raised when configuration cannot be turned into a working component.

    Examples:
        - Unknown database driver tag
        - Driver config of the wrong type for the requested driver
        - Unknown log channel
    """

    def __init__(
        self,
        message: str = "Invalid configuration",
        error_code: str = "CONFIGURATION_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details
        )


class UnsupportedDriverError(ConfigurationError):
    """Raised when a driver tag is not known to the factory."""

    def __init__(self, driver_type: str):
        super().__init__(
            message=f"unsupported driver type: {driver_type}",
            error_code="UNSUPPORTED_DRIVER",
            details={"driver": driver_type}
        )


class InvalidDriverConfigError(ConfigurationError):
    """Raised when the config object does not match the requested driver."""

    def __init__(self, driver_type: str, config_type: str):
        super().__init__(
            message=f"invalid {driver_type} config type",
            error_code="INVALID_DRIVER_CONFIG",
            details={"driver": driver_type, "config_type": config_type}
        )


class DriverNotImplementedError(ConfigurationError):
    """Raised for driver tags that are recognized but have no adapter yet."""

    def __init__(self, driver_type: str):
        super().__init__(
            message=f"{driver_type} driver not yet implemented",
            error_code="DRIVER_NOT_IMPLEMENTED",
            details={"driver": driver_type}
        )


class LoggerConfigError(ConfigurationError):
    """Raised when a logger cannot be built from the logging settings."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="LOGGER_CONFIG_ERROR",
            details=details
        )


# =============================================================================
# DATABASE EXCEPTIONS
# =============================================================================

class DatabaseError(BackofficeError):
    """Base class for database errors."""

    def __init__(
        self,
        message: str = "Database error",
        error_code: str = "DATABASE_ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status_code,
            details=details
        )


class DatabaseConnectionError(DatabaseError):
    """Raised when opening, pinging or wrapping a connection pool fails."""

    def __init__(
        self,
        message: str = "Database connection failed",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="DATABASE_CONNECTION_ERROR",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details=details
        )


class DatabaseNotConnectedError(DatabaseError):
    """Raised when a driver is used before connect() succeeded."""

    def __init__(self, driver_type: Optional[str] = None):
        super().__init__(
            message="database connection is not established",
            error_code="DATABASE_NOT_CONNECTED",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details={"driver": driver_type} if driver_type else {}
        )


class DatabaseQueryError(DatabaseError):
    """Raised when a query fails unexpectedly."""

    def __init__(
        self,
        message: str = "Database query failed",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="DATABASE_QUERY_ERROR",
            details=details
        )


class DriverNotFoundError(DatabaseError):
    """Raised when the manager has no driver registered under a name."""

    def __init__(self, name: str):
        super().__init__(
            message=f"driver with name {name} not found",
            error_code="DRIVER_NOT_FOUND",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"name": name}
        )


class DriverAlreadyExistsError(DatabaseError):
    """Raised when a driver name is registered twice."""

    def __init__(self, name: str):
        super().__init__(
            message=f"driver with name {name} already exists",
            error_code="DRIVER_EXISTS",
            status_code=status.HTTP_409_CONFLICT,
            details={"name": name}
        )


class DatabaseManagerError(DatabaseError):
    """
    Aggregated failure of a batch manager operation.

    Attributes:
        errors: Mapping of driver name to the exception it raised
    """

    def __init__(self, operation: str, errors: Dict[str, Exception]):
        self.errors = errors
        summary = "; ".join(f"{name}: {exc}" for name, exc in errors.items())
        super().__init__(
            message=f"errors during {operation}: {summary}",
            error_code="DATABASE_MANAGER_ERROR",
            details={"operation": operation, "drivers": sorted(errors)}
        )


# =============================================================================
# AUTHENTICATION EXCEPTIONS
# =============================================================================

class AuthenticationError(BackofficeError):
    """
    Raised when authentication fails (invalid credentials, expired token, etc.)
    """

    def __init__(
        self,
        message: str = "Authentication failed",
        error_code: str = "AUTHENTICATION_FAILED",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status.HTTP_401_UNAUTHORIZED,
            details=details
        )


class InvalidCredentialsError(AuthenticationError):
    """Raised when email/password combination is invalid."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Invalid credentials",
            error_code="INVALID_CREDENTIALS",
            details=details
        )


class TokenExpiredError(AuthenticationError):
    """Raised when JWT token has expired."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Token has expired",
            error_code="TOKEN_EXPIRED",
            details=details
        )


class TokenInvalidError(AuthenticationError):
    """Raised when JWT token is malformed, has a bad signature or wrong claims."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Invalid token",
            error_code="TOKEN_INVALID",
            details=details
        )


class TokenMissingError(AuthenticationError):
    """Raised when authentication token is not provided."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Authentication token is required",
            error_code="TOKEN_MISSING",
            details=details
        )


# =============================================================================
# USER EXCEPTIONS
# =============================================================================

class UserNotFoundError(BackofficeError):
    """Raised when user cannot be found."""

    def __init__(self, user_id: Optional[str] = None):
        super().__init__(
            message="User not found",
            error_code="USER_NOT_FOUND",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"user_id": user_id} if user_id else {}
        )


class UserExistsError(BackofficeError):
    """Raised when attempting to create a user that already exists."""

    def __init__(self, field: str = "email"):
        super().__init__(
            message=f"User with this {field} already exists",
            error_code="USER_EXISTS",
            status_code=status.HTTP_409_CONFLICT,
            details={"field": field}
        )


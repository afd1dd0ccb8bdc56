# =============================================================================
# DATABASE MODULE INITIALIZATION
# =============================================================================
# File: backoffice/db/__init__.py
# Description: Database module exports
# =============================================================================

from backoffice.db.base import (
    Base,
    Driver,
    SQLDriver,
    SQLConfig,
    DriverType,
    AccessMode,
)
from backoffice.db.drivers import (
    PostgresConfig,
    PostgresDriver,
    MySQLConfig,
    MySQLDriver,
)
from backoffice.db.factory import DriverFactory
from backoffice.db.manager import DatabaseManager, PRIMARY_DRIVER
from backoffice.db.models import User, UserRole

__all__ = [
    # Base
    "Base",
    "Driver",
    "SQLDriver",
    "SQLConfig",
    "DriverType",
    "AccessMode",

    # Drivers
    "PostgresConfig",
    "PostgresDriver",
    "MySQLConfig",
    "MySQLDriver",

    # Factory / Manager
    "DriverFactory",
    "DatabaseManager",
    "PRIMARY_DRIVER",

    # Models
    "User",
    "UserRole",
]

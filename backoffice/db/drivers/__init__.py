# =============================================================================
# DATABASE DRIVERS INITIALIZATION
# =============================================================================
# File: backoffice/db/drivers/__init__.py
# Description: Driver module exports
# =============================================================================

from backoffice.db.drivers.postgres import PostgresConfig, PostgresDriver
from backoffice.db.drivers.mysql import MySQLConfig, MySQLDriver

__all__ = [
    "PostgresConfig",
    "PostgresDriver",
    "MySQLConfig",
    "MySQLDriver",
]

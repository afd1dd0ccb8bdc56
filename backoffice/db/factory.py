# =============================================================================
# BACKOFFICE SERVICE - DATABASE DRIVER FACTORY
# =============================================================================
# File: backoffice/db/factory.py
# Description: Factory pattern for database driver instantiation
#              Maps a driver tag and typed config to an unconnected driver
# =============================================================================

from typing import Any, Union

from backoffice.core.exceptions import (
    DriverNotImplementedError,
    InvalidDriverConfigError,
    UnsupportedDriverError,
)
from backoffice.db.base import Driver, DriverType
from backoffice.db.drivers.mysql import MySQLConfig, MySQLDriver
from backoffice.db.drivers.postgres import PostgresConfig, PostgresDriver


class DriverFactory:
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    DATABASE DRIVER FACTORY                               │
    │  Creates database drivers from a driver tag and a typed config          │
    │  Supports runtime switching between PostgreSQL and MySQL                │
    └─────────────────────────────────────────────────────────────────────────┘

    The factory holds no state and never connects; the caller decides when
    to call connect() on the returned driver.

    Usage:
        factory = DriverFactory()
        driver = factory.create_driver("postgresql", PostgresConfig(host="db"))
        await driver.connect()
    """

    def create_driver(
        self,
        driver_type: Union[DriverType, str],
        config: Any,
    ) -> Driver:
        """
        Build an unconnected driver.

        Args:
            driver_type: DriverType or its string tag
            config: PostgresConfig for postgresql, MySQLConfig for mysql

        Returns:
            Driver: New driver instance

        Raises:
            UnsupportedDriverError: Unknown driver tag
            InvalidDriverConfigError: Config type does not match the driver
            DriverNotImplementedError: Known tag without an implementation
        """
        driver_type = self.resolve_type(driver_type)

        if driver_type == DriverType.POSTGRESQL:
            if not isinstance(config, PostgresConfig):
                raise InvalidDriverConfigError(
                    driver_type.value, type(config).__name__
                )
            return PostgresDriver(config)

        if driver_type == DriverType.MYSQL:
            if not isinstance(config, MySQLConfig):
                raise InvalidDriverConfigError(
                    driver_type.value, type(config).__name__
                )
            return MySQLDriver(config)

        raise DriverNotImplementedError(driver_type.value)

    @staticmethod
    def resolve_type(driver_type: Union[DriverType, str]) -> DriverType:
        """
        Normalize a driver tag.

        Raises:
            UnsupportedDriverError: If the tag is not a known DriverType
        """
        if isinstance(driver_type, DriverType):
            return driver_type
        try:
            return DriverType(driver_type)
        except ValueError:
            raise UnsupportedDriverError(str(driver_type)) from None

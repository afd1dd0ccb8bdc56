# =============================================================================
# BACKOFFICE SERVICE - DATABASE MANAGER
# =============================================================================
# File: backoffice/db/manager.py
# Description: Registry of named database drivers with batch lifecycle
# =============================================================================

import logging
from typing import Dict, Iterator, List, Optional

from backoffice.core.exceptions import (
    DatabaseManagerError,
    DriverAlreadyExistsError,
    DriverNotFoundError,
)
from backoffice.db.base import Driver
from backoffice.logger import fields


logger = logging.getLogger(__name__)

PRIMARY_DRIVER = "primary"


class DatabaseManager:
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    DATABASE MANAGER                                      │
    │  Holds every configured driver under a unique name                      │
    │  Connects, health-checks and closes them as a group                     │
    └─────────────────────────────────────────────────────────────────────────┘

    By convention the main database is registered as "primary".

    Batch operations walk drivers in registration order. connect_all() and
    close_all() attempt every driver and raise one DatabaseManagerError
    naming each failure; connect_all(fail_fast=True) stops at the first.
    """

    def __init__(self) -> None:
        self._drivers: Dict[str, Driver] = {}

    def add_driver(self, name: str, driver: Driver) -> None:
        """
        Register a driver.

        Raises:
            DriverAlreadyExistsError: If the name is taken; the existing
                                      driver is left in place
        """
        if name in self._drivers:
            raise DriverAlreadyExistsError(name)
        self._drivers[name] = driver

    def get_driver(self, name: str = PRIMARY_DRIVER) -> Driver:
        """
        Look up a driver by name.

        Raises:
            DriverNotFoundError: If nothing is registered under the name
        """
        try:
            return self._drivers[name]
        except KeyError:
            raise DriverNotFoundError(name) from None

    def names(self) -> List[str]:
        """Registered driver names in registration order."""
        return list(self._drivers)

    def __contains__(self, name: object) -> bool:
        return name in self._drivers

    def __len__(self) -> int:
        return len(self._drivers)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._drivers))

    async def connect_all(self, fail_fast: bool = False) -> None:
        """
        Connect every registered driver.

        Args:
            fail_fast: Stop at the first failure instead of trying the rest

        Raises:
            DatabaseManagerError: Carrying {name: exception} for each failure
        """
        errors: Dict[str, Exception] = {}

        for name, driver in list(self._drivers.items()):
            try:
                await driver.connect()
            except Exception as exc:
                logger.error(
                    "Failed to connect database",
                    extra=fields(name=name, error=str(exc)),
                )
                errors[name] = exc
                if fail_fast:
                    break

        if errors:
            raise DatabaseManagerError("connect", errors)

    async def close_all(self) -> None:
        """
        Close every registered driver, continuing past failures.

        Raises:
            DatabaseManagerError: Carrying {name: exception} for each failure
        """
        errors: Dict[str, Exception] = {}

        for name, driver in list(self._drivers.items()):
            try:
                await driver.close()
            except Exception as exc:
                logger.error(
                    "Failed to close database",
                    extra=fields(name=name, error=str(exc)),
                )
                errors[name] = exc

        if errors:
            raise DatabaseManagerError("close", errors)

    async def health(self) -> Dict[str, Optional[Exception]]:
        """
        Run a health check on every driver.

        Returns:
            Dict mapping each name to None when healthy or the exception
        """
        results: Dict[str, Optional[Exception]] = {}
        for name, driver in list(self._drivers.items()):
            try:
                await driver.health()
                results[name] = None
            except Exception as exc:
                results[name] = exc
        return results

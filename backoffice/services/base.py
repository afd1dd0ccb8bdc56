# =============================================================================
# BACKOFFICE SERVICE - SERVICE BASE
# =============================================================================
# File: backoffice/services/base.py
# Description: Shared wiring for services that work on the primary database
# =============================================================================

from typing import Optional

from backoffice.db.base import AccessMode, Driver
from backoffice.db.manager import PRIMARY_DRIVER, DatabaseManager
from backoffice.users.repository import UserRepository, build_user_repository


class BaseService:
    """
    Base for services backed by the primary database.

    The user repository strategy is chosen once, at construction, from the
    primary driver's access mode; the driver must already be connected.

    Args:
        manager: Database manager holding a "primary" driver
    """

    def __init__(self, manager: DatabaseManager):
        self._manager = manager
        self._driver: Driver = manager.get_driver(PRIMARY_DRIVER)
        self._users: UserRepository = build_user_repository(self._driver)

    @property
    def access_mode(self) -> AccessMode:
        return self._driver.access_mode

    async def health(self) -> Optional[Exception]:
        """
        Health of the primary database.

        Returns:
            None when healthy, otherwise the error raised by the check
        """
        try:
            await self._driver.health()
        except Exception as exc:
            return exc
        return None

# =============================================================================
# BACKOFFICE SERVICE - USER SERVICE
# =============================================================================
# File: backoffice/services/user_service.py
# Description: Business logic for the users CRUD API
# =============================================================================

import logging
from typing import List
from uuid import UUID

from backoffice.core.exceptions import UserExistsError, UserNotFoundError
from backoffice.core.security import PasswordManager
from backoffice.db.manager import DatabaseManager
from backoffice.db.models import User, UserRole, generate_uuid
from backoffice.logger import fields
from backoffice.services.base import BaseService
from backoffice.users.schemas import UserCreate, UserResponse, UserUpdate
from backoffice.utils.helpers import utc_now


logger = logging.getLogger(__name__)


def _normalize_id(user_id: str) -> str:
    """Canonical UUID string; malformed ids cannot match any user."""
    try:
        return str(UUID(user_id))
    except (ValueError, AttributeError, TypeError):
        raise UserNotFoundError(user_id) from None


class UserService(BaseService):
    """
    User management on the primary database.

    All methods return UserResponse objects, so password hashes never leave
    the service.
    """

    def __init__(self, manager: DatabaseManager, password_manager: PasswordManager):
        super().__init__(manager)
        self._passwords = password_manager

    async def get_user(self, user_id: str) -> UserResponse:
        """
        Fetch one user.

        Raises:
            UserNotFoundError: Unknown or malformed id
        """
        user = await self._users.get_by_id(_normalize_id(user_id))
        if user is None:
            raise UserNotFoundError(user_id)
        return UserResponse.model_validate(user)

    async def create_user(self, data: UserCreate) -> UserResponse:
        """
        Create a user with role "user".

        Raises:
            UserExistsError: If the email is already registered
        """
        email = data.email.lower()
        if await self._users.exists_email(email):
            raise UserExistsError(field="email")

        now = utc_now()
        user = User(
            id=generate_uuid(),
            email=email,
            username=data.username,
            password=self._passwords.hash_password(data.password) if data.password else "",
            first_name=data.first_name,
            last_name=data.last_name,
            role=UserRole.USER.value,
            active=True,
            created_at=now,
            updated_at=now,
        )
        user = await self._users.create(user)

        logger.info("User created", extra=fields(user_id=user.id))
        return UserResponse.model_validate(user)

    async def update_user(self, user_id: str, data: UserUpdate) -> UserResponse:
        """
        Update the non-empty fields of an existing user.

        Raises:
            UserNotFoundError: Unknown or malformed id
            UserExistsError: New email belongs to another user
        """
        user_id = _normalize_id(user_id)
        current = await self._users.get_by_id(user_id)
        if current is None:
            raise UserNotFoundError(user_id)

        changes = data.changes()
        if "email" in changes:
            changes["email"] = changes["email"].lower()
        if "password" in changes:
            changes["password"] = self._passwords.hash_password(changes["password"])
        changes["updated_at"] = utc_now()

        user = await self._users.update(user_id, changes)

        logger.info(
            "User updated",
            extra=fields(user_id=user_id, changed=",".join(sorted(changes))),
        )
        return UserResponse.model_validate(user)

    async def delete_user(self, user_id: str) -> None:
        """
        Delete a user.

        Raises:
            UserNotFoundError: No row matched the id
        """
        if not await self._users.delete(_normalize_id(user_id)):
            raise UserNotFoundError(user_id)
        logger.info("User deleted", extra=fields(user_id=user_id))

    async def list_users(self, limit: int, offset: int) -> List[UserResponse]:
        """Page of users ordered by creation time, newest first."""
        users = await self._users.list_users(limit=limit, offset=offset)
        return [UserResponse.model_validate(user) for user in users]

    async def count_users(self) -> int:
        return await self._users.count_users()

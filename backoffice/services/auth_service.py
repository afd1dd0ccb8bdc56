# =============================================================================
# BACKOFFICE SERVICE - AUTH SERVICE
# =============================================================================
# File: backoffice/services/auth_service.py
# Description: Business logic layer for authentication operations
#              Orchestrates the user repository, hashing and token issuing
# =============================================================================

import logging
from typing import Optional

from backoffice.core.exceptions import (
    InvalidCredentialsError,
    TokenExpiredError,
    TokenInvalidError,
    UserExistsError,
)
from backoffice.core.security import JWTManager, PasswordManager, TokenClaims
from backoffice.db.manager import DatabaseManager
from backoffice.db.models import User, UserRole, generate_uuid
from backoffice.logger import fields
from backoffice.services.base import BaseService
from backoffice.users.schemas import (
    LoginResponse,
    RefreshResponse,
    RegisterRequest,
    UserResponse,
)
from backoffice.utils.helpers import utc_now


logger = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    AUTHENTICATION SERVICE                                │
    │  Business logic layer handling all authentication operations            │
    │  Coordinates between the user repository and security components        │
    └─────────────────────────────────────────────────────────────────────────┘

    Responsibilities:
        - User registration
        - Login with password verification and hash upgrade
        - Access/refresh token issuing and refresh
        - Logout bookkeeping
    """

    def __init__(
        self,
        manager: DatabaseManager,
        password_manager: PasswordManager,
        jwt_manager: JWTManager,
    ):
        """
        Initialize service with its collaborators.

        Args:
            manager: Database manager holding the primary driver
            password_manager: Password hashing component
            jwt_manager: Token issuing component
        """
        super().__init__(manager)
        self._passwords = password_manager
        self._tokens = jwt_manager

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    async def register(self, data: RegisterRequest) -> UserResponse:
        """
        Register a new user.

        Args:
            data: Registration data

        Returns:
            UserResponse: Created user (without password)

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
            password=self._passwords.hash_password(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            role=UserRole.USER.value,
            active=True,
            created_at=now,
            updated_at=now,
        )
        user = await self._users.create(user)

        logger.info("User registered", extra=fields(user_id=user.id, email=user.email))
        return UserResponse.model_validate(user)

    # =========================================================================
    # LOGIN
    # =========================================================================

    async def login(self, email: str, password: str) -> LoginResponse:
        """
        Authenticate an active user and issue tokens.

        Flow:
            1. Load the active user by email
            2. Verify password, upgrading the stored hash when needed
            3. Issue access and refresh tokens

        Raises:
            InvalidCredentialsError: Unknown email, inactive account or
                                     wrong password
        """
        email = email.lower()
        user = await self._users.get_by_email(email, active_only=True)
        if user is None:
            logger.warning("Login failed", extra=fields(email=email, reason="user_not_found"))
            raise InvalidCredentialsError()

        is_valid, needs_rehash = self._passwords.verify_password(password, user.password)
        if not is_valid:
            logger.warning("Login failed", extra=fields(email=email, reason="invalid_password"))
            raise InvalidCredentialsError()

        if needs_rehash:
            await self._users.update(
                user.id,
                {"password": self._passwords.hash_password(password), "updated_at": utc_now()},
            )

        token = self._tokens.create_token(user.id, user.email, user.role, "access")
        refresh_token = self._tokens.create_token(user.id, user.email, user.role, "refresh")

        logger.info("User logged in", extra=fields(user_id=user.id))
        return LoginResponse(
            token=token,
            refresh_token=refresh_token,
            token_type="bearer",
            expires_in=self._tokens.access_token_expires_in,
            user=UserResponse.model_validate(user),
        )

    # =========================================================================
    # TOKENS
    # =========================================================================

    async def refresh(self, refresh_token: str) -> RefreshResponse:
        """
        Exchange a refresh token for a new access token.

        Raises:
            TokenExpiredError: Refresh token expired
            TokenInvalidError: Bad signature, issuer or token type
        """
        claims = self._tokens.decode_token(refresh_token, expected_type="refresh")
        token = self._tokens.create_token(claims.user_id, claims.email, claims.role, "access")
        return RefreshResponse(
            token=token,
            token_type="bearer",
            expires_in=self._tokens.access_token_expires_in,
        )

    def verify_access_token(self, token: str) -> TokenClaims:
        """
        Validate an access token.

        Raises:
            TokenExpiredError: Token expired
            TokenInvalidError: Token invalid or not an access token
        """
        return self._tokens.decode_token(token, expected_type="access")

    async def logout(self, token: Optional[str]) -> None:
        """
        Record a logout.

        Tokens are stateless, so nothing is revoked; an unreadable token is
        logged and otherwise ignored.
        """
        if not token:
            logger.info("Logout without token")
            return

        try:
            claims = self._tokens.decode_token(token)
        except (TokenExpiredError, TokenInvalidError) as exc:
            logger.info("Logout with unusable token", extra=fields(reason=exc.error_code))
            return

        logger.info("User logged out", extra=fields(user_id=claims.user_id, jti=claims.jti))

# =============================================================================
# BACKOFFICE SERVICE - API DEPENDENCIES
# =============================================================================
# File: backoffice/api/deps.py
# Description: FastAPI dependencies resolving components from app.state
# =============================================================================

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backoffice.core.config import Settings
from backoffice.core.exceptions import TokenMissingError
from backoffice.core.security import TokenClaims
from backoffice.db.manager import DatabaseManager
from backoffice.services.auth_service import AuthService
from backoffice.services.user_service import UserService


# =============================================================================
# SECURITY SCHEME
# =============================================================================

# Bearer token scheme
bearer_scheme = HTTPBearer(
    scheme_name="Bearer",
    description="JWT access token",
    auto_error=False,
)


# =============================================================================
# APPLICATION STATE
# =============================================================================

def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_database_manager(request: Request) -> DatabaseManager:
    return request.app.state.db_manager


def get_auth_service(request: Request) -> AuthService:
    """Auth service built during application startup."""
    return request.app.state.auth_service


def get_user_service(request: Request) -> UserService:
    """User service built during application startup."""
    return request.app.state.user_service


SettingsDep = Annotated[Settings, Depends(get_settings_dep)]
DatabaseManagerDep = Annotated[DatabaseManager, Depends(get_database_manager)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]


# =============================================================================
# TOKEN EXTRACTION
# =============================================================================

async def get_optional_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """
    Optionally extract the bearer token.

    Returns:
        Optional token string
    """
    if credentials is None:
        return None
    return credentials.credentials


OptionalToken = Annotated[Optional[str], Depends(get_optional_token)]


async def require_user_access(
    settings: SettingsDep,
    auth_service: AuthServiceDep,
    token: OptionalToken,
) -> Optional[TokenClaims]:
    """
    Guard for the users routes.

    Open unless AUTH_PROTECT_USERS is enabled, in which case a valid
    access token is required.

    Raises:
        TokenMissingError: Protection enabled and no token sent
        TokenExpiredError: Token expired
        TokenInvalidError: Token invalid or not an access token
    """
    if not settings.auth_protect_users:
        return None
    if token is None:
        raise TokenMissingError()
    return auth_service.verify_access_token(token)

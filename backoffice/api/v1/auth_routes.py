# =============================================================================
# BACKOFFICE SERVICE - AUTH ROUTES
# =============================================================================
# File: backoffice/api/v1/auth_routes.py
# Description: Authentication API endpoints (register, login, logout, refresh)
# =============================================================================

from fastapi import APIRouter, status

from backoffice.api.deps import AuthServiceDep, OptionalToken
from backoffice.users.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
)


router = APIRouter(prefix="/auth", tags=["Authentication"])


# =============================================================================
# REGISTRATION
# =============================================================================

@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Create a new user account with email, password and profile.",
)
async def register(
    data: RegisterRequest,
    auth_service: AuthServiceDep,
) -> RegisterResponse:
    """
    Register a new user account.

    - **email**: Valid email address (unique)
    - **password**: Minimum 6 characters
    - **first_name**, **last_name**, **username**: Required
    """
    user = await auth_service.register(data)
    return RegisterResponse(message="User registered successfully", user=user)


# =============================================================================
# LOGIN
# =============================================================================

@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Authenticate user",
    description="Login with email and password to receive access and refresh tokens.",
)
async def login(
    data: LoginRequest,
    auth_service: AuthServiceDep,
) -> LoginResponse:
    """
    Authenticate user and return JWT tokens.

    Returns:
    - **token**: Access token for API calls
    - **refresh_token**: Long-lived token for renewal
    """
    return await auth_service.login(email=data.email, password=data.password)


# =============================================================================
# LOGOUT
# =============================================================================

@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Logout",
    description="Log the logout of the bearer token, if any. Always succeeds.",
)
async def logout(
    auth_service: AuthServiceDep,
    token: OptionalToken,
) -> MessageResponse:
    await auth_service.logout(token)
    return MessageResponse(message="Logged out successfully")


# =============================================================================
# TOKEN REFRESH
# =============================================================================

@router.post(
    "/refresh",
    response_model=RefreshResponse,
    summary="Refresh access token",
    description="Exchange a refresh token for a new access token.",
)
async def refresh_token(
    data: RefreshRequest,
    auth_service: AuthServiceDep,
) -> RefreshResponse:
    return await auth_service.refresh(data.refresh_token)

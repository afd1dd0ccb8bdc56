# =============================================================================
# BACKOFFICE SERVICE - USER & AUTH SCHEMAS
# =============================================================================
# File: backoffice/users/schemas.py
# Description: Pydantic models for request/response validation
#              Type-safe data transfer objects for the auth and users API
# =============================================================================

from typing import Dict, List, Optional
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, ConfigDict


# =============================================================================
# BASE SCHEMAS
# =============================================================================

class BaseSchema(BaseModel):
    """Base schema with common configuration."""
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# AUTH REQUEST SCHEMAS
# =============================================================================

class RegisterRequest(BaseSchema):
    """
    Schema for user registration request.

    Validation Rules:
        - email: Valid email format
        - password: at least 6 characters
        - first_name, last_name, username: required, non-empty
    """
    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["a@x.com"]
    )
    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="Password (min 6 chars)",
        examples=["secret1"]
    )
    first_name: str = Field(..., min_length=1, max_length=100, examples=["A"])
    last_name: str = Field(..., min_length=1, max_length=100, examples=["B"])
    username: str = Field(..., min_length=1, max_length=100, examples=["a"])


class LoginRequest(BaseSchema):
    """Schema for login request."""
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class RefreshRequest(BaseSchema):
    """Schema for token refresh request."""
    refresh_token: str = Field(..., min_length=1, description="Refresh token")


# =============================================================================
# USER REQUEST SCHEMAS
# =============================================================================

class UserCreate(BaseSchema):
    """
    Schema for creating a user through the users API.

    Only the email is required; an account created without a password
    cannot log in until one is set.
    """
    email: EmailStr = Field(..., description="Email address")
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    username: str = Field("", max_length=100)
    first_name: str = Field("", max_length=100)
    last_name: str = Field("", max_length=100)


class UserUpdate(BaseSchema):
    """
    Schema for updating a user.

    Omitted or empty fields keep their current value.
    """
    email: Optional[EmailStr] = Field(None, description="New email address")
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    username: Optional[str] = Field(None, max_length=100)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)

    def changes(self) -> Dict[str, str]:
        """Non-empty fields supplied by the client."""
        return {
            key: value
            for key, value in self.model_dump(exclude_none=True).items()
            if value != ""
        }


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class UserResponse(BaseSchema):
    """Schema for user response (excludes the password hash)."""
    id: str = Field(..., description="User UUID")
    email: str = Field(..., description="Email address")
    username: str = Field(..., description="Username")
    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    role: str = Field(..., description="admin, user or guest")
    active: bool = Field(..., description="Account active status")
    created_at: datetime = Field(..., description="Account creation date")
    updated_at: datetime = Field(..., description="Last update date")


class MessageResponse(BaseSchema):
    """Generic message response."""
    message: str


class RegisterResponse(BaseSchema):
    """Response for successful registration."""
    message: str = "User registered successfully"
    user: UserResponse


class LoginResponse(BaseSchema):
    """Response for successful login."""
    token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    user: UserResponse


class RefreshResponse(BaseSchema):
    """Response for token refresh."""
    token: str = Field(..., description="New JWT access token")
    token_type: str = "bearer"
    expires_in: int


class UserDataResponse(BaseSchema):
    """Single user wrapped in a data envelope."""
    data: UserResponse


class UserMessageResponse(BaseSchema):
    """Single user with a status message."""
    message: str
    data: UserResponse


class Pagination(BaseSchema):
    """Pagination metadata."""
    page: int
    limit: int
    total: int


class UserListResponse(BaseSchema):
    """Paginated user list."""
    data: List[UserResponse]
    pagination: Pagination


# =============================================================================
# HEALTH SCHEMAS
# =============================================================================

class HealthResponse(BaseSchema):
    """Liveness probe response."""
    status: str = "healthy"
    service: str
    version: str
    uptime: str


class ReadinessResponse(BaseSchema):
    """Readiness probe response with per-database status."""
    status: str
    databases: Dict[str, str]

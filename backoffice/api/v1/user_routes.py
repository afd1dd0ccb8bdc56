# =============================================================================
# BACKOFFICE SERVICE - USER ROUTES
# =============================================================================
# File: backoffice/api/v1/user_routes.py
# Description: Users CRUD API endpoints
# =============================================================================

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from backoffice.api.deps import UserServiceDep, require_user_access
from backoffice.users.schemas import (
    MessageResponse,
    Pagination,
    UserCreate,
    UserDataResponse,
    UserListResponse,
    UserMessageResponse,
    UserUpdate,
)
from backoffice.utils.helpers import clamp_pagination


router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(require_user_access)],
)


@router.get(
    "",
    response_model=UserListResponse,
    summary="List users",
    description="Paginated list of users, newest first.",
)
async def list_users(
    user_service: UserServiceDep,
    page: Optional[str] = Query(
        None,
        description="Page number (default 1; invalid or below 1 becomes 1)",
    ),
    limit: Optional[str] = Query(
        None,
        description="Page size (default 10, max 100; invalid or below 1 becomes 10)",
    ),
) -> UserListResponse:
    # Unparseable values fall back to the defaults instead of a 422
    page, limit, offset = clamp_pagination(page, limit)

    users = await user_service.list_users(limit=limit, offset=offset)
    total = await user_service.count_users()

    return UserListResponse(
        data=users,
        pagination=Pagination(page=page, limit=limit, total=total),
    )


@router.post(
    "",
    response_model=UserMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
)
async def create_user(
    data: UserCreate,
    user_service: UserServiceDep,
) -> UserMessageResponse:
    user = await user_service.create_user(data)
    return UserMessageResponse(message="User created successfully", data=user)


@router.get(
    "/{user_id}",
    response_model=UserDataResponse,
    summary="Get user",
)
async def get_user(
    user_id: str,
    user_service: UserServiceDep,
) -> UserDataResponse:
    return UserDataResponse(data=await user_service.get_user(user_id))


@router.put(
    "/{user_id}",
    response_model=UserMessageResponse,
    summary="Update user",
    description="Update the supplied, non-empty fields of a user.",
)
async def update_user(
    user_id: str,
    data: UserUpdate,
    user_service: UserServiceDep,
) -> UserMessageResponse:
    user = await user_service.update_user(user_id, data)
    return UserMessageResponse(message="User updated successfully", data=user)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Delete user",
)
async def delete_user(
    user_id: str,
    user_service: UserServiceDep,
) -> MessageResponse:
    await user_service.delete_user(user_id)
    return MessageResponse(message="User deleted successfully")

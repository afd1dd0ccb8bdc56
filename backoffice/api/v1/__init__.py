# =============================================================================
# API V1 INITIALIZATION
# =============================================================================
# File: backoffice/api/v1/__init__.py
# Description: Version 1 API router aggregating all endpoints
# =============================================================================

from fastapi import APIRouter

from backoffice.api.v1.auth_routes import router as auth_router
from backoffice.api.v1.user_routes import router as user_router


# Main v1 router
router = APIRouter(prefix="/api/v1")

router.include_router(auth_router)
router.include_router(user_router)

__all__ = ["router"]

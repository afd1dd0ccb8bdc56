# =============================================================================
# API MODULE INITIALIZATION
# =============================================================================
# File: backoffice/api/__init__.py
# Description: API module exports
# =============================================================================

from backoffice.api.v1 import router as v1_router
from backoffice.api.health_routes import router as health_router
from backoffice.api.middleware import LoggingMiddleware

__all__ = [
    "v1_router",
    "health_router",
    "LoggingMiddleware",
]

# =============================================================================
# SERVICES MODULE INITIALIZATION
# =============================================================================
# File: backoffice/services/__init__.py
# Description: Services module exports
# =============================================================================

from backoffice.services.base import BaseService
from backoffice.services.auth_service import AuthService
from backoffice.services.user_service import UserService

__all__ = [
    "BaseService",
    "AuthService",
    "UserService",
]

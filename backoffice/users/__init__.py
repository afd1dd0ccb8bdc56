# =============================================================================
# USERS MODULE INITIALIZATION
# =============================================================================
# File: backoffice/users/__init__.py
# Description: Users module exports
# =============================================================================

from backoffice.users.repository import (
    UserRepository,
    OrmUserRepository,
    SqlUserRepository,
    build_user_repository,
)

__all__ = [
    "UserRepository",
    "OrmUserRepository",
    "SqlUserRepository",
    "build_user_repository",
]

# =============================================================================
# BACKOFFICE SERVICE
# =============================================================================
# File: backoffice/__init__.py
# Description: JWT authentication and user management backend with
#              pluggable PostgreSQL / MySQL drivers
# =============================================================================

__version__ = "1.0.0"

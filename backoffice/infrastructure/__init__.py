# =============================================================================
# INFRASTRUCTURE MODULE INITIALIZATION
# =============================================================================
# File: backoffice/infrastructure/__init__.py
# Description: Capability interfaces for external services
# =============================================================================

from backoffice.infrastructure.interfaces import (
    BlobStorage,
    CacheStore,
    EmailSender,
    MessagePublisher,
)

__all__ = [
    "BlobStorage",
    "CacheStore",
    "EmailSender",
    "MessagePublisher",
]

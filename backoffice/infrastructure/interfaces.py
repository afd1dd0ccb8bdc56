# =============================================================================
# BACKOFFICE SERVICE - INFRASTRUCTURE INTERFACES
# =============================================================================
# File: backoffice/infrastructure/interfaces.py
# Description: Capability protocols for external services
#              (email, cache, message queue, blob storage)
# =============================================================================

from datetime import timedelta
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


# =============================================================================
# EMAIL
# =============================================================================

@runtime_checkable
class EmailSender(Protocol):
    """
    Outbound email delivery.

    Implementations wrap an SMTP relay or a transactional email API.
    """

    async def send(
        self,
        to: List[str],
        subject: str,
        body: str,
        html: Optional[str] = None,
    ) -> None:
        """
        Send one message to every recipient.

        Args:
            to: Recipient addresses
            subject: Subject line
            body: Plain text body
            html: Optional HTML alternative
        """
        ...


# =============================================================================
# CACHE
# =============================================================================

@runtime_checkable
class CacheStore(Protocol):
    """Key/value cache with optional expiry."""

    async def get(self, key: str) -> Optional[bytes]:
        """Cached value, None on a miss."""
        ...

    async def set(
        self,
        key: str,
        value: bytes,
        ttl: Optional[timedelta] = None,
    ) -> None:
        """Store a value; ttl None keeps it until deleted."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove a key; False when it was absent."""
        ...


# =============================================================================
# MESSAGE QUEUE
# =============================================================================

@runtime_checkable
class MessagePublisher(Protocol):
    """Publishes events to a topic on a message broker."""

    async def publish(
        self,
        topic: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        ...


# =============================================================================
# BLOB STORAGE
# =============================================================================

@runtime_checkable
class BlobStorage(Protocol):
    """
    Object storage addressed by key.

    Keys are slash separated paths, e.g. "avatars/<user_id>.png".
    """

    async def put(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        """
        Upload an object.

        Returns:
            str: Location of the stored object
        """
        ...

    async def get(self, key: str) -> bytes:
        """Download an object."""
        ...

    async def delete(self, key: str) -> None:
        ...

    async def exists(self, key: str) -> bool:
        ...

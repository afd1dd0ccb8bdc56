# =============================================================================
# BACKOFFICE SERVICE - INFRASTRUCTURE INTERFACE TESTS
# =============================================================================
# File: tests/test_interfaces.py
# Description: In-memory implementations satisfy the capability protocols
# =============================================================================

from datetime import timedelta
from typing import Any, Dict, List, Optional

from backoffice.infrastructure import BlobStorage, CacheStore, EmailSender, MessagePublisher


class MemoryOutbox:
    def __init__(self) -> None:
        self.sent: List[Dict[str, Any]] = []

    async def send(self, to, subject, body, html=None) -> None:
        self.sent.append({"to": to, "subject": subject, "body": body, "html": html})


class MemoryCache:
    def __init__(self) -> None:
        self.values: Dict[str, bytes] = {}

    async def get(self, key: str) -> Optional[bytes]:
        return self.values.get(key)

    async def set(self, key: str, value: bytes, ttl: Optional[timedelta] = None) -> None:
        self.values[key] = value

    async def delete(self, key: str) -> bool:
        return self.values.pop(key, None) is not None


class MemoryBroker:
    def __init__(self) -> None:
        self.events: List[Any] = []

    async def publish(self, topic, payload, headers=None) -> None:
        self.events.append((topic, payload))


class MemoryBucket:
    def __init__(self) -> None:
        self.objects: Dict[str, bytes] = {}

    async def put(self, key, data, content_type="application/octet-stream") -> str:
        self.objects[key] = data
        return f"memory://{key}"

    async def get(self, key) -> bytes:
        return self.objects[key]

    async def delete(self, key) -> None:
        self.objects.pop(key, None)

    async def exists(self, key) -> bool:
        return key in self.objects


class TestCapabilityProtocols:
    """Structural checks against the runtime-checkable protocols."""

    def test_implementations_match(self):
        assert isinstance(MemoryOutbox(), EmailSender)
        assert isinstance(MemoryCache(), CacheStore)
        assert isinstance(MemoryBroker(), MessagePublisher)
        assert isinstance(MemoryBucket(), BlobStorage)

    def test_partial_implementation_rejected(self):
        class ReadOnlyCache:
            async def get(self, key):
                return None

        assert not isinstance(ReadOnlyCache(), CacheStore)
        assert not isinstance(MemoryCache(), BlobStorage)

    async def test_cache_round_trip(self):
        cache: CacheStore = MemoryCache()

        await cache.set("session:1", b"payload", ttl=timedelta(minutes=5))

        assert await cache.get("session:1") == b"payload"
        assert await cache.delete("session:1") is True
        assert await cache.get("session:1") is None

"""Cache protocol shared by the memory and Redis adapters."""

from abc import abstractmethod
from typing import List, Optional, Protocol, runtime_checkable


@runtime_checkable
class Cache(Protocol):
    """String key/value store with per-entry TTL."""

    @abstractmethod
    async def connect(self) -> None:
        """Open connections or start background work."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Release connections."""
        ...

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Get value by key; None when missing or expired."""
        ...

    @abstractmethod
    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """Set value with optional TTL in seconds."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete key and return whether it existed."""
        ...

    @abstractmethod
    async def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with ``prefix``; returns count."""
        ...

    @abstractmethod
    async def keys(self, pattern: str = "*") -> List[str]:
        """List keys matching a glob pattern."""
        ...

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Check backend health."""
        ...

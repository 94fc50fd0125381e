"""
Cart Store Abstract Base Class

Defines the persistence contract for session carts. A store is a dumb
key-value boundary: it does not validate or price anything, it only keeps
the list of line items for a session id until the TTL lapses.

Each stored cart carries an integer version. `load()` returns it alongside
the items and `put()` accepts the version the caller read; if the stored
version moved in between, the write is refused with `CartConflictError`
so the caller can re-read and re-apply its change.

Design Pattern: Strategy Pattern
    - InMemoryCartStore for development and tests
    - RedisCartStore for staging/production

Author: Khalil Bannouri
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from typing import Optional

from voice_cart.services.cart.models import CartLineItem, CartSnapshot


class BaseCartStore(ABC):
    """
    Abstract base class for session cart persistence.

    Example:
        >>> store = get_cart_store()
        >>> snapshot = await store.load("call_abc123")
        >>> await store.put("call_abc123", snapshot.items, 7200,
        ...                 expected_version=snapshot.version)
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the storage backend.

        Returns:
            str: Backend name (e.g., "memory", "redis")
        """
        pass

    @abstractmethod
    async def load(self, session_id: str) -> CartSnapshot:
        """
        Read a cart with its version.

        Args:
            session_id: Call identifier

        Returns:
            CartSnapshot: Items (empty if absent or expired) and version
                          (0 if absent)
        """
        pass

    async def get(self, session_id: str) -> list[CartLineItem]:
        """Read the cart items only."""
        snapshot = await self.load(session_id)
        return snapshot.items

    @abstractmethod
    async def put(
        self,
        session_id: str,
        items: list[CartLineItem],
        ttl_seconds: int,
        expected_version: Optional[int] = None,
    ) -> int:
        """
        Replace the stored cart.

        Args:
            session_id: Call identifier
            items: Full list of line items to store
            ttl_seconds: Seconds until the cart expires
            expected_version: Version the caller read; None skips the check

        Returns:
            int: The new version

        Raises:
            CartConflictError: If the stored version differs from expected
            InternalError: On backend failure
        """
        pass

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        """Drop a cart (session end)."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify connectivity to the backend.

        Returns:
            bool: True if reachable
        """
        pass

"""
In-Memory Cart Store

Development and test implementation of the cart store. Carts are kept as
JSON documents in a dict, so every read hands back fresh objects exactly as
a networked store would.

Behavior:
    - Expiry is checked on read using a monotonic clock; writes also
      drop every expired cart
    - Version checks are serialized with an asyncio lock

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from voice_cart.core.errors import CartConflictError
from voice_cart.services.cart.models import (
    CartLineItem,
    CartSnapshot,
    line_items_from_documents,
    line_items_to_documents,
)
from voice_cart.services.cart_store.base import BaseCartStore

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    payload: str
    version: int
    expires_at: float


class InMemoryCartStore(BaseCartStore):
    """
    Process-local cart store.

    Attributes:
        clock: Monotonic time source (injectable for expiry tests)
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = asyncio.Lock()
        logger.info("InMemoryCartStore initialized")

    @property
    def provider_name(self) -> str:
        return "memory"

    def _live_entry(self, session_id: str) -> Optional[_Entry]:
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        if entry.expires_at <= self.clock():
            logger.debug(f"Cart for {session_id} expired")
            del self._entries[session_id]
            return None
        return entry

    def _sweep_expired(self) -> None:
        now = self.clock()
        expired = [sid for sid, entry in self._entries.items() if entry.expires_at <= now]
        for sid in expired:
            del self._entries[sid]
        if expired:
            logger.debug(f"Swept {len(expired)} expired cart(s)")

    async def load(self, session_id: str) -> CartSnapshot:
        if not session_id:
            return CartSnapshot()
        entry = self._live_entry(session_id)
        if entry is None:
            return CartSnapshot()
        return CartSnapshot(
            items=line_items_from_documents(json.loads(entry.payload)),
            version=entry.version,
        )

    async def put(
        self,
        session_id: str,
        items: list[CartLineItem],
        ttl_seconds: int,
        expected_version: Optional[int] = None,
    ) -> int:
        async with self._lock:
            self._sweep_expired()
            entry = self._live_entry(session_id)
            current = entry.version if entry else 0

            if expected_version is not None and expected_version != current:
                raise CartConflictError(session_id, expected_version, current)

            new_version = current + 1
            self._entries[session_id] = _Entry(
                payload=json.dumps(line_items_to_documents(items)),
                version=new_version,
                expires_at=self.clock() + ttl_seconds,
            )

        logger.debug(f"Session cart saved for call {session_id} (v{new_version})")
        return new_version

    async def delete(self, session_id: str) -> None:
        self._entries.pop(session_id, None)

    async def health_check(self) -> bool:
        return True

    def clear(self) -> None:
        """Remove every cart (tests)."""
        self._entries.clear()

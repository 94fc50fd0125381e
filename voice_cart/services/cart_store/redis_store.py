"""
Redis Cart Store Implementation

Production cart store backed by Redis. Used when ENV_MODE=production or
ENV_MODE=staging.

Each session cart is a single JSON document:

    {
        "call_id": "call_abc123",
        "version": 4,
        "cart_items": [ {...line item...}, ... ],
        "updated_at": "2025-06-01T18:22:05+00:00"
    }

stored under `{CART_KEY_PREFIX}{call_id}` with `EX = ttl`. Version checks use
WATCH/MULTI: if another writer touches the key between our read and EXEC,
Redis aborts the transaction and we raise `CartConflictError`.

Requirements:
    - REDIS_URL must point at a reachable Redis instance

Author: Khalil Bannouri
Version: 1.0.0
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError, WatchError

from voice_cart.core.config import get_settings
from voice_cart.core.errors import CartConflictError, InternalError
from voice_cart.services.cart.models import (
    CartLineItem,
    CartSnapshot,
    line_items_from_documents,
    line_items_to_documents,
)
from voice_cart.services.cart_store.base import BaseCartStore

logger = logging.getLogger(__name__)


class RedisCartStore(BaseCartStore):
    """
    Redis-backed session cart store.

    Example:
        >>> store = RedisCartStore()
        >>> snapshot = await store.load("call_abc123")
        >>> print(snapshot.version)
        0
    """

    def __init__(
        self,
        client: Optional[aioredis.Redis] = None,
        key_prefix: Optional[str] = None,
    ):
        """
        Initialize the Redis client from settings.

        Args:
            client: Pre-built client (tests); created from REDIS_URL otherwise
            key_prefix: Override for CART_KEY_PREFIX
        """
        settings = get_settings()

        self._client = client or aioredis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_timeout=settings.redis_socket_timeout,
        )
        self._key_prefix = key_prefix if key_prefix is not None else settings.cart_key_prefix

        logger.info(f"RedisCartStore initialized (prefix={self._key_prefix!r})")

    @property
    def provider_name(self) -> str:
        return "redis"

    def _key(self, session_id: str) -> str:
        return f"{self._key_prefix}{session_id}"

    @staticmethod
    def _decode(session_id: str, raw: Optional[str]) -> dict[str, Any]:
        if not raw:
            return {}
        try:
            document = json.loads(raw)
        except ValueError as e:
            logger.error(f"Corrupt session cart for {session_id}: {e}")
            raise InternalError("Could not read session cart", {"details": str(e)})
        if not isinstance(document, dict):
            logger.error(f"Corrupt session cart for {session_id}: not an object")
            raise InternalError("Could not read session cart")
        return document

    async def load(self, session_id: str) -> CartSnapshot:
        if not session_id:
            return CartSnapshot()

        try:
            raw = await self._client.get(self._key(session_id))
        except RedisError as e:
            logger.error(f"Error getting session cart for {session_id}: {e}")
            raise InternalError("Could not read session cart", {"details": str(e)})

        document = self._decode(session_id, raw)
        try:
            return CartSnapshot(
                items=line_items_from_documents(document.get("cart_items")),
                version=int(document.get("version", 0)),
            )
        except (ValueError, TypeError) as e:
            logger.error(f"Corrupt session cart for {session_id}: {e}")
            raise InternalError("Could not read session cart", {"details": str(e)})

    async def put(
        self,
        session_id: str,
        items: list[CartLineItem],
        ttl_seconds: int,
        expected_version: Optional[int] = None,
    ) -> int:
        if not session_id:
            raise InternalError("Call ID required for session cart")

        key = self._key(session_id)

        try:
            async with self._client.pipeline(transaction=True) as pipe:
                await pipe.watch(key)
                current = int(self._decode(session_id, await pipe.get(key)).get("version", 0))

                if expected_version is not None and expected_version != current:
                    await pipe.unwatch()
                    raise CartConflictError(session_id, expected_version, current)

                new_version = current + 1
                document = {
                    "call_id": session_id,
                    "version": new_version,
                    "cart_items": line_items_to_documents(items),
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                }

                pipe.multi()
                pipe.set(key, json.dumps(document), ex=ttl_seconds)
                await pipe.execute()

        except WatchError:
            raise CartConflictError(
                session_id,
                expected_version if expected_version is not None else -1,
                -1,
            )
        except RedisError as e:
            logger.error(f"Error saving session cart for {session_id}: {e}")
            raise InternalError("Could not save session cart", {"details": str(e)})
        except (ValueError, TypeError) as e:
            logger.error(f"Corrupt session cart for {session_id}: {e}")
            raise InternalError("Could not read session cart", {"details": str(e)})

        logger.info(f"Session cart saved for call: {session_id} (v{new_version})")
        return new_version

    async def delete(self, session_id: str) -> None:
        try:
            await self._client.delete(self._key(session_id))
        except RedisError as e:
            raise InternalError("Could not delete session cart", {"details": str(e)})

    async def health_check(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.error(f"Redis health check failed: {e}")
            return False

    async def close(self) -> None:
        await self._client.aclose()

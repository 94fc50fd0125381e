"""
Upstream Credential Provider

Holds one cached credential per provider instance with an explicit expiry.
A caller asks for a token; if the cached entry is missing or inside the
refresh margin, the injected fetcher is awaited and its result cached.

Components that talk to upstream APIs receive a provider instance in their
constructor instead of reading keys from module state.

Usage:
    provider = CredentialProvider(settings_secret_fetcher(settings))
    api_key = await provider.get_token()

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

from voice_cart.core.config import Settings
from voice_cart.core.errors import InternalError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    """
    An upstream access token.

    Attributes:
        token: Secret value to present upstream
        expires_at: UTC instant after which the token must be refetched
                    (None = never expires)
    """
    token: str
    expires_at: Optional[datetime] = None

    def is_valid(self, now: datetime, margin: timedelta) -> bool:
        if self.expires_at is None:
            return True
        return now + margin < self.expires_at


CredentialFetcher = Callable[[], Awaitable[Credential]]


class CredentialProvider:
    """
    Process-wide cache entry for a single upstream credential.

    Attributes:
        refresh_margin: Tokens this close to expiry are treated as expired
    """

    def __init__(
        self,
        fetcher: CredentialFetcher,
        refresh_margin: timedelta = timedelta(seconds=60),
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._fetcher = fetcher
        self._clock = clock
        self.refresh_margin = refresh_margin
        self._cached: Optional[Credential] = None
        self._lock = asyncio.Lock()

    async def get_token(self) -> str:
        """Return a valid token, fetching a new one on miss or expiry."""
        cached = self._cached
        if cached and cached.is_valid(self._clock(), self.refresh_margin):
            return cached.token

        async with self._lock:
            # Another waiter may have refreshed while we were blocked
            cached = self._cached
            if cached and cached.is_valid(self._clock(), self.refresh_margin):
                return cached.token

            logger.info("Refreshing upstream credential")
            credential = await self._fetcher()
            if not credential.token:
                raise InternalError("Credential fetcher returned an empty token")
            self._cached = credential
            return credential.token

    def invalidate(self) -> None:
        """Drop the cached credential (e.g. after an authentication error)."""
        self._cached = None
        logger.debug("Upstream credential invalidated")


def settings_secret_fetcher(settings: Settings) -> CredentialFetcher:
    """
    Build a fetcher that serves the Stripe secret from settings.

    The key is re-read from a fresh Settings object on every refresh so a
    rotated value in the environment is picked up once the cache expires.
    """

    async def fetch() -> Credential:
        current = Settings() if settings.use_real_services else settings
        if not current.stripe_secret_key:
            raise InternalError("STRIPE_SECRET_KEY is not configured")
        return Credential(
            token=current.stripe_secret_key,
            expires_at=datetime.now(timezone.utc)
            + timedelta(seconds=current.credential_cache_seconds),
        )

    return fetch

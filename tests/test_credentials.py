"""Cached upstream credentials."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from voice_cart.core.config import Settings
from voice_cart.core.credentials import (
    Credential,
    CredentialProvider,
    settings_secret_fetcher,
)
from voice_cart.core.errors import InternalError

START = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class CountingFetcher:
    def __init__(self, lifetime: timedelta = timedelta(minutes=10)):
        self.calls = 0
        self.lifetime = lifetime
        self.now = START

    async def __call__(self) -> Credential:
        self.calls += 1
        await asyncio.sleep(0)
        return Credential(token=f"token-{self.calls}", expires_at=self.now + self.lifetime)


class TestCredentialProvider:
    async def test_token_is_cached(self):
        fetcher = CountingFetcher()
        provider = CredentialProvider(fetcher, clock=lambda: fetcher.now)

        assert await provider.get_token() == "token-1"
        assert await provider.get_token() == "token-1"
        assert fetcher.calls == 1

    async def test_refreshes_inside_margin(self):
        fetcher = CountingFetcher()
        provider = CredentialProvider(
            fetcher, refresh_margin=timedelta(seconds=60), clock=lambda: fetcher.now
        )
        await provider.get_token()

        fetcher.now = START + timedelta(minutes=9)
        assert await provider.get_token() == "token-2"

    async def test_concurrent_callers_share_one_fetch(self):
        fetcher = CountingFetcher()
        provider = CredentialProvider(fetcher, clock=lambda: fetcher.now)

        tokens = await asyncio.gather(*(provider.get_token() for _ in range(5)))

        assert set(tokens) == {"token-1"}
        assert fetcher.calls == 1

    async def test_invalidate(self):
        fetcher = CountingFetcher()
        provider = CredentialProvider(fetcher, clock=lambda: fetcher.now)
        await provider.get_token()

        provider.invalidate()

        assert await provider.get_token() == "token-2"

    async def test_empty_token_rejected(self):
        async def empty() -> Credential:
            return Credential(token="")

        with pytest.raises(InternalError):
            await CredentialProvider(empty).get_token()


class TestSettingsSecretFetcher:
    async def test_serves_configured_key(self):
        settings = Settings(stripe_secret_key="sk_test_123", credential_cache_seconds=300)

        credential = await settings_secret_fetcher(settings)()

        assert credential.token == "sk_test_123"
        assert credential.expires_at > datetime.now(timezone.utc)

    async def test_missing_key(self):
        settings = Settings(stripe_secret_key=None)

        with pytest.raises(InternalError):
            await settings_secret_fetcher(settings)()

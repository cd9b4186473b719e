from datetime import datetime, timedelta, timezone

import pytest

from application.services.credential_cache import CredentialCache, ProviderCredentials
from domain.interaction import InteractionLogs
from domain.payment.entity import CredentialCacheEntry, TokenPair
from infrastructure.external.payments.exceptions import GatewayAuthenticationError


NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
CREDS = ProviderCredentials(login="merchant", password="secret")


class FakeAuthenticator:
    def __init__(self, *, login_fails=False, refresh_fails=False):
        self.calls = []
        self.login_fails = login_fails
        self.refresh_fails = refresh_fails

    async def obtain_tokens(self, login, password, logs):
        self.calls.append("login")
        span = logs.enter("login")
        if self.login_fails:
            span.set_status(401)
            raise GatewayAuthenticationError("unexpected status: 401", provider="stbl", status_code=401)
        span.set_status(201)
        return TokenPair(access_token="login-access", refresh_token="login-refresh")

    async def refresh_access_token(self, refresh_token, logs):
        self.calls.append(("refresh", refresh_token))
        span = logs.enter("refresh_token")
        if self.refresh_fails:
            span.set_status(401)
            raise GatewayAuthenticationError("unexpected status: 401", provider="stbl", status_code=401)
        span.set_status(201)
        return TokenPair(access_token="refreshed-access", refresh_token="rotated-refresh")


def _cache(store):
    return CredentialCache(store.uow_factory, clock=lambda: NOW)


def _seed(store, age: timedelta):
    entry = CredentialCacheEntry(
        credentials_hash=CREDS.cache_key,
        access_token="cached-access",
        refresh_token="cached-refresh",
        access_refreshed_at=NOW - age,
    )
    store.token_cache.rows[entry.credentials_hash] = entry


@pytest.mark.asyncio
async def test_fresh_entry_is_used_without_network(store):
    _seed(store, timedelta(minutes=5))
    auth = FakeAuthenticator()
    logs = InteractionLogs()

    tokens = await _cache(store).resolve_token(CREDS, auth, logs)

    assert tokens.access_token == "cached-access"
    assert auth.calls == []
    assert logs.into_inner() == []


@pytest.mark.asyncio
async def test_entry_inside_refresh_margin_is_refreshed(store):
    # 14.5 minutes old: inside the last minute of the 15 minute lifetime
    _seed(store, timedelta(minutes=14, seconds=30))
    auth = FakeAuthenticator()
    logs = InteractionLogs()

    tokens = await _cache(store).resolve_token(CREDS, auth, logs)

    assert auth.calls == [("refresh", "cached-refresh")]
    # the original refresh token is kept even if the provider sends another
    assert tokens == TokenPair(access_token="refreshed-access", refresh_token="cached-refresh")
    stored = store.token_cache.rows[CREDS.cache_key]
    assert stored.refresh_token == "cached-refresh"
    assert stored.access_refreshed_at == NOW
    assert [log.kind for log in logs.into_inner()] == ["refresh_token"]


@pytest.mark.asyncio
async def test_refresh_failure_falls_back_to_login(store):
    _seed(store, timedelta(hours=1))
    auth = FakeAuthenticator(refresh_fails=True)
    logs = InteractionLogs()

    tokens = await _cache(store).resolve_token(CREDS, auth, logs)

    assert auth.calls == [("refresh", "cached-refresh"), "login"]
    assert tokens == TokenPair(access_token="login-access", refresh_token="login-refresh")
    assert store.token_cache.rows[CREDS.cache_key].refresh_token == "login-refresh"
    assert [log.kind for log in logs.into_inner()] == ["refresh_token", "login"]


@pytest.mark.asyncio
async def test_missing_entry_logs_in_and_stores(store):
    auth = FakeAuthenticator()
    tokens = await _cache(store).resolve_token(CREDS, auth, InteractionLogs())

    assert auth.calls == ["login"]
    assert tokens.access_token == "login-access"
    assert CREDS.cache_key in store.token_cache.rows


@pytest.mark.asyncio
async def test_login_failure_is_fatal(store):
    auth = FakeAuthenticator(login_fails=True)
    logs = InteractionLogs()

    with pytest.raises(GatewayAuthenticationError):
        await _cache(store).resolve_token(CREDS, auth, logs)

    assert store.token_cache.rows == {}
    assert [log.status for log in logs.into_inner()] == [401]


@pytest.mark.asyncio
async def test_cache_storage_failures_are_not_fatal(store):
    class BrokenRepo:
        async def get(self, credentials_hash):
            raise RuntimeError("database is locked")

        async def upsert(self, entry):
            raise RuntimeError("database is locked")

    store.token_cache = BrokenRepo()
    auth = FakeAuthenticator()

    tokens = await _cache(store).resolve_token(CREDS, auth, InteractionLogs())

    assert tokens.access_token == "login-access"
    assert auth.calls == ["login"]


def test_cache_key_is_hash_of_login_and_password():
    import hashlib

    assert CREDS.cache_key == hashlib.sha256(b"merchant:secret").hexdigest()
    assert "secret" not in repr(CREDS)

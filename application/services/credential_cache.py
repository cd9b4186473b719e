"""
Provider credential cache - keeps one provider session per merchant login.

Resolution order for a connect request:
1. cached access token younger than TTL - margin → used as is, no network
2. otherwise refresh with the cached refresh token ("refresh_token" span)
3. refresh failure or no cache entry → full login ("login" span)

Only a login failure fails the request. Concurrent requests for the same
credentials may race; the loser merely performs an extra login, and the
upsert is last-write-wins.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from application.ports.payment_gateway import ProviderAuthenticator
from domain.common.exceptions import BusinessException
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.interaction import InteractionLogs
from domain.payment.entity import CredentialCacheEntry, TokenPair, hash_credentials
from core.logging_config import get_logger


logger = get_logger(__name__)

ACCESS_TOKEN_TTL_SECONDS = 15 * 60
REFRESH_MARGIN_SECONDS = 60


@dataclass(frozen=True)
class ProviderCredentials:
    login: str
    password: str

    @property
    def cache_key(self) -> str:
        return hash_credentials(self.login, self.password)

    def __repr__(self) -> str:
        return f"ProviderCredentials(login={self.login!r})"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CredentialCache:
    def __init__(
        self,
        uow_factory: Callable[..., AbstractUnitOfWork],
        *,
        ttl_seconds: float = ACCESS_TOKEN_TTL_SECONDS,
        margin_seconds: float = REFRESH_MARGIN_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._ttl = ttl_seconds
        self._margin = margin_seconds
        self._clock = clock

    async def resolve_token(
        self,
        credentials: ProviderCredentials,
        authenticator: ProviderAuthenticator,
        logs: InteractionLogs,
    ) -> TokenPair:
        credentials_hash = credentials.cache_key
        cached = await self._load(credentials_hash)

        if cached is not None:
            if cached.is_fresh(self._clock(), self._ttl, self._margin):
                logger.info("provider_token_cache_hit", credentials_hash=credentials_hash)
                return cached.tokens

            logger.info("provider_token_refreshing", credentials_hash=credentials_hash)
            try:
                refreshed = await authenticator.refresh_access_token(cached.refresh_token, logs)
            except BusinessException as exc:
                logger.warning("provider_token_refresh_failed", credentials_hash=credentials_hash, error=exc.message)
            else:
                # the provider keeps the original refresh token valid; store that one
                tokens = TokenPair(access_token=refreshed.access_token, refresh_token=cached.refresh_token)
                await self._store(credentials_hash, tokens)
                return tokens

        logger.info("provider_token_login", credentials_hash=credentials_hash)
        tokens = await authenticator.obtain_tokens(credentials.login, credentials.password, logs)
        await self._store(credentials_hash, tokens)
        return tokens

    async def _load(self, credentials_hash: str) -> Optional[CredentialCacheEntry]:
        try:
            async with self._uow_factory(readonly=True) as uow:
                return await uow.token_cache_repository.get(credentials_hash)
        except Exception as exc:
            logger.error("provider_token_cache_read_failed", credentials_hash=credentials_hash, error=str(exc))
            return None

    async def _store(self, credentials_hash: str, tokens: TokenPair) -> None:
        entry = CredentialCacheEntry(
            credentials_hash=credentials_hash,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            access_refreshed_at=self._clock(),
        )
        try:
            async with self._uow_factory() as uow:
                await uow.token_cache_repository.upsert(entry)
        except Exception as exc:
            logger.error("provider_token_cache_write_failed", credentials_hash=credentials_hash, error=str(exc))

"""
Token cache repository - SQLAlchemy implementation
"""
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert

from domain.payment.entity import CredentialCacheEntry
from domain.payment.repository import TokenCacheRepository
from infrastructure.models.token_cache import TokenCacheModel
from core.logging_config import get_logger


logger = get_logger(__name__)


class SQLAlchemyTokenCacheRepository(TokenCacheRepository):
    """Token cache repository backed by SQLite upserts (last write wins)."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: TokenCacheModel) -> CredentialCacheEntry:
        return CredentialCacheEntry(
            credentials_hash=model.credentials_hash,
            access_token=model.access_token,
            refresh_token=model.refresh_token,
            access_refreshed_at=model.access_refreshed_at,
        )

    async def get(self, credentials_hash: str) -> Optional[CredentialCacheEntry]:
        result = await self.session.execute(
            select(TokenCacheModel).where(TokenCacheModel.credentials_hash == credentials_hash)
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def upsert(self, entry: CredentialCacheEntry) -> None:
        values = {
            "credentials_hash": entry.credentials_hash,
            "access_token": entry.access_token,
            "refresh_token": entry.refresh_token,
            "access_refreshed_at": entry.access_refreshed_at,
        }
        stmt = insert(TokenCacheModel).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[TokenCacheModel.credentials_hash],
            set_={
                "access_token": stmt.excluded.access_token,
                "refresh_token": stmt.excluded.refresh_token,
                "access_refreshed_at": stmt.excluded.access_refreshed_at,
            },
        )
        await self.session.execute(stmt)
        logger.debug("token_cache_upserted", credentials_hash=entry.credentials_hash)

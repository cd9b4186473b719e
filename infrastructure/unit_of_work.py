"""SQLAlchemy Unit of Work 实现"""
from __future__ import annotations

from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from domain.common.unit_of_work import AbstractUnitOfWork
from infrastructure.database import AsyncSessionLocal
from infrastructure.repositories.token_cache_repository import SQLAlchemyTokenCacheRepository
from infrastructure.repositories.token_mapping_repository import SQLAlchemyTokenMappingRepository


class SQLAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    Opens its own session per block (or borrows `session`, which is then
    left open for the owner to close).
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] = AsyncSessionLocal,
        session: Optional[AsyncSession] = None,
        *,
        readonly: bool = False,
    ) -> None:
        super().__init__(readonly=readonly)
        self._session_factory = session_factory
        self._owns_session = session is None
        self.session: Optional[AsyncSession] = session

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        if self.session is None:
            self.session = self._session_factory()
        self.token_cache_repository = SQLAlchemyTokenCacheRepository(self.session)
        self.token_mapping_repository = SQLAlchemyTokenMappingRepository(self.session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await super().__aexit__(exc_type, exc, tb)
        finally:
            if self._owns_session and self.session is not None:
                # 只读会话的隐式事务在 close 时回滚
                await self.session.close()
                self.session = None

    async def commit(self) -> None:
        if self.session is not None and self.session.in_transaction():
            await self.session.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self.session is not None and self.session.in_transaction():
            await self.session.rollback()

"""Unit of Work 抽象定义

One unit of work wraps one short transaction over the gateway connect
stores. Leaving the block commits, unless it was opened read-only or an
exception escaped, in which case it rolls back.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from domain.payment.repository import TokenCacheRepository, TokenMappingRepository


class AbstractUnitOfWork(ABC):
    token_cache_repository: TokenCacheRepository
    token_mapping_repository: TokenMappingRepository

    def __init__(self, *, readonly: bool = False) -> None:
        self._readonly = readonly
        self._committed = False

    async def __aenter__(self) -> "AbstractUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc is not None:
            await self.rollback()
        elif not (self._readonly or self._committed):
            await self.commit()

    @abstractmethod
    async def commit(self) -> None: ...

    @abstractmethod
    async def rollback(self) -> None: ...

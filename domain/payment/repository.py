"""
Gateway connect repository interfaces. Both stores only need point lookups
and upserts; implementations may be SQL, key-value or in-memory.
"""
from abc import ABC, abstractmethod
from typing import Optional

from .entity import CredentialCacheEntry, TokenMapping


class TokenCacheRepository(ABC):
    """Credential hash → provider token pair."""

    @abstractmethod
    async def get(self, credentials_hash: str) -> Optional[CredentialCacheEntry]:
        """Return the cached entry or None"""
        pass

    @abstractmethod
    async def upsert(self, entry: CredentialCacheEntry) -> None:
        """Insert or replace the entry for entry.credentials_hash"""
        pass


class TokenMappingRepository(ABC):
    """Provider gateway id → platform token + merchant private key."""

    @abstractmethod
    async def create(self, mapping: TokenMapping) -> TokenMapping:
        """Persist a new mapping; a gateway id is mapped exactly once"""
        pass

    @abstractmethod
    async def get_by_gateway_id(self, gateway_id: str) -> Optional[TokenMapping]:
        """Return the mapping for a provider id or None"""
        pass

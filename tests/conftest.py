"""Pytest bootstrap configuration.

Ensure mandatory environment variables are set before test collection
and module imports that depend on application settings.
"""
import os
import tempfile

# Mandatory settings for validation (SIGN_KEY must be 32 bytes)
os.environ.setdefault("BUSINESS_URL", "https://business.test")
os.environ.setdefault("SIGN_KEY", "0123456789abcdef0123456789abcdef")
os.environ.setdefault("BASE_URL", "https://stbl.test")
os.environ.setdefault("SANDBOX_BASE_URL", "https://sandbox.stbl.test")
os.environ.setdefault("DATABASE_PATH", os.path.join(tempfile.gettempdir(), "stbl-connect-test.db"))

import pytest  # noqa: E402

from domain.common.unit_of_work import AbstractUnitOfWork  # noqa: E402
from domain.payment.repository import TokenCacheRepository, TokenMappingRepository  # noqa: E402


class InMemoryTokenCacheRepository(TokenCacheRepository):
    def __init__(self):
        self.rows = {}

    async def get(self, credentials_hash):
        return self.rows.get(credentials_hash)

    async def upsert(self, entry):
        self.rows[entry.credentials_hash] = entry


class InMemoryTokenMappingRepository(TokenMappingRepository):
    def __init__(self):
        self.rows = {}

    async def create(self, mapping):
        if mapping.gateway_id in self.rows:
            raise ValueError(f"duplicate gateway id {mapping.gateway_id}")
        self.rows[mapping.gateway_id] = mapping
        return mapping

    async def get_by_gateway_id(self, gateway_id):
        return self.rows.get(gateway_id)


class InMemoryStore:
    """Shared state behind every unit of work created by `uow_factory`."""

    def __init__(self):
        self.token_cache = InMemoryTokenCacheRepository()
        self.token_mappings = InMemoryTokenMappingRepository()

    def uow_factory(self, *, readonly: bool = False):
        return InMemoryUnitOfWork(self, readonly=readonly)


class InMemoryUnitOfWork(AbstractUnitOfWork):
    def __init__(self, store: InMemoryStore, *, readonly: bool = False):
        super().__init__(readonly=readonly)
        self.token_cache_repository = store.token_cache
        self.token_mapping_repository = store.token_mappings

    async def commit(self):
        self._committed = True

    async def rollback(self):
        self._committed = False


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def sign_key():
    return os.environ["SIGN_KEY"]

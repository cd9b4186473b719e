"""
Token mapping repository - SQLAlchemy implementation
"""
from typing import Optional
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from domain.payment.entity import TokenMapping
from domain.payment.repository import TokenMappingRepository
from infrastructure.models.token_mapping import TokenMappingModel
from core.logging_config import get_logger


logger = get_logger(__name__)


class SQLAlchemyTokenMappingRepository(TokenMappingRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: TokenMappingModel) -> TokenMapping:
        return TokenMapping(
            gateway_id=model.gateway_id,
            token=model.token,
            merchant_private_key=model.merchant_private_key,
            created_at=model.created_at,
        )

    async def create(self, mapping: TokenMapping) -> TokenMapping:
        """Insert a mapping; a duplicate gateway id raises IntegrityError on flush"""
        model = TokenMappingModel(
            gateway_id=mapping.gateway_id,
            token=mapping.token,
            merchant_private_key=mapping.merchant_private_key,
            created_at=mapping.created_at or datetime.now(timezone.utc),
        )
        self.session.add(model)
        await self.session.flush()
        logger.info("token_mapping_created", gateway_id=mapping.gateway_id, token=mapping.token)
        return self._to_entity(model)

    async def get_by_gateway_id(self, gateway_id: str) -> Optional[TokenMapping]:
        result = await self.session.execute(
            select(TokenMappingModel).where(TokenMappingModel.gateway_id == gateway_id)
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

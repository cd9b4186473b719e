"""
Gateway id → platform token mapping model - SQLAlchemy ORM model
"""
from sqlalchemy import Column, String, Text, DateTime
from datetime import datetime, timezone

from .base import Base


class TokenMappingModel(Base):
    """
    Written once when the provider acknowledges a payment/payout with an id,
    read by status queries and callback relays.
    """
    __tablename__ = "token_mappings"

    gateway_id = Column(String(128), primary_key=True, comment="Provider payment/payout id")
    token = Column(String(255), nullable=False, index=True, comment="Platform transaction token")
    merchant_private_key = Column(Text, nullable=False, comment="Encrypted into callback tokens, never logged")
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self):
        return f"<TokenMappingModel(gateway_id='{self.gateway_id}', token='{self.token}')>"

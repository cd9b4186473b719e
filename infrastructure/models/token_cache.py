"""
Provider token cache model - SQLAlchemy ORM model
"""
from sqlalchemy import Column, String, Text, DateTime
from datetime import datetime, timezone

from .base import Base


class TokenCacheModel(Base):
    """
    One row per provider credential hash.

    Rows are upserted on every refresh or re-login and never deleted;
    stale rows are simply superseded.
    """
    __tablename__ = "token_cache"

    credentials_hash = Column(String(64), primary_key=True, comment="sha256(login:password)")
    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text, nullable=False)
    access_refreshed_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="When access_token was last obtained",
    )

    def __repr__(self):
        return f"<TokenCacheModel(credentials_hash='{self.credentials_hash}', access_refreshed_at={self.access_refreshed_at})>"

"""
Gateway connect domain entities: cached provider credentials and the
gateway id → platform token mapping used by callbacks.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from domain.common.exceptions import DomainValidationException


def _ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Normalize naive datetimes (SQLite drops tzinfo) to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def hash_credentials(login: str, password: str) -> str:
    """One-way cache key for a provider login; plaintext is never stored."""
    return hashlib.sha256(f"{login}:{password}".encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass
class CredentialCacheEntry:
    """
    Cached provider session for one credential hash.

    Rules:
    1. At most one entry per credentials hash (upserts replace the row)
    2. access_refreshed_at is always UTC
    """

    credentials_hash: str
    access_token: str
    refresh_token: str
    access_refreshed_at: datetime

    def __post_init__(self):
        if not self.credentials_hash:
            raise DomainValidationException("credentials hash must not be empty", field="credentials_hash")
        self.access_refreshed_at = _ensure_utc(self.access_refreshed_at)

    @property
    def tokens(self) -> TokenPair:
        return TokenPair(access_token=self.access_token, refresh_token=self.refresh_token)

    def age_seconds(self, now: datetime) -> float:
        return (_ensure_utc(now) - self.access_refreshed_at).total_seconds()

    def is_fresh(self, now: datetime, ttl_seconds: float, margin_seconds: float) -> bool:
        """True while the access token has more than `margin_seconds` left to live."""
        return self.age_seconds(now) < ttl_seconds - margin_seconds


@dataclass
class TokenMapping:
    """Join record between a provider gateway id and the platform transaction."""

    gateway_id: str
    token: str
    merchant_private_key: str
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.gateway_id:
            raise DomainValidationException("gateway id must not be empty", field="gateway_id")
        self.created_at = _ensure_utc(self.created_at)

    def __repr__(self) -> str:
        # merchant_private_key must never reach logs
        return f"TokenMapping(gateway_id={self.gateway_id!r}, token={self.token!r})"

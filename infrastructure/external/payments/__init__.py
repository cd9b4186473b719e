"""
Factories for the STBL provider clients.

Clients share the process-wide httpx.AsyncClient; only the base URL
(sandbox or production) and the access token vary per request.
"""
from __future__ import annotations

import httpx

from core.config import settings
from domain.payment.entity import TokenPair
from .stbl_client import StblAuthClient, StblClient


def get_auth_client(http: httpx.AsyncClient, sandbox: bool) -> StblAuthClient:
    return StblAuthClient(http=http, base_url=settings.provider_base_url(sandbox))


def get_payment_gateway(http: httpx.AsyncClient, sandbox: bool, tokens: TokenPair) -> StblClient:
    return StblClient(http=http, base_url=settings.provider_base_url(sandbox), tokens=tokens)


__all__ = ["StblAuthClient", "StblClient", "get_auth_client", "get_payment_gateway"]

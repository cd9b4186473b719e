"""
API依赖项 - 组合根

Wires infrastructure adapters (provider clients, platform client, unit of
work) into the application service. Tests override these with fakes via
`app.dependency_overrides`.
"""
from functools import partial

import httpx
from fastapi import Depends, Request

from application.services.credential_cache import CredentialCache
from application.services.payment_service import GatewayConnectService
from core.config import settings
from infrastructure.external.api_clients import PlatformClient
from infrastructure.external.payments import get_auth_client, get_payment_gateway
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


async def get_http_client(request: Request) -> httpx.AsyncClient:
    """共享的出站 HTTP 客户端（在 lifespan 中创建）"""
    return request.app.state.http_client


async def get_credential_cache() -> CredentialCache:
    return CredentialCache(
        uow_factory=SQLAlchemyUnitOfWork,
        ttl_seconds=settings.TOKEN_TTL_SECONDS,
        margin_seconds=settings.TOKEN_REFRESH_MARGIN_SECONDS,
    )


async def get_connect_service(
    http: httpx.AsyncClient = Depends(get_http_client),
    credential_cache: CredentialCache = Depends(get_credential_cache),
) -> GatewayConnectService:
    return GatewayConnectService(
        credential_cache=credential_cache,
        uow_factory=SQLAlchemyUnitOfWork,
        auth_factory=partial(get_auth_client, http),
        gateway_factory=partial(get_payment_gateway, http),
        platform=PlatformClient(client=http),
        sign_key=settings.SIGN_KEY,
        currency=settings.CALLBACK_CURRENCY,
    )

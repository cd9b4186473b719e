"""Business platform client: relays signed gateway callbacks."""
from typing import Optional

import httpx

from application.dtos.payments import CallbackPayload
from core.config import settings
from core.logging_config import get_logger
from .base import BaseAPIClient


logger = get_logger(__name__)


class PlatformClient(BaseAPIClient):
    """POSTs callbacks to {BUSINESS_URL}/callbacks/v2/gateway_callbacks/{token}."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, base_url: Optional[str] = None):
        super().__init__(
            base_url=base_url or settings.BUSINESS_URL,
            timeout=settings.HTTP_TIMEOUT,
            client=client,
        )

    async def send_gateway_callback(self, token: str, payload: CallbackPayload, signed_token: str) -> int:
        endpoint = f"callbacks/v2/gateway_callbacks/{token}"
        logger.info(
            "platform_callback_sending",
            url=self._build_url(endpoint),
            payload=payload.model_dump(mode="json", exclude_none=True),
        )
        response = await self.post(
            endpoint,
            json_data=payload,
            headers={"Authorization": f"Bearer {signed_token}"},
        )
        if response.is_success:
            logger.info("platform_callback_delivered", status_code=response.status_code)
        else:
            logger.warning("platform_callback_rejected", status_code=response.status_code, body=response.text()[:512])
        return response.status_code

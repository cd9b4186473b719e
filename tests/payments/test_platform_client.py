import json

import httpx
import pytest

from application.dtos.payments import CallbackPayload
from infrastructure.external.api_clients import APIError, PlatformClient


@pytest.mark.asyncio
async def test_callback_posted_with_bearer_token():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(204)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = PlatformClient(client=http, base_url="https://business.test/")
        status = await client.send_gateway_callback(
            "tx-1", CallbackPayload(status="approved", currency="ARS", amount=100), "signed.jwt.value"
        )

    assert status == 204
    assert seen["url"] == "https://business.test/callbacks/v2/gateway_callbacks/tx-1"
    assert seen["auth"] == "Bearer signed.jwt.value"
    # absent reason is omitted from the body
    assert seen["body"] == {"status": "approved", "currency": "ARS", "amount": 100}


@pytest.mark.asyncio
async def test_platform_error_status_is_returned():
    async with httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(500))) as http:
        client = PlatformClient(client=http)
        status = await client.send_gateway_callback(
            "tx-1", CallbackPayload(status="pending", currency="ARS", amount=1), "t"
        )
    assert status == 500


@pytest.mark.asyncio
async def test_network_failure_raises_api_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = PlatformClient(client=http)
        with pytest.raises(APIError):
            await client.send_gateway_callback(
                "tx-1", CallbackPayload(status="pending", currency="ARS", amount=1), "t"
            )

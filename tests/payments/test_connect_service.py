import json
from datetime import datetime, timezone

import httpx
import pytest

from application.dtos.payments import ConnectError, ConnectRequest, StatusRequest
from application.services.credential_cache import CredentialCache, ProviderCredentials
from application.services.payment_service import GatewayConnectService
from domain.payment.entity import CredentialCacheEntry
from infrastructure.external.payments.stbl_client import StblAuthClient, StblClient


BASE = "https://stbl.test"
PROCESSING_URL = "https://platform.test/processing/tx-1"


class RecordingPlatform:
    def __init__(self, status_code=200):
        self.calls = []
        self.status_code = status_code

    async def send_gateway_callback(self, token, payload, signed_token):
        self.calls.append((token, payload, signed_token))
        return self.status_code


def _seed_fresh_token(store):
    key = ProviderCredentials(login="merchant", password="secret").cache_key
    store.token_cache.rows[key] = CredentialCacheEntry(
        credentials_hash=key,
        access_token="acc",
        refresh_token="ref",
        access_refreshed_at=datetime.now(timezone.utc),
    )


def _service(store, handler, sign_key, platform=None):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GatewayConnectService(
        credential_cache=CredentialCache(store.uow_factory),
        uow_factory=store.uow_factory,
        auth_factory=lambda sandbox: StblAuthClient(http=http, base_url=BASE),
        gateway_factory=lambda sandbox, tokens: StblClient(http=http, base_url=BASE, tokens=tokens),
        platform=platform or RecordingPlatform(),
        sign_key=sign_key,
    )


def _connect_request() -> ConnectRequest:
    return ConnectRequest.model_validate({
        "payment": {
            "token": "tx-1",
            "gateway_amount": 1000,
            "gateway_currency": "ARS",
            "merchant_private_key": "merchant-key",
        },
        "params": {"bank_account": {"account_number": "0000003100010000000001"}},
        "processing_url": PROCESSING_URL,
        "settings": {"login": "merchant", "password": "secret"},
    })


# ---- pay ----

@pytest.mark.asyncio
async def test_pay_created_stores_mapping_and_redirects(store, sign_key):
    _seed_fresh_token(store)

    def handler(request):
        return httpx.Response(201, json={
            "id": "gw-1",
            "status": {"name": "NEW"},
            "pay_form_link": "https://stbl.test/form/gw-1",
        })

    result = await _service(store, handler, sign_key).pay(_connect_request())

    assert result.result is True
    assert result.status == "pending"
    assert result.gateway_token == "gw-1"
    assert result.redirect_request.url == "https://stbl.test/form/gw-1"
    assert result.redirect_request.type.value == "get_with_processing"
    assert [log.kind for log in result.logs] == ["payment"]

    mapping = store.token_mappings.rows["gw-1"]
    assert mapping.token == "tx-1"
    assert mapping.merchant_private_key == "merchant-key"


@pytest.mark.asyncio
async def test_pay_created_without_id_is_error_and_stores_nothing(store, sign_key):
    _seed_fresh_token(store)
    result = await _service(store, lambda r: httpx.Response(201, json={"status": {"name": "NEW"}}), sign_key).pay(
        _connect_request()
    )

    assert isinstance(result, ConnectError)
    assert result.result is False
    assert store.token_mappings.rows == {}
    assert len(result.logs) == 1


@pytest.mark.asyncio
async def test_pay_rejected_relays_provider_detail(store, sign_key):
    _seed_fresh_token(store)
    result = await _service(store, lambda r: httpx.Response(400, json={"detail": "limit exceeded"}), sign_key).pay(
        _connect_request()
    )
    assert isinstance(result, ConnectError)
    assert result.error == "limit exceeded"


@pytest.mark.asyncio
async def test_pay_rejected_without_detail_uses_generic_message(store, sign_key):
    _seed_fresh_token(store)
    result = await _service(store, lambda r: httpx.Response(502, text="<html>"), sign_key).pay(_connect_request())
    assert result.error == "bad gateway response"
    assert result.logs[0].response == "<html>"


@pytest.mark.asyncio
async def test_pay_login_failure_returns_error_with_login_span(store, sign_key):
    def handler(request):
        assert request.url.path.endswith("token-obtain")
        return httpx.Response(401, json={"detail": "bad credentials"})

    result = await _service(store, handler, sign_key).pay(_connect_request())

    assert isinstance(result, ConnectError)
    assert result.error.startswith("failed to login client: ")
    assert [log.kind for log in result.logs] == ["login"]
    assert result.logs[0].status == 401


@pytest.mark.asyncio
async def test_pay_logs_in_then_pays(store, sign_key):
    def handler(request):
        if request.url.path.endswith("token-obtain"):
            return httpx.Response(201, json={"access_token": "a", "refresh_token": "r"})
        assert request.headers["Authorization"] == "Bearer a"
        return httpx.Response(201, json={"id": "gw-2", "status": {"name": "COMPLETED"}, "pay_form_link": "x"})

    result = await _service(store, handler, sign_key).pay(_connect_request())

    assert result.status == "approved"
    assert [log.kind for log in result.logs] == ["login", "payment"]


@pytest.mark.asyncio
async def test_pay_missing_amount_is_error_without_provider_call(store, sign_key):
    _seed_fresh_token(store)
    req = _connect_request()
    req.payment.gateway_amount = None

    def handler(request):
        raise AssertionError("no request expected")

    result = await _service(store, handler, sign_key).pay(req)
    assert isinstance(result, ConnectError)
    assert result.error.startswith("Gateway request failed")


@pytest.mark.asyncio
async def test_pay_mapping_insert_failure_is_not_fatal(store, sign_key):
    _seed_fresh_token(store)
    body = {"id": "gw-dup", "status": {"name": "NEW"}, "pay_form_link": "x"}
    service = _service(store, lambda r: httpx.Response(201, json=body), sign_key)

    await service.pay(_connect_request())
    second = await service.pay(_connect_request())

    assert second.result is True
    assert second.gateway_token == "gw-dup"


# ---- payout ----

@pytest.mark.asyncio
async def test_payout_created_maps_status(store, sign_key):
    _seed_fresh_token(store)
    body = {"id": "po-1", "status": {"name": "PAID"}}
    result = await _service(store, lambda r: httpx.Response(201, json=body), sign_key).payout(_connect_request())

    assert result.status == "approved"
    assert result.gateway_token == "po-1"
    assert result.redirect_request.url == PROCESSING_URL
    assert "po-1" in store.token_mappings.rows


@pytest.mark.asyncio
async def test_payout_server_error_is_pending(store, sign_key):
    _seed_fresh_token(store)
    result = await _service(store, lambda r: httpx.Response(503, text="unavailable"), sign_key).payout(
        _connect_request()
    )

    assert result.result is True
    assert result.status == "pending"
    assert result.gateway_token is None
    assert result.redirect_request.url == PROCESSING_URL
    assert result.logs[0].status == 503


@pytest.mark.asyncio
async def test_payout_created_without_id_is_pending(store, sign_key):
    _seed_fresh_token(store)
    result = await _service(store, lambda r: httpx.Response(201, text="not json"), sign_key).payout(
        _connect_request()
    )
    assert result.status == "pending"
    assert result.gateway_token is None
    assert store.token_mappings.rows == {}


@pytest.mark.asyncio
async def test_payout_client_error_with_detail_is_error(store, sign_key):
    _seed_fresh_token(store)
    result = await _service(store, lambda r: httpx.Response(422, json={"detail": "invalid cbu"}), sign_key).payout(
        _connect_request()
    )
    assert isinstance(result, ConnectError)
    assert result.error == "invalid cbu"


@pytest.mark.asyncio
async def test_payout_client_error_without_detail_is_pending(store, sign_key):
    _seed_fresh_token(store)
    result = await _service(store, lambda r: httpx.Response(409, json={}), sign_key).payout(_connect_request())
    assert result.status == "pending"


# ---- status ----

def _status_request(operation_type="pay"):
    return StatusRequest.model_validate({
        "payment": {"gateway_token": "gw-1", "operation_type": operation_type, "token": "tx-1"},
        "settings": {"login": "merchant", "password": "secret"},
    })


@pytest.mark.asyncio
async def test_status_returns_mapped_status_and_minor_amount(store, sign_key):
    _seed_fresh_token(store)
    body = {"id": "gw-1", "amount": 12.34, "status": {"name": "COMPLETED"}}
    result = await _service(store, lambda r: httpx.Response(200, json=body), sign_key).status(_status_request())

    assert result.result is True
    assert result.status == "approved"
    assert result.amount == 1234
    assert [log.kind for log in result.logs] == ["status"]
    assert set(result.model_dump(exclude_none=True)) == {"result", "logs", "status", "amount"}


@pytest.mark.asyncio
async def test_payout_status_uses_payout_vocabulary(store, sign_key):
    _seed_fresh_token(store)

    def handler(request):
        assert "/payouts/gw-1" in request.url.path
        return httpx.Response(200, json={"id": "gw-1", "amount": 5, "status": {"name": "PAYOUT_DENIED"}})

    result = await _service(store, handler, sign_key).status(_status_request("payout"))
    assert result.status == "declined"
    assert result.amount == 500


@pytest.mark.asyncio
async def test_status_missing_amount_is_incorrect_response(store, sign_key):
    _seed_fresh_token(store)
    result = await _service(store, lambda r: httpx.Response(200, json={"id": "gw-1"}), sign_key).status(
        _status_request()
    )
    assert result.error == "Incorrect provider response"


@pytest.mark.asyncio
async def test_status_not_found_relays_detail(store, sign_key):
    _seed_fresh_token(store)
    result = await _service(store, lambda r: httpx.Response(404, json={"detail": "Not found."}), sign_key).status(
        _status_request()
    )
    assert result.error == "Not found."


@pytest.mark.asyncio
async def test_status_unsupported_operation_makes_no_calls(store, sign_key):
    def handler(request):
        raise AssertionError("no request expected")

    result = await _service(store, handler, sign_key).status(_status_request("refund"))

    assert isinstance(result, ConnectError)
    assert result.error == "unsupported operation type"
    assert result.logs == []


def test_error_response_serializes_logs():
    err = ConnectError(error="boom")
    assert json.loads(err.model_dump_json()) == {"result": False, "error": "boom", "logs": []}

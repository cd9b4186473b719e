"""
STBL external API adapter.

`StblAuthClient` obtains and refreshes provider tokens; `StblClient` is the
per-request authenticated channel used for payments, payouts and status
queries. Both return raw responses (or parsed auth tokens) and record every
exchange in the caller's interaction span.
"""
from __future__ import annotations

import httpx
from pydantic import ValidationError

from application.dtos.payments import ConnectRequest, StatusRequest
from application.dtos.stbl import (
    AuthRequest,
    AuthResponse,
    PaymentAdditionalData,
    PaymentRequest,
    PayoutAdditionalData,
    PayoutRequest,
    RefreshRequest,
)
from domain.interaction import InteractionLogs, InteractionSpan
from domain.payment.entity import TokenPair
from domain.payment.money import minor_to_major
from infrastructure.external.payments.base import BasePaymentClient
from infrastructure.external.payments.exceptions import (
    GatewayAuthenticationError,
    GatewayRequestValidationError,
    GatewayTransportError,
)
from shared.masking import secure_json


LOGIN_PATH = "/auth/api/v1/external-tokens/token-obtain"
REFRESH_PATH = "/auth/api/v1/external-tokens/token-refresh"
PAYMENTS_PATH = "/pay/external-api/v1/payments"
PAYOUTS_PATH = "/pay/external-api/v1/payouts"


class StblAuthClient(BasePaymentClient):
    provider = "stbl"

    async def obtain_tokens(self, login: str, password: str, logs: InteractionLogs) -> TokenPair:
        """Full login with merchant credentials inside a "login" span."""
        span = logs.enter("login")
        body = AuthRequest(username=login, password=password)
        # credentials are not covered by the card masking rules
        log_params = secure_json({"username": login, "password": "***"})
        return await self._token_call(LOGIN_PATH, body, span, log_params=log_params)

    async def refresh_access_token(self, refresh_token: str, logs: InteractionLogs) -> TokenPair:
        """Exchange a refresh token for a new access token inside a "refresh_token" span."""
        span = logs.enter("refresh_token")
        body = RefreshRequest(refresh_token=refresh_token)
        return await self._token_call(REFRESH_PATH, body, span, log_params=secure_json({"refresh_token": "***"}))

    async def _token_call(self, path: str, body, span: InteractionSpan, *, log_params: str | None = None) -> TokenPair:
        try:
            response = await self.make_request("POST", path, body, span, log_params=log_params)
        except GatewayTransportError as exc:
            raise GatewayAuthenticationError(exc.message, provider=self.provider) from exc
        raw = self.read_body(response, span)
        if response.status_code != httpx.codes.CREATED:
            raise GatewayAuthenticationError(
                f"unexpected status: {response.status_code}",
                provider=self.provider,
                status_code=response.status_code,
            )
        try:
            auth = AuthResponse.model_validate_json(raw)
        except ValidationError as exc:
            raise GatewayAuthenticationError(
                f"failed to decode JSON response: {exc.error_count()} error(s)",
                provider=self.provider,
                status_code=response.status_code,
            ) from exc
        return TokenPair(access_token=auth.access_token, refresh_token=auth.refresh_token)


class StblClient(BasePaymentClient):
    """Authenticated provider channel, one instance per inbound request."""

    provider = "stbl"

    def __init__(self, *, http: httpx.AsyncClient, base_url: str, tokens: TokenPair) -> None:
        super().__init__(http=http, base_url=base_url)
        self.tokens = tokens

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        headers["Authorization"] = f"Bearer {self.tokens.access_token}"
        return headers

    async def payment(self, req: ConnectRequest, span: InteractionSpan) -> httpx.Response:
        payment = req.payment
        missing = [
            name for name, value in (
                ("gateway_amount", payment.gateway_amount),
                ("gateway_currency", payment.gateway_currency),
            ) if value is None
        ]
        if missing:
            raise GatewayRequestValidationError(provider=self.provider, missing=missing)

        body = PaymentRequest(
            amount=minor_to_major(payment.gateway_amount),
            transfer_method="QR_CODE",
            external_id=payment.token or None,
            additional_data=PaymentAdditionalData(),
        )
        return await self.make_request("POST", PAYMENTS_PATH, body, span)

    async def payout(self, req: ConnectRequest, span: InteractionSpan) -> httpx.Response:
        account = req.params.bank_account
        account_number = account.account_number if account else None
        missing = [
            name for name, value in (
                ("gateway_amount", req.payment.gateway_amount),
                ("bank_account.account_number", account_number),
            ) if value is None
        ]
        if missing:
            raise GatewayRequestValidationError(provider=self.provider, missing=missing)

        body = PayoutRequest(
            amount=minor_to_major(req.payment.gateway_amount),
            transfer_method="CBU",
            additional_data=PayoutAdditionalData(cbu=account_number),
            external_id=req.payment.token or None,
        )
        return await self.make_request("POST", PAYOUTS_PATH, body, span)

    async def payment_status(self, req: StatusRequest, span: InteractionSpan) -> httpx.Response:
        gateway_token = self._require_gateway_token(req)
        return await self.make_request("GET", f"{PAYMENTS_PATH}/{gateway_token}", None, span)

    async def payout_status(self, req: StatusRequest, span: InteractionSpan) -> httpx.Response:
        gateway_token = self._require_gateway_token(req)
        return await self.make_request("GET", f"{PAYOUTS_PATH}/{gateway_token}", None, span)

    def _require_gateway_token(self, req: StatusRequest) -> str:
        if req.payment.gateway_token is None:
            raise GatewayRequestValidationError(
                "Gateway connect request is missing required fields",
                provider=self.provider,
                missing=["gateway_token"],
            )
        return req.payment.gateway_token

"""
Payment gateway ports (application/ports) exposing replaceable protocols.

Application depends on these Protocols; infrastructure implements adapters
and the composition root (API dependencies) wires factories for them.
"""
from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from application.dtos.payments import CallbackPayload, ConnectRequest, StatusRequest
from domain.interaction import InteractionLogs, InteractionSpan
from domain.payment.entity import TokenPair


@runtime_checkable
class ProviderAuthenticator(Protocol):
    """Obtains provider tokens; each call records its own span into `logs`."""

    async def obtain_tokens(self, login: str, password: str, logs: InteractionLogs) -> TokenPair: ...

    async def refresh_access_token(self, refresh_token: str, logs: InteractionLogs) -> TokenPair: ...


@runtime_checkable
class PaymentGateway(Protocol):
    """Authenticated provider channel.

    Operations return the raw HTTP response; interpreting status codes and
    bodies is the caller's job.
    """

    provider: str

    async def payment(self, req: ConnectRequest, span: InteractionSpan) -> Any: ...

    async def payout(self, req: ConnectRequest, span: InteractionSpan) -> Any: ...

    async def payment_status(self, req: StatusRequest, span: InteractionSpan) -> Any: ...

    async def payout_status(self, req: StatusRequest, span: InteractionSpan) -> Any: ...

    def read_body(self, response: Any, span: InteractionSpan | None) -> bytes: ...


@runtime_checkable
class PlatformCallbackSender(Protocol):
    """Delivers a signed callback to the business platform; returns the HTTP status."""

    async def send_gateway_callback(self, token: str, payload: CallbackPayload, signed_token: str) -> int: ...

"""
Gateway connect DTOs (Pydantic v2) used at application boundaries: the
platform's request/response dialect and the provider's callback bodies.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from domain.interaction import InteractionLog


class _Dto(BaseModel):
    model_config = ConfigDict(extra="ignore")


# Inbound platform requests

class GatewaySettings(_Dto):
    """Per-merchant provider credentials carried by every connect request."""
    login: str = ""
    password: str = ""
    sandbox: bool = False

    def __repr__(self) -> str:
        return f"GatewaySettings(login={self.login!r}, sandbox={self.sandbox!r})"


class Customer(_Dto):
    ip: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: str = ""
    phone: str = ""


class Card(_Dto):
    pan: str = ""


class BankAccount(_Dto):
    requisite_type: str = ""
    bank_name: Optional[str] = None
    account_number: Optional[str] = None


class Params(_Dto):
    customer: Customer = Field(default_factory=Customer)
    card: Card = Field(default_factory=Card)
    bank_account: Optional[BankAccount] = None


class Payment(_Dto):
    token: str
    callback_url: str = ""
    merchant_private_key: str = ""
    extra_return_param: Optional[str] = None
    gateway_currency: Optional[str] = None
    gateway_amount: Optional[int] = Field(default=None, description="Amount in minor units")
    lead_id: int = 0


class ConnectRequest(_Dto):
    """Body of /pay and /payout."""
    params: Params = Field(default_factory=Params)
    payment: Payment
    processing_url: str = ""
    settings: GatewaySettings = Field(default_factory=GatewaySettings)


class StatusPayment(_Dto):
    gateway_token: Optional[str] = None
    operation_type: str
    token: str = ""


class StatusRequest(_Dto):
    payment: StatusPayment
    settings: GatewaySettings = Field(default_factory=GatewaySettings)


# Outbound platform responses

class RedirectType(str, Enum):
    POST_IFRAMES = "post_iframes"
    GET_WITH_PROCESSING = "get_with_processing"
    GET = "get"
    POST = "post"
    REDIRECT_HTML = "redirect_html"


class RedirectRequest(BaseModel):
    url: str
    type: RedirectType

    @classmethod
    def get_with_processing(cls, url: str) -> "RedirectRequest":
        return cls(url=url, type=RedirectType.GET_WITH_PROCESSING)


class ConnectResponse(BaseModel):
    result: bool = True
    logs: list[InteractionLog] = Field(default_factory=list)
    redirect_request: RedirectRequest
    status: str
    gateway_token: Optional[str] = None


class StatusResponse(BaseModel):
    result: bool = True
    logs: list[InteractionLog] = Field(default_factory=list)
    status: Optional[str] = None
    amount: Optional[int] = None


class ConnectError(BaseModel):
    result: bool = False
    error: str
    logs: list[InteractionLog] = Field(default_factory=list)


# Provider callbacks

class PaymentCallback(_Dto):
    id: Optional[str] = None
    status: Optional[str] = None
    amount: Optional[float] = None
    external_id: str = ""
    new_amount: Optional[float] = None


class PayoutCallback(_Dto):
    payout_id: Optional[str] = None
    payout_status: Optional[str] = None
    payout_amount: Optional[float] = None
    payout_external_id: str = ""


# Platform callback

class CallbackPayload(BaseModel):
    status: str
    currency: str
    amount: int
    reason: Optional[str] = None


class CallbackResult(BaseModel):
    result: bool = True

"""
STBL external API wire models (Pydantic v2), shared by the provider adapter
and the connect service that interprets provider responses.

Response models are lenient: every field is optional so that the caller,
not the decoder, decides which missing fields are contract violations.
"""
from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class _Wire(BaseModel):
    model_config = ConfigDict(extra="ignore")


# Auth

class AuthRequest(_Wire):
    username: str
    password: str


class RefreshRequest(_Wire):
    refresh_token: str


class AuthResponse(_Wire):
    access_token: str
    refresh_token: str


class GatewayError(_Wire):
    detail: Optional[str] = None


# Payments

class PaymentAdditionalData(_Wire):
    full_name: Optional[str] = None
    cbu: Optional[str] = None
    cuit: Optional[str] = None


class PaymentRequest(_Wire):
    amount: float
    transfer_method: str = "QR_CODE"
    bank_name: Optional[str] = None
    external_id: Optional[str] = None
    additional_data: PaymentAdditionalData = Field(default_factory=PaymentAdditionalData)
    client_id: Optional[str] = None


class ProviderStatus(_Wire):
    name: Optional[str] = None
    updated_at: Optional[str] = None


class _WithStatus(_Wire):
    status: Optional[ProviderStatus] = None

    @property
    def status_name(self) -> Optional[str]:
        return self.status.name if self.status else None


class BankCard(_Wire):
    qr_code_link: Optional[str] = None
    full_name: Optional[str] = None
    number: Optional[str] = None


class PaymentResponse(_WithStatus):
    id: Optional[str] = None
    amount: Optional[float] = None
    bank_name: Optional[str] = None
    transfer_method: Optional[str] = None
    bank_card: Optional[BankCard] = None
    provider_payment_url: Optional[str] = None
    external_id: Optional[str] = None
    pay_form_link: Optional[str] = None


class PaymentStatusResponse(_WithStatus):
    id: Optional[str] = None
    num: Optional[str] = None
    amount: Optional[float] = None
    transfer_method: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# Payouts

class PayoutAdditionalData(_Wire):
    customer_id: Optional[str] = None
    full_name: Optional[str] = None
    cuit: Optional[str] = None
    cbu: Optional[str] = None


class PayoutRequest(_Wire):
    amount: float
    transfer_method: str = "CBU"
    bank_card_number: Optional[str] = None
    phone_number: Optional[str] = None
    bank_name: Optional[str] = None
    additional_data: Optional[PayoutAdditionalData] = None
    external_id: Optional[str] = None


class PayoutResponse(_WithStatus):
    id: Optional[str] = None
    num: Optional[str] = None
    amount: Optional[float] = None
    bank_card_number: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    external_id: Optional[str] = None
    bank_name: Optional[str] = None


class PayoutStatusResponse(PayoutResponse):
    pass

"""
Exceptions for the provider gateway mapped to unified BusinessException variants.
"""
from __future__ import annotations

from typing import Optional
from domain.common.exceptions import BusinessException
from shared.codes.payment_codes import PaymentCode


class GatewayRequestValidationError(BusinessException):
    """Connect request lacks fields the provider call needs; raised before any network IO."""

    def __init__(self, message: str = "Gateway connect request missing required fields", *, provider: str, missing: Optional[list[str]] = None):
        super().__init__(
            code=PaymentCode.REQUEST_INVALID,
            message=message,
            error_type="GatewayRequestValidationError",
            details={"provider": provider, "missing": missing or []},
        )


class GatewayAuthenticationError(BusinessException):
    def __init__(self, message: str, *, provider: str, status_code: Optional[int] = None):
        super().__init__(
            code=PaymentCode.PROVIDER_AUTH_FAILED,
            message=message,
            error_type="GatewayAuthenticationError",
            details={"provider": provider, "status_code": status_code},
        )


class GatewayTransportError(BusinessException):
    def __init__(self, message: str, *, provider: str, details: Optional[dict] = None):
        full_details = {"provider": provider}
        if details:
            full_details.update(details)
        super().__init__(
            code=PaymentCode.PROVIDER_TRANSPORT,
            message=message,
            error_type="GatewayTransportError",
            details=full_details,
        )

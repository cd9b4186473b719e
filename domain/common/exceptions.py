"""领域层异常定义。

Every failure that the connect flow knows how to report derives from
`BusinessException`: the `message` is what the platform sees, `code` picks
the HTTP status at the API edge, `details` only go to the logs.
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode
from shared.codes.payment_codes import PaymentCode


class BusinessException(Exception):
    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={int(self.code)}, message={self.message!r})"


class DomainValidationException(BusinessException):
    """实体不变量被破坏（如空的主键）"""

    def __init__(self, message: str, *, field: str | None = None, details: dict | None = None):
        super().__init__(BusinessCode.PARAM_VALIDATION_ERROR, message, "DomainValidationError", details, field)


# Callback relay failures. All of them reject the provider callback with a
# client error and nothing is sent to the platform.

class CallbackValidationError(BusinessException):
    """Provider callback is missing fields required to relay it."""

    def __init__(self, message: str = "missing fields in gateway callback", *, details: dict | None = None):
        super().__init__(PaymentCode.CALLBACK_INVALID, message, "CallbackValidationError", details)


class TokenMappingNotFoundError(BusinessException):
    def __init__(self, gateway_id: str):
        super().__init__(
            PaymentCode.MAPPING_NOT_FOUND,
            "failed to load gateway token mapping",
            "TokenMappingNotFound",
            {"gateway_id": gateway_id},
        )


class CallbackSigningError(BusinessException):
    def __init__(self, message: str = "failed to create JWT", *, details: dict | None = None):
        super().__init__(PaymentCode.SIGNING_FAILED, message, "CallbackSigningError", details)


class CallbackRelayError(BusinessException):
    def __init__(self, message: str = "failed to send callback", *, details: dict | None = None):
        super().__init__(PaymentCode.RELAY_FAILED, message, "CallbackRelayError", details)

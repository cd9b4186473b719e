"""
Provider status vocabularies and their mapping onto the platform's
three-value status.

Every provider enum carries an explicit UNKNOWN member: values the provider
adds later parse to UNKNOWN instead of failing, map to pending and are
reported with a warning so operators can extend the tables below.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from core.logging_config import get_logger


logger = get_logger(__name__)


class PlatformStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"


class _ProviderStatus(str, Enum):
    @classmethod
    def parse(cls, raw: Union[str, "_ProviderStatus", None]):
        if isinstance(raw, cls):
            return raw
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN  # type: ignore[attr-defined]


class ProviderPaymentStatus(_ProviderStatus):
    NEW = "NEW"
    CANCELED = "CANCELED"
    COMPLETED = "COMPLETED"
    APPEAL_APPROVED = "APPEAL_APPROVED"
    APPEAL_REJECTED = "APPEAL_REJECTED"
    APPEAL_CONSIDERATION = "APPEAL_CONSIDERATION"
    UNKNOWN = "UNKNOWN"


class ProviderPayoutStatus(_ProviderStatus):
    AWAITING_PROCESSING = "AWAITING_PROCESSING"
    AWAITING_CONFIRMATION = "AWAITING_CONFIRMATION"
    PAYOUT_DENIED = "PAYOUT_DENIED"
    PAID = "PAID"
    UNKNOWN = "UNKNOWN"


PAYMENT_STATUS_MAP: dict[ProviderPaymentStatus, PlatformStatus] = {
    ProviderPaymentStatus.NEW: PlatformStatus.PENDING,
    ProviderPaymentStatus.APPEAL_CONSIDERATION: PlatformStatus.PENDING,
    ProviderPaymentStatus.COMPLETED: PlatformStatus.APPROVED,
    ProviderPaymentStatus.APPEAL_APPROVED: PlatformStatus.APPROVED,
    ProviderPaymentStatus.CANCELED: PlatformStatus.DECLINED,
    ProviderPaymentStatus.APPEAL_REJECTED: PlatformStatus.DECLINED,
    ProviderPaymentStatus.UNKNOWN: PlatformStatus.PENDING,
}

PAYOUT_STATUS_MAP: dict[ProviderPayoutStatus, PlatformStatus] = {
    ProviderPayoutStatus.AWAITING_PROCESSING: PlatformStatus.PENDING,
    ProviderPayoutStatus.AWAITING_CONFIRMATION: PlatformStatus.PENDING,
    ProviderPayoutStatus.PAID: PlatformStatus.APPROVED,
    ProviderPayoutStatus.PAYOUT_DENIED: PlatformStatus.DECLINED,
    ProviderPayoutStatus.UNKNOWN: PlatformStatus.PENDING,
}


def payment_to_platform_status(raw: Optional[str]) -> PlatformStatus:
    status = ProviderPaymentStatus.parse(raw)
    if status is ProviderPaymentStatus.UNKNOWN:
        logger.warning("unhandled_payment_status", provider_status=raw)
    return PAYMENT_STATUS_MAP[status]


def payout_to_platform_status(raw: Optional[str]) -> PlatformStatus:
    status = ProviderPayoutStatus.parse(raw)
    if status is ProviderPayoutStatus.UNKNOWN:
        logger.warning("unhandled_payout_status", provider_status=raw)
    return PAYOUT_STATUS_MAP[status]

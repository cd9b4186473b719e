import pytest

from domain.payment.money import major_to_minor, minor_to_major
from domain.payment.status import (
    PAYMENT_STATUS_MAP,
    PAYOUT_STATUS_MAP,
    PlatformStatus,
    ProviderPaymentStatus,
    ProviderPayoutStatus,
    payment_to_platform_status,
    payout_to_platform_status,
)


def test_every_provider_status_is_mapped():
    assert set(PAYMENT_STATUS_MAP) == set(ProviderPaymentStatus)
    assert set(PAYOUT_STATUS_MAP) == set(ProviderPayoutStatus)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("NEW", PlatformStatus.PENDING),
        ("CANCELED", PlatformStatus.DECLINED),
        ("COMPLETED", PlatformStatus.APPROVED),
        ("APPEAL_APPROVED", PlatformStatus.APPROVED),
        ("APPEAL_REJECTED", PlatformStatus.DECLINED),
        ("APPEAL_CONSIDERATION", PlatformStatus.PENDING),
    ],
)
def test_payment_status_mapping(raw, expected):
    assert payment_to_platform_status(raw) is expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("AWAITING_PROCESSING", PlatformStatus.PENDING),
        ("AWAITING_CONFIRMATION", PlatformStatus.PENDING),
        ("PAYOUT_DENIED", PlatformStatus.DECLINED),
        ("PAID", PlatformStatus.APPROVED),
    ],
)
def test_payout_status_mapping(raw, expected):
    assert payout_to_platform_status(raw) is expected


def test_unknown_statuses_fall_back_to_pending():
    assert payment_to_platform_status("SOMETHING_NEW") is PlatformStatus.PENDING
    assert payment_to_platform_status(None) is PlatformStatus.PENDING
    assert payout_to_platform_status("PAID_TWICE") is PlatformStatus.PENDING


def test_amount_conversion_uses_decimal_rounding():
    assert minor_to_major(1234) == 12.34
    assert major_to_minor(12.34) == 1234
    assert major_to_minor(0.29) == 29
    assert major_to_minor(100) == 10000

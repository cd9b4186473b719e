"""
Provider (6xxxx) and callback relay (7xxxx) codes.
"""
from __future__ import annotations

from enum import IntEnum


class PaymentCode(IntEnum):
    # outbound provider calls
    PROVIDER_AUTH_FAILED = 60001
    PROVIDER_TRANSPORT = 60002
    REQUEST_INVALID = 60003

    # inbound provider callbacks
    CALLBACK_INVALID = 70000
    MAPPING_NOT_FOUND = 70001
    SIGNING_FAILED = 70002
    RELAY_FAILED = 70003


__all__ = ["PaymentCode"]

"""Amount conversion between platform minor units and provider major units."""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP


def minor_to_major(amount: int) -> float:
    """Cents to units: 1234 -> 12.34."""
    return amount / 100.0


def major_to_minor(amount: float) -> int:
    """Units to cents with decimal rounding, so 12.34 -> 1234 (not 1233)."""
    cents = Decimal(str(amount)) * 100
    return int(cents.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

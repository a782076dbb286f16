"""Promotion and price arithmetic.

Every function is pure: the caller passes ``now`` explicitly. Prices are
``Decimal`` quantized to cents with ROUND_HALF_UP.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Optional

from turismo.timeutils import as_utc

HUNDRED = Decimal("100")
CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Any) -> Optional[Decimal]:
    """Best-effort Decimal conversion; ``None`` for missing or non-numeric input."""
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    try:
        # str() avoids binary float artefacts (59.9 -> 59.899999...)
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def round_percent(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def is_promo_active(pkg, now: datetime) -> bool:
    if not pkg.is_promo:
        return False
    now = as_utc(now)
    start = as_utc(pkg.promo_start_at)
    end = as_utc(pkg.promo_end_at)
    if start is not None and now < start:
        return False
    if end is not None and now > end:
        return False
    return True


def effective_price(pkg, now: datetime) -> Optional[Decimal]:
    """Price charged under the running promotion, or ``None`` without one.

    A fixed ``promo_price`` wins over ``promo_percent``.
    """
    if not is_promo_active(pkg, now):
        return None

    promo_price = to_decimal(pkg.promo_price)
    if promo_price is not None and promo_price > ZERO:
        return quantize_money(promo_price)

    percent = to_decimal(pkg.promo_percent)
    price = to_decimal(pkg.price)
    if percent is not None and price is not None and ZERO < percent <= HUNDRED:
        discounted = price * (Decimal("1") - percent / HUNDRED)
        return quantize_money(max(ZERO, discounted))

    return None


def discount_percent(pkg, now: datetime) -> int:
    if not is_promo_active(pkg, now):
        return 0
    eff = effective_price(pkg, now)
    price = to_decimal(pkg.price)
    if eff is None or price is None or price <= ZERO:
        return 0
    pct = round_percent((Decimal("1") - eff / price) * HUNDRED)
    return max(0, min(100, pct))

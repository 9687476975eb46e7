"""Money arithmetic for checkout.

All amounts are :class:`~decimal.Decimal`. Values arriving from the wire go
through :func:`to_number` first, which never raises.
"""

from dataclasses import dataclass, asdict
from decimal import Decimal, InvalidOperation
from typing import Iterable, Mapping, Optional

from coupons.evaluator import discount_for

ZERO = Decimal('0')


def to_number(value) -> Decimal:
    """Coerce a wire value to Decimal.

    Accepts plain numbers, numeric strings and tagged decimals
    (``{"$numberDecimal": "12.50"}``). Anything else becomes 0.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value)) if value == value and value not in (float('inf'), float('-inf')) else ZERO
    if isinstance(value, Mapping) and '$numberDecimal' in value:
        return to_number(value['$numberDecimal'])
    if isinstance(value, str):
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation:
            return ZERO
        return parsed if parsed.is_finite() else ZERO
    return ZERO


@dataclass(frozen=True)
class Totals:
    sub_total: Decimal
    total: Decimal
    savings: Decimal
    shipping_fee: Decimal
    discount: Decimal
    grand_total: Decimal

    def as_dict(self):
        return asdict(self)


def _field(item, name):
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def compute(items: Iterable, coupon=None, shipping_fee=0) -> Totals:
    """Derive order totals from line items.

    Each item exposes ``price`` (unit price actually charged), ``old_price``
    and ``quantity``, either as attributes or mapping keys.
    """
    sub_total = ZERO
    savings = ZERO
    for item in items:
        price = to_number(_field(item, 'price'))
        old_price = to_number(_field(item, 'old_price'))
        quantity = to_number(_field(item, 'quantity'))
        sub_total += price * quantity
        savings += max(ZERO, old_price - price) * quantity

    # Amounts are stored in cents; grand_total is derived from the rounded parts.
    sub_total = quantize(sub_total)
    savings = quantize(savings)
    total = sub_total
    fee = quantize(max(ZERO, to_number(shipping_fee)))
    discount = quantize(min(to_number(discount_for(coupon, total)), total))

    grand_total = max(ZERO, total + fee - discount)
    return Totals(
        sub_total=sub_total,
        total=total,
        savings=savings,
        shipping_fee=fee,
        discount=discount,
        grand_total=grand_total,
    )


def quantize(amount: Optional[Decimal]) -> Decimal:
    """Round to the two decimal places the order columns store."""
    return to_number(amount).quantize(Decimal('0.01'))
